# core/merge_config.py
"""
Load merge locations from config/merge_config.yaml and resolve them to paths.

defaults:
  config_yaml: config/merge_config.yaml (safe_load)
  base_dir: user's desktop (USERPROFILE or home, + Desktop; home when no Desktop exists)
  layout:
    - <base_dir>/MergeIn/          input folder
    - <base_dir>/統合ファイル.pdf   exported PDF
    - <base_dir>/temp.docx         native backup
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

CONFIG_PATH = os.path.join(os.path.dirname(__file__), "../config/merge_config.yaml")

DEFAULTS: Dict[str, Any] = {
    "base_dir": None,
    "input_folder": "MergeIn",
    "pdf_name": "統合ファイル.pdf",
    "backup_name": "temp.docx",
}


@dataclass(frozen=True)
class MergePaths:
    input_dir: Path
    pdf_path: Path
    backup_path: Path


def load_merge_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    spec:
      name: load_merge_config
      signature: load_merge_config(path: str|None = None) -> dict
      r: DEFAULTS overlaid with the YAML mapping; unknown keys are kept but unused.
      s: [fs]
      e:
        - FileNotFoundError: only when an explicit path is missing
        - yaml.YAMLError: when parsing fails
        - ValueError: when the document is not a mapping
      notes:
        - A missing bundled config is not an error; DEFAULTS are returned.
    """
    config = dict(DEFAULTS)
    config_path = path or CONFIG_PATH
    if path is None and not os.path.exists(config_path):
        return config

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return config
    if not isinstance(data, dict):
        raise ValueError(f"Merge config must be a mapping: {config_path}")
    config.update({k: v for k, v in data.items() if v is not None})
    return config


def desktop_dir() -> Path:
    """Return the user's desktop folder, or the home folder when there is none."""
    home = Path(os.getenv("USERPROFILE") or Path.home())
    desktop = home / "Desktop"
    return desktop if desktop.is_dir() else home


def resolve_paths(config: Mapping[str, Any], overrides: Optional[Mapping[str, Any]] = None) -> MergePaths:
    """
    Turn a loaded config into concrete paths.

    overrides may carry "input_dir", "pdf_path" and "backup_path" (e.g. from CLI
    flags); any that are set replace the config-derived path.
    """
    overrides = overrides or {}
    base = Path(os.path.expanduser(str(config["base_dir"]))) if config.get("base_dir") else desktop_dir()

    input_dir = overrides.get("input_dir") or base / config["input_folder"]
    pdf_path = overrides.get("pdf_path") or base / config["pdf_name"]
    backup_path = overrides.get("backup_path") or base / config["backup_name"]
    return MergePaths(Path(input_dir), Path(pdf_path), Path(backup_path))
