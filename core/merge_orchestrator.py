# core/merge_orchestrator.py
"""
Merge the numbered .docx files of one folder into a single PDF plus a .docx backup.

Pipeline (linear, no retries):
    scan -> open sources -> create accumulator -> append each source
         -> export PDF -> save backup -> release everything

spec_legend:
  r: Return value (shape & invariants)
  s: Side effects (project tags; engine/fs/log)
  e: Errors/exceptions behavior
  notes: Brief extra context that aids correct use

defaults:
  failure_policy: lenient (log, skip the file/document, keep going)
  strict: abort on the first OpenError/AppendError after releasing everything
  placeholder: " " seeded at [0, 0) so the accumulator is never empty before an append
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from core.doc_engine import (
    AppendError,
    DocumentEngine,
    DocumentHandle,
    ExportError,
    HandleKind,
    OpenError,
)
from core.filename_indexer import scan_directory
from core.handle_registry import HandleRegistry
from utils.logger import log

PLACEHOLDER_TEXT = " "


@dataclass
class MergeResult:
    """
    spec:
      name: MergeResult
      kind: dataclass
      r: Outcome of one merge_folder() run.
      notes:
        - merged: files whose content reached the accumulator, in merge order.
        - skipped: (file, reason) for every open/append failure.
        - pdf_path/backup_path are None when that output was not written.
        - handles_acquired == handles_released after every run.
    """
    input_dir: Path
    order: List[Path] = field(default_factory=list)
    merged: List[Path] = field(default_factory=list)
    skipped: List[Tuple[Path, str]] = field(default_factory=list)
    pdf_path: Optional[Path] = None
    backup_path: Optional[Path] = None
    handles_acquired: int = 0
    handles_released: int = 0

    @property
    def exported(self) -> bool:
        return self.pdf_path is not None


def _open_sources(engine, registry, order, result, strict) -> List[DocumentHandle]:
    sources = []
    for path in order:
        try:
            native = engine.open_document(path)
        except OpenError as e:
            log(f"[MERGE] Could not open {path.name}: {e}", "ERROR")
            result.skipped.append((path, str(e)))
            if strict:
                raise
            continue
        sources.append(registry.track(native, HandleKind.SOURCE, path))
        log(f"[MERGE] Opened {path.name}", "INFO")
    return sources


def _append_sources(engine, accumulator, sources, result, strict) -> None:
    for handle in sources:
        try:
            engine.append_content(accumulator.native, handle.native)
        except AppendError as e:
            log(f"[MERGE] Could not append {handle.path.name}: {e}", "ERROR")
            result.skipped.append((handle.path, str(e)))
            if strict:
                raise
            continue
        result.merged.append(handle.path)
        log(f"[MERGE] Appended {handle.path.name}", "INFO")


def _write_outputs(engine, accumulator, pdf_path, backup_path, result) -> None:
    try:
        pdf_path.parent.mkdir(parents=True, exist_ok=True)
        engine.export_fixed_format(accumulator.native, pdf_path)
        result.pdf_path = pdf_path
        log(f"[MERGE] Exported PDF: {pdf_path}", "INFO")
    except (ExportError, OSError) as e:
        log(f"[MERGE] PDF export failed: {e}", "FAIL")

    try:
        backup_path.parent.mkdir(parents=True, exist_ok=True)
        engine.save_native(accumulator.native, backup_path)
        result.backup_path = backup_path
        log(f"[MERGE] Saved backup: {backup_path}", "INFO")
    except (ExportError, OSError) as e:
        log(f"[MERGE] Backup save failed: {e}", "FAIL")


def merge_folder(
    input_dir,
    engine: DocumentEngine,
    pdf_path,
    backup_path,
    *,
    strict: bool = False,
) -> MergeResult:
    """
    spec:
      name: merge_folder
      signature: merge_folder(input_dir, engine, pdf_path, backup_path, *, strict=False) -> MergeResult
      r: MergeResult; result.exported is False when no PDF was written.
      s: [fs][engine][log]
      e:
        - DirectoryNotFound: input_dir is missing (raised before the engine is touched)
        - OpenError/AppendError: only when strict=True, after every handle and the session are released
        - EngineError: the session, the accumulator or its placeholder could not be set up, raised after cleanup
        - Export/save failures never raise; they leave pdf_path/backup_path as None
      notes:
        - With no eligible files the engine is never started and no outputs are written.
        - Every handle is released exactly once in the finally block, then the session is closed.
    """
    input_dir = Path(input_dir)
    pdf_path = Path(pdf_path)
    backup_path = Path(backup_path)

    result = MergeResult(input_dir=input_dir)
    result.order = [item.path for item in scan_directory(input_dir)]
    if not result.order:
        log(f"[MERGE] No numbered .docx files in {input_dir}; nothing to merge.", "WARN")
        return result

    log(f"[MERGE] Merging {len(result.order)} file(s) from {input_dir}", "INFO")
    registry = HandleRegistry(engine)
    try:
        engine.open_session()

        sources = _open_sources(engine, registry, result.order, result, strict)

        accumulator = registry.track(engine.new_document(), HandleKind.ACCUMULATOR)
        engine.set_range(accumulator.native, 0, 0, PLACEHOLDER_TEXT)

        _append_sources(engine, accumulator, sources, result, strict)
        _write_outputs(engine, accumulator, pdf_path, backup_path, result)
    finally:
        registry.release_all()
        result.handles_acquired = registry.acquired
        result.handles_released = registry.released
        try:
            engine.close_session()
        except Exception as e:
            log(f"[RELEASE] Engine session did not close cleanly: {e}", "ERROR")
        log(
            f"[MERGE] Done: merged={len(result.merged)} skipped={len(result.skipped)} "
            f"handles={result.handles_released}/{result.handles_acquired} released",
            "INFO",
        )

    return result
