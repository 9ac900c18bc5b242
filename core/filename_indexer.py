# core/filename_indexer.py
"""
Decide which files in the input folder take part in a merge and in what order.

A file is eligible when its extension is .docx (any case) and its base name
ends in a run of decimal digits; that run, read as a base-10 integer, is the
sort key. "intro1.docx", "intro2.docx", "appendix10.docx" merge as 1, 2, 10.

spec_legend:
  r: Return value (shape & invariants)
  s: Side effects (project tags; fs/log)
  e: Errors/exceptions behavior
  notes: Brief extra context that aids correct use
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from core.doc_engine import NATIVE_EXTENSION, DirectoryNotFound, MergeError
from utils.logger import log

PathLike = Union[str, os.PathLike]

LOCK_FILE_PREFIX = "~$"


class ParseError(MergeError):
    """A base name has no trailing digit run to index on."""


@dataclass(frozen=True, order=True)
class IndexedFile:
    """
    spec:
      name: IndexedFile
      kind: frozen dataclass
      r: Ordered by (index, position); path does not take part in comparisons.
      notes:
        - position is the discovery order inside the scanned directory.
    """
    index: int
    position: int
    path: Path = field(compare=False)


def _split_name(path: PathLike):
    stem, ext = os.path.splitext(os.path.basename(os.fspath(path)))
    return stem, ext


def trailing_digits(stem: str) -> str:
    """Return the maximal run of decimal digits at the end of stem ("" if none)."""
    i = len(stem)
    while i > 0 and stem[i - 1].isdecimal():
        i -= 1
    return stem[i:]


def is_eligible(path: PathLike) -> bool:
    """
    spec:
      name: is_eligible
      signature: is_eligible(path) -> bool
      r: True iff extension is .docx (case-insensitive) and the base name ends in a digit.
      s: none
      e: none (pure function)
      notes:
        - "3report.docx" and "re3port.docx" are ineligible; "007.docx" is eligible.
    """
    stem, ext = _split_name(path)
    if ext.lower() != NATIVE_EXTENSION:
        return False
    return trailing_digits(stem) != ""


def extract_index(path: PathLike) -> int:
    """
    spec:
      name: extract_index
      signature: extract_index(path) -> int
      r: Integer value of the trailing digit run; "file007.docx" -> 7.
      e:
        - ParseError: base name has no trailing digit
    """
    stem, _ = _split_name(path)
    digits = trailing_digits(stem)
    if not digits:
        raise ParseError(f"No trailing digits in file name: {os.path.basename(os.fspath(path))}")
    return int(digits)


def scan_directory(input_dir: PathLike) -> List[IndexedFile]:
    """
    spec:
      name: scan_directory
      signature: scan_directory(input_dir) -> list[IndexedFile]
      r: Eligible files sorted by (index, discovery position); may be empty.
      s: [fs][log]
      e:
        - DirectoryNotFound: input_dir is missing or not a directory
        - ParseError: only on an internal inconsistency (eligible but unindexable)
      notes:
        - Non-recursive. Entries are enumerated in name order so ties resolve the same way every run.
        - Sub-directories and Word owner files (~$name.docx) are skipped.
    """
    root = Path(input_dir)
    if not root.is_dir():
        raise DirectoryNotFound(f"Input directory not found: {root}")

    indexed = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_file():
            continue
        if entry.name.startswith(LOCK_FILE_PREFIX):
            log(f"[SCAN] Skipping Word owner file: {entry.name}", "DEBUG")
            continue
        if not is_eligible(entry):
            log(f"[SCAN] Ignoring ineligible file: {entry.name}", "DEBUG")
            continue
        indexed.append(IndexedFile(extract_index(entry), len(indexed), entry))

    indexed.sort()
    for item in indexed:
        log(f"[SCAN] file: {item.path.name} (index={item.index})", "INFO")
    return indexed
