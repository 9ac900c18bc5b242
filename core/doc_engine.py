# core/doc_engine.py
"""
Capability boundary between the merge pipeline and a document-editing engine.

The orchestrator never touches a backend object directly; it only calls the
methods of a DocumentEngine and keeps the returned native objects wrapped in
DocumentHandle records owned by a HandleRegistry.

YAML-in-docstring legend (kept tiny and consistent per module)

spec_legend:
  r: Return value (shape & invariants)
  s: Side effects (project tags; engine/fs/log)
  e: Errors/exceptions behavior
  notes: Brief extra context that aids correct use

defaults:
  native_format: .docx
  fixed_format: .pdf
  error_root: MergeError (every engine failure derives from it)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

NATIVE_EXTENSION = ".docx"
FIXED_EXTENSION = ".pdf"


class MergeError(Exception):
    """Base class for every failure raised by the merge pipeline."""


class DirectoryNotFound(MergeError):
    """The input directory does not exist or is not a directory. Fatal for the run."""


class OpenError(MergeError):
    """A source document could not be opened. Recoverable per file."""


class AppendError(MergeError):
    """A source document could not be appended to the accumulator. Recoverable per document."""


class ExportError(MergeError):
    """The accumulator could not be exported or saved."""


class ReleaseError(MergeError):
    """An engine resource could not be released. Always caught and logged."""


class EngineError(MergeError):
    """The engine could not start, create a document or edit the accumulator. Fatal for the run."""


class HandleKind(str, Enum):
    """
    spec:
      name: HandleKind
      kind: Enum[str]
      members: [SOURCE, ACCUMULATOR]
      notes:
        - SOURCE handles are opened read-only and never mutated.
        - Exactly one ACCUMULATOR exists per run; it is the only append target.
    """
    SOURCE = "SOURCE"
    ACCUMULATOR = "ACCUMULATOR"


@dataclass
class DocumentHandle:
    """
    spec:
      name: DocumentHandle
      kind: dataclass
      r: Registry-owned wrapper around an engine-native document object.
      notes:
        - handle_id is assigned by HandleRegistry in acquisition order.
        - path is None for the accumulator.
        - released flips once; releasing twice is a no-op.
    """
    handle_id: int
    kind: HandleKind
    native: Any
    path: Optional[Path] = None
    released: bool = False

    @property
    def label(self) -> str:
        name = self.path.name if self.path is not None else "<accumulator>"
        return f"#{self.handle_id} {self.kind.value} {name}"


class DocumentEngine(ABC):
    """
    spec:
      name: DocumentEngine
      purpose: Narrow interface to an external document-editing engine.
      lifecycle: open_session() -> document operations -> close_session()
      e:
        - open_session / new_document / set_range: EngineError
        - open_document: OpenError
        - append_content: AppendError
        - export_fixed_format / save_native: ExportError
        - release: ReleaseError
      notes:
        - Methods block until the backend responds; nothing is cancellable.
        - Document arguments are the native objects returned by open_document/new_document.
    """

    @abstractmethod
    def open_session(self) -> None:
        """Start (or attach to) the engine instance."""

    @abstractmethod
    def close_session(self) -> None:
        """Shut the engine instance down. Must be safe to call after a failed open_session()."""

    @abstractmethod
    def open_document(self, path: Path) -> Any:
        """Open an existing document read-only and return the native document object."""

    @abstractmethod
    def new_document(self) -> Any:
        """Create a new empty document and return the native document object."""

    @abstractmethod
    def set_range(self, doc: Any, start: int, end: int, text: str) -> None:
        """Replace the [start, end) character range of doc with text."""

    @abstractmethod
    def append_content(self, target: Any, source: Any) -> None:
        """Copy the full content range of source to the end of target."""

    @abstractmethod
    def export_fixed_format(self, doc: Any, path: Path) -> None:
        """Export doc as a fixed-layout (PDF) file at path, overwriting it."""

    @abstractmethod
    def save_native(self, doc: Any, path: Path) -> None:
        """Save doc in the native editable format at path, overwriting it."""

    @abstractmethod
    def release(self, doc: Any) -> None:
        """Close doc without saving and drop the engine-side reference."""
