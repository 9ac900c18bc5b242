# core/handle_registry.py
"""
Ownership registry for document handles issued by a DocumentEngine.

Every native document object the orchestrator gets from the engine is tracked
here the moment it is created, and a single teardown (release_all) closes each
one exactly once. Release failures are logged and collected; they never stop
the remaining handles from being released.

defaults:
  release_order: reverse acquisition (accumulator before sources)
  counters: acquired / released, used by tests and the final run summary
"""

from pathlib import Path
from typing import Any, List, Optional

from core.doc_engine import DocumentEngine, DocumentHandle, HandleKind, ReleaseError
from utils.logger import log


class HandleRegistry:
    """
    spec:
      name: HandleRegistry
      purpose: Track every engine-side handle and release each exactly once.
      constructor:
        signature: HandleRegistry(engine: DocumentEngine) -> HandleRegistry
        s: [state]
      notes:
        - Not thread-safe; one registry belongs to one merge run.
    """

    def __init__(self, engine: DocumentEngine) -> None:
        self._engine = engine
        self._handles: List[DocumentHandle] = []
        self.acquired = 0
        self.released = 0
        self.errors: List[ReleaseError] = []

    def track(self, native: Any, kind: HandleKind, path: Optional[Path] = None) -> DocumentHandle:
        """Wrap a freshly created native document and take ownership of it."""
        self.acquired += 1
        handle = DocumentHandle(handle_id=self.acquired, kind=kind, native=native, path=path)
        self._handles.append(handle)
        log(f"[ENGINE] Acquired {handle.label}", "DEBUG")
        return handle

    def release(self, handle: DocumentHandle) -> bool:
        """
        spec:
          name: HandleRegistry.release
          signature: release(handle) -> bool
          r: True if the engine released the handle; False if it failed or was already released.
          s: [engine][log]
          e: none (ReleaseError and any backend exception are logged and collected)
          notes:
            - The handle is marked released even when the engine call fails so it is never retried.
        """
        if handle.released:
            return False
        handle.released = True
        self.released += 1
        try:
            self._engine.release(handle.native)
        except ReleaseError as e:
            self.errors.append(e)
            log(f"[RELEASE] Failed to release {handle.label}: {e}", "ERROR")
            return False
        except Exception as e:
            err = ReleaseError(f"{handle.label}: {e}")
            err.__cause__ = e
            self.errors.append(err)
            log(f"[RELEASE] Unexpected error releasing {handle.label}: {e}", "ERROR")
            return False
        log(f"[RELEASE] Released {handle.label}", "DEBUG")
        return True

    def release_all(self) -> int:
        """Release every outstanding handle, newest first. Returns how many were attempted."""
        pending = [h for h in reversed(self._handles) if not h.released]
        for handle in pending:
            self.release(handle)
        return len(pending)

    def outstanding(self) -> List[DocumentHandle]:
        return [h for h in self._handles if not h.released]

    def __len__(self) -> int:
        return len(self._handles)
