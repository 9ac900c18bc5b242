# core/word_engine.py
"""
DocumentEngine backed by Microsoft Word, driven through COM automation (pywin32).

Word is started invisibly with DispatchEx so the merge never attaches to a
window the user has open. COM is initialised for the calling thread in
open_session() and uninitialised in close_session().

Dependencies:
    - Windows with Microsoft Word installed.
    - pywin32 (win32com.client, pythoncom). Imported when the session opens so
      the rest of the project (and the test suite) loads on any platform.
"""

import importlib.util
import os
from pathlib import Path

from core.doc_engine import (
    AppendError,
    DocumentEngine,
    EngineError,
    ExportError,
    OpenError,
    ReleaseError,
)
from utils.logger import log

WD_EXPORT_FORMAT_PDF = 17
WD_FORMAT_DOCUMENT_DEFAULT = 16
WD_DO_NOT_SAVE_CHANGES = 0
WD_ALERTS_NONE = 0
MSO_AUTOMATION_SECURITY_FORCE_DISABLE = 3


class WordEngine(DocumentEngine):
    """Word.Application over COM. One instance per merge run."""

    def __init__(self, visible: bool = False):
        self.visible = visible
        self._app = None
        self._pythoncom = None
        self._com_initialized = False

    @staticmethod
    def is_available():
        """Return (ok, reason). ok is False off Windows or when pywin32 is not installed."""
        if os.name != "nt":
            return False, "Word automation is supported on Windows only."
        if importlib.util.find_spec("win32com") is None:
            return False, "pywin32 is required for Word automation."
        return True, ""

    def _require_app(self):
        if self._app is None:
            raise RuntimeError("Word automation session is not open.")
        return self._app

    def open_session(self):
        import pythoncom
        import win32com.client

        self._pythoncom = pythoncom
        pythoncom.CoInitialize()
        self._com_initialized = True

        try:
            self._app = win32com.client.DispatchEx("Word.Application")
            self._app.Visible = self.visible
            self._app.DisplayAlerts = WD_ALERTS_NONE
        except Exception as e:
            raise EngineError(f"Word could not be started: {e}") from e
        try:
            self._app.AutomationSecurity = MSO_AUTOMATION_SECURITY_FORCE_DISABLE
        except Exception as e:
            log(f"[ENGINE] Could not disable macros, continuing with Word defaults: {e}", "WARN")
        log("[ENGINE] Word session opened", "INFO")

    def close_session(self):
        try:
            if self._app is not None:
                try:
                    self._app.Quit(SaveChanges=WD_DO_NOT_SAVE_CHANGES)
                except Exception as e:
                    raise ReleaseError(f"Word did not quit cleanly: {e}") from e
                finally:
                    self._app = None
        finally:
            if self._com_initialized:
                self._pythoncom.CoUninitialize()
                self._com_initialized = False
        log("[ENGINE] Word session closed", "INFO")

    def open_document(self, path):
        app = self._require_app()
        try:
            return app.Documents.Open(
                str(Path(path).resolve()),
                ReadOnly=True,
                AddToRecentFiles=False,
                Visible=False,
                ConfirmConversions=False,
            )
        except Exception as e:
            raise OpenError(f"Word could not open {path}: {e}") from e

    def new_document(self):
        app = self._require_app()
        try:
            return app.Documents.Add()
        except Exception as e:
            raise EngineError(f"Word could not create a document: {e}") from e

    def set_range(self, doc, start, end, text):
        try:
            doc.Range(start, end).Text = text
        except Exception as e:
            raise EngineError(f"Word could not set range [{start}, {end}): {e}") from e

    def append_content(self, target, source):
        try:
            content = source.Content
            src_range = source.Range(content.Start, content.End)
            # Insert in front of the final paragraph mark of the target.
            end = target.Content.End - 1
            target.Range(end, end).FormattedText = src_range.FormattedText
        except Exception as e:
            raise AppendError(f"Word could not append {getattr(source, 'Name', source)}: {e}") from e

    def export_fixed_format(self, doc, path):
        try:
            doc.ExportAsFixedFormat(str(Path(path).resolve()), WD_EXPORT_FORMAT_PDF)
        except Exception as e:
            raise ExportError(f"Word could not export PDF to {path}: {e}") from e

    def save_native(self, doc, path):
        try:
            doc.SaveAs2(str(Path(path).resolve()), FileFormat=WD_FORMAT_DOCUMENT_DEFAULT)
        except Exception as e:
            raise ExportError(f"Word could not save {path}: {e}") from e

    def release(self, doc):
        try:
            doc.Close(SaveChanges=WD_DO_NOT_SAVE_CHANGES)
        except Exception as e:
            raise ReleaseError(f"Word could not close document: {e}") from e
