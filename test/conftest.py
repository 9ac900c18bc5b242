# test/conftest.py
"""
Shared fixtures: an in-memory DocumentEngine and a scratch input folder.

FakeEngine documents are plain strings. open_document() reads the file's text,
append_content() concatenates, and export/save write the accumulated text to
disk so tests can compare outputs. Failures are injected per file name.
"""

import os
import sys
from pathlib import Path

import pytest

HERE = os.path.dirname(os.path.abspath(__file__))
REPO = os.path.dirname(HERE)
if REPO not in sys.path:
    sys.path.insert(0, REPO)

from core.doc_engine import (  # noqa: E402
    AppendError,
    DocumentEngine,
    ExportError,
    OpenError,
    ReleaseError,
)


class FakeDoc:
    def __init__(self, name, content=""):
        self.name = name
        self.content = content
        self.closed = False


class FakeEngine(DocumentEngine):
    def __init__(self, fail_open=(), fail_append=(), fail_release=(),
                 fail_export=False, fail_save=False, fail_close_session=False):
        self.fail_open = set(fail_open)
        self.fail_append = set(fail_append)
        self.fail_release = set(fail_release)
        self.fail_export = fail_export
        self.fail_save = fail_save
        self.fail_close_session = fail_close_session

        self.sessions_opened = 0
        self.sessions_closed = 0
        self.created = []
        self.released = []
        self.opened_names = []
        self.appended_names = []

    def open_session(self):
        self.sessions_opened += 1

    def close_session(self):
        self.sessions_closed += 1
        if self.fail_close_session:
            raise ReleaseError("engine refused to quit")

    def open_document(self, path):
        path = Path(path)
        if path.name in self.fail_open:
            raise OpenError(f"cannot open {path.name}")
        doc = FakeDoc(path.name, path.read_text(encoding="utf-8"))
        self.created.append(doc)
        self.opened_names.append(path.name)
        return doc

    def new_document(self):
        doc = FakeDoc("<new>")
        self.created.append(doc)
        return doc

    def set_range(self, doc, start, end, text):
        doc.content = doc.content[:start] + text + doc.content[end:]

    def append_content(self, target, source):
        if source.name in self.fail_append:
            raise AppendError(f"cannot append {source.name}")
        target.content += source.content
        self.appended_names.append(source.name)

    def export_fixed_format(self, doc, path):
        if self.fail_export:
            raise ExportError("pdf export failed")
        Path(path).write_text(doc.content, encoding="utf-8")

    def save_native(self, doc, path):
        if self.fail_save:
            raise ExportError("save failed")
        Path(path).write_text(doc.content, encoding="utf-8")

    def release(self, doc):
        self.released.append(doc)
        if doc.name in self.fail_release:
            raise ReleaseError(f"cannot close {doc.name}")
        doc.closed = True


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path, monkeypatch):
    monkeypatch.setenv("WORDMERGE_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def merge_in(tmp_path):
    """Input folder holding intro2, intro1, appendix10 plus files that must be ignored."""
    folder = tmp_path / "MergeIn"
    folder.mkdir()
    (folder / "intro2.docx").write_text("INTRO-2|", encoding="utf-8")
    (folder / "intro1.docx").write_text("INTRO-1|", encoding="utf-8")
    (folder / "appendix10.docx").write_text("APPENDIX-10|", encoding="utf-8")
    (folder / "notes.txt").write_text("not a document", encoding="utf-8")
    (folder / "report.docx").write_text("no index", encoding="utf-8")
    return folder


@pytest.fixture
def out_dir(tmp_path):
    return tmp_path / "out"
