#!/usr/bin/env python3
# test/test_merge_orchestrator.py

import pytest

from conftest import FakeEngine
from core.doc_engine import AppendError, DirectoryNotFound, OpenError
from core.merge_orchestrator import PLACEHOLDER_TEXT, merge_folder


def _run(folder, engine, out_dir, **kwargs):
    return merge_folder(folder, engine, out_dir / "merged.pdf", out_dir / "temp.docx", **kwargs)


def test_end_to_end_merge_order_and_outputs(merge_in, fake_engine, out_dir):
    result = _run(merge_in, fake_engine, out_dir)

    names = [p.name for p in result.merged]
    assert names == ["intro1.docx", "intro2.docx", "appendix10.docx"]
    assert result.skipped == []

    expected = PLACEHOLDER_TEXT + "INTRO-1|INTRO-2|APPENDIX-10|"
    assert result.exported
    assert result.pdf_path.read_text(encoding="utf-8") == expected
    assert result.backup_path.read_text(encoding="utf-8") == expected


def test_accumulator_is_seeded_before_first_append(merge_in, out_dir):
    seen = []

    class RecordingEngine(FakeEngine):
        def append_content(self, target, source):
            seen.append(target.content)
            super().append_content(target, source)

    _run(merge_in, RecordingEngine(), out_dir)

    assert seen[0] == PLACEHOLDER_TEXT


def test_sources_are_never_mutated(merge_in, fake_engine, out_dir):
    _run(merge_in, fake_engine, out_dir)

    sources = [d for d in fake_engine.created if d.name != "<new>"]
    assert {d.name: d.content for d in sources} == {
        "intro1.docx": "INTRO-1|",
        "intro2.docx": "INTRO-2|",
        "appendix10.docx": "APPENDIX-10|",
    }


def test_repeated_runs_produce_same_content(merge_in, out_dir):
    first = _run(merge_in, FakeEngine(), out_dir).pdf_path.read_text(encoding="utf-8")
    second = _run(merge_in, FakeEngine(), out_dir).pdf_path.read_text(encoding="utf-8")
    assert first == second


def test_every_handle_released_exactly_once(merge_in, fake_engine, out_dir):
    result = _run(merge_in, fake_engine, out_dir)

    assert result.handles_acquired == 4
    assert result.handles_released == 4
    assert len(fake_engine.released) == len(fake_engine.created)
    assert len({id(d) for d in fake_engine.released}) == len(fake_engine.released)
    assert all(d.closed for d in fake_engine.created)
    assert fake_engine.sessions_opened == fake_engine.sessions_closed == 1


def test_open_failure_skips_file_and_continues(merge_in, out_dir):
    engine = FakeEngine(fail_open={"intro2.docx"})

    result = _run(merge_in, engine, out_dir)

    assert [p.name for p in result.merged] == ["intro1.docx", "appendix10.docx"]
    assert [p.name for p, _ in result.skipped] == ["intro2.docx"]
    assert result.pdf_path.read_text(encoding="utf-8") == " INTRO-1|APPENDIX-10|"
    assert result.handles_acquired == result.handles_released == 3


def test_append_failure_skips_document_and_continues(merge_in, out_dir):
    engine = FakeEngine(fail_append={"intro1.docx"})

    result = _run(merge_in, engine, out_dir)

    assert [p.name for p in result.merged] == ["intro2.docx", "appendix10.docx"]
    assert [p.name for p, _ in result.skipped] == ["intro1.docx"]
    assert result.handles_acquired == result.handles_released == 4


def test_export_failure_is_not_fatal_and_backup_still_saved(merge_in, out_dir):
    engine = FakeEngine(fail_export=True)

    result = _run(merge_in, engine, out_dir)

    assert not result.exported
    assert not (out_dir / "merged.pdf").exists()
    assert result.backup_path is not None
    assert result.backup_path.exists()
    assert result.handles_acquired == result.handles_released


def test_save_failure_leaves_pdf(merge_in, out_dir):
    result = _run(merge_in, FakeEngine(fail_save=True), out_dir)

    assert result.exported
    assert result.backup_path is None


def test_release_failure_does_not_block_other_releases(merge_in, out_dir):
    engine = FakeEngine(fail_release={"intro1.docx", "<new>"}, fail_close_session=True)

    result = _run(merge_in, engine, out_dir)

    assert result.exported
    assert len(engine.released) == 4
    assert result.handles_acquired == result.handles_released == 4
    assert engine.sessions_closed == 1


def test_strict_mode_aborts_on_open_failure_after_cleanup(merge_in, out_dir):
    engine = FakeEngine(fail_open={"intro2.docx"})

    with pytest.raises(OpenError):
        _run(merge_in, engine, out_dir, strict=True)

    assert engine.opened_names == ["intro1.docx"]
    assert len(engine.released) == len(engine.created) == 1
    assert engine.sessions_closed == 1
    assert not (out_dir / "merged.pdf").exists()


def test_strict_mode_aborts_on_append_failure_after_cleanup(merge_in, out_dir):
    engine = FakeEngine(fail_append={"intro2.docx"})

    with pytest.raises(AppendError):
        _run(merge_in, engine, out_dir, strict=True)

    assert engine.appended_names == ["intro1.docx"]
    assert len(engine.released) == len(engine.created) == 4
    assert engine.sessions_closed == 1


def test_missing_directory_is_fatal_and_engine_untouched(tmp_path, fake_engine, out_dir):
    with pytest.raises(DirectoryNotFound):
        _run(tmp_path / "nope", fake_engine, out_dir)

    assert fake_engine.sessions_opened == 0


def test_empty_folder_produces_no_outputs(tmp_path, fake_engine, out_dir):
    folder = tmp_path / "empty"
    folder.mkdir()
    (folder / "readme.txt").write_text("x", encoding="utf-8")

    result = _run(folder, fake_engine, out_dir)

    assert result.order == []
    assert not result.exported
    assert fake_engine.sessions_opened == 0
    assert not out_dir.exists()


def test_output_directories_are_created(merge_in, fake_engine, tmp_path):
    pdf = tmp_path / "a" / "b" / "merged.pdf"
    backup = tmp_path / "c" / "temp.docx"

    result = merge_folder(merge_in, fake_engine, pdf, backup)

    assert result.pdf_path == pdf and pdf.exists()
    assert result.backup_path == backup and backup.exists()


def test_outputs_are_overwritten(merge_in, fake_engine, out_dir):
    out_dir.mkdir()
    (out_dir / "merged.pdf").write_text("stale", encoding="utf-8")

    result = _run(merge_in, fake_engine, out_dir)

    assert "stale" not in result.pdf_path.read_text(encoding="utf-8")
