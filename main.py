#!/usr/bin/env python3
# main.py

import argparse
import sys

from core.doc_engine import DirectoryNotFound, MergeError
from core.filename_indexer import scan_directory
from core.merge_config import load_merge_config, resolve_paths
from core.merge_orchestrator import merge_folder
from core.word_engine import WordEngine
from utils.logger import log

EXIT_OK = 0
EXIT_NO_PDF = 1
EXIT_NO_INPUT_DIR = 2
EXIT_ENGINE_UNAVAILABLE = 3


def build_parser():
    parser = argparse.ArgumentParser(
        description="Merge numbered .docx files (name1.docx, name2.docx, ...) into one PDF and a .docx backup")
    parser.add_argument("--input", default=None, help="Input folder (default: <desktop>/MergeIn)")
    parser.add_argument("--pdf-out", default=None, help="Exported PDF path (default: <desktop>/統合ファイル.pdf)")
    parser.add_argument("--backup-out", default=None, help="Merged .docx backup path (default: <desktop>/temp.docx)")
    parser.add_argument("--config", default=None, help="Alternate merge_config.yaml")
    parser.add_argument("--strict", action="store_true",
                        help="Abort on the first file that cannot be opened or appended")
    parser.add_argument("--list", action="store_true",
                        help="Print the merge order and exit without starting Word")
    return parser


def main(argv=None, engine_factory=WordEngine):
    args = build_parser().parse_args(argv)

    config = load_merge_config(args.config)
    paths = resolve_paths(config, {
        "input_dir": args.input,
        "pdf_path": args.pdf_out,
        "backup_path": args.backup_out,
    })
    log(f"Input folder: {paths.input_dir}", "DEBUG")

    if args.list:
        try:
            order = scan_directory(paths.input_dir)
        except DirectoryNotFound as e:
            log(str(e), "FAIL")
            return EXIT_NO_INPUT_DIR
        for item in order:
            print(f"{item.index}\t{item.path.name}")
        return EXIT_OK

    if engine_factory is WordEngine:
        ok, reason = WordEngine.is_available()
        if not ok:
            log(reason, "FAIL")
            return EXIT_ENGINE_UNAVAILABLE

    try:
        result = merge_folder(
            paths.input_dir,
            engine_factory(),
            paths.pdf_path,
            paths.backup_path,
            strict=args.strict,
        )
    except DirectoryNotFound as e:
        log(str(e), "FAIL")
        return EXIT_NO_INPUT_DIR
    except MergeError as e:
        log(f"Merge aborted: {e}", "FAIL")
        return EXIT_NO_PDF

    return EXIT_OK if result.exported else EXIT_NO_PDF


if __name__ == "__main__":
    sys.exit(main())
