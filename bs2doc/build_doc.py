#!/usr/bin/env python3
"""
Convert a Brightspace (D2L) content package export into one HTML or DOCX document.

Quizzes are rendered as numbered question lists; pass --answers to include
the correct answers and feedback.

Usage:
  python -m bs2doc.build_doc D2LExport_123.zip --format docx --out build/
  python -m bs2doc.build_doc extracted-export/ --format html --answers --out course.html

Options:
  --format {html,docx}   Output format (default: docx; docx needs pandoc on PATH)
  --answers              Include correct answers and feedback for quiz questions
  --lang CODE            Override the manifest language (en -> English labels, fr -> French)
  --out PATH             Output directory, or a file path ending in .html/.docx (default: .)
"""
from __future__ import annotations

import argparse
import logging
import sys
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional

from bs2doc.common import PandocError
from bs2doc.document import assemble_html, sanitize_filename, write_document
from bs2doc.manifest import ManifestError, build_quiz_html_map, load_manifest
from bs2doc.quiz.common import ExtractionWarning

logger = logging.getLogger("bs2doc")


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def output_path(out: str, title: Optional[str], fmt: str) -> Path:
    p = Path(out)
    if p.suffix.lower() in {".html", ".docx"}:
        return p
    return p / f"{sanitize_filename(title)}.{fmt}"


def convert_package(package_dir: Path, args) -> int:
    try:
        manifest = load_manifest(package_dir)
    except ManifestError as e:
        sys.stderr.write(f"{e}\n")
        return 2

    language = args.lang or manifest.language
    warnings: List[ExtractionWarning] = []
    quiz_html = build_quiz_html_map(manifest, package_dir, args.answers, language, warnings)
    if not manifest.item_resources:
        sys.stderr.write("No content items found in imsmanifest.xml\n")
        return 1

    html_text = assemble_html(manifest, package_dir, quiz_html, language)
    out = output_path(args.out, manifest.title, args.format)
    try:
        write_document(html_text, out, args.format)
    except PandocError as e:
        sys.stderr.write(f"DOCX conversion failed: {e}\n")
        return 2

    print(f"Wrote {out} ({len(manifest.item_resources)} items, {len(quiz_html)} quizzes, {len(warnings)} warnings)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(argument_default=None)
    ap.add_argument("package", help="Brightspace export ZIP or an extracted export directory")
    ap.add_argument("--format", choices=["html", "docx"], default="docx", help="Output format")
    ap.add_argument("--answers", action=argparse.BooleanOptionalAction, default=False,
                    help="Include correct answers and feedback for quiz questions")
    ap.add_argument("--lang", default=None, help="Language code for answer labels (default: from manifest)")
    ap.add_argument("--out", default=".", help="Output directory or file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    args = ap.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    src = Path(args.package)
    if src.is_dir():
        return convert_package(src, args)
    if not src.is_file():
        sys.stderr.write(f"Input not found: {src}\n")
        return 2
    if not zipfile.is_zipfile(src):
        sys.stderr.write(f"Not a ZIP archive: {src}\n")
        return 2

    with tempfile.TemporaryDirectory(prefix="bs2doc-") as tmp:
        with zipfile.ZipFile(src) as z:
            z.extractall(tmp)
        return convert_package(Path(tmp), args)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
