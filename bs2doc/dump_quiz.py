#!/usr/bin/env python3
"""
Dump the questions extracted from one Brightspace quiz XML file as YAML.

Handy for checking what the converter sees in a quiz before building the
whole document.

Usage:
  python -m bs2doc.dump_quiz export/quiz_d2l_123.xml
  python -m bs2doc.dump_quiz export/quiz_d2l_123.xml --validate --out quiz.yaml

Options:
  --root DIR     Folder holding questiondb.xml (default: the quiz file's folder)
  --out FILE     Write YAML to a file instead of stdout
  --validate     Check every record against the bundled JSON schema
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from bs2doc.build_doc import configure_logging
from bs2doc.common import blockify
from bs2doc.quiz.common import ExtractionWarning, Question
from bs2doc.quiz.parser import parse_quiz_xml_file

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "quiz-question.schema.json"


def load_schema(path: Path = SCHEMA_PATH) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))

def question_record(q: Question) -> Dict[str, Any]:
    rec = q.to_dict()
    rec["question"] = blockify(rec["question"])
    return rec

def validate_records(records: List[Dict[str, Any]], validator: Draft202012Validator) -> List[str]:
    problems: List[str] = []
    for i, rec in enumerate(records):
        for err in sorted(validator.iter_errors(rec), key=lambda e: (list(e.path), e.message)):
            loc = ".".join(str(p) for p in err.path) or "(root)"
            problems.append(f"[{i}] {loc}: {err.message}")
    return problems

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(argument_default=None)
    ap.add_argument("quiz_file", help="Path to a quiz XML file (quiz_d2l_*.xml)")
    ap.add_argument("--root", default=None, help="Folder holding questiondb.xml")
    ap.add_argument("--out", default="-", help="Output file or '-' for stdout")
    ap.add_argument("--validate", action="store_true", help="Validate records against the JSON schema")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    configure_logging(args.verbose, False)

    quiz_path = Path(args.quiz_file)
    if not quiz_path.exists():
        sys.stderr.write(f"Quiz file not found: {quiz_path}\n")
        return 2

    warnings: List[ExtractionWarning] = []
    questions = parse_quiz_xml_file(quiz_path, root_dir=args.root, warnings=warnings)
    records = [q.to_dict() for q in questions]

    if args.validate:
        problems = validate_records(records, Draft202012Validator(load_schema()))
        if problems:
            sys.stderr.write("Schema validation failed:\n" + "\n".join(f"  - {p}" for p in problems) + "\n")
            return 1

    text = yaml.safe_dump([question_record(q) for q in questions], sort_keys=False, allow_unicode=True)
    if args.out in ("-", ""):
        sys.stdout.write(text)
    else:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        print(f"Wrote {out_path}")

    for w in warnings:
        sys.stderr.write(f"[skip] {w.kind}: {w.message}" + (f" (item {w.label})" if w.label else "") + "\n")
    if not questions:
        sys.stderr.write("No questions extracted.\n")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
