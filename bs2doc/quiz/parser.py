"""
Entry points for turning a Brightspace quiz file into question records.

Usage:
  from bs2doc.quiz.parser import parse_quiz_xml_file

  warnings = []
  questions = parse_quiz_xml_file("export/quiz_d2l_123.xml", warnings=warnings)

An empty list means the file held no usable quiz content; ``warnings``
collects one entry per skipped item, reference or unreadable file.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional, Union

from bs2doc.common import XmlLoadError, child, load_xml_tree, read_text
from bs2doc.quiz.common import ExtractionWarning, ParseFailure, Question
from bs2doc.quiz.extract import extract_questions
from bs2doc.quiz.itembank import ItemBankResolver
from bs2doc.quiz.sections import walk_sections

logger = logging.getLogger(__name__)


def _fail(message: str, warnings: Optional[List[ExtractionWarning]]) -> List[Question]:
    logger.error("%s", message)
    if warnings is not None:
        warnings.append(ExtractionWarning.from_error(ParseFailure(message)))
    return []

def parse_quiz_xml(xml_text: str, root_dir: Union[str, Path] = ".",
                   resolver: Optional[ItemBankResolver] = None,
                   warnings: Optional[List[ExtractionWarning]] = None) -> List[Question]:
    try:
        tree = load_xml_tree(xml_text)
    except XmlLoadError as e:
        return _fail(f"Error parsing quiz XML: {e}", warnings)

    assessment = child(tree, "questestinterop", "assessment")
    if not isinstance(assessment, dict):
        return _fail("Unexpected structure in parsed quiz XML: questestinterop.assessment not found", warnings)

    sections = assessment.get("section")
    if not sections:
        return _fail("No sections found in parsed quiz XML", warnings)

    if resolver is None:
        resolver = ItemBankResolver()
    items = walk_sections(sections, resolver, root_dir, warnings)
    logger.debug("Quiz items: %d", len(items))
    return extract_questions(items, warnings)

def parse_quiz_xml_file(path: Union[str, Path], root_dir: Union[str, Path, None] = None,
                        resolver: Optional[ItemBankResolver] = None,
                        warnings: Optional[List[ExtractionWarning]] = None) -> List[Question]:
    """Parse one quiz file; item bank references resolve against ``root_dir`` (default: the file's folder)."""
    try:
        xml_text = read_text(path)
    except OSError as e:
        return _fail(f"Cannot read quiz file {path}: {e}", warnings)
    if root_dir is None:
        root_dir = Path(str(path).replace("\\", "/")).parent
    return parse_quiz_xml(xml_text, root_dir, resolver, warnings)
