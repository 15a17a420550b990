"""
Question classifier and extractor.

Each resolved item is classified by its ``qmd_questiontype`` metadata field and
handed to the extractor registered for that exact value. Items that cannot be
turned into a question are skipped with a warning; the rest of the batch is
always processed.
"""
from __future__ import annotations
import logging
from typing import Callable, List, Optional

from bs2doc.common import as_list, child, node_text
from bs2doc.quiz.common import (
    ExtractionWarning, Question, QuizParseError, StructuralMismatch, UnsupportedQuestionType,
)
from bs2doc.quiz.registry import discover_extractors
from bs2doc.quiz.sections import ResolvedItem

logger = logging.getLogger(__name__)

QUESTION_TYPE_FIELD = "qmd_questiontype"


class MissingMetadata(StructuralMismatch):
    pass


def question_type_of(item: dict) -> Optional[str]:
    """Value of the qmd_questiontype metadata field; raises MissingMetadata without itemmetadata."""
    metadata = item.get("itemmetadata")
    if metadata is None:
        raise MissingMetadata("metadata fields not found")
    for fld in as_list(child(metadata, "qtimetadata", "qti_metadatafield")):
        if node_text(child(fld, "fieldlabel")) == QUESTION_TYPE_FIELD:
            return node_text(child(fld, "fieldentry"))
    return None

def classify(item: dict) -> Callable:
    """Extractor for the item's type; raises UnsupportedQuestionType outside the closed set."""
    raw = question_type_of(item)
    extractor = discover_extractors().get(raw) if raw is not None else None
    if extractor is None:
        raise UnsupportedQuestionType(raw)
    return extractor

def extract_item(resolved: ResolvedItem) -> Optional[Question]:
    """
    Question for one item, or None when it has no question text.
    Raises QuizParseError subclasses for anything that must be skipped.
    """
    extractor = classify(resolved.node)
    try:
        return extractor(resolved.node)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        raise StructuralMismatch(f"unexpected item structure: {e}") from e

def extract_questions(items: List[ResolvedItem], warnings: Optional[List[ExtractionWarning]] = None) -> List[Question]:
    questions: List[Question] = []
    for index, resolved in enumerate(items):
        try:
            q = extract_item(resolved)
        except QuizParseError as e:
            logger.warning("Skipping item %s (index %d): %s", resolved.label or "?", index, e)
            if warnings is not None:
                warnings.append(ExtractionWarning.from_error(e, resolved.label))
            continue
        if q is None:
            logger.debug("Dropping item %s: no question text", resolved.label or index)
            continue
        questions.append(q)
    return questions
