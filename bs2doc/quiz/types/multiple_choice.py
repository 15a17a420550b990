from __future__ import annotations
from typing import Dict, Optional
from bs2doc.common import as_list, choice_letter, to_float
from bs2doc.quiz.common import (
    MultipleChoice, QuestionType, choice_idents, label_text, mattext,
    require_flow, require_question_parts, respconditions, setvar_text, varequal_texts,
)

QUESTION_TYPE = QuestionType.MULTIPLE_CHOICE.value

def correct_ident(item: Dict, predicate) -> Optional[str]:
    """Ident named by the first respcondition whose setvar score satisfies ``predicate``."""
    for rc in respconditions(item):
        score = to_float(setvar_text(rc))
        if score is not None and predicate(score):
            idents = varequal_texts(rc)
            return idents[0] if idents else None
    return None

def extract(item: Dict) -> Optional[MultipleChoice]:
    flow = require_flow(item)
    question, labels = require_question_parts(flow, "response_lid")
    if not question:
        return None

    idents = choice_idents(labels)
    ident = correct_ident(item, lambda score: score != 0)
    letter = choice_letter(idents.index(ident)) if ident in idents else None

    feedbacks = [mattext(fb) for fb in as_list(item.get("itemfeedback"))]
    return MultipleChoice(
        question=question,
        answer_choices=[label_text(rl) for rl in labels],
        correct_answer=letter,
        feedbacks=[fb for fb in feedbacks if fb],
    )
