from __future__ import annotations
from typing import Dict, Optional
from bs2doc.quiz.common import (
    QuestionType, TrueFalse, choice_idents, label_text,
    require_flow, require_question_parts,
)
from bs2doc.quiz.types.multiple_choice import correct_ident

QUESTION_TYPE = QuestionType.TRUE_FALSE.value

def extract(item: Dict) -> Optional[TrueFalse]:
    flow = require_flow(item)
    question, labels = require_question_parts(flow, "response_lid")
    if not question:
        return None

    choices = [label_text(rl) for rl in labels]
    idents = choice_idents(labels)
    # Full marks only; partial-credit conditions do not name the right answer.
    ident = correct_ident(item, lambda score: score == 100)
    return TrueFalse(
        question=question,
        answer_choices=choices,
        correct_answer=choices[idents.index(ident)] if ident in idents else None,
    )
