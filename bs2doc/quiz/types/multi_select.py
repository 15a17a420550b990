from __future__ import annotations
from typing import Dict, List, Optional
from bs2doc.common import choice_letter
from bs2doc.quiz.common import (
    MultiSelect, QuestionType, choice_idents, label_text,
    require_flow, require_question_parts, respconditions, setvar_text, varequal_texts,
)

QUESTION_TYPE = QuestionType.MULTI_SELECT.value

def extract(item: Dict) -> Optional[MultiSelect]:
    flow = require_flow(item)
    question, labels = require_question_parts(flow, "response_lid")
    if not question:
        return None

    idents = choice_idents(labels)
    letters: List[str] = []
    for rc in respconditions(item):
        if setvar_text(rc) != "1":
            continue
        for ident in varequal_texts(rc):
            if ident not in idents:
                continue
            letter = choice_letter(idents.index(ident))
            if letter and letter not in letters:
                letters.append(letter)

    return MultiSelect(
        question=question,
        answer_choices=[label_text(rl) for rl in labels],
        correct_answer=", ".join(letters),
    )
