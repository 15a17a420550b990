from __future__ import annotations
import re
from typing import Dict, List, Optional
from bs2doc.quiz.common import (
    Ordering, QuestionType, label_text,
    require_flow, require_question_parts, respconditions, setvar_text, varequal_texts,
)

QUESTION_TYPE = QuestionType.ORDERING.value

# "<anything>_<N>": N is the 1-based position of the choice
POSITION_RE = re.compile(r"_(\d+)$")

def position_letter(value: str) -> Optional[str]:
    m = POSITION_RE.search(value)
    if not m:
        return None
    n = int(m.group(1))
    if not 1 <= n <= 26:
        return None
    return chr(64 + n)

def extract(item: Dict) -> Optional[Ordering]:
    flow = require_flow(item)
    question, labels = require_question_parts(flow, "response_grp")
    if not question:
        return None

    letters: List[str] = []
    for rc in respconditions(item):
        if setvar_text(rc) != "1":
            continue
        for value in varequal_texts(rc):
            letter = position_letter(value)
            if letter:
                letters.append(letter)

    return Ordering(
        question=question,
        answer_choices=[label_text(rl) for rl in labels],
        correct_answer=letters,
    )
