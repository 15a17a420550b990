from __future__ import annotations
from typing import Dict, List, Optional
from bs2doc.common import as_list, attr, child, first, node_text, to_float
from bs2doc.quiz.common import (
    MatchAction, MatchCondition, Matching, MatchingGroup, MatchingOption, MatchRule,
    QuestionType, StructuralMismatch, label_text, mattext,
    require_flow, respconditions, response_labels,
)

QUESTION_TYPE = QuestionType.MATCHING.value

def parse_rule(rc: Dict) -> MatchRule:
    cv = child(rc, "conditionvar")
    test = None
    if isinstance(cv, dict):
        test = first(cv.get("varequal")) or first(cv.get("vargte"))
    match = node_text(test)
    setvar = first(rc.get("setvar"))
    return MatchRule(
        condition=MatchCondition(
            response_identifier=attr(test, "respident"),
            match=match.strip() if match is not None else None,
        ),
        action=MatchAction(
            var_name=attr(setvar, "varname"),
            action_type=attr(setvar, "action"),
            value=to_float(node_text(setvar)),
        ),
    )

def parse_groups(flow: Dict) -> List[MatchingGroup]:
    groups: List[MatchingGroup] = []
    for grp in as_list(flow.get("response_grp")):
        if not isinstance(grp, dict):
            continue
        options = [MatchingOption(text=label_text(rl), ident=attr(rl, "ident")) for rl in response_labels(grp)]
        groups.append(MatchingGroup(label=mattext(grp) or "", ident=attr(grp, "ident"), options=options))
    return groups

def extract(item: Dict) -> Optional[Matching]:
    flow = require_flow(item)
    question = mattext(flow)
    if not question:
        return None

    groups = parse_groups(flow)
    if not groups:
        raise StructuralMismatch("presentation.flow.response_grp not found")

    feedbacks = [mattext(fb) for fb in as_list(item.get("itemfeedback"))]
    feedbacks = [fb for fb in feedbacks if fb]
    return Matching(
        question=question,
        answer_choices=groups,
        correct_answer=[parse_rule(rc) for rc in respconditions(item)],
        feedbacks=feedbacks[0] if feedbacks else None,
    )
