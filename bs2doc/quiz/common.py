"""
Shared types for the quiz engine: question records, diagnostics and the
helpers every question-type extractor uses to read QTI 1.2 presentation and
response-processing blocks.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from bs2doc.common import as_list, attr, child, node_text


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "Multiple Choice"
    MULTI_SELECT = "Multi-Select"
    ORDERING = "Ordering"
    TRUE_FALSE = "True/False"
    MATCHING = "Matching"


# ---------- Errors ----------

class QuizParseError(Exception):
    pass

class StructuralMismatch(QuizParseError):
    pass

class UnsupportedQuestionType(QuizParseError):
    def __init__(self, raw_value: Optional[str]):
        super().__init__(f"Question type not supported: {raw_value}")
        self.raw_value = raw_value

class UnresolvedReference(QuizParseError):
    def __init__(self, label: Optional[str], file_name: str):
        super().__init__(f"Could not find item with id {label} in {file_name}")
        self.label = label
        self.file_name = file_name

class ParseFailure(QuizParseError):
    pass


@dataclass
class ExtractionWarning:
    kind: str
    message: str
    label: Optional[str] = None

    @classmethod
    def from_error(cls, err: QuizParseError, label: Optional[str] = None) -> "ExtractionWarning":
        return cls(kind=type(err).__name__, message=str(err), label=label)


# ---------- Question records ----------

@dataclass
class Question:
    question: str
    answer_choices: List[Any]

    question_type: ClassVar[QuestionType]

    def to_dict(self) -> Dict[str, Any]:
        return {"question_type": self.question_type.value, **asdict(self)}

@dataclass
class MultipleChoice(Question):
    correct_answer: Optional[str] = None
    feedbacks: List[str] = field(default_factory=list)
    question_type: ClassVar[QuestionType] = QuestionType.MULTIPLE_CHOICE

@dataclass
class MultiSelect(Question):
    correct_answer: str = ""
    question_type: ClassVar[QuestionType] = QuestionType.MULTI_SELECT

@dataclass
class Ordering(Question):
    correct_answer: List[str] = field(default_factory=list)
    question_type: ClassVar[QuestionType] = QuestionType.ORDERING

@dataclass
class TrueFalse(Question):
    correct_answer: Optional[str] = None
    question_type: ClassVar[QuestionType] = QuestionType.TRUE_FALSE

@dataclass
class MatchingOption:
    text: str
    ident: Optional[str]

@dataclass
class MatchingGroup:
    label: str
    ident: Optional[str]
    options: List[MatchingOption] = field(default_factory=list)

@dataclass
class MatchCondition:
    response_identifier: Optional[str]
    match: Optional[str]

@dataclass
class MatchAction:
    var_name: Optional[str]
    action_type: Optional[str]
    value: Optional[float]

@dataclass
class MatchRule:
    condition: MatchCondition
    action: MatchAction

@dataclass
class Matching(Question):
    correct_answer: List[MatchRule] = field(default_factory=list)
    feedbacks: Optional[str] = None
    question_type: ClassVar[QuestionType] = QuestionType.MATCHING


def is_correct_choice(rules: List[MatchRule], group_ident: Optional[str], option_ident: Optional[str]) -> bool:
    return any(
        r.condition.response_identifier == group_ident
        and r.condition.match == option_ident
        and r.action.var_name == "D2L_Correct"
        for r in rules
    )


# ---------- QTI reading helpers ----------

def mattext(node: Any) -> Optional[str]:
    """Text of ``node/material/mattext``."""
    return node_text(child(node, "material", "mattext"))

def require_flow(item: Dict[str, Any]) -> Dict[str, Any]:
    flow = child(item, "presentation", "flow")
    if not isinstance(flow, dict):
        raise StructuralMismatch("presentation.flow not found")
    return flow

def response_labels(response: Any) -> List[Dict[str, Any]]:
    """
    Ordered ``response_label`` nodes under ``render_choice/flow_label``.
    Brightspace writes one flow_label per choice for response_lid and a single
    flow_label holding every label for response_grp; both shapes are handled.
    """
    labels: List[Dict[str, Any]] = []
    for fl in as_list(child(response, "render_choice", "flow_label")):
        if isinstance(fl, dict):
            labels.extend(rl for rl in as_list(fl.get("response_label")) if isinstance(rl, dict))
    return labels

def label_text(label: Dict[str, Any]) -> str:
    return mattext(label.get("flow_mat")) or ""

def choice_idents(labels: List[Dict[str, Any]]) -> List[Optional[str]]:
    return [attr(rl, "ident") for rl in labels]

def respconditions(item: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [rc for rc in as_list(child(item, "resprocessing", "respcondition")) if isinstance(rc, dict)]

def setvar_text(rc: Dict[str, Any]) -> Optional[str]:
    text = node_text(rc.get("setvar"))
    return text.strip() if text is not None else None

def varequal_texts(rc: Dict[str, Any]) -> List[str]:
    """Texts of the direct ``conditionvar/varequal`` children (negated ones excluded)."""
    cv = child(rc, "conditionvar")
    if not isinstance(cv, dict):
        return []
    out = []
    for ve in as_list(cv.get("varequal")):
        text = node_text(ve)
        if text is not None:
            out.append(text.strip())
    return out

def require_question_parts(flow: Dict[str, Any], response_key: str):
    """Question text and the ordered response labels of ``flow/<response_key>``."""
    response = child(flow, response_key)
    if response is None:
        raise StructuralMismatch(f"presentation.flow.{response_key} not found")
    labels = response_labels(response)
    if not labels:
        raise StructuralMismatch("no answer choices found")
    return mattext(flow), labels
