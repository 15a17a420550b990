from __future__ import annotations

import pytest

from bs2doc.quiz.common import (
    MatchAction, MatchCondition, Matching, MatchingGroup, MatchingOption, MatchRule,
    MultiSelect, MultipleChoice, Ordering, TrueFalse,
)
from bs2doc.quiz.html import MISSING_QUIZ_DATA, format_quiz_data_as_html


def rule(group: str, option: str, var: str = "D2L_Correct") -> MatchRule:
    return MatchRule(MatchCondition(group, option), MatchAction(var, "Add", 1.0))


@pytest.fixture
def questions():
    return [
        MultipleChoice("<p>Capital?</p>", ["Paris", "Berlin"], "B", ["Berlin it is."]),
        MultiSelect("Primes?", ["2", "4", "5"], "A, C"),
        Ordering("Order", ["x", "y", "z"], ["C", "A", "B"]),
        TrueFalse("Sky is blue", ["True", "False"], "True"),
        Matching(
            "Match",
            [
                MatchingGroup("France", "G1", [MatchingOption("Paris", "C1"), MatchingOption("Rome", "C2")]),
                MatchingGroup("Italy", "G2", [MatchingOption("Paris", "C1"), MatchingOption("Rome", "C2")]),
            ],
            [rule("G1", "C1"), rule("G1", "C2", "D2L_Incorrect"), rule("G2", "C2")],
            "Paris and Rome.",
        ),
    ]


@pytest.mark.parametrize("empty", [None, []])
def test_missing_quiz_data_marker(empty):
    assert format_quiz_data_as_html(empty, "Quiz", True) == "<h1>Missing quiz data</h1>"
    assert MISSING_QUIZ_DATA == "<h1>Missing quiz data</h1>"


@pytest.mark.parametrize("language", ["en", "fr", "fr-ca", None])
def test_no_answers_leaks_without_include_answers(questions, language):
    out = format_quiz_data_as_html(questions, "Quiz", False, language)
    for marker in ("Correct Answer", "Bonne réponse", "(Correct)", "Feedback"):
        assert marker not in out
    assert out.startswith("<h1>Quiz</h1> <ol>") and out.endswith("</ol>")
    assert "<li>Paris</li>" in out and "<li>Rome</li>" in out


def test_answers_and_feedback_in_english(questions):
    out = format_quiz_data_as_html(questions, "Quiz", True, "en-us")
    assert '<li><div><p>Capital?</p></div><ol type="A"><li>Paris</li><li>Berlin</li></ol>' in out
    assert "<p>Correct Answer: B</p><p>Feedback: Berlin it is.</p></li>" in out
    assert "<p>Correct Answer: A, C</p>" in out
    assert "<p>Correct Answer: C, A, B</p>" in out
    assert "<p>Correct Answer: True</p>" in out
    assert "<h3>France</h3><ul><li>Paris (Correct)</li><li>Rome</li></ul>" in out
    assert "<h3>Italy</h3><ul><li>Paris</li><li>Rome (Correct)</li></ul>" in out
    assert "<h2>Feedback</h2><p>Paris and Rome.</p>" in out


def test_french_label(questions):
    out = format_quiz_data_as_html(questions, "Quiz", True, "fr-ca")
    assert "<p>Bonne réponse: B</p>" in out
    assert "Correct Answer" not in out


def test_missing_answer_renders_na():
    out = format_quiz_data_as_html([MultipleChoice("Q", ["a", "b"], None)], "Quiz", True)
    assert "<p>Correct Answer: N/A</p>" in out


def test_questions_without_text_are_skipped(questions):
    out = format_quiz_data_as_html([MultipleChoice("", ["ghost"], "A")] + questions[:1], "Quiz", True)
    assert "ghost" not in out
    assert out.count("<div>") == 1


def test_title_is_escaped():
    out = format_quiz_data_as_html([TrueFalse("Q", ["True", "False"], "True")], "Q&A <1>", False)
    assert out.startswith("<h1>Q&amp;A &lt;1&gt;</h1>")
