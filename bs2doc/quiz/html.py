#!/usr/bin/env python3
"""
Render extracted quiz questions as an HTML fragment for the combined document.

Question and choice text is already HTML in Brightspace exports and is kept
as-is; only the title is escaped.

Layout:
  <h1>Title</h1>
  <ol>
    <li><div>question</div><ol type="A"><li>choice</li>...</ol>
        [<p>Correct Answer: X</p><p>Feedback: ...</p>]</li>
    <li><div>matching question</div><ul>
        <h3>group</h3><ul><li>option[ (Correct)]</li>...</ul>...
        </ul>[<h2>Feedback</h2><p>...</p>]</li>
  </ol>
"""
from __future__ import annotations
import html
from typing import List, Optional

from bs2doc.quiz.common import Matching, Ordering, Question, is_correct_choice

MISSING_QUIZ_DATA = "<h1>Missing quiz data</h1>"

LABELS = {
    "en": {"answer": "Correct Answer", "feedback": "Feedback", "correct": "Correct"},
    "fr": {"answer": "Bonne réponse", "feedback": "Feedback", "correct": "Correct"},
}


def labels_for(language: Optional[str]) -> dict:
    code = (language or "en").strip().lower()[:2]
    return LABELS.get(code, LABELS["en"])


def answer_text(q: Question) -> str:
    ans = getattr(q, "correct_answer", None)
    if isinstance(q, Ordering):
        ans = ", ".join(ans)
    return str(ans) if ans else "N/A"


def feedback_list(q: Question) -> List[str]:
    fb = getattr(q, "feedbacks", None)
    if not fb:
        return []
    if isinstance(fb, str):
        return [fb]
    return [f for f in fb if f]


def render_choice_question(q: Question, include_answers: bool, labels: dict) -> str:
    out: List[str] = [f"<li><div>{q.question}</div><ol type=\"A\">"]
    for choice in q.answer_choices:
        out.append(f"<li>{choice}</li>")
    out.append("</ol>")
    if include_answers:
        out.append(f"<p>{labels['answer']}: {answer_text(q)}</p>")
        for fb in feedback_list(q):
            out.append(f"<p>{labels['feedback']}: {fb}</p>")
    out.append("</li>")
    return "".join(out)


def render_matching_question(q: Matching, include_answers: bool, labels: dict) -> str:
    out: List[str] = [f"<li><div>{q.question}</div><ul>"]
    for group in q.answer_choices:
        out.append(f"<h3>{group.label}</h3><ul>")
        for option in group.options:
            mark = ""
            if include_answers and is_correct_choice(q.correct_answer, group.ident, option.ident):
                mark = f" ({labels['correct']})"
            out.append(f"<li>{option.text}{mark}</li>")
        out.append("</ul>")
    out.append("</ul>")
    if include_answers and q.feedbacks:
        out.append(f"<h2>{labels['feedback']}</h2><p>{q.feedbacks}</p>")
    out.append("</li>")
    return "".join(out)


def format_quiz_data_as_html(questions: Optional[List[Question]], title: str,
                             include_answers: bool = False, language: Optional[str] = "en") -> str:
    if not questions:
        return MISSING_QUIZ_DATA
    labels = labels_for(language)
    parts: List[str] = [f"<h1>{html.escape(title or '')}</h1> <ol>"]
    for q in questions:
        if not q.question:
            continue
        if isinstance(q, Matching):
            parts.append(render_matching_question(q, include_answers, labels))
        else:
            parts.append(render_choice_question(q, include_answers, labels))
    parts.append("</ol>")
    return "".join(parts)
