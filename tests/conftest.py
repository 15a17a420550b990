# tests/conftest.py
from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Iterable, Optional, Sequence, Tuple

import pytest

# Repo root on sys.path so "bs2doc.*" imports work when running pytest at repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

SAMPLE_PACKAGE = REPO_ROOT / "samples" / "package"


def mattext(text: str) -> str:
    return f'<material><mattext texttype="text/html">{text}</mattext></material>'

def response_lid(choices: Sequence[Tuple[str, str]], ident: str = "LID_1") -> str:
    labels = "".join(
        f'<flow_label class="Block"><response_label ident="{cid}"><flow_mat>{mattext(text)}</flow_mat></response_label></flow_label>'
        for cid, text in choices
    )
    return f'<response_lid ident="{ident}"><render_choice shuffle="no">{labels}</render_choice></response_lid>'

def response_grp(choices: Sequence[Tuple[str, str]], ident: str = "GRP_1", label: Optional[str] = None) -> str:
    labels = "".join(
        f'<response_label ident="{cid}"><flow_mat>{mattext(text)}</flow_mat></response_label>'
        for cid, text in choices
    )
    head = mattext(label) if label is not None else ""
    return f'<response_grp ident="{ident}">{head}<render_choice><flow_label class="Block">{labels}</flow_label></render_choice></response_grp>'

def respconditions(conds: Iterable[Tuple[str, str]], respident: str = "LID_1") -> str:
    return "".join(
        f'<respcondition><conditionvar><varequal respident="{respident}">{value}</varequal></conditionvar>'
        f'<setvar action="Set">{score}</setvar></respcondition>'
        for value, score in conds
    )

def item(qtype: Optional[str], flow: Optional[str], resprocessing: str = "", feedback: Iterable[str] = (),
         label: str = "QUES_1", metadata: bool = True) -> str:
    meta = ""
    if metadata:
        fields = '<qti_metadatafield><fieldlabel>qmd_computerscored</fieldlabel><fieldentry>yes</fieldentry></qti_metadatafield>'
        if qtype is not None:
            fields += f'<qti_metadatafield><fieldlabel>qmd_questiontype</fieldlabel><fieldentry>{qtype}</fieldentry></qti_metadatafield>'
        meta = f"<itemmetadata><qtimetadata>{fields}</qtimetadata></itemmetadata>"
    pres = f"<presentation><flow>{flow}</flow></presentation>" if flow is not None else ""
    fbs = "".join(f'<itemfeedback ident="{label}_IF{i}">{mattext(f)}</itemfeedback>' for i, f in enumerate(feedback))
    return f'<item label="{label}" ident="OBJ_{label}">{meta}{pres}<resprocessing>{resprocessing}</resprocessing>{fbs}</item>'

def quiz(*section_bodies: str) -> str:
    sections = "".join(f'<section ident="SECT_{i}">{body}</section>' for i, body in enumerate(section_bodies))
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<questestinterop xmlns:d2l_2p0="http://desire2learn.com/xsd/d2lcp_v2p0">'
        f'<assessment title="Quiz" ident="res_quiz">{sections}</assessment></questestinterop>'
    )

def objectbank(body: str) -> str:
    return f'<?xml version="1.0" encoding="UTF-8"?><questestinterop><objectbank ident="QDB">{body}</objectbank></questestinterop>'

def itemref(label: str, href: str = "questiondb.xml") -> str:
    return f'<itemref linkrefid="{label}"><file href="{href}" /></itemref>'


@pytest.fixture
def qti():
    """Builders for small QTI 1.2 documents in the Brightspace dialect."""
    return SimpleNamespace(
        mattext=mattext, response_lid=response_lid, response_grp=response_grp,
        respconditions=respconditions, item=item, quiz=quiz, objectbank=objectbank, itemref=itemref,
    )

@pytest.fixture
def sample_package() -> Path:
    assert SAMPLE_PACKAGE.is_dir(), f"Missing sample package: {SAMPLE_PACKAGE}"
    return SAMPLE_PACKAGE
