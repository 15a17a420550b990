from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from bs2doc.common import have_pandoc
from bs2doc.document import (
    assemble_html, embed_images, fragment_with_images, sanitize_filename, write_document,
)
from bs2doc.manifest import build_quiz_html_map, load_manifest


@pytest.mark.parametrize("name,expected", [
    ("Intro to Geography", "Intro_to_Geography"),
    ('a/b\\c:d*e?f"g<h>i|j', "a_b_c_d_e_f_g_h_i_j"),
    ("", "default_filename"),
    (None, "default_filename"),
])
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_embed_images_in_content_page(sample_package: Path, caplog):
    page = sample_package / "content" / "intro.html"
    soup = BeautifulSoup(page.read_text(encoding="utf-8"), "html.parser")
    with caplog.at_level(logging.WARNING):
        assert embed_images(soup, page.parent, sample_package) == 2
    srcs = [img["src"] for img in soup.find_all("img")]
    assert srcs[0].startswith("data:image/png;base64,")
    assert srcs[1] == "https://example.com/remote.png"
    # /content/enforced/<orgunit>/ resolves against the package root
    assert srcs[2].startswith("data:image/png;base64,")
    assert srcs[3] == "images/missing.png"
    assert "File not found, skipping image" in caplog.text


PNG = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def test_content_enforced_image_falls_back_to_package_root(tmp_path: Path):
    pkg = tmp_path / "pkg"
    (pkg / "content").mkdir(parents=True)
    (pkg / "logo.png").write_bytes(PNG)
    soup = BeautifulSoup(
        '<img src="/content/enforced/1001-GEO/images/deep/logo.png">'
        '<img src="/d2l/common/viewFile.d2l?fileId=7">',
        "html.parser",
    )
    assert embed_images(soup, pkg / "content", pkg) == 1
    first, second = soup.find_all("img")
    assert first["src"].startswith("data:image/png;base64,")
    assert second["src"] == "/d2l/common/viewFile.d2l?fileId=7"


def test_images_outside_the_package_are_not_read(tmp_path: Path, caplog):
    (tmp_path / "secret.png").write_bytes(PNG)
    pkg = tmp_path / "pkg"
    (pkg / "content").mkdir(parents=True)
    soup = BeautifulSoup(
        '<img src="../../secret.png"><img src="/content/enforced/1001/../../../secret.png">',
        "html.parser",
    )
    with caplog.at_level(logging.WARNING):
        assert embed_images(soup, pkg / "content", pkg) == 0
    assert [img["src"] for img in soup.find_all("img")] == [
        "../../secret.png", "/content/enforced/1001/../../../secret.png",
    ]
    assert caplog.text.count("Image outside the package") == 2


def test_fragment_without_local_images_is_unchanged(tmp_path: Path):
    fragment = '<h1>Quiz</h1> <ol><li><div><img src="data:image/gif;base64,R0lG"></div></li></ol>'
    assert fragment_with_images(fragment, tmp_path) == fragment


def test_assemble_sample_package(sample_package: Path):
    m = load_manifest(sample_package)
    quiz_html = build_quiz_html_map(m, sample_package, include_answers=False)
    doc = assemble_html(m, sample_package, quiz_html)

    assert doc.startswith("<!DOCTYPE html>")
    assert '<html lang="en-us">' in doc
    assert "<title>Intro to Geography</title>" in doc
    assert "<h1>Introduction</h1>\n<p>Read this first & take notes.</p>" in doc
    assert "<h2>Welcome</h2>" in doc
    assert "<h1>Module 1 Quiz</h1> <ol>" in doc
    assert "<h1>Self Check</h1> <ol>" in doc
    # two intro page images and the self-check question image
    assert doc.count("data:image/png;base64,") == 3
    assert "Correct Answer" not in doc

    # organization order: page, quiz, self check
    assert doc.index("Welcome") < doc.index("Module 1 Quiz") < doc.index("Self Check")


def test_assemble_language_override(sample_package: Path):
    m = load_manifest(sample_package)
    doc = assemble_html(m, sample_package, {}, language="fr-ca")
    assert '<html lang="fr-ca">' in doc


def test_assemble_missing_page_is_skipped(tmp_path: Path, caplog):
    (tmp_path / "imsmanifest.xml").write_text(
        '<manifest><organizations><organization>'
        '<item identifier="I1" identifierref="R"><title>Gone</title></item>'
        '</organization></organizations>'
        '<resources><resource identifier="R" href="gone.html" title="Gone"/></resources></manifest>',
        encoding="utf-8",
    )
    m = load_manifest(tmp_path)
    with caplog.at_level(logging.WARNING):
        doc = assemble_html(m, tmp_path, {})
    assert "<title>BrightspaceToDocx</title>" in doc
    assert "Cannot read content page" in caplog.text


def test_write_html(tmp_path: Path):
    out = write_document("<html></html>", tmp_path / "nested" / "course.html", "html")
    assert out.read_text(encoding="utf-8") == "<html></html>"


def test_write_unknown_format(tmp_path: Path):
    with pytest.raises(ValueError, match="Unsupported output format"):
        write_document("<html></html>", tmp_path / "course.pdf", "pdf")


@pytest.mark.skipif(not have_pandoc(), reason="pandoc not installed")
def test_write_docx(sample_package: Path, tmp_path: Path):
    m = load_manifest(sample_package)
    doc = assemble_html(m, sample_package, build_quiz_html_map(m, sample_package, True))
    out = write_document(doc, tmp_path / "course.docx", "docx")
    assert zipfile.is_zipfile(out)
