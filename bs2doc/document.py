"""
Assemble the consolidated course document.

Content pages are concatenated in organization order; a quiz's formatted
fragment stands in for its page. Local images are inlined as base64 data URIs
so the HTML (and the DOCX pandoc makes from it) is self-contained.
"""
from __future__ import annotations
import base64
import html
import logging
import mimetypes
import re
from pathlib import Path
from typing import Dict, List, Optional, Union
from urllib.parse import unquote

from bs4 import BeautifulSoup

from bs2doc.common import html_to_docx, read_text
from bs2doc.manifest import Manifest

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_RE = re.compile(r"[ <>:\"/\\|?*]")
CONTENT_ENFORCED_RE = re.compile(r"^/content/enforced/[^/]+/")

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="UTF-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def sanitize_filename(name: Optional[str]) -> str:
    if not isinstance(name, str) or not name:
        logger.error("Invalid filename: %r", name)
        name = "default_filename"
    return UNSAFE_FILENAME_RE.sub("_", name)

def image_data_uri(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name)
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime or 'application/octet-stream'};base64,{data}"

def local_image_path(src: str, base_dir: Path, package_dir: Path) -> Optional[Path]:
    """
    File an <img src> points to inside the package, or None for sources that
    are not package files. ``/content/enforced/<orgunit>/...`` paths resolve
    against the package root; other relative paths against ``base_dir``.
    """
    path = unquote(src.split("?")[0])
    if CONTENT_ENFORCED_RE.match(path):
        return package_dir / CONTENT_ENFORCED_RE.sub("", path)
    if path.startswith("/"):
        return None
    return base_dir / path

def within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents

def embed_images(soup: BeautifulSoup, base_dir: Path, package_dir: Optional[Path] = None) -> int:
    """Inline local <img> sources; returns how many were embedded."""
    root = Path(package_dir if package_dir is not None else base_dir).resolve()
    embedded = 0
    for img in soup.find_all("img"):
        src = img.get("src")
        if not src or src.startswith("data:"):
            continue
        if src.startswith(("http://", "https://", "//")):
            logger.debug("Leaving remote image %s", src)
            continue
        candidate = local_image_path(src, Path(base_dir), root)
        if candidate is None:
            logger.debug("Leaving server image %s", src)
            continue
        path = candidate.resolve()
        if not within(path, root):
            logger.warning("Image outside the package, skipping: %s", src)
            continue
        if not path.is_file():
            # retry by file name at the package root
            fallback = (root / path.name).resolve()
            if not within(fallback, root) or not fallback.is_file():
                logger.warning("File not found, skipping image: %s", path)
                continue
            path = fallback
        try:
            img["src"] = image_data_uri(path)
        except OSError as e:
            logger.error("Error converting image to base64: %s: %s", path, e)
            continue
        embedded += 1
    return embedded

def page_body(html_path: Path, package_dir: Optional[Path] = None) -> str:
    soup = BeautifulSoup(read_text(html_path), "html.parser")
    embed_images(soup, html_path.parent, package_dir)
    body = soup.body
    return body.decode_contents() if body is not None else str(soup)

def fragment_with_images(fragment: str, base_dir: Path) -> str:
    soup = BeautifulSoup(fragment, "html.parser")
    if embed_images(soup, base_dir):
        return str(soup)
    return fragment

def assemble_html(manifest: Manifest, package_dir: Union[str, Path], quiz_html: Dict[str, str],
                  language: Optional[str] = None) -> str:
    package_dir = Path(package_dir)
    parts: List[str] = []
    for title, res in manifest.item_resources.items():
        body = ""
        if title in quiz_html:
            body = fragment_with_images(quiz_html[title], package_dir)
        elif res.href:
            path = package_dir / res.href
            try:
                body = page_body(path, package_dir)
            except OSError as e:
                logger.warning("Cannot read content page %s: %s", path, e)
        heading = ""
        if res.description:
            heading = f"<h1>{html.escape(title)}</h1>\n{html.unescape(res.description)}\n"
        parts.append(f"{heading}{body}\n")
    return DOCUMENT_TEMPLATE.format(
        lang=html.escape(language or manifest.language or "en"),
        title=html.escape(manifest.title or "BrightspaceToDocx"),
        body="".join(parts),
    )

def write_document(html_text: str, out_path: Union[str, Path], fmt: str) -> Path:
    out = Path(out_path)
    if fmt == "docx":
        return html_to_docx(html_text, out)
    if fmt != "html":
        raise ValueError(f"Unsupported output format: {fmt}")
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(html_text, encoding="utf-8")
    return out
