"""
Read a Brightspace ``imsmanifest.xml``: course title and language, the
organization tree (the order content appears in the document) and the
resources each organization item points to.

Quiz resources are ``.xml`` files whose ``d2l_2p0:material_type`` is
``d2lquiz`` or ``d2lselfassess``. Brightspace also emits ``contentlink``
resources (``...?type=quiz...``) for quizzes placed inside a module; these
borrow the file of the quiz resource with the same title.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from bs2doc.common import XmlLoadError, as_list, attr, child, first, load_xml_tree, node_text, read_text
from bs2doc.quiz.common import ExtractionWarning
from bs2doc.quiz.html import format_quiz_data_as_html
from bs2doc.quiz.itembank import ItemBankResolver
from bs2doc.quiz.parser import parse_quiz_xml_file

logger = logging.getLogger(__name__)

MANIFEST_FILE = "imsmanifest.xml"
QUIZ_MATERIAL_TYPES = {"d2lquiz", "d2lselfassess"}


class ManifestError(ValueError):
    pass


@dataclass
class Resource:
    identifier: str
    href: str
    title: Optional[str]
    is_html: bool = False
    is_quiz: bool = False

@dataclass
class ItemResource:
    href: str
    description: str = ""

@dataclass
class Manifest:
    title: Optional[str]
    language: Optional[str]
    organization_items: List[Any]
    resource_map: Dict[str, Resource]
    item_resources: Dict[str, ItemResource] = field(default_factory=dict)

    @property
    def quizzes(self) -> List[Resource]:
        return [r for r in self.resource_map.values() if r.is_quiz]


def material_type(resource: Any) -> Optional[str]:
    node = first(resource)
    if not isinstance(node, dict):
        return None
    for key, value in node.items():
        if key == "@material_type" or key.endswith(":material_type"):
            return value
    return None

def identifier_titles(items: Any, out: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """identifierref -> title for every organization item, depth first."""
    if out is None:
        out = {}
    for item in as_list(items):
        ref = attr(item, "identifierref")
        title = node_text(child(item, "title"))
        if ref and title:
            out[ref] = title
        identifier_titles(child(item, "item"), out)
    return out

def build_resource_map(resources: Any, titles: Dict[str, str]) -> Dict[str, Resource]:
    resource_map: Dict[str, Resource] = {}
    for res in as_list(resources):
        identifier = attr(res, "identifier")
        if not identifier:
            logger.warning("Resource without identifier skipped")
            continue
        href = attr(res, "href") or ""
        title = attr(res, "title")
        mtype = material_type(res)
        lower = href.lower()
        r = Resource(
            identifier=identifier,
            href=href,
            title=title,
            is_html=lower.endswith(".html"),
            is_quiz=lower.endswith(".xml") and mtype in QUIZ_MATERIAL_TYPES,
        )
        if mtype == "contentlink" and "type=quiz" in lower:
            quiz = next((q for q in resource_map.values() if q.is_quiz and q.title == title), None)
            if quiz is not None:
                r.href = quiz.href
                r.is_quiz = True
                r.title = titles.get(identifier) or titles.get(quiz.identifier) or title
            else:
                logger.warning("Quiz link %s has no matching quiz resource", title)
        resource_map[identifier] = r
    return resource_map

def parse_items(item_list: Any, item_resource_map: Dict[str, ItemResource], resource_map: Dict[str, Resource]) -> None:
    """Map organization item titles to the HTML file and description shown for them."""
    for item in as_list(item_list):
        title = node_text(child(item, "title"))
        if not isinstance(item, dict) or not title:
            logger.warning("Invalid item structure encountered, skipping")
            continue
        resource = resource_map.get(attr(item, "identifierref") or "")
        if resource is not None:
            item_resource_map[title] = ItemResource(
                href=resource.href if resource.is_html else "",
                description=attr(item, "description") or "",
            )
        if item.get("item") is not None:
            parse_items(item.get("item"), item_resource_map, resource_map)

def load_manifest(package_dir: Union[str, Path]) -> Manifest:
    path = Path(package_dir) / MANIFEST_FILE
    try:
        tree = load_xml_tree(read_text(path))
    except (OSError, XmlLoadError) as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e

    manifest = tree.get("manifest")
    organization = child(manifest, "organizations", "organization")
    if not isinstance(organization, dict):
        raise ManifestError("Invalid imsmanifest.xml structure: no organization found")
    resources = child(manifest, "resources", "resource")
    if resources is None:
        raise ManifestError("Invalid imsmanifest.xml structure: no resources found")

    general = child(manifest, "metadata", "lom", "general")
    if general is None:
        logger.warning("imsmanifest.xml has no metadata; course title unknown")
    title = node_text(child(general, "title", "langstring"))
    language = node_text(child(general, "language"))

    org_items = as_list(organization.get("item"))
    resource_map = build_resource_map(resources, identifier_titles(org_items))
    item_resources: Dict[str, ItemResource] = {}
    parse_items(org_items, item_resources, resource_map)
    return Manifest(title=title, language=language, organization_items=org_items,
                    resource_map=resource_map, item_resources=item_resources)

def build_quiz_html_map(manifest: Manifest, package_dir: Union[str, Path], include_answers: bool,
                        language: Optional[str] = None,
                        warnings: Optional[List[ExtractionWarning]] = None) -> Dict[str, str]:
    """quiz title -> formatted quiz fragment, for every quiz resource in the manifest."""
    package_dir = Path(package_dir)
    resolver = ItemBankResolver()
    language = language or manifest.language
    quiz_html: Dict[str, str] = {}
    for quiz in manifest.quizzes:
        title = quiz.title or quiz.identifier
        if title in quiz_html:
            continue
        logger.info("Parsing quiz %s (%s)", title, quiz.href)
        questions = parse_quiz_xml_file(package_dir / quiz.href, root_dir=package_dir,
                                        resolver=resolver, warnings=warnings)
        quiz_html[title] = format_quiz_data_as_html(questions, title, include_answers, language)
    return quiz_html
