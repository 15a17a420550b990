"""
Section walker.

Flattens an assessment's section tree into the ordered list of items to
extract: a section's own items, then its item references, then its nested
sections (depth first), then the next sibling section.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from bs2doc.common import as_list, attr, child
from bs2doc.quiz.common import ExtractionWarning, UnresolvedReference
from bs2doc.quiz.itembank import ItemBankError, ItemBankResolver

logger = logging.getLogger(__name__)

ITEM_BANK_FILE = "questiondb.xml"


@dataclass
class ResolvedItem:
    node: dict
    kind: str = "item"  # "item" or "linked"

    @property
    def label(self) -> Optional[str]:
        return attr(self.node, "label") or attr(self.node, "ident")


def _resolve_ref(ref: Any, resolver: ItemBankResolver, root_dir: Path,
                 warnings: Optional[List[ExtractionWarning]]) -> Optional[ResolvedItem]:
    href = attr(child(ref, "file"), "href")
    label = attr(ref, "linkrefid")
    if href != ITEM_BANK_FILE or not label:
        logger.debug("Skipping item reference %s -> %s", label, href)
        return None

    try:
        node = resolver.resolve(root_dir / ITEM_BANK_FILE, label)
    except ItemBankError as e:
        logger.warning("%s", e)
        node = None
    if node is None:
        err = UnresolvedReference(label, ITEM_BANK_FILE)
        logger.warning("%s", err)
        if warnings is not None:
            warnings.append(ExtractionWarning.from_error(err, label))
        return None
    return ResolvedItem(node=node, kind="linked")


def walk_sections(sections: Any, resolver: ItemBankResolver, root_dir: Union[str, Path],
                  warnings: Optional[List[ExtractionWarning]] = None) -> List[ResolvedItem]:
    root_dir = Path(root_dir)
    out: List[ResolvedItem] = []

    def visit(section: Any) -> None:
        if not isinstance(section, dict):
            return
        ident = attr(section, "ident")
        logger.debug("Processing section %s", ident)
        items = [i for i in as_list(section.get("item")) if isinstance(i, dict)]
        refs = as_list(section.get("itemref"))
        nested_sections = as_list(section.get("section"))
        if not items and not refs and not nested_sections:
            logger.warning("No items or item references found in quiz XML section: %s", ident)
        out.extend(ResolvedItem(node=i) for i in items)
        for ref in refs:
            resolved = _resolve_ref(ref, resolver, root_dir, warnings)
            if resolved is not None:
                out.append(resolved)
        for nested in nested_sections:
            visit(nested)

    for section in as_list(sections):
        visit(section)
    return out
