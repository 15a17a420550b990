"""
Item bank resolver.

Quiz sections may point at items stored in a shared objectbank file
(``questiondb.xml``). The resolver keeps the label index of the last file it
read, so resolving many references into the same bank reads it once. A
lookup in a different file replaces the cached index. A bank that cannot be
read or parsed is reported once and skipped for the rest of the session.

One resolver serves one conversion at a time; give concurrent sessions
their own instance.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Set, Union

from bs2doc.common import XmlLoadError, as_list, attr, child, load_xml_tree, read_text
from bs2doc.quiz.common import ParseFailure

logger = logging.getLogger(__name__)


class ItemBankError(ParseFailure):
    pass


def _index_items(items, index: Dict[str, dict]) -> None:
    for item in as_list(items):
        label = attr(item, "label")
        if label is None:
            logger.debug("Item bank entry without label skipped")
            continue
        index[label] = item

def _index_section(section, index: Dict[str, dict]) -> None:
    if not isinstance(section, dict):
        return
    _index_items(section.get("item"), index)
    for nested in as_list(section.get("section")):
        _index_section(nested, index)

def build_index(tree: dict) -> Dict[str, dict]:
    """Flatten objectbank items and all (nested) sections into label -> item."""
    objectbank = child(tree, "questestinterop", "objectbank")
    if not isinstance(objectbank, dict):
        raise ItemBankError("questestinterop.objectbank not found")
    index: Dict[str, dict] = {}
    _index_items(objectbank.get("item"), index)
    for section in as_list(objectbank.get("section")):
        _index_section(section, index)
    return index


class ItemBankResolver:
    def __init__(self, reader: Callable[[Union[str, Path]], str] = read_text):
        self.reader = reader
        self.cached_path: Optional[str] = None
        self.cached_index: Optional[Dict[str, dict]] = None
        # banks that could not be read or parsed; never retried
        self.failed_paths: Set[str] = set()

    def resolve(self, file_path: Union[str, Path], label: str) -> Optional[dict]:
        """
        Item with ``label`` in the bank at ``file_path``, or None when absent.
        Raises ItemBankError the first time a bank cannot be used; later
        lookups in that bank return None without reading it again.
        """
        key = str(file_path).replace("\\", "/")
        if key in self.failed_paths:
            return None
        if key != self.cached_path:
            self.cached_path = None
            self.cached_index = None
            logger.debug("Loading item bank %s", key)
            try:
                tree = load_xml_tree(self.reader(key))
                index = build_index(tree)
            except (OSError, XmlLoadError) as e:
                self.failed_paths.add(key)
                raise ItemBankError(f"cannot read item bank {key}: {e}") from e
            except ItemBankError:
                self.failed_paths.add(key)
                raise
            self.cached_index = index
            self.cached_path = key
        return self.cached_index.get(label)
