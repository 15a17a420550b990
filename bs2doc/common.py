#!/usr/bin/env python3
"""
Common helpers for bs2doc.

XML trees
  Brightspace exports are read with xmltodict into plain nested dicts:
    - namespace prefixes are stripped from tag names (``imsmd:lom`` -> ``lom``),
      attribute names are left alone (``@d2l_2p0:material_type``)
    - element text is kept as written; whitespace-only text reads as None
    - attributes live under ``@name`` keys, element text under ``#text``
    - a child that occurs once is a value, a child that repeats is a list;
      callers normalise with ``as_list`` wherever either shape can appear

Pandoc bridge
  DOCX output goes through pandoc (HTML -> DOCX), which must be on PATH.

Typical use:
  from bs2doc.common import load_xml_tree, as_list, node_text

  tree = load_xml_tree(read_text(path))
  for item in as_list(tree["questestinterop"]["assessment"]["section"]["item"]):
      print(attr(item, "label"))
"""

from __future__ import annotations
import shutil
import subprocess
from pathlib import Path
from typing import Any, List, Optional, Union
from xml.parsers.expat import ExpatError

import xmltodict
import yaml

PathLike = Union[str, Path]


# ---------- File reading ----------

def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file; Windows separators in the path are normalised."""
    corrected = str(path).replace("\\", "/")
    return Path(corrected).read_text(encoding="utf-8")


# ---------- XML tree loader ----------

class XmlLoadError(ValueError):
    pass

def _postprocess(path, key: str, value):
    """Strip tag prefixes and drop whitespace-only text."""
    if key.startswith("@"):
        return key, value
    if isinstance(value, str) and not value.strip():
        if key == "#text":
            return None
        value = None
    if key.startswith("#"):
        return key, value
    return key.rsplit(":", 1)[-1], value

def load_xml_tree(xml_text: str) -> dict:
    """Parse XML text into a nested dict with tag prefixes stripped."""
    if not xml_text or not xml_text.strip():
        raise XmlLoadError("empty XML document")
    try:
        return xmltodict.parse(xml_text, postprocessor=_postprocess, strip_whitespace=False)
    except ExpatError as e:
        raise XmlLoadError(f"malformed XML: {e}") from e


# ---------- Tree access ----------

def as_list(node: Any) -> List[Any]:
    """Wrap a singleton child into a one-element list; None becomes []."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]

def first(node: Any) -> Any:
    items = as_list(node)
    return items[0] if items else None

def child(node: Any, *keys: str) -> Any:
    """
    Follow ``keys`` down the tree, taking the first element whenever a step
    yields a list. Returns None as soon as a step is missing.
    """
    cur = node
    for k in keys:
        cur = first(cur)
        if not isinstance(cur, dict):
            return None
        cur = cur.get(k)
    return cur

def attr(node: Any, name: str) -> Optional[str]:
    node = first(node)
    if not isinstance(node, dict):
        return None
    return node.get("@" + name)

def node_text(node: Any) -> Optional[str]:
    """Text content of an element whether or not it carried attributes."""
    node = first(node)
    if node is None:
        return None
    if isinstance(node, str):
        return node
    if isinstance(node, dict):
        return node.get("#text")
    return str(node)

def to_float(s: Optional[str]) -> Optional[float]:
    if s is None:
        return None
    try:
        return float(str(s).strip())
    except ValueError:
        return None

def choice_letter(i: int) -> Optional[str]:
    """0 -> "A" ... 25 -> "Z"; None past the alphabet."""
    if not 0 <= i < 26:
        return None
    return chr(ord("A") + i)


# ---------- YAML block-scalar helper ----------

class LiteralStr(str): pass
def _repr_literal(dumper, data):
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
yaml.add_representer(LiteralStr, _repr_literal, Dumper=yaml.SafeDumper)

def blockify(s: Optional[str]) -> Optional[str]:
    if s is None:
        return None
    s = str(s)
    if "\n" in s:
        return LiteralStr(s.rstrip("\n"))
    return s


# ---------- Pandoc bridge ----------

def have_pandoc() -> bool:
    """Return True if pandoc is available on PATH."""
    return shutil.which("pandoc") is not None

class PandocError(RuntimeError):
    pass

def _run_pandoc(text: str, args: List[str]) -> bytes:
    if not have_pandoc():
        raise PandocError("pandoc not found in PATH")
    try:
        proc = subprocess.run(
            ["pandoc", *args],
            input=text.encode("utf-8"),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise PandocError(f"pandoc failed: {e.stderr.decode('utf-8', 'ignore')}") from e
    return proc.stdout

def html_to_docx(html: str, out_path: PathLike) -> Path:
    """Convert a full HTML document to DOCX at ``out_path``."""
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    _run_pandoc(html, ["-f", "html", "-t", "docx", "-o", str(out)])
    return out
