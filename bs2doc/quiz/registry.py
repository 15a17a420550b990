from __future__ import annotations
from importlib import import_module
import functools
import pkgutil
from typing import Callable, Dict

@functools.lru_cache(maxsize=None)
def discover_extractors() -> Dict[str, Callable]:
    """
    Auto-import all modules in bs2doc.quiz.types and return
    a map: qmd_questiontype value -> extract(item: dict) -> Question | None
    """
    import bs2doc.quiz.types as pkg
    extractor_map: Dict[str, Callable] = {}
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        mod = import_module(m.name)
        qtype = getattr(mod, "QUESTION_TYPE", None)
        func = getattr(mod, "extract", None)
        if isinstance(qtype, str) and callable(func):
            extractor_map[qtype] = func
    return extractor_map
