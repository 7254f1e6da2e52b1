# rdfa_core/curie.py
import json
import os
import re
from pathlib import Path
from typing import Dict, Optional

from .errors import MalformedResourceReference, UnresolvablePrefix
from . import uri as urilib

# грузим конфиг
CONFIG_DIR = Path(os.environ.get("RDFA_CONFIG_DIR") or Path(__file__).resolve().parent / "config")

NAMESPACES = json.loads((CONFIG_DIR / "namespaces.json").read_text(encoding="utf-8"))

NS: Dict[str, str] = NAMESPACES["ns"]
DEFAULT_PREFIXES: Dict[str, str] = NAMESPACES["default_prefixes"]
RESERVED_NS: str = NAMESPACES["reserved_namespace"]
RESERVED = frozenset(NAMESPACES["reserved"])

SAFE_CURIE = re.compile(r"^\[([^\]]*)\]$")
PREFIX = re.compile(r"^[A-Za-z_][\w.\-]*$")
# допустимая локальная часть при записи CURIE
REFERENCE = re.compile(r"^[A-Za-z_][\w.\-]*$")


def split_curie(curie: str):
    if ":" not in curie:
        return None, curie
    prefix, reference = curie.split(":", 1)
    return prefix, reference


def resolve_curie(curie: str, prefixes: Dict[str, str], reserved: bool = False) -> str:
    """
    prefix:reference -> URI.
    reserved=True разрешает зарезервированные слова XHTML (для rel/rev).
    """
    prefix, reference = split_curie(curie)
    if prefix is None:
        if reserved and curie.lower() in RESERVED:
            return RESERVED_NS + curie.lower()
        raise MalformedResourceReference("not a CURIE", value=curie)
    if prefix == "":
        return RESERVED_NS + reference
    if not PREFIX.match(prefix):
        raise MalformedResourceReference("malformed CURIE prefix", value=curie)
    ns = prefixes.get(prefix)
    if ns is None:
        ns = DEFAULT_PREFIXES.get(prefix)
    if ns is None:
        raise UnresolvablePrefix(prefix, value=curie)
    return urilib.check(ns + reference)


def is_bound(value: str, prefixes: Dict[str, str]) -> bool:
    """Начинается ли строка с зарегистрированного префикса (и это не схема URI вида http://)."""
    prefix, reference = split_curie(value)
    if not prefix or reference.startswith("//"):
        return False
    return prefix in prefixes or prefix in DEFAULT_PREFIXES


def create_curie(uri: str, prefixes: Dict[str, str]) -> str:
    """
    URI -> prefix:reference по самому длинному подходящему пространству имён.
    Бросает UnresolvablePrefix, если подходящей привязки нет.
    """
    best: Optional[str] = None
    best_ns = ""
    for prefix in sorted(prefixes):
        ns = prefixes[prefix]
        if not prefix or not ns or not uri.startswith(ns) or len(ns) <= len(best_ns):
            continue
        reference = uri[len(ns):]
        if REFERENCE.match(reference):
            best, best_ns = prefix, ns
    if best is None:
        raise UnresolvablePrefix("", value=uri)
    return f"{best}:{uri[len(best_ns):]}"
