# rdfa_core/ttl_generator.py
import re
from typing import Dict, List, Optional
from .document import Document
from .terms import RDF_TYPE, XSD_NS, BlankNode, Literal, NamedNode, TripleSet

_LOCAL = re.compile(r"^[A-Za-z_][\w\-]*$")

def collect_prefixes(doc: Document) -> Dict[str, str]:
    """Все xmlns:* документа (первое объявление префикса побеждает)."""
    prefixes: Dict[str, str] = {}
    for el in doc.root.iter():
        for name, value in el.attrs.items():
            if name.startswith("xmlns:"):
                prefixes.setdefault(name[len("xmlns:"):], value)
    return prefixes

def iri(uri: str, prefixes: Optional[Dict[str, str]] = None) -> str:
    for prefix, ns in sorted((prefixes or {}).items(), key=lambda kv: -len(kv[1])):
        if uri.startswith(ns) and _LOCAL.match(uri[len(ns):]):
            return f"{prefix}:{uri[len(ns):]}"
    return f"<{uri}>"

def lit(l: Literal, prefixes: Optional[Dict[str, str]] = None) -> str:
    s = l.value.replace("\\", "\\\\").replace('"', '\\"')
    if "\n" in s or "\r" in s:
        s = s.replace("\r", "\\r").replace("\n", "\\n")
    if l.lang:
        return f'"{s}"@{l.lang}'
    if l.datatype:
        return f'"{s}"^^{iri(l.datatype, prefixes)}'
    return f'"{s}"'

def term(t, prefixes: Optional[Dict[str, str]] = None) -> str:
    if isinstance(t, NamedNode):
        return iri(t.uri, prefixes)
    if isinstance(t, BlankNode):
        return f"_:{t.id}"
    return lit(t, prefixes)


def triples_to_nt(triples: TripleSet) -> str:
    return "".join(f"{t}\n" for t in triples)


def triples_to_ttl(triples: TripleSet, prefixes: Dict[str, str]) -> str:
    lines: List[str] = [f"@prefix {p}: <{ns}> ." for p, ns in sorted(prefixes.items())]
    if lines:
        lines.append("")

    # группируем по субъекту, порядок первого появления
    by_subject: Dict[object, List] = {}
    for t in triples:
        by_subject.setdefault(t.subject, []).append(t)

    for subject, ts in by_subject.items():
        lines.append(term(subject, prefixes))
        for i, t in enumerate(ts):
            pred = "a" if t.predicate.uri == RDF_TYPE else term(t.predicate, prefixes)
            end = " ." if i == len(ts) - 1 else " ;"
            lines.append(f"    {pred} {term(t.object, prefixes)}{end}")
        lines.append("")
    return "\n".join(lines)


def document_to_ttl(doc: Document) -> str:
    prefixes = collect_prefixes(doc)
    triples = doc.triples()
    if any(isinstance(t.object, Literal) and (t.object.datatype or "").startswith(XSD_NS) for t in triples):
        prefixes.setdefault("xsd", XSD_NS)
    return triples_to_ttl(triples, prefixes)
