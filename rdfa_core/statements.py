# rdfa_core/statements.py
"""Разбор одной тройки, записанной строкой в стиле N-Triples/Turtle."""
import re
from typing import List

from . import uri as urilib
from .errors import MalformedResourceReference
from .identity import IdentityResolver
from .model import Element
from .terms import RDF_TYPE, Literal, NamedNode, Object, Triple, is_resource

_TOKEN = re.compile(
    r"""\s*(?:
        <(?P<iri>[^>]*)>
      | (?P<blank>_:[A-Za-z0-9_][\w.\-]*)
      | "(?P<literal>(?:[^"\\]|\\.)*)"
        (?:@(?P<lang>[A-Za-z]+(?:-[A-Za-z0-9]+)*)|\^\^(?:<(?P<dtiri>[^>]*)>|(?P<dtname>[^\s<>"]+)))?
      | (?P<name>[^\s<>"]+)
    )""",
    re.VERBOSE,
)

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", '"': '"', "'": "'", "\\": "\\"}
_ESCAPE = re.compile(r"\\(u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|.)")


def _unescape(s: str) -> str:
    def repl(m):
        e = m.group(1)
        if e[0] in "uU":
            return chr(int(e[1:], 16))
        if e in _ESCAPES:
            return _ESCAPES[e]
        raise MalformedResourceReference(f"bad escape \\{e}", value=s)
    return _ESCAPE.sub(repl, s)


def parse_statement(text: str, node: Element, resolver: IdentityResolver) -> Triple:
    """
    "<s> ex:p "значение"@ru ." -> Triple.
    Префиксы берутся из области видимости node, относительные IRI - от базы документа.
    """
    body = text.strip()
    if body.endswith("."):
        body = body[:-1]
    terms: List[Object] = []
    pos = 0
    while pos < len(body.rstrip()):
        m = _TOKEN.match(body, pos)
        if not m or m.end() == pos:
            raise MalformedResourceReference("cannot parse statement", value=text)
        pos = m.end()
        terms.append(_term(m, node, resolver, len(terms)))
    if len(terms) != 3:
        raise MalformedResourceReference(f"expected 3 terms, got {len(terms)}", value=text)
    subject, predicate, obj = terms
    if not is_resource(subject) or not isinstance(predicate, NamedNode):
        raise MalformedResourceReference("subject must be a resource and predicate a URI", value=text)
    return Triple(subject, predicate, obj)


def _term(m, node: Element, resolver: IdentityResolver, position: int) -> Object:
    if m.group("iri") is not None:
        return NamedNode(urilib.resolve(resolver.base, m.group("iri")))
    if m.group("blank") is not None:
        return resolver.blanks.named(m.group("blank")[2:])
    if m.group("literal") is not None:
        value = _unescape(m.group("literal"))
        if m.group("lang"):
            return Literal(value, lang=m.group("lang"))
        if m.group("dtiri") is not None:
            return Literal(value, datatype=urilib.resolve(resolver.base, m.group("dtiri")))
        if m.group("dtname") is not None:
            dt = resolver.curie(m.group("dtname"), node)
            if not isinstance(dt, NamedNode):
                raise MalformedResourceReference("datatype must be a URI", value=m.group("dtname"))
            return Literal(value, datatype=dt.uri)
        return Literal(value)
    name = m.group("name")
    if name == "a" and position == 1:
        return NamedNode(RDF_TYPE)
    return resolver.curie(name, node)
