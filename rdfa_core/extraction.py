# rdfa_core/extraction.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import MalformedResourceReference, RDFaError
from .identity import IdentityResolver, NodeCache, attribute, tokens
from .model import Element
from .model_loader import escape_attr, inner_markup
from .terms import RDF_TYPE, XML_LITERAL, Literal, NamedNode, Resource, Triple

logger = logging.getLogger(__name__)


@dataclass
class RelationContext:
    """rel/rev родителя без собственного объекта: связываются с субъектом ребёнка."""
    forward: List[NamedNode] = field(default_factory=list)
    backward: List[NamedNode] = field(default_factory=list)


# ---------- XML-литерал ----------

def serialize_children(node: Element) -> str:
    """
    Дословная разметка детей узла для rdf:XMLLiteral.
    Непосредственным детям-элементам добавляется унаследованный xmlns, если он не объявлен.
    """
    out = []
    for child in node.children:
        if not child.is_element:
            out.append(child.text())
            continue
        s = "<" + child.name
        for name, value in child.attrs.items():
            s += f' {name}="{escape_attr(value)}"'
        ns = child.default_namespace()
        if ns is not None and child.get("xmlns") is None:
            s += f' xmlns="{escape_attr(ns)}"'
        s += ">" + inner_markup(child) + f"</{child.name}>"
        out.append(s)
    return "".join(out)


def literal_for(node: Element, resolver: IdentityResolver) -> Literal:
    """
    Литерал для @property узла:
    datatype -> content -> текст (нет детей-элементов или datatype="") -> XML-литерал.
    """
    lang = resolver.lang(node)
    datatype = attribute(node, "datatype")
    content = attribute(node, "content")

    if datatype:
        dt = resolver.curie(datatype.strip(), node, "datatype")
        if not isinstance(dt, NamedNode):
            raise MalformedResourceReference("datatype must be a URI", value=datatype, attr="datatype")
        if dt.uri == XML_LITERAL:
            return Literal(serialize_children(node), datatype=XML_LITERAL)
        if content is not None:
            return Literal(content, datatype=dt.uri)
        return Literal(node.text(), datatype=dt.uri)
    if content is not None:
        return Literal(content, lang=lang)
    if not node.element_children() or datatype == "":
        return Literal(node.text(), lang=lang)
    return Literal(serialize_children(node), datatype=XML_LITERAL)


class Extractor:
    """
    Рекурсивный обход дерева -> тройки.

    strict=False: ошибки разбора отдельных атрибутов логируются и копятся в errors,
    обход остального дерева продолжается. strict=True: первая ошибка пробрасывается.
    """

    def __init__(self, resolver: IdentityResolver, cache: NodeCache, strict: bool = False):
        self.resolver = resolver
        self.cache = cache
        self.strict = strict

    @property
    def errors(self) -> List[RDFaError]:
        """Ошибки по текущему состоянию дерева: без повторов, сбрасываются вместе с кешем узла."""
        return [e for found in self.cache.errors.values() for e in found]

    def extract(self, node: Element, context: Optional[RelationContext] = None) -> List[Triple]:
        triples: List[Triple] = []
        if context is not None and (context.forward or context.backward):
            triples.extend(self._link_to_parent(node, context))

        local = self.cache.triples.get(node.handle)
        if local is None:
            local = self._local_triples(node)
            self.cache.triples[node.handle] = local
        return triples + local

    # ---------- связь с родителем ----------

    def _link_to_parent(self, node: Element, context: RelationContext) -> List[Triple]:
        try:
            subject = self.resolver.subject(node)
            parent = self.resolver.subject(node.parent)
        except RDFaError as e:
            self._failed(e, node)
            return []
        triples = [Triple(parent, p, subject) for p in context.forward]
        triples += [Triple(subject, p, parent) for p in context.backward]
        return triples

    # ---------- тройки самого узла ----------

    def _local_triples(self, node: Element) -> List[Triple]:
        local: List[Triple] = []
        rels: List[NamedNode] = []
        revs: List[NamedNode] = []
        try:
            subject = self.resolver.subject(node)
        except RDFaError as e:
            # без субъекта собственные тройки узла не строятся, дети обходятся дальше
            self._failed(e, node)
            subject = None
        try:
            resource = self.resolver.object_resource(node)
            object_failed = False
        except RDFaError as e:
            self._failed(e, node)
            resource, object_failed = None, True

        if subject is not None:
            for t in tokens(attribute(node, "typeof")):
                obj = self._resolve(t, node, "typeof")
                if obj is not None:
                    local.append(Triple(subject, NamedNode(RDF_TYPE), obj, source=node))

            properties = tokens(attribute(node, "property"))
            if properties:
                obj = self._literal(node)
                if obj is not None:
                    for p in properties:
                        pred = self._resolve(p, node, "property")
                        if isinstance(pred, NamedNode):
                            local.append(Triple(subject, pred, obj, source=node))

            rels = self._predicates(node, "rel")
            revs = self._predicates(node, "rev")

            if attribute(node, "resource") is not None or attribute(node, "href") is not None:
                # объект задан явно: тройки сразу, детям ничего не передаём;
                # битый объект отбрасывает только rel/rev этого узла
                if not object_failed:
                    for p in rels:
                        local.append(Triple(subject, p, resource, source=node))
                    for p in revs:
                        local.append(Triple(resource, p, subject, source=node))
                rels, revs = [], []

        context = RelationContext(forward=rels, backward=revs)
        for child in node.element_children():
            local.extend(self.extract(child, context))
        return local

    def _predicates(self, node: Element, attr: str) -> List[NamedNode]:
        out = []
        for t in tokens(attribute(node, attr)):
            p = self._resolve(t, node, attr)
            if isinstance(p, NamedNode):
                out.append(p)
        return out

    def _literal(self, node: Element) -> Optional[Literal]:
        try:
            return literal_for(node, self.resolver)
        except RDFaError as e:
            self._failed(e, node)
            return None

    def _resolve(self, token: str, node: Element, attr: str) -> Optional[Resource]:
        try:
            return self.resolver.curie(token, node, attr)
        except RDFaError as e:
            self._failed(e, node)
            return None

    def _failed(self, error: RDFaError, node: Element) -> None:
        if self.strict:
            raise error
        found = self.cache.errors.setdefault(node.handle, [])
        if any(type(e) is type(error) and str(e) == str(error) for e in found):
            return
        logger.warning("skipping %s at %s: %s", error.attr or "attribute", node.path(), error)
        found.append(error)
