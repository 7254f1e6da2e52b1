# rdfa_core/identity.py
"""
Определение субъекта и объекта-ресурса для каждого узла.

Результаты кешируются в явной таблице по handle узла; при изменении дерева
кеш сбрасывается для узла, его поддерева и всех предков.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from . import uri as urilib
from .curie import SAFE_CURIE, is_bound, resolve_curie
from .errors import MalformedResourceReference, RDFaError
from .model import Element
from .terms import BlankNode, BlankNodeFactory, NamedNode, Resource, Triple

# атрибуты, у которых пустое значение равносильно отсутствию
_EMPTY_IS_ABSENT = ("rel", "rev")


class NodeCache:
    def __init__(self):
        self.subjects: Dict[int, Resource] = {}
        self.objects: Dict[int, Optional[Resource]] = {}
        self.triples: Dict[int, List[Triple]] = {}
        self.errors: Dict[int, List[RDFaError]] = {}

    def invalidate(self, node: Element) -> None:
        for el in node.iter():
            self._drop(el.handle)
        for el in node.ancestors():
            self._drop(el.handle)

    def clear(self) -> None:
        self.subjects.clear()
        self.objects.clear()
        self.triples.clear()
        self.errors.clear()

    def _drop(self, handle: int) -> None:
        self.subjects.pop(handle, None)
        self.objects.pop(handle, None)
        self.triples.pop(handle, None)
        self.errors.pop(handle, None)


def attribute(node: Element, attr: str) -> Optional[str]:
    value = node.get(attr)
    if attr in _EMPTY_IS_ABSENT and value == "":
        return None
    return value


def has_relation(node: Element) -> bool:
    return attribute(node, "rel") is not None or attribute(node, "rev") is not None


def has_rdfa(node: Element) -> bool:
    return (
        has_relation(node)
        or attribute(node, "property") is not None
        or attribute(node, "typeof") is not None
    )


def tokens(value: Optional[str]) -> List[str]:
    return value.split() if value else []


class IdentityResolver:
    def __init__(
        self,
        base: str,
        blanks: BlankNodeFactory,
        cache: NodeCache,
        document_roots: Iterable[str] = ("head", "body"),
    ):
        self.base = base
        self.blanks = blanks
        self.cache = cache
        self.document_roots = frozenset(document_roots)
        self.document = NamedNode(urilib.resolve(base, ""))
        # пустые узлы "без имени" закреплены за узлом дерева и переживают сброс кеша
        self._anonymous_nodes: Dict[Tuple[int, str], BlankNode] = {}

    # ---------- субъект ----------

    def subject(self, node: Element, relation: Optional[bool] = None) -> Resource:
        if relation is None:
            cached = self.cache.subjects.get(node.handle)
            if cached is not None:
                return cached

        r = has_relation(node) if relation is None else relation
        attr = "about"
        value = attribute(node, "about")
        if value is None:
            attr, value = "src", attribute(node, "src")
        if not r:
            if value is None:
                attr, value = "resource", attribute(node, "resource")
            if value is None:
                attr, value = "href", attribute(node, "href")

        if value is None:
            if self._local_name(node) in self.document_roots:
                subject = self.document
            elif attribute(node, "typeof") is not None:
                subject = self._anonymous(node, "subject")
            elif node.parent is not None:
                subject = self._inherited(node.parent)
            else:
                subject = self.document
        else:
            subject = self.resource(value, node, attr)

        if relation is None:
            self.cache.subjects[node.handle] = subject
        return subject

    def _inherited(self, parent: Element) -> Resource:
        try:
            obj = self.object_resource(parent)
        except RDFaError:
            # ошибка объекта учитывается на самом родителе
            obj = None
        return obj or self.subject(parent)

    # ---------- объект-ресурс ----------

    def object_resource(self, node: Element, relation: Optional[bool] = None) -> Optional[Resource]:
        if relation is None and node.handle in self.cache.objects:
            return self.cache.objects[node.handle]

        r = has_relation(node) if relation is None else relation
        attr = "resource"
        value = attribute(node, "resource")
        if value is None:
            attr, value = "href", attribute(node, "href")

        if value is None:
            resource = self._anonymous(node, "object") if r else None
        else:
            resource = self.resource(value, node, attr)

        if relation is None:
            self.cache.objects[node.handle] = resource
        return resource

    # ---------- язык ----------

    def lang(self, node: Element) -> Optional[str]:
        for el in [node, *node.ancestors()]:
            value = el.get("xml:lang")
            if value is None:
                value = el.get("lang")
            if value is not None:
                # пустой lang явно снимает язык
                return value or None
        return None

    # ---------- разбор ссылок ----------

    def resource(self, value: str, node: Element, attr: Optional[str] = None) -> Resource:
        """Значение about/src/resource/href -> ресурс (safe CURIE, _:, CURIE или URI)."""
        try:
            m = SAFE_CURIE.match(value)
            if m:
                inner = m.group(1)
                if inner.startswith("_:"):
                    return self._blank(inner)
                prefixes = node.namespaces()
                if is_bound(inner, prefixes):
                    return NamedNode(resolve_curie(inner, prefixes))
                if urilib.is_absolute(inner):
                    return NamedNode(urilib.resolve(self.base, inner))
                raise MalformedResourceReference("malformed safe CURIE", value=value)
            if value.startswith("["):
                raise MalformedResourceReference("unterminated safe CURIE", value=value)
            if value.startswith("_:"):
                return self._blank(value)
            prefixes = node.namespaces()
            if is_bound(value, prefixes):
                return NamedNode(resolve_curie(value, prefixes))
            return NamedNode(urilib.resolve(self.base, value))
        except RDFaError as e:
            if e.attr is None:
                e.attr = attr
            raise

    def curie(self, token: str, node: Element, attr: Optional[str] = None) -> Resource:
        """Токен typeof/property/rel/rev/datatype -> ресурс."""
        if token.startswith("_:"):
            return self._blank(token)
        try:
            reserved = attr in ("rel", "rev")
            return NamedNode(resolve_curie(token, node.namespaces(), reserved=reserved))
        except RDFaError as e:
            if e.attr is None:
                e.attr = attr
            raise

    def _blank(self, ref: str) -> BlankNode:
        name = ref[2:]
        if not name:
            raise MalformedResourceReference("empty blank node label", value=ref)
        return self.blanks.named(name)

    @staticmethod
    def _local_name(node: Element) -> str:
        return node.name.rsplit(":", 1)[-1].lower()

    def _anonymous(self, node: Element, role: str) -> BlankNode:
        key = (node.handle, role)
        blank = self._anonymous_nodes.get(key)
        if blank is None:
            blank = self.blanks.fresh()
            self._anonymous_nodes[key] = blank
        return blank
