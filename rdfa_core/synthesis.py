# rdfa_core/synthesis.py
"""
Обратная операция: тройка -> минимальные RDFa-атрибуты в дереве,
после которых извлечение снова даёт эту тройку.
"""
import logging
import re
from typing import Dict, Iterable, List, Optional

from . import uri as urilib
from .curie import NS, create_curie
from .errors import MalformedResourceReference, RDFaError, UnresolvablePrefix
from .extraction import literal_for, serialize_children
from .identity import IdentityResolver, NodeCache, attribute, has_rdfa
from .model import Element, Node
from .model_loader import parse_fragment
from .rules import AttrWrite, Context, Strategy, WrapBoth, WrapChildren, WrapSelf, WriteAttrs, decide
from .terms import XML_LITERAL, BlankNode, Literal, NamedNode, Resource, Triple, is_resource

logger = logging.getLogger(__name__)

_NAMESPACE = re.compile(r"^(.+[/#])([^#]+)$")
_CONVENTIONAL = {ns: prefix for prefix, ns in NS.items()}


class Annotator:
    def __init__(
        self,
        resolver: IdentityResolver,
        cache: NodeCache,
        wrapper_tag: str = "span",
        auto_prefix: str = "ns",
    ):
        self.resolver = resolver
        self.cache = cache
        self.wrapper_tag = wrapper_tag
        self.auto_prefix = auto_prefix
        self._prefix_counter = 0

    def apply(self, node: Element, triple: Triple) -> Element:
        """Записывает тройку в дерево; возвращает узел, на котором оказалась аннотация."""
        if is_resource(triple.object):
            return self._apply_relation(node, triple)
        return self._apply_literal(node, triple)

    def apply_all(self, node: Element, triples: Iterable[Triple]) -> Element:
        for t in triples:
            self.apply(node, t)
        return node

    # ======================================================================
    # Объект - ресурс
    # ======================================================================

    def _apply_relation(self, node: Element, triple: Triple) -> Element:
        if triple.is_type() and not isinstance(triple.object, NamedNode):
            raise MalformedResourceReference("typeof needs a URI", value=str(triple.object))
        ctx = Context(
            triple=triple,
            subject=self.resolver.subject(node, True),
            object=self.resolver.object_resource(node, True),
            has_rdfa=has_rdfa(node),
            # до записи: новые атрибуты узла изменят то, что наследуют дети
            inherited=self.resolver.object_resource(node) or self.resolver.subject(node),
        )
        strategy = decide(ctx)
        logger.debug("%s at %s: %s", triple, node.path(), type(strategy).__name__)
        self._check_strategy(node, strategy)
        target = self._execute(node, strategy)
        self._changed(node, target)
        return target

    def _execute(self, node: Element, strategy: Strategy) -> Element:
        if isinstance(strategy, WriteAttrs):
            self._write_all(node, strategy.writes)
            if strategy.restore_subject is not None and node.element_children():
                self._restore_subject(node, strategy.restore_subject)
            return node

        if isinstance(strategy, WrapChildren):
            span = self._wrap_inner(node)
            self._write_all(span, strategy.writes)
            if strategy.restore_subject is not None and span.element_children():
                self._restore_subject(span, strategy.restore_subject)
            return span if strategy.returns_wrapper else node

        if isinstance(strategy, WrapSelf):
            span = node.wrap(self.wrapper_tag)
            self.cache.invalidate(span)
            self._write_all(span, strategy.writes)
            return span

        if isinstance(strategy, WrapBoth):
            span = self._wrap_inner(node)
            self._write_all(span, strategy.wrapper)
            if strategy.nested:
                nested = self._wrap_inner(span)
                self._write_all(nested, strategy.nested)
            return node

        raise TypeError(f"unknown strategy {strategy!r}")

    def _write_all(self, node: Element, writes: List[AttrWrite]) -> None:
        for w in writes:
            if w.kind == "curie":
                self.write_curie(node, w.attr, w.value)
            elif w.kind == "subject":
                self.write_subject(node, w.value)
            elif w.kind == "object":
                self.write_object(node, w.value)
            else:
                raise ValueError(f"unknown write kind {w.kind!r}")

    def _restore_subject(self, node: Element, subject: Resource) -> None:
        span = self._wrap_inner(node)
        self.write_subject(span, subject)

    def _check_strategy(self, node: Element, strategy: Strategy) -> None:
        # до изменения дерева: все предикаты должны выражаться через CURIE
        scope = node.parent if isinstance(strategy, WrapSelf) else node
        writes = strategy.wrapper if isinstance(strategy, WrapBoth) else strategy.writes
        for w in writes:
            if w.kind == "curie":
                self.check_expressible(w.value, scope)

    # ======================================================================
    # Объект - литерал
    # ======================================================================

    def _apply_literal(self, node: Element, triple: Triple) -> Element:
        lit: Literal = triple.object
        subject = self.resolver.subject(node)
        obj = self.resolver.object_resource(node)
        if lit.datatype == XML_LITERAL:
            value_differs = serialize_children(node) != lit.value
        else:
            value_differs = node.text() != lit.value

        if attribute(node, "property") is not None:
            if subject == triple.subject and self._current_literal(node) == lit:
                self.write_curie(node, "property", triple.predicate.uri)
                self._changed(node)
                return node
            return self.apply(self._wrap_inner(node), triple)

        if obj == triple.subject:
            return self.apply(self._wrap_inner(node), triple)

        self.check_expressible(triple.predicate.uri, node)
        if lit.datatype:
            self.check_expressible(lit.datatype, node)
        fragment = None
        if value_differs and lit.datatype == XML_LITERAL:
            fragment = self._xml_fragment(node, lit.value)

        self.write_curie(node, "property", triple.predicate.uri)
        self.write_subject(node, triple.subject)
        if value_differs:
            if lit.datatype == XML_LITERAL:
                node.set_children(fragment)
            else:
                node.set("content", lit.value)
        elif node.get("content") is not None:
            node.remove("content")

        lang = self.resolver.lang(node)
        if lit.lang:
            if lang != lit.lang:
                self._set_lang(node, lit.lang)
                if value_differs:
                    self._reset_lang(node, lang)
            if not value_differs and node.element_children():
                node.set("datatype", "")
            else:
                node.remove("datatype")
        elif lit.datatype:
            # datatype однозначный: заменяем, а не дописываем
            node.set("datatype", self.curie_for(node, lit.datatype))
        else:
            # пустой datatype: дети, добавленные позже, не превратят литерал в XML
            if not value_differs:
                node.set("datatype", "")
            else:
                node.remove("datatype")
            # пустой lang: язык предков не попадёт в литерал
            if lang is not None:
                self._set_lang(node, "")
                if value_differs:
                    self._reset_lang(node, lang)

        self._changed(node)
        return node

    def _xml_fragment(self, node: Element, value: str) -> List[Node]:
        """
        Разметка XML-литерала -> новые дети узла.
        Литерал, который после записи прочитается иначе (например <br/>), не принимается.
        """
        ns = node.default_namespace()
        holder = Element(node.name, attrs={} if ns is None else {"xmlns": ns})
        holder.set_children(parse_fragment(value))
        if serialize_children(holder) != value:
            raise MalformedResourceReference("XML literal is not in serialized form", value=value)
        return list(holder.children)

    def _current_literal(self, node: Element) -> Optional[Literal]:
        try:
            return literal_for(node, self.resolver)
        except RDFaError:
            return None

    def _set_lang(self, node: Element, lang: str) -> None:
        node.set("lang", lang)
        if node.has("xml:lang"):
            node.set("xml:lang", lang)

    def _reset_lang(self, node: Element, lang: Optional[str]) -> None:
        """Прежний текст уходит во внутренний span со старым языком."""
        if not node.children:
            return
        span = self._wrap_inner(node)
        span.set("lang", lang or "")

    # ======================================================================
    # Запись атрибутов
    # ======================================================================

    def write_curie(self, node: Element, attr: str, uri: str) -> str:
        """
        Добавляет CURIE в многозначный атрибут (если его там ещё нет).
        Если префикса для URI нет, объявляет новый xmlns на самом узле.
        """
        curie = self.curie_for(node, uri)
        value = attribute(node, attr)
        if not value:
            node.set(attr, curie)
        elif curie not in value.split():
            node.set(attr, value + " " + curie)
        self.cache.invalidate(node)
        return curie

    def curie_for(self, node: Element, uri: str) -> str:
        prefixes = node.namespaces()
        try:
            return create_curie(uri, prefixes)
        except UnresolvablePrefix:
            return self._declare_prefix(node, uri, prefixes)

    def check_expressible(self, uri: str, node: Element) -> None:
        try:
            create_curie(uri, node.namespaces())
        except UnresolvablePrefix:
            self._split_namespace(uri)

    def _declare_prefix(self, node: Element, uri: str, prefixes: Dict[str, str]) -> str:
        if uri == XML_LITERAL and "rdf" not in prefixes:
            node.set("xmlns:rdf", NS["rdf"])
            return "rdf:XMLLiteral"
        ns, local = self._split_namespace(uri)
        prefix = _CONVENTIONAL.get(ns)
        if prefix is None or prefix in prefixes:
            prefix = self._mint_prefix(prefixes)
        node.set(f"xmlns:{prefix}", ns)
        logger.info("declared xmlns:%s=%s at %s", prefix, ns, node.path())
        return f"{prefix}:{local}"

    def _split_namespace(self, uri: str):
        m = _NAMESPACE.match(uri)
        if not m:
            raise MalformedResourceReference("URI cannot be written as a CURIE", value=uri)
        urilib.check(uri)
        return m.group(1), m.group(2)

    def _mint_prefix(self, prefixes: Dict[str, str]) -> str:
        while True:
            self._prefix_counter += 1
            prefix = f"{self.auto_prefix}{self._prefix_counter}"
            if prefix not in prefixes:
                return prefix

    def write_resource(self, node: Element, attr: str, resource: Resource) -> None:
        if isinstance(resource, BlankNode):
            ref = f"[_:{resource.id}]"
        else:
            ref = urilib.relative(self.resolver.base, resource.uri)
        node.set(attr, ref)
        self.cache.invalidate(node)

    def write_subject(self, node: Element, subject: Resource) -> None:
        if subject != self.resolver.subject(node):
            self.write_resource(node, "about", subject)
        self.cache.invalidate(node)

    def write_object(self, node: Element, obj: Resource) -> None:
        if obj != self.resolver.object_resource(node):
            self.write_resource(node, "resource", obj)
        self.cache.invalidate(node)

    # ======================================================================

    def _wrap_inner(self, node: Element) -> Element:
        if (
            attribute(node, "property") is not None
            and node.get("content") is None
            and node.get("datatype") is None
            and not node.element_children()
        ):
            # текстовый литерал узла не должен стать XML-литералом после обёртки
            node.set("datatype", "")
        span = node.wrap_inner(self.wrapper_tag)
        self.cache.invalidate(node)
        return span

    def _changed(self, node: Element, *others: Element) -> None:
        for el in (node, *others):
            self.cache.invalidate(el)
        node.notify_change()
