# rdfa_core/rules.py
"""
Таблица решений для записи тройки с объектом-ресурсом.

Правила проверяются сверху вниз, срабатывает первое подходящее.
Порядок правил и есть контракт: условия соседних правил могут пересекаться.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union

from .terms import Resource, Triple


@dataclass
class Context:
    triple: Triple
    subject: Resource            # субъект узла (как если бы на нём был rel)
    object: Optional[Resource]   # объект-ресурс узла (как если бы на нём был rel)
    has_rdfa: bool               # rel/rev/property/typeof уже есть
    inherited: Optional[Resource] = None  # субъект, который сейчас видят дети узла

    @property
    def same_subject(self) -> bool:
        return self.subject == self.triple.subject

    @property
    def same_object(self) -> bool:
        return self.object == self.triple.object

    @property
    def children_subject(self) -> Resource:
        return self.inherited if self.inherited is not None else self.subject

    @property
    def object_overridable(self) -> bool:
        return not self.has_rdfa


# ---------- Стратегии ----------

@dataclass
class AttrWrite:
    kind: str          # "curie" | "subject" | "object"
    attr: str          # typeof / rel / rev / about / resource
    value: Union[str, Resource]


def curie(attr: str, uri: str) -> AttrWrite:
    return AttrWrite("curie", attr, uri)


def about(resource: Resource) -> AttrWrite:
    return AttrWrite("subject", "about", resource)


def obj(resource: Resource) -> AttrWrite:
    return AttrWrite("object", "resource", resource)


@dataclass
class WriteAttrs:
    """Запись прямо на узел; restore_subject: обернуть детей и вернуть им прежний субъект."""
    writes: List[AttrWrite]
    restore_subject: Optional[Resource] = None


@dataclass
class WrapChildren:
    """Дети узла оборачиваются, атрибуты пишутся на обёртку."""
    writes: List[AttrWrite]
    restore_subject: Optional[Resource] = None
    returns_wrapper: bool = False


@dataclass
class WrapSelf:
    """Узел оборачивается новым родителем, атрибуты пишутся на родителя."""
    writes: List[AttrWrite]


@dataclass
class WrapBoth:
    """Двойная обёртка детей: wrapper внутри узла, nested внутри wrapper."""
    wrapper: List[AttrWrite]
    nested: List[AttrWrite] = field(default_factory=list)


Strategy = Union[WriteAttrs, WrapChildren, WrapSelf, WrapBoth]


class Rule(Protocol):
    def apply(self, ctx: Context) -> Optional[Strategy]:
        ...


# --- Конкретные правила ---

class TypeOnSameSubjectRule:
    """rdf:type, субъект совпадает -> typeof на узле"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.triple.is_type() and ctx.same_subject:
            # typeof без about сделал бы субъект пустым узлом: about пишется, только если он изменился
            return WriteAttrs([curie("typeof", ctx.triple.object.uri), about(ctx.triple.subject)])
        return None


class TypeOnWrapperRule:
    """rdf:type на узле, где уже есть RDFa -> typeof (+about) на обёртке детей"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if not (ctx.triple.is_type() and ctx.has_rdfa):
            return None
        writes = [curie("typeof", ctx.triple.object.uri)]
        if ctx.object != ctx.triple.subject:
            writes.append(about(ctx.triple.subject))
        return WrapChildren(writes, returns_wrapper=True)


class TypeWithSubjectRule:
    """rdf:type в остальных случаях -> typeof + about на узле"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.triple.is_type():
            return WriteAttrs([curie("typeof", ctx.triple.object.uri), about(ctx.triple.subject)])
        return None


class RelRule:
    """субъект и объект совпадают -> rel"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.same_subject and ctx.same_object:
            return WriteAttrs([curie("rel", ctx.triple.predicate.uri)])
        return None


class RelWithObjectRule:
    """субъект совпадает, объект можно переопределить -> rel + resource"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.same_subject and ctx.object_overridable:
            return WriteAttrs([curie("rel", ctx.triple.predicate.uri), obj(ctx.triple.object)])
        return None


class RevOnParentRule:
    """субъект совпадает, объект занят -> обёртка узла: rev, about=объект, resource=субъект"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.same_subject:
            t = ctx.triple
            return WrapSelf([curie("rev", t.predicate.uri), about(t.object), obj(t.subject)])
        return None


class RevRule:
    """субъект узла = объект тройки, объект узла = субъект тройки -> rev"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.subject == ctx.triple.object and ctx.object == ctx.triple.subject:
            return WriteAttrs([curie("rev", ctx.triple.predicate.uri)])
        return None


class RevWithObjectRule:
    """субъект узла = объект тройки, объект можно переопределить -> rev + resource"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.subject == ctx.triple.object and ctx.object_overridable:
            return WriteAttrs([curie("rev", ctx.triple.predicate.uri), obj(ctx.triple.subject)])
        return None


class RelOnParentRule:
    """субъект узла = объект тройки, объект занят -> обёртка узла: rel, about=субъект, resource=объект"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.subject == ctx.triple.object:
            t = ctx.triple
            return WrapSelf([curie("rel", t.predicate.uri), about(t.subject), obj(t.object)])
        return None


class SameObjectRule:
    """объект узла = объект тройки"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if not ctx.same_object:
            return None
        t = ctx.triple
        if ctx.has_rdfa:
            # rev на вложенной обёртке, детям возвращаем прежний субъект
            return WrapBoth(
                wrapper=[curie("rev", t.predicate.uri), obj(t.subject)],
                nested=[about(t.object)],
            )
        return WriteAttrs([about(t.subject), curie("rel", t.predicate.uri)])


class ObjectIsSubjectRule:
    """объект узла = субъект тройки"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if ctx.object != ctx.triple.subject:
            return None
        t = ctx.triple
        if ctx.has_rdfa:
            return WrapBoth(
                wrapper=[curie("rel", t.predicate.uri), obj(t.object)],
                nested=[about(ctx.object)],
            )
        return WriteAttrs([about(t.object), curie("rev", t.predicate.uri)])


class NewRelationOnWrapperRule:
    """ничего не совпало, на узле уже есть RDFa -> rel + about + resource на обёртке детей"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        if not ctx.has_rdfa:
            return None
        t = ctx.triple
        return WrapChildren(
            [curie("rel", t.predicate.uri), about(t.subject), obj(t.object)],
            restore_subject=ctx.children_subject,
        )


class NewRelationRule:
    """запасной вариант -> rel + about + resource прямо на узле"""

    def apply(self, ctx: Context) -> Optional[Strategy]:
        t = ctx.triple
        return WriteAttrs(
            [curie("rel", t.predicate.uri), about(t.subject), obj(t.object)],
            restore_subject=ctx.children_subject,
        )


# РЕЕСТР ПРАВИЛ – порядок важен
RULES: List[Rule] = [
    TypeOnSameSubjectRule(),
    TypeOnWrapperRule(),
    TypeWithSubjectRule(),
    RelRule(),
    RelWithObjectRule(),
    RevOnParentRule(),
    RevRule(),
    RevWithObjectRule(),
    RelOnParentRule(),
    SameObjectRule(),
    ObjectIsSubjectRule(),
    NewRelationOnWrapperRule(),
    NewRelationRule(),
]


def decide(ctx: Context, rules: Optional[List[Rule]] = None) -> Strategy:
    for rule in rules if rules is not None else RULES:
        strategy = rule.apply(ctx)
        if strategy is not None:
            return strategy
    raise LookupError("no rule matched")  # NewRelationRule срабатывает всегда
