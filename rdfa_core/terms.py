# rdfa_core/terms.py
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XSD_NS = "http://www.w3.org/2001/XMLSchema#"

RDF_TYPE = RDF_NS + "type"
XML_LITERAL = RDF_NS + "XMLLiteral"


# ---------- Ресурсы ----------

@dataclass(frozen=True)
class NamedNode:
    uri: str

    def __str__(self) -> str:
        return f"<{self.uri}>"


@dataclass(frozen=True)
class BlankNode:
    id: str

    def __str__(self) -> str:
        return f"_:{self.id}"


Resource = Union[NamedNode, BlankNode]


@dataclass(frozen=True)
class Literal:
    value: str
    datatype: Optional[str] = None
    lang: Optional[str] = None

    def __post_init__(self):
        if self.datatype is not None and self.lang is not None:
            raise ValueError("literal cannot carry both datatype and language")

    def __str__(self) -> str:
        s = (
            self.value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        if self.lang:
            return f'"{s}"@{self.lang}'
        if self.datatype:
            return f'"{s}"^^<{self.datatype}>'
        return f'"{s}"'


Object = Union[NamedNode, BlankNode, Literal]


def is_resource(obj: Any) -> bool:
    return isinstance(obj, (NamedNode, BlankNode))


# ---------- Тройка ----------

@dataclass(frozen=True)
class Triple:
    subject: Resource
    predicate: NamedNode
    object: Object
    # узел-источник: только ссылка, в сравнении не участвует
    source: Any = field(default=None, compare=False, repr=False)

    def is_type(self) -> bool:
        return self.predicate.uri == RDF_TYPE

    def key(self) -> Tuple[Resource, NamedNode, Object]:
        return (self.subject, self.predicate, self.object)

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."


class TripleSet:
    """
    Множество троек с сохранением порядка вставки.
    Дубликаты схлопываются (первая тройка сохраняет свой source).
    """

    def __init__(self, triples: Iterable[Triple] = ()):
        self._triples: Dict[Tuple[Resource, NamedNode, Object], Triple] = {}
        for t in triples:
            self.add(t)

    def add(self, triple: Triple) -> None:
        self._triples.setdefault(triple.key(), triple)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._triples.values())

    def __len__(self) -> int:
        return len(self._triples)

    def __contains__(self, triple: object) -> bool:
        return isinstance(triple, Triple) and triple.key() in self._triples

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TripleSet):
            return NotImplemented
        return set(self._triples) == set(other._triples)

    def match(self, subject=None, predicate=None, obj=None) -> List[Triple]:
        return [
            t for t in self
            if (subject is None or t.subject == subject)
            and (predicate is None or t.predicate == predicate)
            and (obj is None or t.object == obj)
        ]

    def subjects(self) -> List[Resource]:
        return _unique(t.subject for t in self)

    def predicates(self) -> List[NamedNode]:
        return _unique(t.predicate for t in self)

    def objects(self) -> List[Object]:
        return _unique(t.object for t in self)

    def types(self, subject: Resource) -> List[Object]:
        return [t.object for t in self if t.subject == subject and t.is_type()]


def _unique(items) -> list:
    seen: Set[Any] = set()
    out = []
    for x in items:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out


# ---------- Пустые узлы ----------

class BlankNodeFactory:
    """
    Счётчик пустых узлов в рамках одного документа.
    Именованные (_:x) возвращаются стабильно, сгенерированные не пересекаются с ними.
    """

    def __init__(self, prefix: str = "b"):
        self.prefix = prefix
        self._counter = 0
        self._named: Dict[str, BlankNode] = {}

    def fresh(self) -> BlankNode:
        while True:
            self._counter += 1
            bid = f"{self.prefix}{self._counter}"
            if bid not in self._named:
                return BlankNode(bid)

    def named(self, name: str) -> BlankNode:
        node = self._named.get(name)
        if node is None:
            node = BlankNode(name)
            self._named[name] = node
        return node
