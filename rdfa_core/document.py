# rdfa_core/document.py
import json
import logging
import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from .errors import RDFaError
from .extraction import Extractor
from .identity import IdentityResolver, NodeCache, attribute, has_rdfa, tokens
from .model import Element
from .model_loader import load_from_markup, to_markup
from .statements import parse_statement
from .synthesis import Annotator
from .terms import BlankNodeFactory, NamedNode, Resource, Triple, TripleSet

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("RDFA_CONFIG_DIR") or Path(__file__).resolve().parent / "config")
SETTINGS = json.loads((CONFIG_DIR / "settings.json").read_text(encoding="utf-8"))


_REFERENCE_ATTRS = ("about", "src", "resource", "href")
_TOKEN_ATTRS = ("typeof", "property", "rel", "rev", "datatype")


def find_base(root: Element) -> Optional[str]:
    """<base href="..."> внутри документа, если есть."""
    for el in root.iter():
        if el.name.rsplit(":", 1)[-1].lower() == "base" and el.get("href"):
            return el.get("href")
    return None


def reserve_blank_labels(root: Element, blanks: BlankNodeFactory) -> None:
    """Метки _:x из документа занимаются до разбора: сгенерированные пустые узлы их не повторят."""
    for el in root.iter():
        labels = []
        for attr in _REFERENCE_ATTRS:
            value = el.get(attr) or ""
            if value.startswith("[") and value.endswith("]"):
                value = value[1:-1]
            labels.append(value)
        for attr in _TOKEN_ATTRS:
            labels.extend(tokens(el.get(attr)))
        for label in labels:
            if label.startswith("_:") and len(label) > 2:
                blanks.named(label[2:])


class Document:
    """
    Одно аннотированное дерево со своими кешем, счётчиком пустых узлов и префиксов.
    Доступ к одному документу должен быть последовательным.
    """

    def __init__(self, root: Element, base: Optional[str] = None, strict: bool = False):
        self.root = root
        self.base = base or find_base(root) or SETTINGS["default_base"]
        self.cache = NodeCache()
        self.blanks = BlankNodeFactory()
        reserve_blank_labels(root, self.blanks)
        self.resolver = IdentityResolver(self.base, self.blanks, self.cache, SETTINGS["document_roots"])
        self.extractor = Extractor(self.resolver, self.cache, strict=strict)
        self.annotator = Annotator(
            self.resolver,
            self.cache,
            wrapper_tag=SETTINGS["wrapper_tag"],
            auto_prefix=SETTINGS["auto_prefix"],
        )

    @classmethod
    def from_markup(cls, markup: str, base: Optional[str] = None, strict: bool = False) -> "Document":
        return cls(load_from_markup(markup), base=base, strict=strict)

    @property
    def errors(self) -> List[RDFaError]:
        return self.extractor.errors

    # ---------- извлечение ----------

    def triples(self, node: Optional[Element] = None) -> TripleSet:
        return TripleSet(self.extractor.extract(node or self.root))

    def invalidate(self, node: Optional[Element] = None) -> None:
        if node is None:
            self.cache.clear()
        else:
            self.cache.invalidate(node)

    # ---------- запись ----------

    def parse_statement(self, text: str, node: Optional[Element] = None) -> Triple:
        return parse_statement(text, node or self.root, self.resolver)

    def add(self, triple: Union[Triple, str], node: Optional[Element] = None) -> Element:
        node = node or self.body()
        if isinstance(triple, str):
            triple = self.parse_statement(triple, node)
        return self.annotator.apply(node, triple)

    def add_all(self, triples: Iterable[Union[Triple, str]], node: Optional[Element] = None) -> None:
        for t in triples:
            self.add(t, node)

    def body(self) -> Element:
        """Узел по умолчанию для новых аннотаций: <body>, иначе корень."""
        for el in self.root.iter():
            if el.name.rsplit(":", 1)[-1].lower() == "body":
                return el
        return self.root

    def subscribe(self, callback: Callable[[Element], None]) -> None:
        self.root.subscribe(callback)

    def to_markup(self) -> str:
        return to_markup(self.root)

    # ---------- поиск узлов ----------

    def find_about(self, subject: Union[Resource, str]) -> List[Element]:
        if isinstance(subject, str):
            subject = NamedNode(subject)
        found = []
        for el in self.root.iter():
            try:
                if self.resolver.subject(el) == subject:
                    found.append(el)
            except RDFaError as e:
                logger.debug("no subject for %s: %s", el.path(), e)
        return found

    def find_annotated(self) -> List[Element]:
        return [el for el in self.root.iter() if has_rdfa(el)]

    def find_typed(self, type_uri: Optional[str] = None) -> List[Element]:
        found = []
        for el in self.root.iter():
            value = attribute(el, "typeof")
            if value is None:
                continue
            if type_uri is None:
                found.append(el)
                continue
            for t in tokens(value):
                try:
                    r = self.resolver.curie(t, el, "typeof")
                except RDFaError:
                    continue
                if isinstance(r, NamedNode) and r.uri == type_uri:
                    found.append(el)
                    break
        return found
