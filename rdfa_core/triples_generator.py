# rdfa_core/triples_generator.py
from typing import List
from .document import Document
from .terms import BlankNode, Literal, NamedNode, Triple
from .triples_types import TripleRow

def term_text(term) -> str:
    if isinstance(term, NamedNode):
        return term.uri
    if isinstance(term, Literal):
        return term.value
    return str(term)

def term_kind(term) -> str:
    if isinstance(term, Literal):
        return "literal"
    if isinstance(term, BlankNode):
        return "bnode"
    return "uri"

def triple_to_row(doc: Document, t: Triple) -> TripleRow:
    source = t.source
    obj = t.object
    is_literal = isinstance(obj, Literal)
    return TripleRow(
        subject=term_text(t.subject),
        predicate=term_text(t.predicate),
        object=term_text(obj),
        object_kind=term_kind(obj),
        datatype=(obj.datatype or "") if is_literal else "",
        lang=(obj.lang or "") if is_literal else "",
        doc=doc.base,
        # связи через rel/rev родителя источника не имеют
        node=source.path() if source is not None else "",
        node_text=" ".join(source.text().split()) if source is not None else "",
    )

def generate_triples(doc: Document) -> List[TripleRow]:
    return [triple_to_row(doc, t) for t in doc.triples()]
