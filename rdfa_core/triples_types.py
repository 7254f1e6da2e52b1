# rdfa_core/triples_types.py
from dataclasses import astuple, dataclass, fields
from typing import List

@dataclass
class TripleRow:
    subject: str
    predicate: str
    object: str
    object_kind: str  # uri | bnode | literal
    datatype: str
    lang: str
    doc: str          # база документа
    node: str         # путь к узлу-источнику
    node_text: str    # текст узла-источника

    def values(self) -> List[str]:
        return list(astuple(self))

COLUMNS: List[str] = [f.name for f in fields(TripleRow)]
