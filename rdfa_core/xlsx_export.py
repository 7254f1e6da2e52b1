# rdfa_core/xlsx_export.py
from typing import Dict, List, Optional
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from .triples_types import COLUMNS, TripleRow

MAX_WIDTH = 60

def export_triples_to_xlsx(
    triples: List[TripleRow],
    path: str,
    prefixes: Optional[Dict[str, str]] = None,
) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = "Triples"

    # заголовки
    ws.append(COLUMNS)
    for t in triples:
        ws.append(t.values())
    _style_sheet(ws)

    if prefixes:
        ps = wb.create_sheet("Prefixes")
        ps.append(["prefix", "namespace"])
        for prefix, ns in sorted(prefixes.items()):
            ps.append([prefix, ns])
        _style_sheet(ps)

    wb.save(path)

def _style_sheet(ws) -> None:
    for cell in ws[1]:
        cell.font = Font(bold=True)
    ws.freeze_panes = "A2"
    for idx, column in enumerate(ws.iter_cols(values_only=True), start=1):
        width = max(len(str(v)) if v is not None else 0 for v in column)
        ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, MAX_WIDTH)
