
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rdfa_core.document import Document
from rdfa_core.errors import RDFaError
from rdfa_core.logging_setup import init_logging
from rdfa_core.model_loader import MarkupError
from rdfa_core.triples_generator import generate_triples
from rdfa_core.ttl_generator import collect_prefixes, document_to_ttl, triples_to_nt
from rdfa_core.xlsx_export import export_triples_to_xlsx


# ======================================================================
# 1. Разметка -> TTL / N-Triples
# ======================================================================

def markup_to_ttl(markup: str, base: Optional[str] = None, statements: Optional[List[str]] = None) -> str:
    doc = Document.from_markup(markup, base=base)
    doc.add_all(statements or [])
    return document_to_ttl(doc)


def markup_to_nt(markup: str, base: Optional[str] = None, statements: Optional[List[str]] = None) -> str:
    doc = Document.from_markup(markup, base=base)
    doc.add_all(statements or [])
    return triples_to_nt(doc.triples())


# ======================================================================
# 2. Добавление троек в разметку
# ======================================================================

def annotate_markup(markup: str, statements: List[str], base: Optional[str] = None) -> str:
    doc = Document.from_markup(markup, base=base)
    doc.add_all(statements)
    return doc.to_markup()


# ======================================================================
# 3. Командная строка
# ======================================================================

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Extract RDFa triples from XHTML or add triples to it.")
    p.add_argument("file", help="XHTML/XML file ('-' for stdin)")
    p.add_argument("--base", help="base URI of the document")
    p.add_argument("--format", choices=("ttl", "nt", "xlsx"), default="ttl")
    p.add_argument("--output", "-o", help="output file (required for xlsx)")
    p.add_argument("--add", action="append", default=[], metavar="STATEMENT",
                   help='triple to add, e.g. \'<#me> foaf:name "Alice" .\'')
    p.add_argument("--markup", action="store_true", help="print annotated markup instead of triples")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(logging.DEBUG if args.verbose else None)

    text = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    try:
        doc = Document.from_markup(text, base=args.base)
        doc.add_all(args.add)
    except (MarkupError, RDFaError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.markup:
        out = doc.to_markup()
    elif args.format == "xlsx":
        if not args.output:
            print("error: --output is required for xlsx", file=sys.stderr)
            return 2
        export_triples_to_xlsx(generate_triples(doc), args.output, collect_prefixes(doc))
        return 0
    elif args.format == "nt":
        out = triples_to_nt(doc.triples())
    else:
        out = document_to_ttl(doc)

    if args.output:
        Path(args.output).write_text(out, encoding="utf-8")
    else:
        sys.stdout.write(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
