from fastapi import FastAPI, Body, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, FileResponse
from pydantic import BaseModel
from typing import List, Optional
import logging
import tempfile
import os

from rdfa_core.document import Document
from rdfa_core.errors import RDFaError
from rdfa_core.logging_setup import init_logging
from rdfa_core.model_loader import MarkupError
from rdfa_core.terms import TripleSet
from rdfa_core.triples_generator import generate_triples
from rdfa_core.ttl_generator import collect_prefixes, document_to_ttl, triples_to_nt
from rdfa_core.xlsx_export import export_triples_to_xlsx

logger = logging.getLogger(__name__)

# ---------------- Models ----------------

class MarkupRequest(BaseModel):
    markup: str
    base: Optional[str] = None
    statements: List[str] = []


class Triple(BaseModel):
    subject: str
    predicate: str
    object: str


class TriplesResponse(BaseModel):
    triples: List[Triple]
    errors: List[str] = []


class AnnotateResponse(BaseModel):
    markup: str
    triples: List[Triple]


# ---------------- Helpers ----------------

def load_document(req: MarkupRequest) -> Document:
    try:
        return Document.from_markup(req.markup, base=req.base)
    except MarkupError as e:
        raise HTTPException(status_code=400, detail=str(e))


def to_models(triples: TripleSet) -> List[Triple]:
    return [
        Triple(subject=str(t.subject), predicate=str(t.predicate), object=str(t.object))
        for t in triples
    ]


# ---------------- FastAPI ----------------

init_logging()

app = FastAPI(title="RDFa extraction and annotation backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def root():
    return {"status": "ok", "message": "rdfa API is running"}

@app.post("/api/markup/to-triples", response_model=TriplesResponse)
def api_markup_to_triples(req: MarkupRequest = Body(...)) -> TriplesResponse:
    doc = load_document(req)
    triples = doc.triples()
    return TriplesResponse(triples=to_models(triples), errors=[str(e) for e in doc.errors])

@app.post("/api/markup/to-ttl", response_class=PlainTextResponse)
def api_markup_to_ttl(req: MarkupRequest = Body(...), format: str = Query("ttl", pattern="^(ttl|nt)$")) -> str:
    doc = load_document(req)
    if format == "nt":
        return triples_to_nt(doc.triples())
    return document_to_ttl(doc)

@app.post("/api/markup/to-triples-xlsx")
def api_markup_to_triples_xlsx(req: MarkupRequest = Body(...)):
    doc = load_document(req)
    fd, path = tempfile.mkstemp(suffix=".xlsx")
    os.close(fd)
    export_triples_to_xlsx(generate_triples(doc), path, collect_prefixes(doc))
    return FileResponse(
        path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename="triples.xlsx",
    )

@app.post("/api/markup/annotate", response_model=AnnotateResponse)
def api_markup_annotate(req: MarkupRequest = Body(...)) -> AnnotateResponse:
    doc = load_document(req)
    try:
        doc.add_all(req.statements)
    except (RDFaError, MarkupError) as e:
        logger.warning("annotate failed: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    return AnnotateResponse(markup=doc.to_markup(), triples=to_models(doc.triples()))
