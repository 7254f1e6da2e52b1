# tests/conftest.py
import logging
import sys

import pytest

from rdfa_core.document import Document
from rdfa_core.terms import NamedNode

BASE = "http://example.org/page"
EX = "http://example.org/ns#"
FOAF = "http://xmlns.com/foaf/0.1/"
DC = "http://purl.org/dc/elements/1.1/"

PERSON_PAGE = """<html xmlns="http://www.w3.org/1999/xhtml"
      xmlns:foaf="http://xmlns.com/foaf/0.1/"
      xmlns:dc="http://purl.org/dc/elements/1.1/">
  <head><title property="dc:title">Jo's page</title></head>
  <body>
    <div about="#jo" typeof="foaf:Person">
      <span property="foaf:name">Jo</span>
      <a rel="foaf:homepage" href="http://jo.example.org/">home</a>
      <div rel="foaf:knows">
        <span about="#bob" property="foaf:name">Bob</span>
      </div>
    </div>
  </body>
</html>"""


def foaf(local: str) -> NamedNode:
    return NamedNode(FOAF + local)


def find_element(root, name, **attrs):
    for el in root.iter():
        if el.name == name and all(el.get(k) == v for k, v in attrs.items()):
            return el
    raise LookupError(f"<{name} {attrs}> not found")


@pytest.fixture
def person_doc():
    return Document.from_markup(PERSON_PAGE, base=BASE)


@pytest.fixture
def make_doc():
    def _make(markup: str, strict: bool = False) -> Document:
        return Document.from_markup(markup, base=BASE, strict=strict)
    return _make


@pytest.fixture(autouse=True)
def log_stream():
    # обработчик проекта держит sys.stderr момента вызова init_logging;
    # после capsys возвращаем его на настоящий поток
    yield
    for name in ("rdfa_core", "rdfa_api"):
        for h in logging.getLogger(name).handlers:
            if isinstance(h, logging.StreamHandler):
                # setStream() would flush the already-closed capture stream
                h.stream = sys.stderr
