# rdfa_core/uri.py
import re
from urllib.parse import urljoin, urlsplit, urlunsplit

from .errors import MalformedResourceReference

_FORBIDDEN = re.compile(r'[\s<>"{}|\\^`]')
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def is_absolute(value: str) -> bool:
    return bool(_SCHEME.match(value))


def check(value: str) -> str:
    if _FORBIDDEN.search(value):
        raise MalformedResourceReference("malformed URI", value=value)
    return value


def resolve(base: str, reference: str) -> str:
    """Ссылка (возможно относительная) -> абсолютный URI относительно base."""
    check(reference)
    try:
        return urljoin(base, reference)
    except ValueError as e:
        raise MalformedResourceReference(f"malformed URI: {e}", value=reference) from e


def relative(base: str, uri: str) -> str:
    """
    Кратчайшая ссылка, которая через resolve(base, ...) даёт uri.
    Для другой схемы/хоста возвращается сам uri.
    """
    check(uri)
    b = urlsplit(base)
    t = urlsplit(uri)
    if (b.scheme, b.netloc) != (t.scheme, t.netloc) or not t.scheme:
        return uri

    bpath = b.path or "/"
    tpath = t.path or "/"
    if tpath == bpath:
        if t.query == b.query:
            if t.fragment:
                return "#" + t.fragment
            # без фрагмента: пустая ссылка = сам документ
            return "" if not b.fragment else urlunsplit(("", "", _last_segment(tpath) or "./", t.query, ""))
        return urlunsplit(("", "", "", t.query, t.fragment)) if t.query else _relative_path(bpath, tpath, t)

    return _relative_path(bpath, tpath, t)


def _last_segment(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _relative_path(bpath: str, tpath: str, t) -> str:
    bdir = bpath.split("/")[:-1]
    tseg = tpath.split("/")
    i = 0
    while i < len(bdir) and i < len(tseg) - 1 and bdir[i] == tseg[i]:
        i += 1
    rel = "../" * (len(bdir) - i) + "/".join(tseg[i:])
    if not rel:
        rel = "./"
    elif ":" in rel.split("/", 1)[0]:
        rel = "./" + rel
    return urlunsplit(("", "", rel, t.query, t.fragment))
