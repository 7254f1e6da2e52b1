# rdfa_core/errors.py
from typing import Optional


class RDFaError(Exception):
    """Базовая ошибка разбора/записи RDFa-атрибутов."""

    def __init__(self, message: str, value: Optional[str] = None, attr: Optional[str] = None):
        super().__init__(message)
        self.value = value
        self.attr = attr

    def __str__(self) -> str:
        msg = super().__str__()
        if self.attr:
            return f"{msg} (@{self.attr}={self.value!r})"
        return msg


class MalformedResourceReference(RDFaError):
    """Некорректный URI / CURIE / safe CURIE."""


class UnresolvablePrefix(MalformedResourceReference):
    """CURIE использует префикс без привязки (xmlns:*)."""

    def __init__(self, prefix: str, value: Optional[str] = None, attr: Optional[str] = None):
        msg = f"unbound prefix {prefix!r}" if prefix else "no prefix binding covers this URI"
        super().__init__(msg, value=value, attr=attr)
        self.prefix = prefix
