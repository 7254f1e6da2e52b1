# rdfa_core/model_loader.py
from typing import List, Optional
from xml.parsers import expat

from .model import Element, Node, Text

# фрагменты разбираются внутри служебного корня
_FRAGMENT_ROOT = "rdfa-fragment"


class MarkupError(ValueError):
    """Разметка не является корректным XML."""


def load_from_markup(markup: str) -> Element:
    """
    XHTML/XML текст -> дерево Element.

    Обработка пространств имён выключена: xmlns:* остаются обычными атрибутами,
    а имена тегов сохраняются как в исходнике (нужно для CURIE и сериализации).
    """
    stack: List[Element] = []
    root: Optional[Element] = None

    parser = expat.ParserCreate()
    parser.ordered_attributes = True
    parser.buffer_text = True

    def start(name, attrs):
        nonlocal root
        el = Element(name, dict(zip(attrs[0::2], attrs[1::2])))
        if stack:
            stack[-1].append(el)
        else:
            root = el
        stack.append(el)

    def end(name):
        stack.pop()

    def chars(data):
        if stack:
            stack[-1].append(Text(data))

    parser.StartElementHandler = start
    parser.EndElementHandler = end
    parser.CharacterDataHandler = chars

    try:
        parser.Parse(markup, True)
    except expat.ExpatError as e:
        raise MarkupError(f"malformed markup: {e}") from e
    if root is None:
        raise MarkupError("markup has no root element")
    return root


def parse_fragment(markup: str) -> List[Node]:
    """Фрагмент разметки (смешанное содержимое) -> список узлов без родителя."""
    holder = load_from_markup(f"<{_FRAGMENT_ROOT}>{markup}</{_FRAGMENT_ROOT}>")
    nodes = list(holder.children)
    holder.set_children([])
    return nodes


# ---------- Сериализация ----------

def escape_attr(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace('"', "&quot;")


def escape_text(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def inner_markup(el: Element) -> str:
    return "".join(to_markup(c) for c in el.children)


def to_markup(node: Node) -> str:
    if not node.is_element:
        return escape_text(node.text())
    attrs = "".join(f' {k}="{escape_attr(v)}"' for k, v in node.attrs.items())
    if not node.children:
        return f"<{node.name}{attrs}/>"
    return f"<{node.name}{attrs}>{inner_markup(node)}</{node.name}>"
