# rdfa_core/model.py
import itertools
import weakref
from typing import Callable, Dict, Iterator, List, Optional, Union

_handles = itertools.count(1)


class Node:
    """Общая часть элементов и текстовых узлов: handle и слабая ссылка на родителя."""

    is_element = False

    def __init__(self):
        self.handle: int = next(_handles)
        self._parent: Optional[weakref.ReferenceType] = None

    @property
    def parent(self) -> Optional["Element"]:
        return self._parent() if self._parent is not None else None

    def _attach(self, parent: Optional["Element"]) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    def ancestors(self) -> Iterator["Element"]:
        p = self.parent
        while p is not None:
            yield p
            p = p.parent

    def text(self) -> str:
        raise NotImplementedError


class Text(Node):
    def __init__(self, value: str):
        super().__init__()
        self.value = value

    def text(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Text({self.value!r})"


class Element(Node):
    is_element = True

    def __init__(
        self,
        name: str,
        attrs: Optional[Dict[str, str]] = None,
        children: Optional[List[Union[Node, str]]] = None,
    ):
        super().__init__()
        self.name = name
        self.attrs: Dict[str, str] = dict(attrs or {})
        self.children: List[Node] = []
        self._listeners: List[Callable[["Element"], None]] = []
        for c in children or []:
            self.append(c)

    def __repr__(self) -> str:
        return f"Element({self.name!r}, {self.attrs!r})"

    # --- атрибуты ---

    def get(self, attr: str) -> Optional[str]:
        return self.attrs.get(attr)

    def set(self, attr: str, value: str) -> None:
        self.attrs[attr] = value

    def remove(self, attr: str) -> None:
        self.attrs.pop(attr, None)

    def has(self, attr: str) -> bool:
        return attr in self.attrs

    # --- навигация ---

    def append(self, child: Union[Node, str]) -> Node:
        if isinstance(child, str):
            child = Text(child)
        child._attach(self)
        self.children.append(child)
        return child

    def set_children(self, children: List[Node]) -> None:
        for c in self.children:
            c._attach(None)
        self.children = []
        for c in children:
            self.append(c)

    def element_children(self) -> List["Element"]:
        return [c for c in self.children if c.is_element]

    def iter(self) -> Iterator["Element"]:
        """Обход элементов в глубину, начиная с себя."""
        yield self
        for c in self.element_children():
            yield from c.iter()

    def text(self) -> str:
        return "".join(c.text() for c in self.children)

    def set_text(self, value: str) -> None:
        self.set_children([Text(value)])

    def path(self) -> str:
        parent = self.parent
        if parent is None:
            return f"/{self.name}"
        same = [c for c in parent.element_children() if c.name == self.name]
        step = self.name
        if len(same) > 1:
            step += f"[{same.index(self) + 1}]"
        return f"{parent.path()}/{step}"

    # --- обёртки ---

    def wrap(self, tag: str = "span") -> "Element":
        """Вставляет новый элемент на место self; self становится его единственным ребёнком."""
        parent = self.parent
        if parent is None:
            raise ValueError(f"cannot wrap root element <{self.name}>")
        wrapper = Element(tag)
        idx = next(i for i, c in enumerate(parent.children) if c is self)
        wrapper._attach(parent)
        parent.children[idx] = wrapper
        wrapper.append(self)
        return wrapper

    def wrap_inner(self, tag: str = "span") -> "Element":
        """Переносит всех детей self в новый элемент-ребёнок."""
        wrapper = Element(tag)
        inner = self.children
        self.children = []
        for c in inner:
            wrapper.append(c)
        self.append(wrapper)
        return wrapper

    # --- пространства имён ---

    def namespaces(self) -> Dict[str, str]:
        """Префиксы в области видимости (xmlns:*); ближайшее объявление побеждает."""
        result: Dict[str, str] = {}
        for el in itertools.chain([self], self.ancestors()):
            for name, value in el.attrs.items():
                if name.startswith("xmlns:"):
                    result.setdefault(name[len("xmlns:"):], value)
        return result

    def default_namespace(self) -> Optional[str]:
        for el in itertools.chain([self], self.ancestors()):
            ns = el.attrs.get("xmlns")
            if ns is not None:
                return ns
        return None

    # --- уведомления об изменениях ---

    def subscribe(self, callback: Callable[["Element"], None]) -> None:
        self._listeners.append(callback)

    def notify_change(self) -> None:
        """Вызывает подписчиков на самом узле и на всех предках (всплытие)."""
        for el in itertools.chain([self], self.ancestors()):
            for cb in list(el._listeners):
                cb(self)
