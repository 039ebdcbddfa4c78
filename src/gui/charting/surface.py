"""Rendering surface: a small retained element tree.

Renderers append ``Element`` nodes (``svg``, ``g``, ``rect``, ``text``) with
SVG-style attributes and pointer listeners. The tree is backend neutral:
the matplotlib backend draws it, tests inspect it directly.

A ``Surface`` is created fresh per render pass and disposed before the next
one. ``dispose()`` drops every child and listener and flips ``active`` so any
handler that outlived the tree can tell it is stale.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

__all__ = ["PointerEvent", "Element", "Surface", "POINTER_ENTER", "POINTER_LEAVE"]

POINTER_ENTER = "pointerenter"
POINTER_LEAVE = "pointerleave"

_surface_ids = itertools.count(1)


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in surface (page) coordinates, origin top-left."""

    x: float
    y: float


Listener = Callable[[PointerEvent], None]


@dataclass(eq=False)
class Element:
    tag: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: List["Element"] = field(default_factory=list)
    listeners: Dict[str, List[Listener]] = field(default_factory=dict)
    text: str = ""

    def append(self, tag: str, attrs: Optional[Dict[str, Any]] = None, *, text: str = "") -> "Element":
        child = Element(tag, dict(attrs or {}), text=text)
        self.children.append(child)
        return child

    def set(self, name: str, value: Any) -> "Element":
        self.attrs[name] = value
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    @property
    def id(self) -> Optional[str]:
        return self.attrs.get("id")

    @property
    def classes(self) -> List[str]:
        return str(self.attrs.get("class", "")).split()

    def on(self, event: str, listener: Listener) -> "Element":
        self.listeners.setdefault(event, []).append(listener)
        return self

    def dispatch(self, event: str, pointer: PointerEvent) -> int:
        """Invoke listeners for ``event``; returns how many ran."""
        handlers = list(self.listeners.get(event, ()))
        for handler in handlers:
            handler(pointer)
        return len(handlers)

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            yield from child.iter()

    def select_all(self, css_class: str) -> List["Element"]:
        return [el for el in self.iter() if css_class in el.classes]

    def find(self, element_id: str) -> Optional["Element"]:
        return next((el for el in self.iter() if el.id == element_id), None)

    def release(self) -> None:
        for child in self.children:
            child.release()
        self.listeners.clear()
        self.children.clear()


class Surface:
    """Root ``svg`` element plus the bookkeeping needed for interaction."""

    def __init__(self, width: float, height: float) -> None:
        self.id = next(_surface_ids)
        self.root = Element("svg", {"width": width, "height": height})
        self.active = True
        self.context: Any = None  # render context resolved by cell handlers
        self.cells: Dict[Any, Element] = {}

    @property
    def width(self) -> float:
        return self.root.attrs["width"]

    @property
    def height(self) -> float:
        return self.root.attrs["height"]

    def select_all(self, css_class: str) -> List[Element]:
        return self.root.select_all(css_class)

    def find(self, element_id: str) -> Optional[Element]:
        return self.root.find(element_id)

    def listener_count(self) -> int:
        return sum(len(v) for el in self.root.iter() for v in el.listeners.values())

    def dispose(self) -> None:
        if not self.active:
            return
        self.active = False
        self.root.release()
        self.cells.clear()
        self.context = None

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        state = "active" if self.active else "disposed"
        return f"<Surface #{self.id} {state} cells={len(self.cells)}>"
