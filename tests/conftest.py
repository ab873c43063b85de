"""Shared test fixtures and helpers for wheelzoom tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote

from wheelzoom.zoom import ImageElement


def app_uri(name: str, folder: str = "C:/vault/", timestamp: int = 1677337704730) -> str:
    """Build a rendered local image ``src`` like the host produces.

    Args:
        name: Decoded file name (spaces are percent-encoded).
        folder: Absolute folder the host serves the file from.
        timestamp: Cache-busting query value.

    Returns:
        A string like ``app://local/C:/vault/my%20image.png?1677337704730``.
    """
    return f"app://local/{folder}{quote(name)}?{timestamp}"


def table(*cells: str) -> str:
    """Build a small pipe-framed table whose body row holds *cells*."""
    header = "| " + " | ".join(f"col{i}" for i in range(len(cells))) + " |"
    rule = "|" + "|".join("---" for _ in cells) + "|"
    row = "| " + " | ".join(cells) + " |"
    return "\n".join((header, rule, row))


@dataclass
class MemoryDocument:
    """In-memory :class:`~wheelzoom.zoom.Document` that records writes."""

    text: str
    writes: list[str] = field(default_factory=list)

    def read(self) -> str:
        return self.text

    def write(self, text: str) -> None:
        self.writes.append(text)
        self.text = text


@dataclass
class FakePane:
    """Pane that shows a fixed set of elements."""

    document: MemoryDocument
    elements: tuple[ImageElement, ...] = ()
    is_markdown: bool = True

    def contains(self, element: ImageElement) -> bool:
        return element in self.elements
