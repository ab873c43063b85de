"""Value types shared by the resolver, the edit-term generator, and the
zoom orchestrator.

All types are immutable and built fresh for every zoom event from the
current document text; nothing here survives between events.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from wheelzoom.syntax import SeparatorDef, separator_for


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ZoomError(Exception):
    """Base class for failures that abort a zoom cycle without writing."""


class PaneNotFoundError(ZoomError):
    """The image element does not belong to any open Markdown pane."""


class ReferenceNotFoundError(ZoomError):
    """The image reference does not occur verbatim in the document."""


class MalformedUriError(ReferenceNotFoundError):
    """No file name could be isolated from the image source URI."""


class UnsupportedSourceError(ZoomError):
    """The image source is neither local, remote, nor a drawing node."""


# ---------------------------------------------------------------------------
# Reference model
# ---------------------------------------------------------------------------


class Dialect(Enum):
    """Syntax enclosing an image reference."""

    WIKI_EMBED = "wiki"
    """``![[name|100]]``"""

    MARKDOWN_LINK = "markdown"
    """``![alt|100](name)`` (local paths and remote URLs)."""


@dataclass(frozen=True)
class ImageReference:
    """Resolved identity of one image mention in a document."""

    base_name: str
    """Decoded file name (or remote URL) before folder/suffix recovery."""

    canonical_form: str
    """Exact substring that edits anchor on: folder + name + suffix, in the
    spelling that actually occurs in the document."""

    dialect: Dialect
    is_in_table: bool
    folder: str = ""
    attribute_suffix: str = ""

    @property
    def separator(self) -> SeparatorDef:
        """Size separator appropriate for this reference's location."""
        return separator_for(self.is_in_table)


@dataclass(frozen=True)
class SizeAnnotation:
    """A ``|<width>`` annotation found next to a reference."""

    value: int
    separator: str

    def __str__(self) -> str:
        return f"{self.separator}{self.value}"


@dataclass(frozen=True)
class EditTerm:
    """Pair of pure string templates over a size value.

    ``find_text(old)`` is the exact substring to locate and
    ``replace_text(new)`` is what replaces it.
    """

    find: Callable[[int], str]
    replace: Callable[[int], str]

    def find_text(self, old_size: int) -> str:
        return self.find(old_size)

    def replace_text(self, new_size: int) -> str:
        return self.replace(new_size)


@dataclass(frozen=True)
class ZoomParams:
    """Everything needed to rewrite one reference's size annotation."""

    size_match_re: re.Pattern[str]
    """Matches an existing annotation; group 1 is the current size."""

    size_exists: EditTerm
    """Edit used when an annotation is already present."""

    size_missing: EditTerm
    """Edit used to insert the initial annotation."""

    reference: ImageReference

    def find_size(self, text: str) -> SizeAnnotation | None:
        """Return the current annotation in *text*, or ``None``."""
        m = self.size_match_re.search(text)
        if m is None:
            return None
        return SizeAnnotation(int(m.group(1)), self.reference.separator.literal)
