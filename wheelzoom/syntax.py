"""Centralized pattern definitions for image-reference rewriting.

Single source of truth for every separator, regex, and URI shape used
when locating an image reference in Markdown text and editing its size
annotation.  No other module should hard-code these patterns.

Size separators come in two flavours: the bare pipe used in running text
and the escaped pipe used inside table rows (an unescaped ``|`` would be
read as a new column).  Each flavour is a :class:`SeparatorDef` that
knows both its literal text and its regex form.

Usage::

    from wheelzoom.syntax import PLAIN_SEPARATOR, TABLE_SEPARATOR, escape_regex

    PLAIN_SEPARATOR.literal               # '|'
    TABLE_SEPARATOR.literal               # '\\|'
    TABLE_SEPARATOR.pattern               # '\\\\\\|'
    PLAIN_SEPARATOR.format("a.png", 100)  # 'a.png|100'
    escape_regex("a(b)c.png")             # 'a\\(b\\)c\\.png'
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_REGEX_SPECIALS_RE = re.compile(r"[-/\\^$*+?.()|\[\]{}]")
"""Characters that must be escaped to be matched literally."""


def escape_regex(text: str) -> str:
    """Escape *text* so it matches literally inside a regex.

    Escapes exactly ``- / \\ ^ $ * + ? . ( ) | [ ] { }``.  Unlike
    :func:`re.escape`, spaces and other punctuation are left alone so the
    generated pattern stays readable in logs.

    >>> escape_regex("example.png")
    'example\\\\.png'
    """
    return _REGEX_SPECIALS_RE.sub(lambda m: "\\" + m.group(0), text)


@dataclass(frozen=True)
class SeparatorDef:
    """Separator placed between an image name and its size value.

    Parameters
    ----------
    literal:
        Text written into the document, e.g. ``"|"`` or ``"\\|"``.
    """

    literal: str

    @property
    def pattern(self) -> str:
        """Regex source matching :attr:`literal` verbatim.

        >>> TABLE_SEPARATOR.pattern
        '\\\\\\\\\\\\|'
        """
        return escape_regex(self.literal)

    def format(self, prefix: str, size: int) -> str:
        """Render ``prefix + separator + size``."""
        return f"{prefix}{self.literal}{size}"


PLAIN_SEPARATOR = SeparatorDef("|")
"""Separator used outside tables: ``![[a.png|100]]``."""

TABLE_SEPARATOR = SeparatorDef("\\|")
"""Separator used inside table rows: ``| ![[a.png\\|100]] |``."""


def separator_for(in_table: bool) -> SeparatorDef:
    """Pick the separator for a reference inside or outside a table."""
    return TABLE_SEPARATOR if in_table else PLAIN_SEPARATOR


# ---------------------------------------------------------------------------
# Table detection
# ---------------------------------------------------------------------------


def table_line_re(needle: str) -> re.Pattern[str]:
    """Regex matching a pipe-framed line that contains *needle*.

    A line counts as a table row when it starts and ends with ``|`` and
    has at least one character on each side of *needle*.  This is a
    line-shape heuristic: multi-line cells are not recognised.  Lines may
    end in ``\\r\\n``.
    """
    return re.compile(rf"^\|.+{escape_regex(needle)}.+\|\r?$", re.MULTILINE)


# ---------------------------------------------------------------------------
# Wiki-embed attribute suffix
# ---------------------------------------------------------------------------

ATTRIBUTE_SUFFIX_RE = re.compile(
    r"([^\]\n]*?)\\?\|\d+\]\]"
    r"|([^\]\n]*?)\]\]"
)
"""Regex applied (anchored) right after an image name inside ``![[...]]``.

Group 1 captures modifiers that precede an existing size
(``|ctr`` in ``|ctr|100]]``); group 2 captures modifiers when no size is
present (``|ctr`` in ``|ctr]]``).  Either group may be empty.
"""

WIKI_OPENER = "["
"""Character immediately preceding a wiki-embedded name (``![[name``)."""

# ---------------------------------------------------------------------------
# Image source shapes
# ---------------------------------------------------------------------------

LOCAL_NAME_RE = re.compile(r"([^/\\?]+)\?")
"""Regex isolating a local file name before its ``?`` query marker.

Captures the last path segment, e.g. ``image.png`` from
``app://local/C:/notes/image.png?1677337704730``.
"""

LINUX_DECODING_PREFIX = "2F"
"""Leftover of an undecoded ``%2F`` separator in front of a file name."""

REMOTE_PREFIXES = ("http://", "https://")
"""Prefixes of remote image sources."""

LOCAL_URI_PREFIXES = ("app://", "file://")
"""Prefixes of local-file image sources."""

DRAWING_CLASS_RE = re.compile(r"excalidraw-svg.*")
"""Regex matching the CSS class of an embedded-drawing element."""

DRAWING_SUFFIX_LEN = 3
"""Length of the format marker stripped from a drawing's ``filesource``
(``.md`` in ``Drawings/sketch.excalidraw.md``)."""
