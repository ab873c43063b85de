"""Reference resolution: from an image source to its spelling in the text.

Given an image element's source identifier and the raw Markdown of the
document that shows it, determines the exact substring that encodes the
reference (its *canonical form*), which embed syntax encloses it, and
whether it sits in a table row.

Local images are resolved in five steps:

1. Decode the source URI and isolate the file name before the ``?``
   query marker.
2. Pick the spelling of that name that occurs in the document: raw,
   fully URI-encoded, or with only spaces encoded as ``%20``.
3. Recover a folder prefix written between the opening ``[`` / ``(`` and
   the name.
4. For wiki embeds, recover modifiers written between the name and the
   size or closing ``]]`` (e.g. ``|ctr``).
5. Detect the dialect from the character preceding the reference and
   the table flag from the shape of its line.

Remote images are taken verbatim: the URL is the canonical form and the
dialect is always Markdown-link.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, unquote

from wheelzoom.models import (
    Dialect,
    ImageReference,
    MalformedUriError,
    ReferenceNotFoundError,
)
from wheelzoom.syntax import (
    ATTRIBUTE_SUFFIX_RE,
    DRAWING_SUFFIX_LEN,
    LINUX_DECODING_PREFIX,
    LOCAL_NAME_RE,
    WIKI_OPENER,
    table_line_re,
)

_log = logging.getLogger("resolver")

_URI_SAFE = "/;,?:@&=+$!~*'()#"
"""Characters left unencoded when building the fully encoded spelling."""

_FOLDER_OPENERS = ("[", "(")
"""Characters that open the target part of an embed."""

_FOLDER_STOP_CHARS = frozenset("\n])")
"""A folder prefix never spans these characters."""


# ---------------------------------------------------------------------------
# Source identifiers
# ---------------------------------------------------------------------------


def image_name_from_uri(image_uri: str) -> str:
    """Isolate the decoded file name from a local image URI.

    >>> image_name_from_uri("app://local/C:/notes/my%20image.png?1677337704730")
    'my image.png'

    Raises:
        MalformedUriError: When the URI carries no ``?`` query marker.
    """
    decoded = unquote(image_uri)
    m = LOCAL_NAME_RE.search(decoded)
    if m is None:
        raise MalformedUriError(f"No file name found in image URI: {image_uri}")
    name = m.group(1)

    # Some platforms leave the %2F before the file name half-decoded.
    if name.startswith(LINUX_DECODING_PREFIX):
        _log.debug("  Stripping leftover %r prefix from %r", LINUX_DECODING_PREFIX, name)
        name = name[len(LINUX_DECODING_PREFIX):]
    return name


def drawing_name_from_filesource(filesource: str) -> str:
    """Return the embed name of a drawing node from its ``filesource``.

    The rendered ``src`` of a drawing is a raster, so the name is taken
    from the source path instead: the trailing format marker is dropped
    and only the last path segment is kept.

    >>> drawing_name_from_filesource("Drawings/sketch.excalidraw.md")
    'sketch.excalidraw'
    """
    stem = filesource[: len(filesource) - DRAWING_SUFFIX_LEN]
    return stem[stem.rfind("/") + 1:]


def is_in_table(needle: str, text: str) -> bool:
    """Whether *needle* occurs on a pipe-framed line of *text*."""
    return table_line_re(needle).search(text) is not None


# ---------------------------------------------------------------------------
# Local resolution
# ---------------------------------------------------------------------------


def document_spelling(name: str, text: str) -> str:
    """Return the spelling of *name* that occurs verbatim in *text*.

    Candidates are tried in order: the raw name, the fully URI-encoded
    name, and the name with only spaces replaced by ``%20``.

    Raises:
        ReferenceNotFoundError: When no candidate occurs in *text*.
    """
    candidates = (name, quote(name, safe=_URI_SAFE), name.replace(" ", "%20"))
    for candidate in candidates:
        if candidate and candidate in text:
            return candidate
    raise ReferenceNotFoundError(f"Image {name!r} not found in document")


def _recover_folder(text: str, position: int) -> str:
    """Return the folder prefix written in front of *position*.

    The prefix runs from the nearer of the last ``[`` or ``(`` before
    *position* up to the name.  Anything that spans a line break or a
    closing bracket is not a folder and yields ``""``.
    """
    opener = max(text.rfind(ch, 0, position) for ch in _FOLDER_OPENERS)
    if opener < 0:
        return ""
    folder = text[opener + 1:position]
    if _FOLDER_STOP_CHARS.intersection(folder):
        return ""
    return folder


def _recover_attribute_suffix(text: str, end: int) -> str:
    """Return wiki-embed modifiers written right after position *end*."""
    m = ATTRIBUTE_SUFFIX_RE.match(text, end)
    if m is None:
        return ""
    return m.group(1) or m.group(2) or ""


def resolve_local_name(name: str, text: str) -> ImageReference:
    """Resolve an already-decoded local file *name* against *text*.

    Raises:
        ReferenceNotFoundError: When the name does not occur in *text*.
    """
    spelling = document_spelling(name, text)
    position = text.index(spelling)

    folder = _recover_folder(text, position)
    start = position - len(folder)
    end = position + len(spelling)

    preceding = text[start - 1] if start > 0 else ""
    dialect = Dialect.WIKI_EMBED if preceding == WIKI_OPENER else Dialect.MARKDOWN_LINK

    suffix = _recover_attribute_suffix(text, end) if dialect is Dialect.WIKI_EMBED else ""
    canonical = f"{folder}{spelling}{suffix}"
    in_table = is_in_table(canonical, text)

    _log.debug(
        "  Resolved %r -> %r (folder=%r, suffix=%r, %s, table=%s)",
        name, canonical, folder, suffix, dialect.value, in_table,
    )
    return ImageReference(
        base_name=name,
        canonical_form=canonical,
        dialect=dialect,
        is_in_table=in_table,
        folder=folder,
        attribute_suffix=suffix,
    )


def resolve_local(image_uri: str, text: str) -> ImageReference:
    """Resolve a local image URI (``app://...?<timestamp>``) against *text*.

    Raises:
        MalformedUriError: When no file name can be isolated.
        ReferenceNotFoundError: When the name does not occur in *text*.
    """
    name = image_name_from_uri(image_uri)
    _log.debug("  Local image name: %r", name)
    return resolve_local_name(name, text)


# ---------------------------------------------------------------------------
# Remote resolution
# ---------------------------------------------------------------------------


def resolve_remote(image_url: str, text: str) -> ImageReference:
    """Resolve a remote image URL against *text*.

    The URL is used verbatim; remote images are always Markdown links.

    Raises:
        ReferenceNotFoundError: When the URL does not occur in *text*.
    """
    if image_url not in text:
        raise ReferenceNotFoundError(f"Image URL {image_url!r} not found in document")
    in_table = is_in_table(image_url, text)
    _log.debug("  Resolved remote %r (table=%s)", image_url, in_table)
    return ImageReference(
        base_name=image_url,
        canonical_form=image_url,
        dialect=Dialect.MARKDOWN_LINK,
        is_in_table=in_table,
    )
