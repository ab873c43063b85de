"""Zoom orchestration: one read-resolve-rewrite-write cycle per wheel event.

The host application supplies the pieces this module cannot own itself:
the scrolled image element, the panes that might contain it, and a
:class:`Document` that can be read and written.  Everything in between
is done here:

1. Pick the document whose Markdown pane hosts the image
   (:func:`find_document`).
2. Resolve the image's reference in the current text and build its edit
   terms (:func:`resolve_params`).
3. Compute the new size and rewrite the text (:func:`rewrite`).
4. Write the text back only when it actually changed.

A failure in any step raises a :class:`~wheelzoom.models.ZoomError`
subclass before anything is written, so the document is either fully
updated or left untouched.

Also holds the modifier-key state machine (:class:`KeyTracker`) and the
canvas-node resize arithmetic (:func:`resize_canvas_node`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Protocol, runtime_checkable

from wheelzoom.edit_terms import build_zoom_params
from wheelzoom.models import (
    PaneNotFoundError,
    UnsupportedSourceError,
    ZoomParams,
)
from wheelzoom.resolver import (
    drawing_name_from_filesource,
    resolve_local,
    resolve_local_name,
    resolve_remote,
)
from wheelzoom.settings import ModifierKey, ZoomSettings
from wheelzoom.syntax import DRAWING_CLASS_RE, LOCAL_URI_PREFIXES, REMOTE_PREFIXES

_log = logging.getLogger("zoom")


# ---------------------------------------------------------------------------
# Host-facing types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImageElement:
    """The rendered image under the pointer."""

    src: str
    """Value of the element's ``src`` attribute."""

    classes: tuple[str, ...] = ()
    """CSS classes of the element."""

    filesource: str | None = None
    """``filesource`` attribute of embedded-drawing elements."""

    natural_width: int | None = None
    """Intrinsic pixel width, when the host knows it."""

    @property
    def is_drawing(self) -> bool:
        return any(DRAWING_CLASS_RE.match(cls) for cls in self.classes)


@runtime_checkable
class Document(Protocol):
    """A document whose full text can be read and replaced."""

    def read(self) -> str:
        ...

    def write(self, text: str) -> None:
        ...


@runtime_checkable
class Pane(Protocol):
    """An open view that may display an image element."""

    @property
    def is_markdown(self) -> bool:
        ...

    @property
    def document(self) -> Document:
        ...

    def contains(self, element: ImageElement) -> bool:
        ...


class FileDocument:
    """:class:`Document` backed by a UTF-8 text file.

    Line endings are passed through untranslated, so a CRLF note keeps
    its ``\\r\\n`` endings after a write.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str:
        with open(self._path, encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, text: str) -> None:
        with open(self._path, "w", encoding="utf-8", newline="") as f:
            f.write(text)

    def __repr__(self) -> str:
        return f"FileDocument({str(self._path)!r})"


def find_document(panes: Iterable[Pane], element: ImageElement) -> Document:
    """Return the document of the first Markdown pane showing *element*.

    Raises:
        PaneNotFoundError: When no Markdown pane contains the element.
    """
    for pane in panes:
        if pane.is_markdown and pane.contains(element):
            return pane.document
    raise PaneNotFoundError("No document belonging to the image found")


# ---------------------------------------------------------------------------
# Size arithmetic
# ---------------------------------------------------------------------------


def compute_new_size(old_size: int, delta_y: float, step_size: int) -> int:
    """Return the size after one wheel notch.

    Scrolling up (``delta_y < 0``) grows by one step.  Scrolling down
    shrinks by one step only while the size stays positive, so a size of
    exactly one step is left unchanged.
    """
    if delta_y < 0:
        return old_size + step_size
    if delta_y > 0 and old_size > step_size:
        return old_size - step_size
    return old_size


def initial_size(settings: ZoomSettings, natural_width: int | None = None) -> int:
    """Size given to an image without an annotation.

    The configured default, capped to the image's natural width when that
    is known and smaller.
    """
    if natural_width and 0 < natural_width < settings.initial_size:
        return natural_width
    return settings.initial_size


# ---------------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ZoomOutcome:
    """Result of rewriting one document for one wheel event."""

    text: str
    """Document text after the edit (identical to the input on a no-op)."""

    old_size: int | None
    """Size before the edit, ``None`` when no annotation existed."""

    new_size: int
    changed: bool
    """Whether :attr:`text` differs from the input."""


def rewrite(
    text: str,
    params: ZoomParams,
    delta_y: float,
    settings: ZoomSettings,
    natural_width: int | None = None,
) -> ZoomOutcome:
    """Apply one zoom step to *text* without touching any document.

    An existing annotation is updated in place; otherwise the initial size
    is inserted.  Only the first occurrence of the find text is replaced.
    """
    annotation = params.find_size(text)
    if annotation is not None:
        old_size = annotation.value
        new_size = compute_new_size(old_size, delta_y, settings.step_size)
        term = params.size_exists
    else:
        old_size = None
        new_size = initial_size(settings, natural_width)
        term = params.size_missing

    find = term.find_text(old_size or 0)
    new_text = text.replace(find, term.replace_text(new_size), 1)
    return ZoomOutcome(new_text, old_size, new_size, new_text != text)


def resolve_params(element: ImageElement, text: str) -> ZoomParams:
    """Resolve *element*'s reference in *text* and build its edit terms.

    Raises:
        UnsupportedSourceError: When the source is not a remote URL, a
            drawing node, or a local file URI.
        ReferenceNotFoundError: When the reference is not in *text*.
    """
    src = element.src
    if src.startswith(REMOTE_PREFIXES):
        ref = resolve_remote(src, text)
    elif element.is_drawing and element.filesource:
        ref = resolve_local_name(drawing_name_from_filesource(element.filesource), text)
    elif src.startswith(LOCAL_URI_PREFIXES):
        ref = resolve_local(src, text)
    else:
        raise UnsupportedSourceError(f"Image is not zoomable: {src!r}")
    return build_zoom_params(ref)


class ZoomSession:
    """Runs zoom cycles with a fixed configuration.

    Args:
        settings: Effective configuration.
        width_probe: Optional callable returning an image's natural width
            from its source; consulted only when an image gets its first
            annotation and the element does not carry the width itself.
    """

    def __init__(
        self,
        settings: ZoomSettings,
        width_probe: Callable[[str], int | None] | None = None,
    ) -> None:
        self._settings = settings
        self._width_probe = width_probe

    @property
    def settings(self) -> ZoomSettings:
        return self._settings

    def _natural_width(self, element: ImageElement) -> int | None:
        if element.natural_width:
            return element.natural_width
        if self._width_probe is None:
            return None
        return self._width_probe(element.src)

    def zoom(self, document: Document, element: ImageElement, delta_y: float) -> ZoomOutcome:
        """Run one read-resolve-rewrite-write cycle.

        Nothing is written when resolution fails (the error propagates) or
        when the rewrite leaves the text unchanged.
        """
        text = document.read()
        params = resolve_params(element, text)

        natural_width = None
        if params.find_size(text) is None:
            natural_width = self._natural_width(element)

        outcome = rewrite(text, params, delta_y, self._settings, natural_width)
        if outcome.changed:
            document.write(outcome.text)
            _log.info(
                "Resized %s: %s -> %d",
                params.reference.canonical_form,
                outcome.old_size if outcome.old_size is not None else "unsized",
                outcome.new_size,
            )
        else:
            _log.debug("  No change for %s (size %d)",
                       params.reference.canonical_form, outcome.new_size)
        return outcome

    def zoom_in_panes(
        self, panes: Iterable[Pane], element: ImageElement, delta_y: float,
    ) -> ZoomOutcome:
        """Locate the pane hosting *element*, then run :meth:`zoom`."""
        return self.zoom(find_document(panes, element), element, delta_y)


# ---------------------------------------------------------------------------
# Modifier key state
# ---------------------------------------------------------------------------


class KeyTracker:
    """Tracks whether the configured modifier key is held down.

    Key events carry physical key codes (``"AltLeft"``); wheel events only
    carry the live modifier flags, which :meth:`confirm` uses to drop a
    stale "held" state (e.g. after switching windows with Alt+Tab, when
    the key-up event never arrives).
    """

    def __init__(self, settings: ZoomSettings) -> None:
        self._key = settings.modifier_key
        self._held = False

    @property
    def is_held(self) -> bool:
        return self._held

    @property
    def suppresses_scroll(self) -> bool:
        """Whether normal scrolling is blocked while the key is held."""
        return self._held and not self._key.is_shift

    def key_down(self, code: str) -> None:
        if code == self._key.value:
            self._held = True

    def key_up(self, code: str) -> None:
        if code == self._key.value:
            self._held = False

    def confirm(self, *, alt: bool = False, ctrl: bool = False, shift: bool = False) -> bool:
        """Re-check the held state against a wheel event's modifier flags."""
        if not self._held:
            return False
        if self._key in (ModifierKey.ALT, ModifierKey.ALT_RIGHT):
            down = alt
        elif self._key in (ModifierKey.CTRL, ModifierKey.CTRL_RIGHT):
            down = ctrl
        else:
            down = shift
        if not down:
            _log.debug("  Modifier %s no longer down, releasing", self._key.value)
            self._held = False
        return down


# ---------------------------------------------------------------------------
# Canvas nodes
# ---------------------------------------------------------------------------


def resize_canvas_node(
    width: float, height: float, delta_y: float, step_size: int,
) -> tuple[float, float]:
    """Return the new ``(width, height)`` of a canvas node.

    Unlike images, canvas nodes grow when scrolling down (``delta_y > 0``)
    and shrink otherwise.  The aspect ratio is preserved.
    """
    delta = step_size if delta_y > 0 else -step_size
    aspect_ratio = width / height
    new_width = width + delta
    return new_width, new_width / aspect_ratio
