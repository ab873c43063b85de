"""Edit-term generation for size annotations.

Turns a resolved :class:`~wheelzoom.models.ImageReference` into a
:class:`~wheelzoom.models.ZoomParams`: a detection regex for an existing
size plus two find/replace pairs, one that updates an existing size and
one that inserts the initial size.

Wiki embeds carry the size after the name::

    ![[name]]        ->  ![[name|100]]
    ![[name|100]]    ->  ![[name|125]]

Markdown links carry it at the end of the alt text::

    ![alt](name)      ->  ![alt|100](name)
    ![alt|100](name)  ->  ![alt|125](name)

Inside table rows the separator is ``\\|`` instead of ``|``.
"""

from __future__ import annotations

import logging
import re

from wheelzoom.models import Dialect, EditTerm, ImageReference, ZoomParams
from wheelzoom.syntax import escape_regex

_log = logging.getLogger("edit_terms")


def _wiki_params(ref: ImageReference) -> ZoomParams:
    name = ref.canonical_form
    sep = ref.separator

    size_match_re = re.compile(rf"{escape_regex(name)}{sep.pattern}(\d+)")
    size_exists = EditTerm(
        find=lambda old: sep.format(name, old),
        replace=lambda new: sep.format(name, new),
    )
    size_missing = EditTerm(
        find=lambda _old: name,
        replace=lambda new: sep.format(name, new),
    )
    return ZoomParams(size_match_re, size_exists, size_missing, ref)


def _markdown_params(ref: ImageReference) -> ZoomParams:
    name = ref.canonical_form
    sep = ref.separator
    target = f"]({name})"

    size_match_re = re.compile(
        rf"{sep.pattern}(\d+)\]{escape_regex(f'({name})')}"
    )
    size_exists = EditTerm(
        find=lambda old: sep.format("", old) + target,
        replace=lambda new: sep.format("", new) + target,
    )
    size_missing = EditTerm(
        find=lambda _old: target,
        replace=lambda new: sep.format("", new) + target,
    )
    return ZoomParams(size_match_re, size_exists, size_missing, ref)


def build_zoom_params(ref: ImageReference) -> ZoomParams:
    """Build the detection regex and edit terms for *ref*.

    The generated terms are pure functions of the size value and do not
    depend on any particular document text.
    """
    if ref.dialect is Dialect.WIKI_EMBED:
        params = _wiki_params(ref)
    else:
        params = _markdown_params(ref)
    _log.debug(
        "  Edit terms for %r (%s): size regex %s",
        ref.canonical_form, ref.dialect.value, params.size_match_re.pattern,
    )
    return params
