"""Mouse-wheel image resizing for Markdown notes.

Resizes an embedded image by rewriting its size annotation directly in
the note's Markdown, the way a user would type it by hand:

- Wiki embeds: ``![[image.png]]`` → ``![[image.png|500]]``
- Markdown links: ``![alt](image.png)`` → ``![alt|500](image.png)``
- Remote images: ``![](https://…/i.png)`` → ``![|500](https://…/i.png)``
- Table rows use the escaped separator: ``![[image.png\\|500]]``

Key features:
- Locates the exact spelling of a reference (raw, URI-encoded, or
  ``%20``-encoded), including folder prefixes and theme modifiers such
  as ``|ctr`` that must stay in front of the size
- Single-pass, first-occurrence edits; unchanged text is never written
- Initial size capped to the image's natural width (``pymupdf``/``httpx``)
- JSON settings overlaid on defaults; CLI host for files on disk

Note: Imports are deferred so that ``pymupdf`` and ``httpx`` are only
loaded when image probing is used.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("wheelzoom")
except PackageNotFoundError:
    __version__ = "0.0.0"  # fallback for uninstalled dev usage


def __getattr__(name: str):
    """Lazy imports to avoid loading image libraries at package import time."""
    _lazy_imports = {
        # wheelzoom.models
        "Dialect": "wheelzoom.models",
        "EditTerm": "wheelzoom.models",
        "ImageReference": "wheelzoom.models",
        "SizeAnnotation": "wheelzoom.models",
        "ZoomError": "wheelzoom.models",
        "ZoomParams": "wheelzoom.models",
        # wheelzoom.resolver
        "resolve_local": "wheelzoom.resolver",
        "resolve_remote": "wheelzoom.resolver",
        # wheelzoom.edit_terms
        "build_zoom_params": "wheelzoom.edit_terms",
        # wheelzoom.zoom
        "FileDocument": "wheelzoom.zoom",
        "ImageElement": "wheelzoom.zoom",
        "ZoomSession": "wheelzoom.zoom",
        "compute_new_size": "wheelzoom.zoom",
        "rewrite": "wheelzoom.zoom",
        # wheelzoom.settings
        "ZoomSettings": "wheelzoom.settings",
        "load_settings": "wheelzoom.settings",
        # wheelzoom.images
        "probe_natural_width": "wheelzoom.images",
    }

    if name in _lazy_imports:
        import importlib
        module = importlib.import_module(_lazy_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'wheelzoom' has no attribute {name!r}")


__all__ = [
    "build_zoom_params",
    "compute_new_size",
    "Dialect",
    "EditTerm",
    "FileDocument",
    "ImageElement",
    "ImageReference",
    "load_settings",
    "probe_natural_width",
    "resolve_local",
    "resolve_remote",
    "rewrite",
    "SizeAnnotation",
    "ZoomError",
    "ZoomParams",
    "ZoomSession",
    "ZoomSettings",
]
