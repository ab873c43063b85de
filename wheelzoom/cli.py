"""CLI entry point for wheelzoom.

Acts as the host for zoom cycles against Markdown files on disk: each
``zoom`` step is one wheel notch over the image identified by its
rendered ``src``.

Usage::

    wheelzoom zoom note.md "app://local/home/me/vault/image.png?1677337704730"
    wheelzoom zoom note.md https://example.com/i.png --out --steps 3
    wheelzoom resolve note.md "app://local/home/me/vault/image.png?1"
    wheelzoom show-settings
    wheelzoom init-settings
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import colorlog

from wheelzoom import __version__
from wheelzoom.images import probe_natural_width
from wheelzoom.models import ZoomError
from wheelzoom.settings import (
    AUTO_SETTINGS_FILENAME,
    ZoomSettings,
    find_settings_file,
    generate_settings_file,
    load_settings,
)
from wheelzoom.zoom import FileDocument, ImageElement, ZoomSession, resolve_params

_log = logging.getLogger("wheelzoom")

_ZOOM_IN_DELTA = -1.0
"""Wheel delta of one notch "up" (grow)."""

_ZOOM_OUT_DELTA = 1.0
"""Wheel delta of one notch "down" (shrink)."""


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_colorized_logging():
    """Configure colorized logging output."""
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(name)-10s%(reset)s: "
            "%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _setup_logging(verbose: bool) -> None:
    """Initialize colorized logging and optionally enable debug level."""
    setup_colorized_logging()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands."""
    # -- Parent parsers for shared argument groups -----------------------------
    verbose_parent = argparse.ArgumentParser(add_help=False)
    verbose_parent.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    settings_parent = argparse.ArgumentParser(add_help=False)
    settings_parent.add_argument(
        "--settings",
        type=Path,
        default=None,
        metavar="FILE",
        help=f"Settings file (default: {AUTO_SETTINGS_FILENAME} next to the "
             "note, if present).",
    )

    element_parent = argparse.ArgumentParser(add_help=False)
    element_parent.add_argument(
        "note",
        type=Path,
        help="Markdown note containing the image",
    )
    element_parent.add_argument(
        "src",
        help="Rendered image source: 'app://...?<timestamp>', 'file://...' "
             "or an http(s) URL",
    )
    element_parent.add_argument(
        "--class",
        dest="classes",
        action="append",
        default=[],
        metavar="CLS",
        help="CSS class of the image element (repeatable). An "
             "'excalidraw-svg' class marks an embedded drawing.",
    )
    element_parent.add_argument(
        "--filesource",
        default=None,
        metavar="PATH",
        help="'filesource' attribute of an embedded drawing element.",
    )

    # -- Main parser -----------------------------------------------------------
    parser = argparse.ArgumentParser(
        prog="wheelzoom",
        description="Resize images in Markdown notes by rewriting their "
                    "size annotation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  zoom            Grow or shrink an image by one or more wheel steps
  resolve         Show how an image reference is located in a note
  show-settings   Print the effective settings as JSON
  init-settings   Generate a settings file with all defaults

Run '%(prog)s COMMAND --help' for command-specific options.
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # -- zoom ------------------------------------------------------------------
    p_zoom = subparsers.add_parser(
        "zoom",
        parents=[verbose_parent, settings_parent, element_parent],
        formatter_class=argparse.RawDescriptionHelpFormatter,
        help="Grow or shrink an image by one or more wheel steps",
        description="Rewrite the size annotation of an image in a note.",
        epilog="""
Examples:
  %(prog)s note.md "app://local/vault/a.png?1"          Grow by one step
  %(prog)s note.md "app://local/vault/a.png?1" --out    Shrink by one step
  %(prog)s note.md https://x.com/i.png --steps 4         Grow by four steps
  %(prog)s note.md "app://local/vault/a.png?1" -n       Show the result only
        """,
    )
    p_zoom.add_argument(
        "--out",
        action="store_true",
        help="Zoom out (shrink) instead of in",
    )
    p_zoom.add_argument(
        "--steps",
        type=int,
        default=1,
        metavar="N",
        help="Number of wheel steps to apply (default: %(default)s).",
    )
    width_group = p_zoom.add_mutually_exclusive_group()
    width_group.add_argument(
        "--natural-width",
        type=int,
        default=None,
        metavar="PX",
        help="Natural width of the image, caps the initial size.",
    )
    width_group.add_argument(
        "--no-probe",
        action="store_true",
        help="Do not read or download the image to find its natural width.",
    )
    p_zoom.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Print the rewritten note to stdout instead of saving it.",
    )

    # -- resolve ---------------------------------------------------------------
    subparsers.add_parser(
        "resolve",
        parents=[verbose_parent, element_parent],
        help="Show how an image reference is located in a note",
        description="Resolve an image reference and print its canonical "
                    "form, dialect, table flag, and current size.",
    )

    # -- show-settings ---------------------------------------------------------
    p_show = subparsers.add_parser(
        "show-settings",
        help="Print the effective settings as JSON",
        description="Print the effective settings (defaults overlaid with "
                    "the settings file) as JSON.",
    )
    p_show.add_argument(
        "--settings",
        type=Path,
        default=Path(AUTO_SETTINGS_FILENAME),
        metavar="FILE",
        help=f"Settings file (default: {AUTO_SETTINGS_FILENAME}).",
    )

    # -- init-settings ---------------------------------------------------------
    p_init = subparsers.add_parser(
        "init-settings",
        help="Generate a settings file with all defaults",
        description="Write a settings file containing every default value.",
    )
    p_init.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=Path(AUTO_SETTINGS_FILENAME),
        help=f"Output path (default: {AUTO_SETTINGS_FILENAME})",
    )

    return parser


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


class _DryRunDocument:
    """Document that reads a file once and keeps writes in memory."""

    def __init__(self, path: Path) -> None:
        self._text = FileDocument(path).read()
        self.written = False

    @property
    def text(self) -> str:
        return self._text

    def read(self) -> str:
        return self._text

    def write(self, text: str) -> None:
        self._text = text
        self.written = True


def _element_from_args(args: argparse.Namespace, natural_width: int | None = None) -> ImageElement:
    return ImageElement(
        src=args.src,
        classes=tuple(args.classes),
        filesource=args.filesource,
        natural_width=natural_width,
    )


def _check_note(note: Path) -> bool:
    if not note.is_file():
        _log.error("Note not found: %s", note)
        return False
    return True


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_init_settings(args: argparse.Namespace) -> int:
    """Handle the ``init-settings`` command."""
    generate_settings_file(args.path)
    print(f"Settings written to {args.path}")
    return 0


def _cmd_show_settings(args: argparse.Namespace) -> int:
    """Handle the ``show-settings`` command."""
    _setup_logging(False)
    try:
        settings = load_settings(args.settings)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(settings.to_json(), indent=2))
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    """Handle the ``resolve`` command."""
    _setup_logging(args.verbose)
    if not _check_note(args.note):
        return 1

    text = FileDocument(args.note).read()
    try:
        params = resolve_params(_element_from_args(args), text)
    except ZoomError as e:
        _log.error("%s: %s", type(e).__name__, e)
        return 1

    ref = params.reference
    annotation = params.find_size(text)
    print(f"canonical form: {ref.canonical_form}")
    print(f"base name:      {ref.base_name}")
    print(f"folder:         {ref.folder or '-'}")
    print(f"suffix:         {ref.attribute_suffix or '-'}")
    print(f"dialect:        {ref.dialect.value}")
    print(f"in table:       {'yes' if ref.is_in_table else 'no'}")
    print(f"size regex:     {params.size_match_re.pattern}")
    print(f"current size:   {annotation.value if annotation else '-'}")
    return 0


def _cmd_zoom(args: argparse.Namespace) -> int:
    """Handle the ``zoom`` command."""
    _setup_logging(args.verbose)

    if args.steps < 1:
        _log.error("--steps must be at least 1")
        return 1
    if not _check_note(args.note):
        return 1

    try:
        settings: ZoomSettings = load_settings(
            find_settings_file(args.note, args.settings)
        )
    except ValueError as e:
        _log.error("%s", e)
        return 1

    width_probe = None if args.no_probe else probe_natural_width
    session = ZoomSession(settings, width_probe=width_probe)
    element = _element_from_args(args, natural_width=args.natural_width)
    delta_y = _ZOOM_OUT_DELTA if args.out else _ZOOM_IN_DELTA

    document = _DryRunDocument(args.note) if args.dry_run else FileDocument(args.note)

    _log.debug(
        "Zooming %s in %s (%d step(s), step size %d)",
        "out" if args.out else "in", args.note, args.steps, settings.step_size,
    )
    try:
        for _ in range(args.steps):
            outcome = session.zoom(document, element, delta_y)
    except ZoomError as e:
        _log.error("%s: %s", type(e).__name__, e)
        return 1

    if isinstance(document, _DryRunDocument):
        sys.stdout.write(document.text)
    _log.info("Size: %d", outcome.new_size)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> int:
    """Main entry point."""
    parser = _build_parser()

    # Show help if no arguments provided.
    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    args = parser.parse_args()

    # No subcommand given (e.g. only --version was handled by argparse).
    if args.command is None:
        parser.print_help()
        return 0

    handlers = {
        "zoom": _cmd_zoom,
        "resolve": _cmd_resolve,
        "show-settings": _cmd_show_settings,
        "init-settings": _cmd_init_settings,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
