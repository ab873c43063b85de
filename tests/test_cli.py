"""Tests for CLI argument parsing and subcommand dispatch.

Notes are real files under ``tmp_path``; image probing is disabled with
``--no-probe`` or ``--natural-width`` so no image is read or downloaded.
"""

from __future__ import annotations

import json

import pytest

from wheelzoom.cli import _build_parser, main

from tests.conftest import app_uri


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse(argv: list[str]):
    """Parse *argv* using the CLI parser and return the namespace."""
    parser = _build_parser()
    return parser.parse_args(argv)


def _parse_fails(argv: list[str]):
    """Assert that parsing *argv* raises SystemExit (argparse error)."""
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(argv)


def _run(monkeypatch, argv: list[str]) -> int:
    monkeypatch.setattr("sys.argv", ["wheelzoom", *argv])
    return main()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestZoomArgs:
    """Argument parsing for the ``zoom`` subcommand."""

    def test_minimal(self):
        args = _parse(["zoom", "note.md", "https://x.com/i.png"])
        assert args.command == "zoom"
        assert str(args.note) == "note.md"
        assert args.src == "https://x.com/i.png"
        assert args.out is False
        assert args.steps == 1
        assert args.classes == []
        assert args.filesource is None
        assert args.settings is None
        assert args.dry_run is False

    def test_all_options(self):
        args = _parse([
            "zoom", "note.md", "app://local/a.png?1",
            "-v", "--out", "--steps", "3",
            "--class", "excalidraw-svg", "--class", "other",
            "--filesource", "Drawings/a.excalidraw.md",
            "--natural-width", "300",
            "--settings", "s.json",
            "-n",
        ])
        assert args.verbose is True
        assert args.out is True
        assert args.steps == 3
        assert args.classes == ["excalidraw-svg", "other"]
        assert args.filesource == "Drawings/a.excalidraw.md"
        assert args.natural_width == 300
        assert str(args.settings) == "s.json"
        assert args.dry_run is True

    def test_width_options_exclusive(self):
        _parse_fails(["zoom", "n.md", "x", "--natural-width", "3", "--no-probe"])

    def test_missing_src(self):
        _parse_fails(["zoom", "note.md"])


class TestMain:
    """Top-level dispatch."""

    def test_no_args_returns_zero(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["wheelzoom"])
        assert main() == 0

    def test_version(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["wheelzoom", "--version"])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 0


# ---------------------------------------------------------------------------
# zoom
# ---------------------------------------------------------------------------


class TestZoomCommand:
    """End-to-end ``zoom`` runs against files on disk."""

    def test_zoom_in_writes(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("Lorem ipsum ![[example.png]] dolor sit amet", encoding="utf-8")
        rc = _run(monkeypatch, ["zoom", str(note), app_uri("example.png"), "--no-probe"])
        assert rc == 0
        assert note.read_text(encoding="utf-8") == "Lorem ipsum ![[example.png|500]] dolor sit amet"

    def test_crlf_table_note(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_bytes(b"| h | i |\r\n|---|---|\r\n| a | ![[example.png]] |\r\n")
        rc = _run(monkeypatch, ["zoom", str(note), app_uri("example.png"), "--no-probe"])
        assert rc == 0
        assert note.read_bytes() == b"| h | i |\r\n|---|---|\r\n| a | ![[example.png\\|500]] |\r\n"

    def test_steps_and_settings(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("![[example.png|100]]", encoding="utf-8")
        (tmp_path / ".wheelzoom.json").write_text('{"stepSize": 10}', encoding="utf-8")
        rc = _run(monkeypatch, ["zoom", str(note), app_uri("example.png"), "--steps", "3", "--no-probe"])
        assert rc == 0
        assert note.read_text(encoding="utf-8") == "![[example.png|130]]"

    def test_zoom_out_floor(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        text = "![|25](https://x.com/i.png)"
        note.write_text(text, encoding="utf-8")
        rc = _run(monkeypatch, ["zoom", str(note), "https://x.com/i.png", "--out", "--no-probe"])
        assert rc == 0
        assert note.read_text(encoding="utf-8") == text

    def test_natural_width(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("![](https://x.com/i.png)", encoding="utf-8")
        rc = _run(monkeypatch, ["zoom", str(note), "https://x.com/i.png", "--natural-width", "64"])
        assert rc == 0
        assert note.read_text(encoding="utf-8") == "![|64](https://x.com/i.png)"

    def test_dry_run(self, monkeypatch, tmp_path, capsys):
        note = tmp_path / "note.md"
        note.write_text("![[example.png]]", encoding="utf-8")
        rc = _run(monkeypatch, ["zoom", str(note), app_uri("example.png"), "--no-probe", "-n"])
        assert rc == 0
        assert note.read_text(encoding="utf-8") == "![[example.png]]"
        assert capsys.readouterr().out == "![[example.png|500]]"

    def test_reference_not_found(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("nothing", encoding="utf-8")
        rc = _run(monkeypatch, ["zoom", str(note), app_uri("example.png"), "--no-probe"])
        assert rc == 1
        assert note.read_text(encoding="utf-8") == "nothing"

    def test_unsupported_source(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("![[a.png]]", encoding="utf-8")
        assert _run(monkeypatch, ["zoom", str(note), "data:xyz", "--no-probe"]) == 1

    def test_missing_note(self, monkeypatch, tmp_path):
        assert _run(monkeypatch, ["zoom", str(tmp_path / "x.md"), "https://x.com/i.png"]) == 1

    def test_invalid_steps(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("![[a.png]]", encoding="utf-8")
        assert _run(monkeypatch, ["zoom", str(note), app_uri("a.png"), "--steps", "0"]) == 1

    def test_invalid_settings(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("![[a.png]]", encoding="utf-8")
        settings = tmp_path / "bad.json"
        settings.write_text('{"stepSize": -3}', encoding="utf-8")
        rc = _run(monkeypatch, [
            "zoom", str(note), app_uri("a.png"), "--settings", str(settings), "--no-probe",
        ])
        assert rc == 1


# ---------------------------------------------------------------------------
# resolve / settings commands
# ---------------------------------------------------------------------------


class TestResolveCommand:
    """Tests for ``resolve``."""

    def test_prints_reference(self, monkeypatch, tmp_path, capsys):
        note = tmp_path / "note.md"
        note.write_text("| a | ![[img/example.png\\|ctr\\|40]] |", encoding="utf-8")
        rc = _run(monkeypatch, ["resolve", str(note), app_uri("example.png")])
        assert rc == 0
        out = capsys.readouterr().out
        assert "canonical form: img/example.png\\|ctr" in out
        assert "dialect:        wiki" in out
        assert "in table:       yes" in out
        assert "current size:   40" in out

    def test_not_found(self, monkeypatch, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("nothing", encoding="utf-8")
        assert _run(monkeypatch, ["resolve", str(note), app_uri("example.png")]) == 1


class TestSettingsCommands:
    """Tests for ``init-settings`` and ``show-settings``."""

    def test_init_then_show(self, monkeypatch, tmp_path, capsys):
        path = tmp_path / "s.json"
        assert _run(monkeypatch, ["init-settings", str(path)]) == 0
        capsys.readouterr()

        assert _run(monkeypatch, ["show-settings", "--settings", str(path)]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown == {
            "modifierKey": "AltLeft",
            "stepSize": 25,
            "initialSize": 500,
            "resizeInCanvas": False,
        }

    def test_show_unknown_key_logs_warning(self, monkeypatch, tmp_path, capsys):
        path = tmp_path / "s.json"
        path.write_text('{"zoomSpeed": 3}', encoding="utf-8")
        assert _run(monkeypatch, ["show-settings", "--settings", str(path)]) == 0
        err = capsys.readouterr().err
        assert "WARNING" in err
        assert "Ignoring unknown setting 'zoomSpeed'" in err

    def test_show_invalid(self, monkeypatch, tmp_path, capsys):
        path = tmp_path / "s.json"
        path.write_text('{"modifierKey": "Nope"}', encoding="utf-8")
        assert _run(monkeypatch, ["show-settings", "--settings", str(path)]) == 1
        assert "modifierKey" in capsys.readouterr().err
