"""Zoom settings: defaults overlaid with persisted JSON overrides.

Settings are an immutable :class:`ZoomSettings` value built once at
startup and passed explicitly to the orchestrator.  The persisted form is
a flat JSON object with camelCase keys::

    {
      "modifierKey": "AltLeft",
      "stepSize": 25,
      "initialSize": 500,
      "resizeInCanvas": false
    }

Keys missing from the file keep their defaults; unknown keys are logged
and ignored.  Also provides :func:`generate_settings_file` to scaffold a
file with every default spelled out.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

_log = logging.getLogger("settings")

AUTO_SETTINGS_FILENAME = ".wheelzoom.json"
"""Filename auto-discovered next to each document (when no explicit ``--settings``)."""


class ModifierKey(Enum):
    """Physical key that must be held for wheel zoom (``KeyboardEvent.code``)."""

    ALT = "AltLeft"
    CTRL = "ControlLeft"
    SHIFT = "ShiftLeft"
    ALT_RIGHT = "AltRight"
    CTRL_RIGHT = "ControlRight"
    SHIFT_RIGHT = "ShiftRight"

    @property
    def is_shift(self) -> bool:
        """Shift keys keep normal scrolling available (horizontal scroll)."""
        return self in (ModifierKey.SHIFT, ModifierKey.SHIFT_RIGHT)


@dataclass(frozen=True)
class ZoomSettings:
    """Effective zoom configuration."""

    modifier_key: ModifierKey = ModifierKey.ALT
    step_size: int = 25
    """Pixels added or removed per wheel notch."""
    initial_size: int = 500
    """Width given to an image that has no size annotation yet."""
    resize_in_canvas: bool = False
    """Also resize canvas nodes while the modifier key is held."""

    def __post_init__(self) -> None:
        for name in ("step_size", "initial_size"):
            value = getattr(self, name)
            # bool is an int subclass; reject it explicitly.
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
        if not isinstance(self.resize_in_canvas, bool):
            raise ValueError(
                f"resize_in_canvas must be a boolean, got {self.resize_in_canvas!r}"
            )
        if not isinstance(self.modifier_key, ModifierKey):
            raise ValueError(f"modifier_key must be a ModifierKey, got {self.modifier_key!r}")

    def replace(self, **changes: object) -> ZoomSettings:
        """Return a copy with *changes* applied (validated again)."""
        return dataclasses.replace(self, **changes)

    def to_json(self) -> dict:
        """Persisted (camelCase) representation."""
        return {
            _FIELD_TO_KEY[f.name]: _encode(getattr(self, f.name))
            for f in dataclasses.fields(self)
        }


DEFAULT_SETTINGS = ZoomSettings()

_KEY_TO_FIELD: dict[str, str] = {
    "modifierKey": "modifier_key",
    "stepSize": "step_size",
    "initialSize": "initial_size",
    "resizeInCanvas": "resize_in_canvas",
}
"""Persisted key → :class:`ZoomSettings` field name."""

_FIELD_TO_KEY = {v: k for k, v in _KEY_TO_FIELD.items()}


def _encode(value: object) -> object:
    return value.value if isinstance(value, Enum) else value


def settings_from_dict(data: dict) -> ZoomSettings:
    """Overlay a persisted settings object on the defaults.

    Raises:
        ValueError: On an unknown modifier key, a wrong value type, or a
            negative size.
    """
    changes: dict[str, object] = {}
    for key, value in data.items():
        field_name = _KEY_TO_FIELD.get(key)
        if field_name is None:
            _log.warning("Ignoring unknown setting %r", key)
            continue
        if field_name == "modifier_key":
            try:
                value = ModifierKey(value)
            except ValueError:
                valid = ", ".join(k.value for k in ModifierKey)
                raise ValueError(
                    f"Unknown modifierKey {value!r} (expected one of: {valid})"
                ) from None
        changes[field_name] = value
    return DEFAULT_SETTINGS.replace(**changes)


def load_settings(path: Path | None) -> ZoomSettings:
    """Load settings from *path*, falling back to defaults.

    A ``None`` path or a missing file yields :data:`DEFAULT_SETTINGS`.

    Raises:
        ValueError: When the file is not a JSON object or holds invalid
            values.
    """
    if path is None or not path.is_file():
        return DEFAULT_SETTINGS
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")
    settings = settings_from_dict(data)
    _log.debug("Loaded settings from %s: %s", path, settings)
    return settings


def save_settings(settings: ZoomSettings, path: Path) -> None:
    """Persist *settings* as a camelCase JSON object."""
    path.write_text(
        json.dumps(settings.to_json(), indent=2) + "\n", encoding="utf-8",
    )


def generate_settings_file(path: Path) -> None:
    """Write a settings file containing every default value."""
    save_settings(DEFAULT_SETTINGS, path)


def find_settings_file(document: Path, explicit: Path | None = None) -> Path | None:
    """Return the settings file that applies to *document*.

    The explicit path wins; otherwise ``.wheelzoom.json`` next to the
    document is used when present.
    """
    if explicit is not None:
        return explicit
    auto_path = document.parent / AUTO_SETTINGS_FILENAME
    return auto_path if auto_path.is_file() else None
