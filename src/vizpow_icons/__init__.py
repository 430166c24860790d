"""Tools for importing 8x8 pixel icons into the vizPow LED matrix firmware.

The :class:`~vizpow_icons.importer.IconImporter` class runs the whole
pipeline and can be imported directly::

    from vizpow_icons import IconImporter, ImporterConfig

The lower level helpers for parsing WLED payloads, rendering ``CRGB`` tables
and patching the firmware sources are exported alongside it.
"""

from __future__ import annotations

from .colors import AliasTable, PixelGrid, RGBColor
from .errors import (
    DuplicateError,
    IconImportError,
    InputError,
    MarkerNotFoundError,
    ParseError,
    ShapeError,
    SizeError,
)
from .importer import IconImporter, ImporterConfig, ImportResult
from .payload import load_payload, parse_payload, resolve_payload
from .registry import patch_sprites, patch_web_server
from .render import IconRecord, render_icon

__all__ = [
    "AliasTable",
    "PixelGrid",
    "RGBColor",
    "IconImportError",
    "InputError",
    "ParseError",
    "ShapeError",
    "SizeError",
    "MarkerNotFoundError",
    "DuplicateError",
    "IconImporter",
    "ImporterConfig",
    "ImportResult",
    "IconRecord",
    "render_icon",
    "load_payload",
    "parse_payload",
    "resolve_payload",
    "patch_sprites",
    "patch_web_server",
]

__version__ = "0.1.0"
