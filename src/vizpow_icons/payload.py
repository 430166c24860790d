"""Acquire and decode the WLED-style JSON pixel payload for an icon."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
import shutil
import subprocess
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .colors import PIXEL_COUNT, REQUIRED_VALUES, PixelGrid
from .errors import InputError, ParseError, ShapeError, SizeError

LOGGER = logging.getLogger(__name__)

# Tried in order; only commands present on PATH are attempted.
CLIPBOARD_COMMANDS: Tuple[Tuple[str, ...], ...] = (
    ("pbpaste",),
    ("wl-paste", "--no-newline"),
    ("xclip", "-selection", "clipboard", "-o"),
    ("xsel", "--clipboard", "--output"),
    ("powershell", "-NoProfile", "-Command", "Get-Clipboard"),
)
_CLIPBOARD_TIMEOUT = 5.0


@dataclass(frozen=True)
class PayloadSource:
    """Raw payload text together with a description of where it came from."""

    text: str
    origin: str


def _is_existing_file(candidate: str) -> bool:
    try:
        return Path(candidate).is_file()
    except (OSError, ValueError):
        # Long JSON literals and embedded NULs are not valid paths.
        return False


def read_clipboard(commands: Sequence[Sequence[str]] = CLIPBOARD_COMMANDS) -> str:
    """Return the text content of the system clipboard.

    Raises :class:`InputError` when no clipboard utility is available or the
    clipboard is empty.
    """

    attempted: List[str] = []
    for command in commands:
        executable = shutil.which(command[0])
        if executable is None:
            continue
        attempted.append(command[0])
        try:
            completed = subprocess.run(
                [executable, *command[1:]],
                check=True,
                capture_output=True,
                text=True,
                timeout=_CLIPBOARD_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.debug("Clipboard command %s failed: %s", command[0], exc)
            continue
        if completed.stdout.strip():
            return completed.stdout
        LOGGER.debug("Clipboard command %s returned no text", command[0])

    if not attempted:
        raise InputError(
            "No JSON provided and no clipboard utility was found. "
            "Provide JSON as the second argument or install pbpaste, wl-paste, xclip or xsel."
        )
    raise InputError(
        "No JSON provided and could not read from clipboard. "
        "Provide JSON as the second argument or copy it to the clipboard first."
    )


def resolve_payload(
    argument: Optional[str],
    *,
    clipboard_reader: Callable[[], str] = read_clipboard,
) -> PayloadSource:
    """Return the payload text for *argument*.

    An argument naming an existing file is read from disk, any other argument
    is used as literal JSON, and a missing argument falls back to the
    clipboard.
    """

    if not argument:
        text = clipboard_reader()
        origin = "clipboard"
        LOGGER.info("Read JSON from clipboard")
    else:
        text = argument
        origin = "argument"

    if _is_existing_file(text.strip()):
        path = Path(text.strip())
        try:
            contents = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InputError(f"Could not read payload file {path}: {exc}") from exc
        LOGGER.info("Read JSON from file: %s", path)
        return PayloadSource(text=contents, origin=str(path))
    return PayloadSource(text=text, origin=origin)


def _extract_values(data: Any) -> Any:
    if isinstance(data, dict):
        segment = data.get("seg")
        if isinstance(segment, dict) and "i" in segment:
            return segment["i"]
        if "i" in data:
            return data["i"]
    elif isinstance(data, list):
        return data
    raise ShapeError("No pixel data found in JSON. Expected seg.i, i, or flat array.")


def parse_payload(text: str) -> PixelGrid:
    """Decode *text* into a :class:`PixelGrid`.

    Accepted layouts are ``{"seg": {"i": [...]}}``, ``{"i": [...]}`` and a bare
    ``[...]`` of flat ``r, g, b`` values.
    """

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc

    values = _extract_values(data)
    if not isinstance(values, list):
        raise ShapeError(
            f"Pixel data must be a flat array of numbers, got {type(values).__name__}."
        )
    if len(values) < REQUIRED_VALUES:
        raise SizeError(
            f"Expected {REQUIRED_VALUES} values ({PIXEL_COUNT} pixels), got {len(values)}",
            count=len(values),
        )
    if len(values) > REQUIRED_VALUES:
        LOGGER.debug("Ignoring %d values past the first %d", len(values) - REQUIRED_VALUES, REQUIRED_VALUES)

    try:
        return PixelGrid.from_flat(values[:REQUIRED_VALUES])
    except ValueError as exc:
        index = _first_invalid_index(values)
        location = f" at index {index}" if index is not None else ""
        raise ShapeError(f"Invalid pixel value{location}: {exc}") from exc


def _first_invalid_index(values: Sequence[Any]) -> Optional[int]:
    for index, value in enumerate(values[:REQUIRED_VALUES]):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
            return index
    return None


def load_payload(argument: Optional[str], **kwargs: Any) -> PixelGrid:
    """Resolve *argument* and parse it in one step."""

    return parse_payload(resolve_payload(argument, **kwargs).text)


__all__ = [
    "CLIPBOARD_COMMANDS",
    "PayloadSource",
    "load_payload",
    "parse_payload",
    "read_clipboard",
    "resolve_payload",
]
