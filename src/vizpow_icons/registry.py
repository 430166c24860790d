"""Splice a rendered icon into ``emoji_sprites.h`` and ``web_server.h``.

Both files are treated as plain text with a handful of named anchors.  Every
anchor is located with a regular expression and the edit is spliced in at the
matched span; a missing anchor raises :class:`MarkerNotFoundError` instead of
guessing a position.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import re
from typing import Optional

from .errors import DuplicateError, MarkerNotFoundError
from .render import IconRecord

LOGGER = logging.getLogger(__name__)

ICON_COUNT_MARKER = "// ==================== ICON COUNT ===================="

_ICON_COUNT_PATTERN = re.compile(r"#define ICON_COUNT (\d+)")
_ALL_ICONS_PATTERN = re.compile(
    r"const CRGB\s*\*\s*(?:const\s+)?ALL_ICONS\[ICON_COUNT\](?:\s+PROGMEM)?\s*=\s*\{(?P<body>[^}]+)\}"
)
_ICON_NAMES_PATTERN = re.compile(
    r"const char\s*\*\s*(?:const\s+)?ICON_NAMES\[ICON_COUNT\](?:\s+PROGMEM)?\s*=\s*\{(?P<body>[^}]+)\}"
)
_PROGMEM_TABLE_PATTERN = re.compile(r"const CRGB ICON_\w+\[\d+\]\s+PROGMEM")

_EMOJI_NAMES_PATTERN = re.compile(r"const emojiNames = \[(?P<body>[^\]]+)\]")
_ICON_TOTAL_PATTERN = re.compile(r"(?P<prefix>//[^\n]*\()(?P<count>\d+)(?P<suffix> icons\))")


@dataclass(frozen=True)
class SpritesUpdate:
    """Result of registering an icon in the sprites header."""

    content: str
    identifier: str
    display_name: str
    old_count: int
    new_count: int


@dataclass(frozen=True)
class WebServerUpdate:
    """Result of registering a display name in the web UI source."""

    content: str
    display_name: str
    duplicate_name: bool
    old_count: Optional[int] = None
    new_count: Optional[int] = None


def _describe(path: Optional[Path], default: str) -> str:
    return path.name if path is not None else default


def _append_element(
    content: str,
    pattern: re.Pattern[str],
    element: str,
    *,
    trailer: str,
    marker: str,
    path: Optional[Path],
    default_name: str,
) -> str:
    match = pattern.search(content)
    if match is None:
        raise MarkerNotFoundError(
            f"Could not find {marker} in {_describe(path, default_name)}",
            marker=marker,
            path=path,
        )
    start, end = match.span("body")
    body = match.group("body").rstrip()
    return f"{content[:start]}{body}, {element}{trailer}{content[end:]}"


def uses_progmem(content: str) -> bool:
    """Return ``True`` when existing colour tables are declared ``PROGMEM``."""

    return _PROGMEM_TABLE_PATTERN.search(content) is not None


def ensure_unregistered(
    content: str,
    identifier: str,
    *,
    path: Optional[Path] = None,
    whole_word: bool = False,
) -> None:
    """Raise :class:`DuplicateError` when *identifier* already occurs in *content*.

    Any occurrence counts, so ``ICON_STAR`` is taken once ``ICON_STARFISH``
    exists.  Pass ``whole_word=True`` to only match complete identifiers.
    """

    if whole_word:
        found = re.search(rf"\b{re.escape(identifier)}\b", content) is not None
    else:
        found = identifier in content
    if found:
        raise DuplicateError(
            f"Icon {identifier} already exists in {_describe(path, 'emoji_sprites.h')}",
            identifier=identifier,
        )


def patch_sprites(
    content: str,
    record: IconRecord,
    code: str,
    *,
    path: Optional[Path] = None,
) -> SpritesUpdate:
    """Return *content* with *code* declared and *record* appended to the tables."""

    name = "emoji_sprites.h"
    ensure_unregistered(content, record.identifier, path=path)

    if ICON_COUNT_MARKER not in content:
        raise MarkerNotFoundError(
            f"Could not find ICON COUNT marker in {_describe(path, name)}",
            marker=ICON_COUNT_MARKER,
            path=path,
        )
    content = content.replace(ICON_COUNT_MARKER, f"{code}\n{ICON_COUNT_MARKER}", 1)

    count_match = _ICON_COUNT_PATTERN.search(content)
    if count_match is None:
        raise MarkerNotFoundError(
            f"Could not find ICON_COUNT in {_describe(path, name)}",
            marker="#define ICON_COUNT",
            path=path,
        )
    old_count = int(count_match.group(1))
    new_count = old_count + 1
    start, end = count_match.span()
    content = f"{content[:start]}#define ICON_COUNT {new_count}{content[end:]}"

    content = _append_element(
        content,
        _ALL_ICONS_PATTERN,
        record.identifier,
        trailer="\n",
        marker="ALL_ICONS array",
        path=path,
        default_name=name,
    )
    content = _append_element(
        content,
        _ICON_NAMES_PATTERN,
        f'"{record.display_name}"',
        trailer="\n",
        marker="ICON_NAMES array",
        path=path,
        default_name=name,
    )
    return SpritesUpdate(
        content=content,
        identifier=record.identifier,
        display_name=record.display_name,
        old_count=old_count,
        new_count=new_count,
    )


def patch_web_server(
    content: str,
    display_name: str,
    *,
    path: Optional[Path] = None,
) -> WebServerUpdate:
    """Return *content* with *display_name* appended to ``emojiNames``."""

    name = "web_server.h"
    if _EMOJI_NAMES_PATTERN.search(content) is None:
        raise MarkerNotFoundError(
            f"Could not find emojiNames array in {_describe(path, name)}",
            marker="emojiNames array",
            path=path,
        )

    quoted = f'"{display_name}"'
    duplicate = quoted in content
    if duplicate:
        LOGGER.warning(
            "Warning: %s may already exist in %s emojiNames", quoted, _describe(path, name)
        )

    content = _append_element(
        content,
        _EMOJI_NAMES_PATTERN,
        quoted,
        trailer="",
        marker="emojiNames array",
        path=path,
        default_name=name,
    )

    old_count: Optional[int] = None
    new_count: Optional[int] = None
    total_match = _ICON_TOTAL_PATTERN.search(content)
    if total_match is not None:
        old_count = int(total_match.group("count"))
        new_count = old_count + 1
        start, end = total_match.span("count")
        content = f"{content[:start]}{new_count}{content[end:]}"
    else:
        LOGGER.debug("No icon total comment found in %s", _describe(path, name))

    return WebServerUpdate(
        content=content,
        display_name=display_name,
        duplicate_name=duplicate,
        old_count=old_count,
        new_count=new_count,
    )


def read_artifact(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_artifact(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")
    LOGGER.debug("Wrote %d characters to %s", len(content), path)


__all__ = [
    "ICON_COUNT_MARKER",
    "SpritesUpdate",
    "WebServerUpdate",
    "ensure_unregistered",
    "patch_sprites",
    "patch_web_server",
    "read_artifact",
    "uses_progmem",
    "write_artifact",
]
