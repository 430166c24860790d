"""Render an icon as a ``CRGB`` colour table declaration."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import List, Optional

from .colors import PIXEL_COUNT, AliasTable, PixelGrid
from .errors import InputError

IDENTIFIER_PREFIX = "ICON_"

_NON_IDENTIFIER = re.compile(r"[^A-Z0-9]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class IconRecord:
    """Names under which an icon is registered in the firmware sources."""

    name: str
    identifier: str
    display_name: str

    @classmethod
    def from_name(cls, name: str) -> "IconRecord":
        if not name or not name.strip():
            raise InputError("An icon name is required.")
        identifier = IDENTIFIER_PREFIX + _NON_IDENTIFIER.sub("_", name.upper())
        display_name = _WHITESPACE.sub("", name)
        return cls(name=name, identifier=identifier, display_name=display_name)


def render_icon(
    record: IconRecord,
    grid: PixelGrid,
    aliases: Optional[AliasTable] = None,
    *,
    progmem: bool = False,
) -> str:
    """Return the C++ declaration for *grid*, one row of eight tokens per line."""

    table = aliases if aliases is not None else AliasTable()
    qualifier = " PROGMEM" if progmem else ""
    lines: List[str] = [
        f"// {record.name}",
        f"const CRGB {record.identifier}[{PIXEL_COUNT}]{qualifier} = {{",
    ]
    rows = list(grid.iter_rows())
    for index, row in enumerate(rows):
        tokens = ", ".join(table.token(colour) for colour in row)
        # Rows end in a bare comma with no trailing space, matching the
        # hand-written tables in emoji_sprites.h.
        separator = "," if index < len(rows) - 1 else ""
        lines.append(f"  {tokens}{separator}")
    lines.append("};")
    return "\n".join(lines) + "\n"


__all__ = ["IDENTIFIER_PREFIX", "IconRecord", "render_icon"]
