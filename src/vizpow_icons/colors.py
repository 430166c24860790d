"""Colour primitives and the alias table used to keep sprite tables compact."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

LOGGER = logging.getLogger(__name__)

GRID_WIDTH = 8
GRID_HEIGHT = 8
PIXEL_COUNT = GRID_WIDTH * GRID_HEIGHT
CHANNELS_PER_PIXEL = 3
REQUIRED_VALUES = PIXEL_COUNT * CHANNELS_PER_PIXEL

DEFAULT_TOLERANCE = 5

# Mirrors the #define shortcuts at the top of emoji_sprites.h.  Order matters
# for fuzzy matching: the first alias within tolerance wins.
DEFAULT_ALIASES: Tuple[Tuple[str, str], ...] = (
    ("0,0,0", "___"),
    ("255,0,0", "RED"),
    ("255,128,0", "ORG"),
    ("255,255,0", "YEL"),
    ("0,255,0", "GRN"),
    ("0,255,255", "CYN"),
    ("0,0,255", "BLU"),
    ("128,0,255", "PUR"),
    ("255,0,128", "PNK"),
    ("255,255,255", "WHT"),
    ("128,128,128", "GRY"),
    ("64,64,64", "DGR"),
    ("139,69,19", "BRN"),
    ("255,200,150", "SKN"),
    ("180,0,0", "DRD"),
    ("0,180,0", "LGR"),
    ("0,0,180", "DBL"),
    ("249,56,1", "GHO"),
    ("1,119,251", "EYE"),
    ("244,59,2", "SHY"),
    ("175,6,0", "SHD"),
)

_CRGB_DEFINE_PATTERN = re.compile(
    r"^\s*#define\s+([A-Za-z_][A-Za-z0-9_]*)\s+CRGB\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)",
    re.MULTILINE,
)
_BLACK_DEFINE_PATTERN = re.compile(
    r"^\s*#define\s+([A-Za-z_][A-Za-z0-9_]*)\s+CRGB::Black\b", re.MULTILINE
)


def _ensure_byte(value: object, description: str) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{description} must be an integer")
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{description} must fit in a single byte (0-255).")
    return value


@dataclass(frozen=True)
class RGBColor:
    """Immutable representation of a single pixel colour."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue"):
            object.__setattr__(self, name, _ensure_byte(getattr(self, name), "colour channel"))

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    @property
    def key(self) -> str:
        """Return the ``"r,g,b"`` key used by the alias table."""

        return f"{self.red},{self.green},{self.blue}"

    @classmethod
    def from_iterable(cls, values: Sequence[int]) -> "RGBColor":
        if len(values) != 3:
            raise ValueError(
                "An RGB colour requires exactly three values (red, green, blue)."
            )
        red, green, blue = values
        return cls(red=red, green=green, blue=blue)

    @classmethod
    def from_key(cls, key: str) -> "RGBColor":
        parts = key.split(",")
        try:
            values = [int(part.strip()) for part in parts]
        except ValueError as exc:
            raise ValueError(f"Invalid colour key {key!r}") from exc
        return cls.from_iterable(values)

    def within(self, other: "RGBColor", tolerance: int) -> bool:
        return (
            abs(self.red - other.red) <= tolerance
            and abs(self.green - other.green) <= tolerance
            and abs(self.blue - other.blue) <= tolerance
        )

    def as_crgb(self) -> str:
        return f"CRGB({self.red},{self.green},{self.blue})"

    def __iter__(self) -> Iterator[int]:
        yield from (self.red, self.green, self.blue)


@dataclass(frozen=True)
class PixelGrid:
    """Row-major 8x8 grid of colours describing one icon."""

    pixels: Tuple[RGBColor, ...]

    def __post_init__(self) -> None:
        if len(self.pixels) != PIXEL_COUNT:
            raise ValueError(
                f"An icon requires exactly {PIXEL_COUNT} pixels, got {len(self.pixels)}."
            )

    @classmethod
    def from_flat(cls, values: Sequence[int]) -> "PixelGrid":
        """Build a grid from the first 192 values of a flat ``r,g,b`` sequence.

        Values past the first full grid are ignored.
        """

        if len(values) < REQUIRED_VALUES:
            raise ValueError(
                f"Expected {REQUIRED_VALUES} values ({PIXEL_COUNT} pixels), got {len(values)}"
            )
        pixels = tuple(
            RGBColor.from_iterable(values[index : index + CHANNELS_PER_PIXEL])
            for index in range(0, REQUIRED_VALUES, CHANNELS_PER_PIXEL)
        )
        return cls(pixels=pixels)

    def __len__(self) -> int:
        return len(self.pixels)

    def __getitem__(self, index: int) -> RGBColor:
        return self.pixels[index]

    def pixel(self, row: int, column: int) -> RGBColor:
        return self.pixels[row * GRID_WIDTH + column]

    def iter_rows(self) -> Iterator[Tuple[RGBColor, ...]]:
        for row in range(GRID_HEIGHT):
            start = row * GRID_WIDTH
            yield self.pixels[start : start + GRID_WIDTH]


class AliasTable:
    """Ordered mapping from exact colours to short mnemonic tokens.

    Lookups try an exact match first and then fall back to the first entry,
    in table order, whose channels are all within ``tolerance`` of the pixel.
    The fallback is first-hit, not nearest-match: overlapping aliases resolve
    according to their position in the table.
    """

    def __init__(
        self,
        aliases: Mapping[str, str] | Iterable[Tuple[str, str]] = DEFAULT_ALIASES,
        *,
        tolerance: int = DEFAULT_TOLERANCE,
    ) -> None:
        if tolerance < 0:
            raise ValueError("Alias tolerance cannot be negative.")
        items = aliases.items() if isinstance(aliases, Mapping) else aliases
        self._entries: List[Tuple[RGBColor, str]] = []
        self._exact: dict[Tuple[int, int, int], str] = {}
        for key, token in items:
            colour = RGBColor.from_key(key)
            if colour.as_tuple() in self._exact:
                LOGGER.debug("Ignoring duplicate alias %s for %s", token, key)
                continue
            self._entries.append((colour, token))
            self._exact[colour.as_tuple()] = token
        self.tolerance = tolerance

    @classmethod
    def from_header(cls, text: str, *, tolerance: int = DEFAULT_TOLERANCE) -> "AliasTable":
        """Build a table from the ``#define XXX CRGB(r,g,b)`` lines of a header."""

        found: List[Tuple[int, str, str]] = []
        for match in _BLACK_DEFINE_PATTERN.finditer(text):
            found.append((match.start(), "0,0,0", match.group(1)))
        for match in _CRGB_DEFINE_PATTERN.finditer(text):
            name, red, green, blue = match.groups()
            found.append((match.start(), f"{int(red)},{int(green)},{int(blue)}", name))
        found.sort()
        return cls(((key, token) for _, key, token in found), tolerance=tolerance)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[RGBColor, str]]:
        return iter(self._entries)

    def lookup(self, colour: RGBColor) -> Optional[str]:
        """Return the alias for *colour*, or ``None`` when nothing is close enough."""

        exact = self._exact.get(colour.as_tuple())
        if exact is not None:
            return exact
        for candidate, token in self._entries:
            if colour.within(candidate, self.tolerance):
                return token
        return None

    def token(self, colour: RGBColor) -> str:
        """Return the source token for *colour*: an alias or a ``CRGB(...)`` literal."""

        alias = self.lookup(colour)
        if alias is not None:
            return alias
        return colour.as_crgb()


__all__ = [
    "AliasTable",
    "DEFAULT_ALIASES",
    "DEFAULT_TOLERANCE",
    "GRID_HEIGHT",
    "GRID_WIDTH",
    "PIXEL_COUNT",
    "PixelGrid",
    "REQUIRED_VALUES",
    "RGBColor",
]
