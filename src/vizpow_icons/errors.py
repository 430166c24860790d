"""Exceptions raised while importing an icon into the firmware sources."""

from __future__ import annotations

from pathlib import Path


class IconImportError(RuntimeError):
    """Base class for every failure that aborts an icon import."""


class InputError(IconImportError):
    """Raised when no payload can be obtained from a file, argument or clipboard."""


class ParseError(IconImportError):
    """Raised when the payload is not valid JSON."""


class ShapeError(IconImportError):
    """Raised when the payload does not contain pixel data in a known layout."""


class SizeError(IconImportError):
    """Raised when the payload holds fewer values than a full 8x8 icon needs."""

    def __init__(self, message: str, *, count: int) -> None:
        super().__init__(message)
        self.count = count


class MarkerNotFoundError(IconImportError):
    """Raised when an expected anchor is missing from a target source file."""

    def __init__(self, message: str, *, marker: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.marker = marker
        self.path = path


class DuplicateError(IconImportError):
    """Raised when the icon identifier is already registered."""

    def __init__(self, message: str, *, identifier: str) -> None:
        super().__init__(message)
        self.identifier = identifier


__all__ = [
    "IconImportError",
    "InputError",
    "ParseError",
    "ShapeError",
    "SizeError",
    "MarkerNotFoundError",
    "DuplicateError",
]
