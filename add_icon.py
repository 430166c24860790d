"""Backward compatible entry point for the old ``add-icon`` script."""

from __future__ import annotations

from typing import Sequence

from vizpow_icons.importer import main as importer_main

__all__ = ["main"]


def main(argv: Sequence[str] | None = None) -> int:
    """Import an icon into the firmware sources below the current directory."""

    return importer_main(argv)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
