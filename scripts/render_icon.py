#!/usr/bin/env python3
"""Preview the ``CRGB`` colour table for a WLED payload without editing firmware."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Optional, Sequence

# Ensure local sources are importable when the package isn't installed.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from vizpow_icons import AliasTable, IconImportError, IconRecord, load_payload, render_icon


def build_code(
    name: str,
    payload: Optional[str],
    *,
    aliases: Optional[AliasTable] = None,
    progmem: bool = False,
) -> str:
    """Return the declaration that the importer would add for *name*."""

    grid = load_payload(payload)
    return render_icon(IconRecord.from_name(name), grid, aliases, progmem=progmem)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Render a WLED pixel export as a CRGB colour table."
    )
    parser.add_argument("name", help="Icon name used for the comment and identifier.")
    parser.add_argument(
        "payload",
        nargs="?",
        help="WLED JSON or a path to a JSON file. Reads the clipboard when omitted.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Optional file path to write. Defaults to stdout.",
    )
    parser.add_argument(
        "--header",
        type=Path,
        help="Use the colour #defines of this emoji_sprites.h instead of the built-in table.",
    )
    parser.add_argument(
        "--progmem",
        action="store_true",
        help="Declare the table PROGMEM, as the ESP8266 firmware does.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")

    try:
        aliases = None
        if args.header is not None:
            aliases = AliasTable.from_header(args.header.read_text(encoding="utf-8"))
        code = build_code(args.name, args.payload, aliases=aliases, progmem=args.progmem)
    except (IconImportError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.output is None:
        print(code, end="")
    else:
        args.output.write_text(code, encoding="utf-8")

    return 0


if __name__ == "__main__":  # pragma: no cover - manual usage
    raise SystemExit(main())
