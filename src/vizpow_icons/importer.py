"""Import an 8x8 icon into the vizPow firmware sources.

The importer converts a WLED JSON pixel export into a ``CRGB`` colour table,
adds it to ``emoji_sprites.h`` (declaration, ``ICON_COUNT``, ``ALL_ICONS`` and
``ICON_NAMES``) and registers the display name in the ``emojiNames`` list of
``web_server.h``.  The firmware still has to be rebuilt and flashed afterwards.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from .colors import AliasTable, PixelGrid
from .errors import IconImportError
from .payload import parse_payload, read_clipboard, resolve_payload
from .registry import (
    SpritesUpdate,
    WebServerUpdate,
    patch_sprites,
    patch_web_server,
    read_artifact,
    uses_progmem,
    write_artifact,
)
from .render import IconRecord, render_icon

LOGGER = logging.getLogger(__name__)

DEFAULT_FIRMWARE = "vizpow"
SPRITES_FILENAME = "emoji_sprites.h"
WEB_SERVER_FILENAME = "web_server.h"

ALIAS_SOURCES = ("builtin", "header")

USAGE = """
Usage: vizpow-add-icon <name> [wled-json-or-file]

Examples:
  vizpow-add-icon "Shy Guy"              # reads JSON from clipboard
  vizpow-add-icon "Mario" ./mario.json   # reads JSON from file

The WLED JSON should contain 64 pixels (192 RGB values) in one of these formats:
  - {"seg":{"i":[r,g,b,r,g,b,...]}}
  - {"i":[r,g,b,r,g,b,...]}
  - [r,g,b,r,g,b,...]
"""


@dataclass(frozen=True)
class ImporterConfig:
    """Locations of the two target sources and how to render into them."""

    sprites_path: Path
    web_server_path: Path
    alias_source: str = "builtin"
    aliases: Optional[AliasTable] = field(default=None, compare=False)
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.alias_source not in ALIAS_SOURCES:
            raise ValueError(
                f"Unknown alias source {self.alias_source!r}; expected one of {', '.join(ALIAS_SOURCES)}"
            )

    @classmethod
    def for_project(
        cls,
        root: str | Path,
        firmware: str = DEFAULT_FIRMWARE,
        **kwargs,
    ) -> "ImporterConfig":
        firmware_dir = Path(root) / firmware
        return cls(
            sprites_path=firmware_dir / SPRITES_FILENAME,
            web_server_path=firmware_dir / WEB_SERVER_FILENAME,
            **kwargs,
        )


@dataclass(frozen=True)
class ImportResult:
    record: IconRecord
    code: str
    sprites: SpritesUpdate
    web_server: WebServerUpdate
    written: bool

    @property
    def old_count(self) -> int:
        return self.sprites.old_count

    @property
    def new_count(self) -> int:
        return self.sprites.new_count


class IconImporter:
    """Run the parse, render and patch pipeline for a single icon."""

    def __init__(self, config: ImporterConfig) -> None:
        self._config = config

    @property
    def config(self) -> ImporterConfig:
        return self._config

    def _alias_table(self, sprites_content: str) -> AliasTable:
        if self._config.aliases is not None:
            return self._config.aliases
        if self._config.alias_source == "header":
            table = AliasTable.from_header(sprites_content)
            if len(table):
                LOGGER.debug("Loaded %d colour aliases from %s", len(table), self._config.sprites_path)
                return table
            LOGGER.warning(
                "No colour aliases found in %s; using the built-in table",
                self._config.sprites_path,
            )
        return AliasTable()

    def import_icon(self, name: str, grid: PixelGrid) -> ImportResult:
        record = IconRecord.from_name(name)
        config = self._config

        sprites_content = read_artifact(config.sprites_path)
        aliases = self._alias_table(sprites_content)
        code = render_icon(record, grid, aliases, progmem=uses_progmem(sprites_content))
        sprites = patch_sprites(sprites_content, record, code, path=config.sprites_path)

        if config.dry_run:
            web_server = patch_web_server(
                read_artifact(config.web_server_path),
                record.display_name,
                path=config.web_server_path,
            )
            LOGGER.info("Dry run: rendered %s\n%s", record.identifier, code)
            LOGGER.info("Dry run: ICON_COUNT would change %s -> %s", sprites.old_count, sprites.new_count)
            LOGGER.info("Dry run: no files were written")
            return ImportResult(record, code, sprites, web_server, written=False)

        write_artifact(config.sprites_path, sprites.content)
        LOGGER.info("Updated %s:", config.sprites_path.name)
        LOGGER.info("  - Added %s definition", record.identifier)
        LOGGER.info("  - Updated ICON_COUNT: %s -> %s", sprites.old_count, sprites.new_count)
        LOGGER.info("  - Added to ALL_ICONS array")
        LOGGER.info('  - Added "%s" to ICON_NAMES array', record.display_name)
        LOGGER.info("")

        web_server = patch_web_server(
            read_artifact(config.web_server_path),
            record.display_name,
            path=config.web_server_path,
        )
        write_artifact(config.web_server_path, web_server.content)
        LOGGER.info("Updated %s:", config.web_server_path.name)
        LOGGER.info('  - Added "%s" to emojiNames array', record.display_name)
        if web_server.new_count is not None:
            LOGGER.info("  - Updated icon total: %s -> %s", web_server.old_count, web_server.new_count)

        return ImportResult(record, code, sprites, web_server, written=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vizpow-add-icon",
        description="Add an 8x8 WLED pixel export to the vizPow firmware icon tables.",
    )
    parser.add_argument("name", nargs="?", help="Display name of the icon, e.g. 'Shy Guy'.")
    parser.add_argument(
        "payload",
        nargs="?",
        help="WLED JSON or a path to a JSON file. Reads the clipboard when omitted.",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Project root containing the firmware directories (default: current directory).",
    )
    parser.add_argument(
        "--firmware",
        default=DEFAULT_FIRMWARE,
        help=f"Firmware directory below the root (default: {DEFAULT_FIRMWARE}).",
    )
    parser.add_argument("--sprites", type=Path, default=None, help="Explicit path to emoji_sprites.h.")
    parser.add_argument("--web-server", type=Path, default=None, help="Explicit path to web_server.h.")
    parser.add_argument(
        "--aliases",
        choices=ALIAS_SOURCES,
        default="builtin",
        help="Colour alias table: the built-in shortcuts or the #defines found in emoji_sprites.h.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render and validate the edits without writing either file.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (e.g. INFO, DEBUG).",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    clipboard_reader: Callable[[], str] = read_clipboard,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.name is None:
        print(USAGE)
        return 1

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(message)s",
    )

    config = ImporterConfig.for_project(
        args.root,
        args.firmware,
        alias_source=args.aliases,
        dry_run=args.dry_run,
    )
    if args.sprites is not None:
        config = replace(config, sprites_path=args.sprites)
    if args.web_server is not None:
        config = replace(config, web_server_path=args.web_server)

    try:
        source = resolve_payload(args.payload, clipboard_reader=clipboard_reader)
        LOGGER.info('\nAdding icon: "%s"\n', args.name)
        grid = parse_payload(source.text)
        LOGGER.info("Parsed %s pixels from JSON\n", len(grid))
        result = IconImporter(config).import_icon(args.name, grid)
    except (IconImportError, OSError) as exc:
        LOGGER.error("Error: %s", exc)
        return 1

    if result.written:
        LOGGER.info('\nDone! Icon "%s" has been added as %s.', args.name, result.record.identifier)
        LOGGER.info("Remember to recompile and upload the firmware.")
    return 0


__all__ = [
    "DEFAULT_FIRMWARE",
    "IconImporter",
    "ImportResult",
    "ImporterConfig",
    "USAGE",
    "main",
]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
