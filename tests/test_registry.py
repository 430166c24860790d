from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from vizpow_icons.errors import DuplicateError, MarkerNotFoundError
from vizpow_icons.registry import (
    ICON_COUNT_MARKER,
    ensure_unregistered,
    patch_sprites,
    patch_web_server,
    uses_progmem,
)
from vizpow_icons.render import IconRecord

SPRITES = """#define ___ CRGB::Black
#define RED CRGB(255,0,0)

// Red heart
const CRGB ICON_HEART[64] = {
  RED, RED, RED, RED, RED, RED, RED, RED
};

// ==================== ICON COUNT ====================
#define ICON_COUNT 2

// Array of all icons for easy iteration
const CRGB* ALL_ICONS[ICON_COUNT] = {
  ICON_HEART, ICON_STAR
};

// Icon names for debugging
const char* ICON_NAMES[ICON_COUNT] = {
  "Heart", "Star"
};
"""

SPRITES_PROGMEM = """// Red heart
const CRGB ICON_HEART[64] PROGMEM = {
  RED
};

// ==================== ICON COUNT ====================
#define ICON_COUNT 41

const CRGB* const ALL_ICONS[ICON_COUNT] PROGMEM = {
  ICON_HEART
};

const char* const ICON_NAMES[ICON_COUNT] PROGMEM = {
  "Heart"
};
"""

WEB_SERVER = """<script>
    // Icon names matching emoji_sprites.h (2 icons)
    const emojiNames = [
      "Heart", "Star"
    ];
</script>
"""

CODE = "// Shy Guy\nconst CRGB ICON_SHY_GUY[64] = {\n  RED\n};\n"


def test_patch_sprites_registers_icon() -> None:
    record = IconRecord.from_name("Shy Guy")
    update = patch_sprites(SPRITES, record, CODE)

    assert update.old_count == 2
    assert update.new_count == 3
    assert "#define ICON_COUNT 3\n" in update.content
    assert "#define ICON_COUNT 2" not in update.content
    assert f"{CODE}\n{ICON_COUNT_MARKER}" in update.content
    assert "  ICON_HEART, ICON_STAR, ICON_SHY_GUY\n};" in update.content
    assert '  "Heart", "Star", "ShyGuy"\n};' in update.content
    assert update.content.count("ICON_SHY_GUY") == 2


def test_patch_sprites_accepts_progmem_declarations() -> None:
    record = IconRecord.from_name("Mario")
    assert uses_progmem(SPRITES_PROGMEM)
    assert not uses_progmem(SPRITES)

    update = patch_sprites(SPRITES_PROGMEM, record, "// Mario\n")

    assert update.new_count == 42
    assert "  ICON_HEART, ICON_MARIO\n};" in update.content
    assert '  "Heart", "Mario"\n};' in update.content


def test_patch_sprites_rejects_duplicate_identifier() -> None:
    record = IconRecord.from_name("Heart")
    with pytest.raises(DuplicateError) as excinfo:
        patch_sprites(SPRITES, record, CODE)
    assert excinfo.value.identifier == "ICON_HEART"


def test_duplicate_check_matches_identifier_prefixes() -> None:
    content = SPRITES.replace("ICON_STAR", "ICON_STARFISH")
    with pytest.raises(DuplicateError) as excinfo:
        patch_sprites(content, IconRecord.from_name("Star"), "// Star\n")
    assert excinfo.value.identifier == "ICON_STAR"


def test_whole_word_duplicate_check_is_opt_in() -> None:
    content = SPRITES.replace("ICON_STAR", "ICON_STARFISH")
    ensure_unregistered(content, "ICON_STAR", whole_word=True)
    with pytest.raises(DuplicateError):
        ensure_unregistered(content, "ICON_STARFISH", whole_word=True)


@pytest.mark.parametrize(
    "removed, marker",
    [
        (ICON_COUNT_MARKER, ICON_COUNT_MARKER),
        ("#define ICON_COUNT 2", "#define ICON_COUNT"),
        ("const CRGB* ALL_ICONS[ICON_COUNT]", "ALL_ICONS array"),
        ("const char* ICON_NAMES[ICON_COUNT]", "ICON_NAMES array"),
    ],
)
def test_patch_sprites_requires_every_marker(removed: str, marker: str) -> None:
    content = SPRITES.replace(removed, "")
    with pytest.raises(MarkerNotFoundError) as excinfo:
        patch_sprites(content, IconRecord.from_name("Shy Guy"), CODE, path=Path("emoji_sprites.h"))
    assert excinfo.value.marker == marker
    assert "emoji_sprites.h" in str(excinfo.value)


def test_patch_web_server_appends_name_and_updates_total() -> None:
    update = patch_web_server(WEB_SERVER, "ShyGuy")

    assert '      "Heart", "Star", "ShyGuy"];' in update.content
    assert "(3 icons)" in update.content
    assert update.old_count == 2
    assert update.new_count == 3
    assert not update.duplicate_name


def test_patch_web_server_without_total_comment() -> None:
    content = WEB_SERVER.replace("    // Icon names matching emoji_sprites.h (2 icons)\n", "")
    update = patch_web_server(content, "ShyGuy")

    assert update.old_count is None
    assert update.new_count is None
    assert '"Star", "ShyGuy"]' in update.content


def test_patch_web_server_warns_about_existing_name(caplog) -> None:
    with caplog.at_level("WARNING"):
        update = patch_web_server(WEB_SERVER, "Star")

    assert update.duplicate_name
    assert '"Heart", "Star", "Star"]' in update.content
    assert any("may already exist" in record.getMessage() for record in caplog.records)


def test_patch_web_server_requires_name_list() -> None:
    with pytest.raises(MarkerNotFoundError):
        patch_web_server("const otherNames = [\"A\"];", "ShyGuy")
