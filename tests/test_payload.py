import json
from pathlib import Path
import subprocess
import sys
from types import SimpleNamespace

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import vizpow_icons.payload as payload
from vizpow_icons.colors import AliasTable, RGBColor
from vizpow_icons.errors import InputError, ParseError, ShapeError, SizeError
from vizpow_icons.payload import parse_payload, read_clipboard, resolve_payload


def _flat(colour=(255, 0, 0), pixels=64):
    return list(colour) * pixels


@pytest.mark.parametrize(
    "document",
    [
        {"seg": {"i": _flat()}},
        {"i": _flat()},
        _flat(),
    ],
)
def test_parse_accepts_each_payload_shape(document) -> None:
    grid = parse_payload(json.dumps(document))
    assert len(grid) == 64
    assert all(pixel == RGBColor(255, 0, 0) for pixel in grid.pixels)


def test_parse_ignores_values_past_first_icon() -> None:
    values = _flat((1, 2, 3)) + [200, 200, 200]
    grid = parse_payload(json.dumps({"i": values}))
    assert len(grid) == 64
    assert grid[63] == RGBColor(1, 2, 3)


def test_parse_reports_invalid_json() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_payload("{not json")
    assert str(excinfo.value).startswith("Invalid JSON:")


@pytest.mark.parametrize(
    "document",
    [
        {"pixels": _flat()},
        {"seg": {"col": [[255, 0, 0]]}},
        "just a string",
        42,
    ],
)
def test_parse_rejects_unknown_shapes(document) -> None:
    with pytest.raises(ShapeError):
        parse_payload(json.dumps(document))


def test_parse_reports_actual_count_when_too_short() -> None:
    with pytest.raises(SizeError) as excinfo:
        parse_payload(json.dumps({"seg": {"i": [0] * 150}}))
    assert excinfo.value.count == 150
    assert "got 150" in str(excinfo.value)


def test_parse_rejects_non_integer_pixel_values() -> None:
    values = _flat()
    values[4] = "red"
    with pytest.raises(ShapeError) as excinfo:
        parse_payload(json.dumps(values))
    assert "index 4" in str(excinfo.value)


def test_resolve_reads_payload_from_existing_file(tmp_path: Path) -> None:
    icon_file = tmp_path / "mario.json"
    icon_file.write_text(json.dumps({"i": _flat()}), encoding="utf-8")

    source = resolve_payload(str(icon_file), clipboard_reader=_unexpected_clipboard)

    assert source.origin == str(icon_file)
    assert json.loads(source.text) == {"i": _flat()}


def test_resolve_treats_unknown_path_as_literal_json() -> None:
    literal = json.dumps(_flat())
    source = resolve_payload(literal, clipboard_reader=_unexpected_clipboard)
    assert source.origin == "argument"
    assert source.text == literal


def test_resolve_treats_overlong_literal_as_json() -> None:
    literal = json.dumps({"seg": {"i": _flat((200, 200, 200), pixels=400)}})
    source = resolve_payload(literal, clipboard_reader=_unexpected_clipboard)
    assert source.text == literal


def test_resolve_falls_back_to_clipboard() -> None:
    literal = json.dumps(_flat())
    source = resolve_payload(None, clipboard_reader=lambda: literal)
    assert source.origin == "clipboard"
    assert source.text == literal


def test_resolve_clipboard_path_is_read_as_file(tmp_path: Path) -> None:
    icon_file = tmp_path / "copied.json"
    icon_file.write_text("[]", encoding="utf-8")
    source = resolve_payload(None, clipboard_reader=lambda: f"{icon_file}\n")
    assert source.text == "[]"


def test_resolve_propagates_clipboard_failure() -> None:
    def _failing() -> str:
        raise InputError("clipboard unavailable")

    with pytest.raises(InputError):
        resolve_payload(None, clipboard_reader=_failing)


def test_read_clipboard_without_utilities(monkeypatch) -> None:
    monkeypatch.setattr(payload.shutil, "which", lambda name: None)
    with pytest.raises(InputError) as excinfo:
        read_clipboard()
    assert "no clipboard utility" in str(excinfo.value)


def test_read_clipboard_uses_first_working_command(monkeypatch) -> None:
    calls = []

    def _which(name):
        return f"/usr/bin/{name}" if name in {"xclip", "xsel"} else None

    def _run(command, **kwargs):
        calls.append(command)
        if command[0].endswith("xclip"):
            raise subprocess.CalledProcessError(1, command)
        return SimpleNamespace(stdout="[1, 2, 3]")

    monkeypatch.setattr(payload.shutil, "which", _which)
    monkeypatch.setattr(payload.subprocess, "run", _run)

    assert read_clipboard() == "[1, 2, 3]"
    assert [command[0] for command in calls] == ["/usr/bin/xclip", "/usr/bin/xsel"]


def test_read_clipboard_rejects_empty_clipboard(monkeypatch) -> None:
    monkeypatch.setattr(payload.shutil, "which", lambda name: f"/bin/{name}")
    monkeypatch.setattr(payload.subprocess, "run", lambda command, **kwargs: SimpleNamespace(stdout="  \n"))
    with pytest.raises(InputError):
        read_clipboard()


def _unexpected_clipboard() -> str:  # pragma: no cover - should never run
    raise AssertionError("clipboard should not be read")


def test_parse_accepts_integral_float_channels() -> None:
    grid = parse_payload(json.dumps([255.0, 0, 0.0] * 64))
    assert grid[0] == RGBColor(255, 0, 0)
    assert AliasTable().token(grid[0]) == "RED"
    assert isinstance(grid[0].red, int)


def test_parse_rejects_fractional_channels() -> None:
    values = _flat()
    values[2] = 0.5
    with pytest.raises(ShapeError) as excinfo:
        parse_payload(json.dumps(values))
    assert "index 2" in str(excinfo.value)


def test_resolve_treats_whitespace_argument_as_literal() -> None:
    source = resolve_payload("   ", clipboard_reader=_unexpected_clipboard)
    assert source.origin == "argument"
    with pytest.raises(ParseError):
        parse_payload(source.text)
