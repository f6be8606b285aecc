import json

import pytest

from pachi_ocr.config import (
    DEFAULT_FIELDS,
    GridCell,
    Settings,
    WindowRule,
    load_field_config,
    load_settings,
    parse_field_config,
)

ENV_KEYS = [
    "EXTRACTOR", "GRID_ROWS", "GRID_COLS", "GRID_MARGIN_ROWS", "GRID_TOP_OFFSET",
    "ANCHOR_FUZZY_SCORE", "DAILY_MAX_VALUE", "DEBUG_TEXT_CHARS", "OCR_LANG",
    "LOG_LEVEL", "OUTPUT_PATH", "LABELS_PATH", "FIELD_TABLE_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults():
    s = load_settings()
    assert s == Settings()
    assert s.anchor_fuzzy_score is None
    assert (s.grid_rows, s.grid_cols, s.grid_margin_rows) == (5, 4, 2)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("EXTRACTOR", "Chain")
    monkeypatch.setenv("GRID_ROWS", "6")
    monkeypatch.setenv("ANCHOR_FUZZY_SCORE", "80")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = load_settings()
    assert s.extractor == "chain"
    assert s.grid_rows == 6
    assert s.anchor_fuzzy_score == 80.0
    assert s.log_level == "DEBUG"


def test_bad_values_raise(monkeypatch):
    monkeypatch.setenv("GRID_COLS", "four")
    with pytest.raises(ValueError, match="GRID_COLS"):
        load_settings()


def test_unknown_extractor_raises(monkeypatch):
    monkeypatch.setenv("EXTRACTOR", "magic")
    with pytest.raises(ValueError, match="EXTRACTOR"):
        load_settings()


def test_default_keywords_longest_first():
    labels = [lbl for lbl, _ in DEFAULT_FIELDS.keywords]
    assert labels.index("2穴二回目") < labels.index("2穴")
    assert labels.index("SP→V") < labels.index("SP")
    assert dict(DEFAULT_FIELDS.keywords)["対象ゲーム数"] == ("X", "A", "B", "C", "D")


def test_default_field_ids_cover_display():
    assert DEFAULT_FIELDS.field_ids == list("XABCDEFGHIJKLM")


def test_parse_field_config():
    fc = parse_field_config({
        "inline": [{"field": "X", "label": "対象ゲーム数"}],
        "windows": [{"anchor": "当大", "direction": "before", "fields": ["J", "K"]}],
        "grid": {"J": [3, 1]},
        "ranges": {"J": [0, 999]},
        "labels": ["当中"],
    })
    assert fc.windows == (WindowRule("当大", "before", ("J", "K")),)
    assert fc.windows[0].window_size == 2
    assert fc.grid == {"J": GridCell(3, 1)}
    assert fc.ranges == {"J": (0, 999)}
    assert "当中" in dict(fc.keywords)


@pytest.mark.parametrize("data", [
    {"windows": [{"anchor": "当大", "direction": "sideways", "fields": ["J"]}]},
    {"windows": [{"anchor": "当大", "fields": []}]},
    {"windows": [{"direction": "after", "fields": ["J"]}]},
    {"ranges": {"J": [10, 1]}},
])
def test_parse_field_config_rejects_malformed(data):
    with pytest.raises(ValueError):
        parse_field_config(data)


def test_load_field_config_from_file(tmp_path):
    path = tmp_path / "fields.json"
    path.write_text(json.dumps({"windows": [{"anchor": "打込", "fields": ["A"]}]}), encoding="utf-8")
    fc = load_field_config(Settings(field_table_path=str(path)))
    assert fc.windows[0].direction == "after"
    assert load_field_config(Settings()) is DEFAULT_FIELDS


def test_load_field_config_bad_json(tmp_path):
    path = tmp_path / "fields.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_field_config(Settings(field_table_path=str(path)))
