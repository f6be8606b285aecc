from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal
import json
import os

Direction = Literal["before", "after"]

@dataclass(frozen=True)
class InlineRule:
    # "<label>\s*(\d+)" directly on the normalized text
    field_id: str
    label: str

@dataclass(frozen=True)
class WindowRule:
    anchor: str
    direction: Direction
    fields: tuple[str, ...]
    skip_inline_value: bool = False

    @property
    def window_size(self) -> int:
        return len(self.fields)

@dataclass(frozen=True)
class GridCell:
    row: int
    col: int

@dataclass(frozen=True)
class FieldConfig:
    inline: tuple[InlineRule, ...] = ()
    windows: tuple[WindowRule, ...] = ()
    grid: dict[str, GridCell] = field(default_factory=dict)
    ranges: dict[str, tuple[int, int]] = field(default_factory=dict)
    # labels that appear on the display but anchor nothing themselves
    extra_labels: tuple[str, ...] = ()

    @property
    def keywords(self) -> list[tuple[str, tuple[str, ...]]]:
        """Ordered (label, field_ids) pairs, longest label first."""
        out: dict[str, list[str]] = {}
        for r in self.inline:
            out.setdefault(r.label, []).append(r.field_id)
        for w in self.windows:
            out.setdefault(w.anchor, []).extend(w.fields)
        for lbl in self.extra_labels:
            out.setdefault(lbl, [])
        ordered = sorted(out.items(), key=lambda kv: len(kv[0]), reverse=True)
        return [(k, tuple(v)) for k, v in ordered]

    @property
    def field_ids(self) -> list[str]:
        ids: list[str] = []
        for r in self.inline:
            ids.append(r.field_id)
        for w in self.windows:
            ids.extend(w.fields)
        ids.extend(self.grid)
        return list(dict.fromkeys(ids))


# Display layout: X is the target game count, A..M the 4-column counter grid.
FIELD_LABELS = {
    "X": "対象ゲーム数",
    "A": "打込",
    "B": "2穴",
    "C": "リプレイ",
    "D": "リプ→V",
    "E": "羽根拾",
    "F": "V入賞",
    "G": "SP",
    "H": "SP→V",
    "I": "拾い→蹴り",
    "J": "当大",
    "K": "当中",
    "L": "当小",
    "M": "2穴二回目",
}

DEFAULT_FIELDS = FieldConfig(
    inline=(InlineRule("X", "対象ゲーム数"),),
    windows=(
        WindowRule("対象ゲーム数", "after", ("A", "B", "C", "D"), skip_inline_value=True),
        WindowRule("羽根拾", "after", ("E", "F", "G", "H")),
        WindowRule("拾い→蹴り", "after", ("I", "J", "K", "L")),
        WindowRule("2穴二回目", "after", ("M",)),
    ),
    grid={
        "A": GridCell(1, 0), "B": GridCell(1, 1), "C": GridCell(1, 2), "D": GridCell(1, 3),
        "E": GridCell(2, 0), "F": GridCell(2, 1), "G": GridCell(2, 2), "H": GridCell(2, 3),
        "I": GridCell(3, 0), "J": GridCell(3, 1), "K": GridCell(3, 2), "L": GridCell(3, 3),
        "M": GridCell(4, 0),
    },
    ranges={
        "X": (1, 99999),
        "A": (0, 9999), "B": (0, 9999), "C": (0, 9999), "D": (0, 9999),
        "E": (0, 9999), "F": (0, 9999), "G": (0, 9999), "H": (0, 9999),
        "I": (0, 9999), "J": (0, 999), "K": (0, 999), "L": (0, 999),
    },
    extra_labels=tuple(
        FIELD_LABELS[f] for f in ("A", "B", "C", "D", "F", "G", "H", "J", "K", "L")
    ),
)

EXTRACTORS = ("keyword", "grid", "chain")

@dataclass(frozen=True)
class Settings:
    extractor: str = "keyword"

    # Grid strategy
    grid_rows: int = 5
    grid_cols: int = 4
    grid_margin_rows: int = 2
    grid_top_offset: float = 0.5

    # Keyword strategy; None disables fuzzy anchor recovery
    anchor_fuzzy_score: float | None = None

    # Daily aggregation
    daily_max_value: int = 5000
    prior_lines: float = 0.90
    prior_fallback: float = 0.25

    debug_text_chars: int = 200
    ocr_lang: str = "jpn+eng"
    log_level: str = "INFO"
    output_path: str = "outputs/predictions.jsonl"
    labels_path: str = ""
    field_table_path: str = ""

def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc

def _env_float(key: str, default: float | None) -> float | None:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc

def load_settings() -> Settings:
    extractor = os.getenv("EXTRACTOR", "keyword").strip().lower()
    if extractor not in EXTRACTORS:
        raise ValueError(f"EXTRACTOR must be one of {', '.join(EXTRACTORS)}, got {extractor!r}")

    grid_rows = _env_int("GRID_ROWS", 5)
    grid_cols = _env_int("GRID_COLS", 4)
    if grid_rows < 1 or grid_cols < 1:
        raise ValueError("GRID_ROWS and GRID_COLS must be positive")

    return Settings(
        extractor=extractor,
        grid_rows=grid_rows,
        grid_cols=grid_cols,
        grid_margin_rows=max(0, _env_int("GRID_MARGIN_ROWS", 2)),
        grid_top_offset=_env_float("GRID_TOP_OFFSET", 0.5),
        anchor_fuzzy_score=_env_float("ANCHOR_FUZZY_SCORE", None),
        daily_max_value=_env_int("DAILY_MAX_VALUE", 5000),
        debug_text_chars=max(0, _env_int("DEBUG_TEXT_CHARS", 200)),
        ocr_lang=os.getenv("OCR_LANG", "jpn+eng").strip(),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        output_path=os.getenv("OUTPUT_PATH", "outputs/predictions.jsonl").strip(),
        labels_path=os.getenv("LABELS_PATH", "").strip(),
        field_table_path=os.getenv("FIELD_TABLE_PATH", "").strip(),
    )

def parse_field_config(data: dict[str, Any]) -> FieldConfig:
    """
    Build a FieldConfig from its JSON form:

        {
          "inline":  [{"field": "X", "label": "対象ゲーム数"}],
          "windows": [{"anchor": "羽根拾", "direction": "after", "fields": ["E", "F"]}],
          "grid":    {"A": [1, 0]},
          "ranges":  {"A": [0, 9999]},
          "labels":  ["打込"]
        }
    """
    try:
        inline = tuple(InlineRule(r["field"], r["label"]) for r in data.get("inline", []))
        windows = []
        for w in data.get("windows", []):
            direction = w.get("direction", "after")
            if direction not in ("before", "after"):
                raise ValueError(f"window direction must be 'before' or 'after', got {direction!r}")
            fields = tuple(w["fields"])
            if not fields:
                raise ValueError(f"window on {w['anchor']!r} has no fields")
            windows.append(WindowRule(w["anchor"], direction, fields, bool(w.get("skip_inline_value", False))))
        grid = {f: GridCell(int(rc[0]), int(rc[1])) for f, rc in data.get("grid", {}).items()}
        ranges = {}
        for f, (lo, hi) in data.get("ranges", {}).items():
            if int(lo) > int(hi):
                raise ValueError(f"range for {f!r} has min > max")
            ranges[f] = (int(lo), int(hi))
        labels = tuple(data.get("labels", []))
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed field table: {exc}") from exc

    return FieldConfig(inline=inline, windows=tuple(windows), grid=grid, ranges=ranges, extra_labels=labels)

def load_field_config(settings: Settings) -> FieldConfig:
    if not settings.field_table_path:
        return DEFAULT_FIELDS
    with open(settings.field_table_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"field table {settings.field_table_path} is not valid JSON") from exc
    return parse_field_config(data)
