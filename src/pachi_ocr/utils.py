from __future__ import annotations
import json
import os
import re
from typing import Any, Iterable

# Half-width and full-width dashes / hyphens / minus signs. The display prints
# "—" for an empty counter, which OCR returns as any of these. The katakana
# prolonged sound mark (ー, ｰ) is deliberately absent: it occurs inside labels.
DASH_CHARS = "-‐‑‒–—―−－﹣"
DASH_RE = re.compile(f"[{re.escape(DASH_CHARS)}]")

def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)

def write_jsonl(path: str, rows: Iterable[dict[str, Any]]) -> None:
    ensure_dir(os.path.dirname(path) or ".")
    with open(path, "w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")

def read_jsonl(path: str) -> list[dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(ln) for ln in f if ln.strip()]

def normalize_whitespace(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()

def dash_to_zero(s: str) -> str:
    return DASH_RE.sub("0", s)

def normalize_text(s: str | None) -> str:
    """
    Single-line form every offset is computed against: whitespace runs
    collapsed, ends trimmed, dashes read as 0. Idempotent.
    """
    if not s:
        return ""
    return dash_to_zero(normalize_whitespace(s))

def normalize_line(s: str) -> str:
    # same as normalize_text but keeps the line itself intact
    return dash_to_zero(re.sub(r"[ \t　]+", " ", s)).strip()

def extract_lines(text: str) -> list[str]:
    raw = text.replace("\r", "\n")
    return [normalize_line(ln) for ln in raw.split("\n") if ln.strip()]

def truncate(s: str, limit: int) -> str:
    if limit <= 0:
        return ""
    return s if len(s) <= limit else s[:limit] + "…"
