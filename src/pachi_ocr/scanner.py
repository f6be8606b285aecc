"""Numeric token scanning and keyword anchor lookup over normalized OCR text.

All offsets refer to the string produced by ``utils.normalize_text``; callers
must normalize first.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from rapidfuzz import fuzz

from .utils import DASH_CHARS, normalize_text

# Maximal digit runs, or a lone dash (already 0 after normalization, but a
# caller may hand over raw text).
NUMERIC_RE = re.compile(rf"\d+|[{re.escape(DASH_CHARS)}]")


@dataclass(frozen=True)
class NumericToken:
    value: int
    source_index: int
    text: str


@dataclass(frozen=True)
class KeywordAnchor:
    label: str
    offset: int | None
    end: int | None = None
    fuzzy: bool = False

    @property
    def found(self) -> bool:
        return self.offset is not None


def label_spans(text: str, labels: Iterable[str]) -> list[tuple[int, int]]:
    """Every occurrence of every label, as (start, end) spans."""
    spans: list[tuple[int, int]] = []
    for label in labels:
        needle = normalize_text(label)
        if not needle:
            continue
        start = text.find(needle)
        while start != -1:
            spans.append((start, start + len(needle)))
            start = text.find(needle, start + 1)
    return spans


def scan_numeric_tokens(text: str, mask_labels: Iterable[str] = ()) -> tuple[NumericToken, ...]:
    """
    Left-to-right scan producing numeric candidates in document order.

    Digits inside an occurrence of one of ``mask_labels`` (the "2" of "2穴")
    belong to the label and are skipped.
    """
    spans = label_spans(text, mask_labels)
    out: list[NumericToken] = []
    for m in NUMERIC_RE.finditer(text):
        if any(s <= m.start() < e for s, e in spans):
            continue
        raw = m.group(0)
        value = int(raw) if raw.isdigit() else 0
        out.append(NumericToken(value=value, source_index=m.start(), text=raw))
    return tuple(out)


def _fuzzy_locate(text: str, needle: str, min_score: float) -> tuple[int, int] | None:
    # Short labels fuzzy-match almost anything.
    if len(needle) < 3 or len(needle) > len(text):
        return None
    res = fuzz.partial_ratio_alignment(needle, text, score_cutoff=min_score)
    if res is None:
        return None
    return res.dest_start, res.dest_end


def locate_anchor(text: str, label: str, fuzzy_score: float | None = None) -> KeywordAnchor:
    """First literal occurrence of ``label``; no regex semantics."""
    needle = normalize_text(label)
    if not needle:
        return KeywordAnchor(label, None)
    idx = text.find(needle)
    if idx != -1:
        return KeywordAnchor(label, idx, idx + len(needle))
    if fuzzy_score is not None:
        hit = _fuzzy_locate(text, needle, fuzzy_score)
        if hit is not None:
            return KeywordAnchor(label, hit[0], hit[1], fuzzy=True)
    return KeywordAnchor(label, None)


def locate_anchors(text: str, labels: Iterable[str], fuzzy_score: float | None = None) -> dict[str, KeywordAnchor]:
    # Each label is looked up on its own; overlapping labels are fine.
    return {label: locate_anchor(text, label, fuzzy_score) for label in labels}
