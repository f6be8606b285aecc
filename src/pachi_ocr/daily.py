"""Daily history screens: sum "today .. 6 days ago" counts.

The data display has a history page listing one count per day for the last
seven days. Two such screenshots (jackpots and total starts) give the hit
probability ``1 / (starts / wins)``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .confidence import aggregate_confidence
from .config import Settings
from .logging import get_logger
from .utils import extract_lines

log = get_logger(__name__)

DAY_LABELS = ("今日", "1日前", "2日前", "3日前", "4日前", "5日前", "6日前")
DAY_ALIASES = {"本日": "今日", "今日": "今日"}

DAY_LINE_RE = re.compile(r"(本日|今日|(?<!\d)([1-6])日前)\s*(\d+)")
NUMBER_RE = re.compile(r"\d+")

WIN_MARKERS = ("大当り", "大当")


@dataclass
class DailyTotal:
    total: int
    details: list[tuple[str, int]]
    mode: str  # "lines" | "fallback" | "empty"
    confidence: float = 0.0
    reasons: list[str] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.mode == "fallback"

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "details": [{"day": d, "value": v} for d, v in self.details],
            "mode": self.mode,
            "confidence": round(self.confidence, 4),
            "reasons": list(self.reasons),
        }


@dataclass
class PairAggregate:
    total_wins: int
    total_starts: int
    wins: DailyTotal
    starts: DailyTotal

    @property
    def probability(self) -> float | None:
        # "1 / x" where x is starts per jackpot
        if self.total_wins == 0:
            return None
        return self.total_starts / self.total_wins

    def to_dict(self) -> dict[str, Any]:
        p = self.probability
        return {
            "totalWins": self.total_wins,
            "totalStarts": self.total_starts,
            "probability": None if p is None else round(p, 1),
            "wins": self.wins.to_dict(),
            "starts": self.starts.to_dict(),
        }


def _canonical_day(label: str, n: str | None) -> str:
    return f"{n}日前" if n else DAY_ALIASES[label]


def parse_day_lines(text: str) -> dict[str, int]:
    """Day label -> count, first occurrence of each day wins."""
    found: dict[str, int] = {}
    for ln in extract_lines(text):
        for m in DAY_LINE_RE.finditer(ln):
            day = _canonical_day(m.group(1), m.group(2))
            if day in found:
                continue
            found[day] = int(m.group(3))
    return found


def fallback_sum(text: str, max_value: int) -> tuple[int, list[int]]:
    # every number on screen, minus zeros and things like dates or battery %
    nums = [int(n) for n in NUMBER_RE.findall(text)]
    kept = [n for n in nums if 0 < n < max_value]
    return sum(kept), kept


def sum_daily(text: str | None, settings: Settings | None = None) -> DailyTotal:
    settings = settings or Settings()
    if not text or not text.strip():
        conf = aggregate_confidence(settings, "empty", 0)
        return DailyTotal(total=0, details=[], mode="empty", confidence=conf.conf, reasons=conf.reasons)

    found = parse_day_lines(text)
    if found:
        details = [(d, found[d]) for d in DAY_LABELS if d in found]
        conf = aggregate_confidence(settings, "lines", len(details), len(DAY_LABELS))
        return DailyTotal(
            total=sum(v for _, v in details),
            details=details,
            mode="lines",
            confidence=conf.conf,
            reasons=conf.reasons,
        )

    total, kept = fallback_sum(text, settings.daily_max_value)
    log.info("daily_fallback_aggregate", numbers=len(kept), total=total)
    if not kept:
        conf = aggregate_confidence(settings, "empty", 0)
        return DailyTotal(total=0, details=[], mode="empty", confidence=conf.conf, reasons=conf.reasons)
    conf = aggregate_confidence(settings, "fallback", 0)
    return DailyTotal(total=total, details=[], mode="fallback", confidence=conf.conf, reasons=conf.reasons)


def is_wins_screen(text: str | None) -> bool:
    return bool(text) and any(m in text for m in WIN_MARKERS)


def aggregate_pair(text1: str | None, text2: str | None, settings: Settings | None = None) -> PairAggregate:
    """
    Combine a jackpot history screen and a total-starts history screen given in
    either order. The screen mentioning 大当り is the jackpot one; when neither
    does, the second screen is taken as jackpots.
    """
    if is_wins_screen(text1):
        wins_text, starts_text = text1, text2
    else:
        wins_text, starts_text = text2, text1

    wins = sum_daily(wins_text, settings)
    starts = sum_daily(starts_text, settings)
    return PairAggregate(total_wins=wins.total, total_starts=starts.total, wins=wins, starts=starts)
