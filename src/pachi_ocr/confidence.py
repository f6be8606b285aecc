from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .config import Settings

Mode = Literal["lines", "fallback", "empty"]


@dataclass
class ConfidenceResult:
    conf: float
    reasons: list[str]


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def aggregate_confidence(settings: Settings, mode: Mode, days_found: int, total_days: int = 7) -> ConfidenceResult:
    """
    Confidence of a daily-history sum.

    - Line matches start from ``prior_lines`` and lose weight with every
      missing day (a missing day silently lowers the total).
    - The fallback aggregate sums every plausible number on the screen and is
      pinned to ``prior_fallback`` no matter how many numbers it saw.
    """
    reasons: list[str] = []

    if mode == "empty":
        return ConfidenceResult(conf=0.0, reasons=["no_numbers"])

    if mode == "fallback":
        reasons.append("fallback_aggregate")
        return ConfidenceResult(conf=clamp01(settings.prior_fallback), reasons=reasons)

    coverage = days_found / total_days if total_days else 0.0
    if days_found >= total_days:
        reasons.append("lines_all_days")
    else:
        reasons.append("lines_partial_days")
        reasons.append(f"missing_days_{total_days - days_found}")

    # coverage matters, but one missing line should not sink below the fallback
    conf = settings.prior_lines * (0.5 + 0.5 * coverage)
    return ConfidenceResult(conf=clamp01(conf), reasons=reasons)
