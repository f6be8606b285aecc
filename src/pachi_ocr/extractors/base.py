from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from ..config import FieldConfig, InlineRule
from ..ocr import OCRToken
from ..utils import normalize_text, truncate
from ..validate import apply_ranges

@dataclass
class ExtractionResult:
    extracted_values: dict[str, int]
    debug: dict[str, Any] = field(default_factory=dict)
    strategy: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "extracted_values": dict(self.extracted_values),
            "debug": self.debug,
        }

class Extractor(Protocol):
    name: str

    def extract(self, text: str | None, tokens: Sequence[OCRToken] | None = None) -> ExtractionResult:
        ...

def inline_pattern(label: str) -> re.Pattern[str]:
    return re.compile(re.escape(normalize_text(label)) + r"\s*(\d+)")

def apply_inline_rules(norm_text: str, rules: Sequence[InlineRule]) -> dict[str, int]:
    # label immediately followed by its value, e.g. "対象ゲーム数 120"
    out: dict[str, int] = {}
    for r in rules:
        m = inline_pattern(r.label).search(norm_text)
        if m:
            out[r.field_id] = int(m.group(1))
    return out

def empty_result(strategy: str, token_count: int = 0, reason: str = "empty_text") -> ExtractionResult:
    return ExtractionResult(
        extracted_values={},
        debug={
            "strategy": strategy,
            "token_count": token_count,
            "numeric_count": 0,
            "normalized_text": "",
            "dropped": {},
            "reason": reason,
        },
        strategy=strategy,
    )

def assemble_result(
    strategy: str,
    values: dict[str, int],
    fields: FieldConfig,
    norm_text: str,
    token_count: int,
    numeric_count: int,
    debug_text_chars: int,
    **extra: Any,
) -> ExtractionResult:
    kept, dropped = apply_ranges(values, fields.ranges)
    debug: dict[str, Any] = {
        "strategy": strategy,
        "token_count": token_count,
        "numeric_count": numeric_count,
        "normalized_text": truncate(norm_text, debug_text_chars),
        "dropped": dropped,
    }
    debug.update(extra)
    # keep the configured field order in the output
    order = {f: i for i, f in enumerate(fields.field_ids)}
    ordered = dict(sorted(kept.items(), key=lambda kv: order.get(kv[0], len(order))))
    return ExtractionResult(extracted_values=ordered, debug=debug, strategy=strategy)
