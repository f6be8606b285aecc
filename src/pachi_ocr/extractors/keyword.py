from __future__ import annotations
from typing import Any, Sequence

from .base import ExtractionResult, apply_inline_rules, assemble_result, empty_result, inline_pattern
from ..config import DEFAULT_FIELDS, FieldConfig, Settings, WindowRule
from ..logging import get_logger
from ..ocr import OCRToken
from ..scanner import KeywordAnchor, NumericToken, locate_anchors, scan_numeric_tokens
from ..utils import normalize_text

log = get_logger(__name__)

def _window_start(norm_text: str, anchor: KeywordAnchor, rule: WindowRule) -> int:
    """Offset from which an "after" window starts collecting tokens."""
    start = anchor.end if anchor.end is not None else anchor.offset
    if rule.skip_inline_value:
        m = inline_pattern(rule.anchor).match(norm_text, anchor.offset)
        if m:
            start = m.end()
    return start

def select_window(
    tokens: Sequence[NumericToken],
    norm_text: str,
    anchor: KeywordAnchor,
    rule: WindowRule,
) -> list[NumericToken]:
    """
    Up to ``rule.window_size`` tokens nearest to the anchor on the rule's side,
    in document order. Uses the full token sequence every time.
    """
    n = rule.window_size
    if rule.direction == "before":
        side = [t for t in tokens if t.source_index < anchor.offset]
        return side[-n:]
    start = _window_start(norm_text, anchor, rule)
    side = [t for t in tokens if t.source_index >= start]
    return side[:n]

class KeywordAnchoredExtractor:
    """Locate labels by substring search and read the numbers next to them."""

    name = "keyword"

    def __init__(self, settings: Settings | None = None, fields: FieldConfig = DEFAULT_FIELDS):
        self.settings = settings or Settings()
        self.fields = fields

    def extract(self, text: str | None, tokens: Sequence[OCRToken] | None = None) -> ExtractionResult:
        token_count = len(tokens) if tokens else 0
        norm = normalize_text(text)
        if not norm:
            return empty_result(self.name, token_count)

        labels = [lbl for lbl, _ in self.fields.keywords]
        numeric = scan_numeric_tokens(norm, mask_labels=labels)
        values = apply_inline_rules(norm, self.fields.inline)

        anchors = locate_anchors(norm, [w.anchor for w in self.fields.windows], self.settings.anchor_fuzzy_score)
        windows_meta: list[dict[str, Any]] = []
        for rule in self.fields.windows:
            anchor = anchors[rule.anchor]
            meta: dict[str, Any] = {
                "anchor": rule.anchor,
                "direction": rule.direction,
                "offset": anchor.offset,
                "fuzzy": anchor.fuzzy,
                "size": rule.window_size,
                "available": 0,
                "resolved": False,
            }
            windows_meta.append(meta)
            if not anchor.found:
                continue

            window = select_window(numeric, norm, anchor, rule)
            meta["available"] = len(window)
            if len(window) < rule.window_size:
                # all-or-nothing: a short window is never spread over its fields
                log.debug("short_window", anchor=rule.anchor, available=len(window), size=rule.window_size)
                continue

            meta["resolved"] = True
            for field_id, tok in zip(rule.fields, window):
                values.setdefault(field_id, tok.value)

        result = assemble_result(
            self.name,
            values,
            self.fields,
            norm,
            token_count=token_count,
            numeric_count=len(numeric),
            debug_text_chars=self.settings.debug_text_chars,
            windows=windows_meta,
        )
        if result.debug["dropped"]:
            log.debug("out_of_range_dropped", dropped=result.debug["dropped"])
        return result
