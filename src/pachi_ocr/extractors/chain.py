from __future__ import annotations
from typing import Any, Sequence

from .base import Extractor, ExtractionResult
from .grid import GridExtractor
from .keyword import KeywordAnchoredExtractor
from ..config import DEFAULT_FIELDS, FieldConfig, Settings
from ..ocr import OCRToken

class ChainExtractor:
    """
    Run extractors in order. Earlier extractors win; later ones only fill
    fields that are still missing.
    """

    name = "chain"

    def __init__(self, extractors: Sequence[Extractor]):
        if not extractors:
            raise ValueError("ChainExtractor needs at least one extractor")
        self.extractors = list(extractors)

    def extract(self, text: str | None, tokens: Sequence[OCRToken] | None = None) -> ExtractionResult:
        values: dict[str, int] = {}
        sources: dict[str, str] = {}
        members: dict[str, Any] = {}
        dropped: dict[str, int] = {}
        for ex in self.extractors:
            res = ex.extract(text, tokens)
            members[ex.name] = res.debug
            dropped.update(res.debug.get("dropped", {}))
            for f, v in res.extracted_values.items():
                if f not in values:
                    values[f] = v
                    sources[f] = ex.name

        first = self.extractors[0].name
        debug: dict[str, Any] = {
            "strategy": self.name,
            "token_count": members[first].get("token_count", 0),
            "numeric_count": max(m.get("numeric_count", 0) for m in members.values()),
            "normalized_text": members[first].get("normalized_text", ""),
            "dropped": {f: v for f, v in dropped.items() if f not in values},
            "sources": sources,
            "members": members,
        }
        return ExtractionResult(extracted_values=values, debug=debug, strategy=self.name)

def build_extractor(name: str, settings: Settings | None = None, fields: FieldConfig = DEFAULT_FIELDS) -> Extractor:
    settings = settings or Settings()
    if name == "keyword":
        return KeywordAnchoredExtractor(settings, fields)
    if name == "grid":
        return GridExtractor(settings, fields)
    if name == "chain":
        # grid first, keyword fills the gaps
        return ChainExtractor([GridExtractor(settings, fields), KeywordAnchoredExtractor(settings, fields)])
    raise ValueError(f"unknown extractor {name!r}")
