from .base import Extractor, ExtractionResult
from .keyword import KeywordAnchoredExtractor
from .grid import GridExtractor
from .chain import ChainExtractor, build_extractor

__all__ = [
    "Extractor",
    "ExtractionResult",
    "KeywordAnchoredExtractor",
    "GridExtractor",
    "ChainExtractor",
    "build_extractor",
]
