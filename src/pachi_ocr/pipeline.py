from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from PIL import Image

from .config import DEFAULT_FIELDS, FieldConfig, Settings
from .daily import PairAggregate, aggregate_pair
from .extractors import ExtractionResult, build_extractor
from .logging import get_logger
from .ocr import OCRResult, run_tesseract

log = get_logger(__name__)

OcrFn = Callable[[Image.Image], OCRResult]


def default_ocr(settings: Settings) -> OcrFn:
    return lambda img: run_tesseract(img, lang=settings.ocr_lang)


def extract_ocr(ocr: OCRResult, settings: Settings, fields: FieldConfig = DEFAULT_FIELDS) -> ExtractionResult:
    extractor = build_extractor(settings.extractor, settings, fields)
    result = extractor.extract(ocr.full_text, ocr.tokens)
    result.debug["avg_ocr_conf"] = round(ocr.avg_conf, 4)
    log.info(
        "extracted",
        strategy=result.strategy,
        fields=len(result.extracted_values),
        numeric_count=result.debug.get("numeric_count", 0),
        dropped=len(result.debug.get("dropped", {})),
    )
    return result


def extract_image(
    img: Image.Image,
    settings: Settings,
    fields: FieldConfig = DEFAULT_FIELDS,
    ocr_fn: OcrFn | None = None,
) -> ExtractionResult:
    ocr = (ocr_fn or default_ocr(settings))(img)
    return extract_ocr(ocr, settings, fields)


def aggregate_images(
    img1: Image.Image,
    img2: Image.Image,
    settings: Settings,
    ocr_fn: OcrFn | None = None,
) -> PairAggregate:
    """OCR both history screens concurrently, then combine once both are done."""
    ocr_fn = ocr_fn or default_ocr(settings)
    with ThreadPoolExecutor(max_workers=2) as pool:
        f1 = pool.submit(ocr_fn, img1)
        f2 = pool.submit(ocr_fn, img2)
        ocr1, ocr2 = f1.result(), f2.result()

    agg = aggregate_pair(ocr1.full_text, ocr2.full_text, settings)
    log.info(
        "aggregated",
        total_wins=agg.total_wins,
        total_starts=agg.total_starts,
        wins_mode=agg.wins.mode,
        starts_mode=agg.starts.mode,
    )
    return agg
