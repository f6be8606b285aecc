from __future__ import annotations

import argparse
import json
import os
from typing import Any

from PIL import Image

from .config import Settings, load_field_config, load_settings
from .daily import aggregate_pair
from .evaluate import EvalRow, evaluate_one, summarize
from .logging import configure_logging, get_logger
from .ocr import OCRResult, from_vision_response, run_tesseract
from .pipeline import aggregate_images, extract_ocr
from .utils import read_jsonl, write_jsonl

log = get_logger(__name__)

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tif", ".tiff"}


def load_ocr(path: str, lang: str) -> OCRResult:
    """
    OCR input from disk:
      - images go through tesseract
      - .json is a saved Google Vision textDetection response
      - anything else is read as already-recognized text
    """
    ext = os.path.splitext(path)[1].lower()
    if ext in IMAGE_EXTS:
        with Image.open(path) as img:
            return run_tesseract(img, lang=lang)
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()
    if ext == ".json":
        payload = json.loads(raw)
        # the HTTP response wraps the annotate result in a list
        if isinstance(payload, list):
            payload = payload[0] if payload else {}
        return from_vision_response(payload)
    return OCRResult(full_text=raw, tokens=[], avg_conf=1.0)


def _sample_id(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def _load_labels(path: str) -> dict[str, dict[str, Any]]:
    out: dict[str, dict[str, Any]] = {}
    for row in read_jsonl(path):
        fields = row.get("fields")
        if isinstance(fields, dict):
            out[str(row.get("id"))] = fields
    return out


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pachi-ocr", description="Extract counters from pachinko data display OCR.")
    ap.add_argument("paths", nargs="*", help="images, .txt OCR dumps or .json Vision responses")
    ap.add_argument("--pair", nargs=2, metavar=("SCREEN1", "SCREEN2"),
                    help="sum two daily history screens (jackpots + starts) instead")
    ap.add_argument("--output", default=None, help="JSONL output path (default: OUTPUT_PATH)")
    return ap


def run_pair(paths: list[str], settings: Settings) -> dict[str, Any]:
    if all(os.path.splitext(p)[1].lower() in IMAGE_EXTS for p in paths):
        with Image.open(paths[0]) as a, Image.open(paths[1]) as b:
            agg = aggregate_images(a, b, settings)
    else:
        t1, t2 = (load_ocr(p, settings.ocr_lang).full_text for p in paths)
        agg = aggregate_pair(t1, t2, settings)
    return agg.to_dict()


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    fields = load_field_config(settings)
    output_path = args.output or settings.output_path

    if args.pair:
        out = run_pair(list(args.pair), settings)
        write_jsonl(output_path, [out])
        print(json.dumps(out, ensure_ascii=False, indent=2))
        return

    labels = _load_labels(settings.labels_path) if settings.labels_path else {}

    outputs: list[dict[str, Any]] = []
    eval_rows_all: list[dict[str, Any]] = []
    eval_objs: list[EvalRow] = []

    for path in args.paths:
        sample_id = _sample_id(path)
        try:
            ocr = load_ocr(path, settings.ocr_lang)
        except (OSError, ValueError) as exc:
            log.error("ocr_failed", path=path, error=str(exc))
            outputs.append({"id": sample_id, "error": str(exc)})
            continue

        result = extract_ocr(ocr, settings, fields)
        outputs.append({"id": sample_id, **result.to_dict()})

        gt = labels.get(sample_id)
        if gt:
            rows = evaluate_one(result.extracted_values, gt)
            eval_objs.extend(rows)
            for r in rows:
                eval_rows_all.append({
                    "id": sample_id,
                    "field": r.field,
                    "ok": r.ok,
                    "score": round(r.score, 4),
                    "predicted": r.predicted,
                    "expected": r.expected,
                })

    write_jsonl(output_path, outputs)
    log.info("predictions_written", path=output_path, count=len(outputs))

    if eval_rows_all:
        eval_path = os.path.join(os.path.dirname(output_path) or ".", "eval_rows.jsonl")
        write_jsonl(eval_path, eval_rows_all)

        s = summarize(eval_objs)
        print(f"[EVAL] rows={s['rows']} ok={s['ok']} acc={s['acc']:.3f} missing={s['missing']} missing_rate={s['missing_rate']:.3f}")


if __name__ == "__main__":
    main()
