from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import pytesseract
from pytesseract import Output
from PIL import Image

Point = tuple[float, float]

@dataclass(frozen=True)
class OCRToken:
    text: str
    start_index: int = -1  # offset into OCRResult.full_text, -1 if unknown
    polygon: tuple[Point, ...] | None = None  # 4 corners, clockwise from top-left
    conf: float = 1.0  # 0..1

    @property
    def centroid(self) -> Point | None:
        if not self.polygon:
            return None
        n = len(self.polygon)
        return (sum(p[0] for p in self.polygon) / n, sum(p[1] for p in self.polygon) / n)

@dataclass
class OCRResult:
    full_text: str
    tokens: list[OCRToken]
    avg_conf: float

def box_to_polygon(x: float, y: float, w: float, h: float) -> tuple[Point, ...]:
    return ((x, y), (x + w, y), (x + w, y + h), (x, y + h))

def _locate_tokens(full_text: str, texts: list[str]) -> list[int]:
    # walk a cursor so repeated tokens resolve to successive occurrences
    out: list[int] = []
    cursor = 0
    for t in texts:
        idx = full_text.find(t, cursor)
        if idx == -1:
            out.append(-1)
            continue
        out.append(idx)
        cursor = idx + len(t)
    return out

def run_tesseract(img: Image.Image, lang: str = "jpn+eng") -> OCRResult:
    data: dict[str, Any] = pytesseract.image_to_data(img, lang=lang, output_type=Output.DICT)

    tokens: list[OCRToken] = []
    lines: dict[tuple[int, int, int], list[str]] = {}
    confs: list[float] = []

    n = len(data.get("text", []))
    for i in range(n):
        txt = (data["text"][i] or "").strip()
        if not txt:
            continue

        # tesseract conf is often a string; -1 marks non-word rows
        try:
            c = float(data["conf"][i])
        except (TypeError, ValueError):
            c = -1.0
        if c < 0:
            continue
        c01 = max(0.0, min(1.0, c / 100.0))

        x, y, w, h = int(data["left"][i]), int(data["top"][i]), int(data["width"][i]), int(data["height"][i])
        tokens.append(OCRToken(text=txt, polygon=box_to_polygon(x, y, w, h), conf=c01))
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        lines.setdefault(key, []).append(txt)
        confs.append(c01)

    full_text = "\n".join(" ".join(words) for words in lines.values())
    starts = _locate_tokens(full_text, [t.text for t in tokens])
    tokens = [OCRToken(t.text, s, t.polygon, t.conf) for t, s in zip(tokens, starts)]
    avg_conf = sum(confs) / len(confs) if confs else 0.0
    return OCRResult(full_text=full_text, tokens=tokens, avg_conf=avg_conf)

def from_vision_response(payload: dict[str, Any]) -> OCRResult:
    """
    Convert a Google Cloud Vision ``textDetection`` response (JSON form) into an
    OCRResult. ``textAnnotations[0]`` is the whole text; the rest are words.
    """
    annotations = payload.get("textAnnotations") or []
    full = payload.get("fullTextAnnotation") or {}
    if annotations:
        full_text = annotations[0].get("description") or ""
    else:
        full_text = full.get("text") or ""

    tokens: list[OCRToken] = []
    texts: list[str] = []
    for ann in annotations[1:]:
        txt = (ann.get("description") or "").strip()
        if not txt:
            continue
        vertices = (ann.get("boundingPoly") or {}).get("vertices") or []
        # Vision omits zero coordinates from the JSON
        poly = tuple((float(v.get("x", 0)), float(v.get("y", 0))) for v in vertices) or None
        tokens.append(OCRToken(text=txt, polygon=poly))
        texts.append(txt)

    starts = _locate_tokens(full_text, texts)
    tokens = [OCRToken(t.text, s, t.polygon, t.conf) for t, s in zip(tokens, starts)]
    return OCRResult(full_text=full_text, tokens=tokens, avg_conf=1.0 if tokens else 0.0)
