from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Sequence

from .base import ExtractionResult, apply_inline_rules, assemble_result, empty_result
from ..config import DEFAULT_FIELDS, FieldConfig, Settings
from ..logging import get_logger
from ..ocr import OCRToken
from ..utils import normalize_text
from ..validate import parse_count

log = get_logger(__name__)

@dataclass(frozen=True)
class GridGeometry:
    width: float
    height: float
    cell_width: float
    cell_height: float
    top_offset: float  # in cells

    def cell_of(self, x: float, y: float) -> tuple[int, int]:
        col = math.floor(x / self.cell_width)
        row = math.floor((y - self.cell_height * self.top_offset) / self.cell_height)
        return row, col

def infer_geometry(tokens: Sequence[OCRToken], settings: Settings) -> GridGeometry | None:
    xs = [p[0] for t in tokens if t.polygon for p in t.polygon]
    ys = [p[1] for t in tokens if t.polygon for p in t.polygon]
    if not xs or not ys:
        return None
    width, height = max(xs), max(ys)
    if width <= 0 or height <= 0:
        return None
    return GridGeometry(
        width=width,
        height=height,
        cell_width=width / settings.grid_cols,
        # the grid spans rows + margin rows; header text sits in the margin
        cell_height=height / (settings.grid_rows + settings.grid_margin_rows),
        top_offset=settings.grid_top_offset,
    )

def assign_cells(tokens: Sequence[OCRToken], geom: GridGeometry) -> dict[tuple[int, int], dict[str, Any]]:
    """Numeric tokens by (row, col); the largest value wins a shared cell."""
    cells: dict[tuple[int, int], dict[str, Any]] = {}
    for t in tokens:
        c = t.centroid
        if c is None:
            continue
        value = parse_count(t.text)
        if value is None:
            continue
        key = geom.cell_of(*c)
        cur = cells.get(key)
        if cur is None or value > cur["value"]:
            cells[key] = {"value": value, "text": t.text, "x": c[0], "y": c[1]}
    return cells

class GridExtractor:
    """Assign numbers to fields by where their boxes sit on the display."""

    name = "grid"

    def __init__(self, settings: Settings | None = None, fields: FieldConfig = DEFAULT_FIELDS):
        self.settings = settings or Settings()
        self.fields = fields

    def extract(self, text: str | None, tokens: Sequence[OCRToken] | None = None) -> ExtractionResult:
        tokens = list(tokens or [])
        norm = normalize_text(text)
        if not norm and not tokens:
            return empty_result(self.name)

        values = apply_inline_rules(norm, self.fields.inline)
        geom = infer_geometry(tokens, self.settings)
        if geom is None:
            # no boxes to place; inline labels in the text still count
            return assemble_result(
                self.name,
                values,
                self.fields,
                norm,
                token_count=len(tokens),
                numeric_count=0,
                debug_text_chars=self.settings.debug_text_chars,
                reason="no_geometry",
            )

        cells = assign_cells(tokens, geom)
        for field_id, cell in self.fields.grid.items():
            hit = cells.get((cell.row, cell.col))
            if hit is not None:
                values.setdefault(field_id, hit["value"])

        log.debug("grid_assigned", cells=len(cells), fields=len(values))
        return assemble_result(
            self.name,
            values,
            self.fields,
            norm,
            token_count=len(tokens),
            numeric_count=sum(1 for t in tokens if t.polygon and parse_count(t.text) is not None),
            debug_text_chars=self.settings.debug_text_chars,
            grid={
                "rows": self.settings.grid_rows,
                "cols": self.settings.grid_cols,
                "image_width": geom.width,
                "image_height": geom.height,
                "cell_width": geom.cell_width,
                "cell_height": geom.cell_height,
                "cells": {f"{r}_{c}": v["value"] for (r, c), v in sorted(cells.items())},
            },
        )
