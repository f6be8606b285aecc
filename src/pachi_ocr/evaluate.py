from __future__ import annotations
from dataclasses import dataclass
from typing import Any

@dataclass
class EvalRow:
    field: str
    ok: bool
    score: float
    predicted: int | None = None
    expected: int | None = None

def _to_int(v: Any) -> int | None:
    if v is None or v == "":
        return None
    try:
        return int(str(v).strip())
    except ValueError:
        return None

def relative_error(pred: int, gt: int) -> float:
    if gt == 0:
        return 0.0 if pred == 0 else 1.0
    return min(1.0, abs(pred - gt) / abs(gt))

def evaluate_one(pred_values: dict[str, int], gt_values: dict[str, Any]) -> list[EvalRow]:
    """Exact match per labelled field; score is 1 - relative error."""
    rows: list[EvalRow] = []
    for field, raw_gt in gt_values.items():
        gt = _to_int(raw_gt)
        if gt is None:
            continue
        pred = pred_values.get(field)
        if pred is None:
            rows.append(EvalRow(field, False, 0.0, None, gt))
            continue
        ok = pred == gt
        rows.append(EvalRow(field, ok, 1.0 - relative_error(pred, gt), pred, gt))
    return rows

def summarize(rows: list[EvalRow]) -> dict[str, Any]:
    total = len(rows)
    ok = sum(1 for r in rows if r.ok)
    missing = sum(1 for r in rows if r.predicted is None)
    return {
        "rows": total,
        "ok": ok,
        "acc": ok / total if total else 0.0,
        "missing": missing,
        "missing_rate": missing / total if total else 0.0,
    }
