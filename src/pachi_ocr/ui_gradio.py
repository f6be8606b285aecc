from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Tuple

import gradio as gr
import pandas as pd
from PIL import Image

from .config import FIELD_LABELS, load_field_config, load_settings
from .logging import configure_logging, get_logger
from .pipeline import aggregate_images, extract_image

log = get_logger(__name__)


def run_extraction_ui(img: Image.Image | None) -> Tuple[str, pd.DataFrame, str]:
    """
    Returns:
      - pretty JSON (string)
      - table dataframe
      - status markdown (string)
    """
    columns = ["field", "label", "value"]
    if img is None:
        return "{}", pd.DataFrame([], columns=columns), "画像を選択してください。"

    settings = load_settings()
    fields = load_field_config(settings)
    result = extract_image(img, settings, fields)
    out = result.to_dict()

    rows: List[Dict[str, Any]] = []
    for f in fields.field_ids:
        rows.append({
            "field": f,
            "label": FIELD_LABELS.get(f, ""),
            "value": result.extracted_values.get(f),
        })
    df = pd.DataFrame(rows, columns=columns)

    found = len(result.extracted_values)
    status = f"""
### 解析結果
**strategy:** `{result.strategy}`
**fields:** `{found} / {len(fields.field_ids)}`
**numbers seen:** `{result.debug.get("numeric_count", 0)}`
**dropped (out of range):** {", ".join(result.debug.get("dropped", {})) or "—"}
""".strip()

    pretty = json.dumps(out, indent=2, ensure_ascii=False)
    return pretty, df, status


def run_pair_ui(img1: Image.Image | None, img2: Image.Image | None) -> Tuple[str, str]:
    if img1 is None or img2 is None:
        return "{}", "画像を2枚選択してください。"

    settings = load_settings()
    agg = aggregate_images(img1, img2, settings)
    p = agg.probability
    prob = "計算不能 (大当り0回)" if p is None else f"1 / {p:.1f}"

    notes = []
    for name, d in (("大当り", agg.wins), ("総スタート", agg.starts)):
        if d.is_fallback:
            notes.append(f"{name}: 日別の行を読み取れず、画面内の数値合計で推定")
    summary = f"""
### 計算結果
**大当り合計:** `{agg.total_wins}`
**総スタート合計:** `{agg.total_starts}`
**大当り確率:** `{prob}`
{"  ".join(notes)}
""".strip()
    return json.dumps(agg.to_dict(), indent=2, ensure_ascii=False), summary


def build_app() -> gr.Blocks:
    with gr.Blocks(title="Pachi OCR") as demo:
        gr.Markdown("# Pachi OCR")

        with gr.Tab("データ表示"):
            gr.Markdown("Upload a data display photo → extract counters.")
            inp = gr.Image(type="pil", label="Data display image")
            run_btn = gr.Button("Run extraction", variant="primary")
            json_out = gr.Code(label="Pretty JSON output", language="json")
            table_out = gr.Dataframe(label="Fields table", interactive=False, wrap=True)
            status_out = gr.Markdown()
            run_btn.click(fn=run_extraction_ui, inputs=[inp], outputs=[json_out, table_out, status_out])

        with gr.Tab("大当り確率"):
            gr.Markdown("Upload the jackpot and total-start history screens (either order).")
            with gr.Row():
                img1 = gr.Image(type="pil", label="Screen 1")
                img2 = gr.Image(type="pil", label="Screen 2")
            pair_btn = gr.Button("Calculate", variant="primary")
            pair_json = gr.Code(label="Pretty JSON output", language="json")
            pair_out = gr.Markdown()
            pair_btn.click(fn=run_pair_ui, inputs=[img1, img2], outputs=[pair_json, pair_out])

    return demo


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    demo = build_app()
    # IMPORTANT for Docker: bind to 0.0.0.0
    server_name = os.getenv("GRADIO_SERVER_NAME", "0.0.0.0")
    server_port = int(os.getenv("GRADIO_SERVER_PORT", "7860"))
    log.info("ui_starting", host=server_name, port=server_port)
    demo.launch(server_name=server_name, server_port=server_port)


if __name__ == "__main__":
    main()
