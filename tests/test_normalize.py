import pytest

from pachi_ocr.utils import extract_lines, normalize_line, normalize_text, truncate


def test_normalize_text_collapses_whitespace_and_trims():
    raw = "  対象ゲーム数\n\n 120 \t打込\r\n5  "
    assert normalize_text(raw) == "対象ゲーム数 120 打込 5"


@pytest.mark.parametrize("dash", ["-", "‐", "‑", "‒", "–", "—", "―", "−", "－", "﹣"])
def test_every_dash_variant_becomes_zero(dash):
    assert normalize_text(f"当大 {dash} 当中 3") == "当大 0 当中 3"


def test_prolonged_sound_mark_is_not_a_dash():
    assert normalize_text("対象ゲーム数 ｰ") == "対象ゲーム数 ｰ"
    assert "ゲーム" in normalize_text("対象ゲーム数 120")


def test_normalize_text_is_idempotent():
    raw = "3日前－\n 本日  50　—  リプ→V 2"
    once = normalize_text(raw)
    assert normalize_text(once) == once


def test_empty_and_none_normalize_to_empty_string():
    assert normalize_text("") == ""
    assert normalize_text(None) == ""
    assert normalize_text(" \n\t ") == ""


def test_normalize_line_keeps_line_and_zeroes_dash():
    assert normalize_line("3日前－") == "3日前0"


def test_extract_lines_skips_blank_lines():
    assert extract_lines("本日 50\n\n1日前 30\r\n") == ["本日 50", "1日前 30"]


def test_truncate():
    assert truncate("abcdef", 3) == "abc…"
    assert truncate("abc", 3) == "abc"
    assert truncate("abc", 0) == ""
