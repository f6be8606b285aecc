from pachi_ocr.scanner import locate_anchor, locate_anchors, scan_numeric_tokens
from pachi_ocr.utils import normalize_text


def test_scan_numeric_tokens_in_document_order_with_offsets():
    text = "打込 5 リプレイ 120"
    toks = scan_numeric_tokens(text)
    assert [t.value for t in toks] == [5, 120]
    assert [t.source_index for t in toks] == [text.index("5"), text.index("120")]
    assert toks[0].source_index < toks[1].source_index


def test_scan_handles_raw_dash_and_normalized_dash_the_same_way():
    raw = "当大 － 当中 2"
    raw_toks = scan_numeric_tokens(raw)
    norm_toks = scan_numeric_tokens(normalize_text(raw))
    assert [t.value for t in raw_toks] == [0, 2]
    assert [(t.value, t.source_index) for t in raw_toks] == [(t.value, t.source_index) for t in norm_toks]


def test_dash_without_digit_yields_zero_token():
    toks = scan_numeric_tokens(normalize_text("3日前－"), mask_labels=["3日前"])
    assert [t.value for t in toks] == [0]


def test_digits_inside_labels_are_masked():
    text = "打込 5 2穴 10"
    assert [t.value for t in scan_numeric_tokens(text)] == [5, 2, 10]
    assert [t.value for t in scan_numeric_tokens(text, mask_labels=["2穴"])] == [5, 10]


def test_scan_result_is_restartable():
    toks = scan_numeric_tokens("1 2 3")
    assert list(toks) == list(toks)


def test_locate_anchor_is_plain_substring_search():
    text = "SP→V 3 (当大) 1"
    a = locate_anchor(text, "(当大)")
    assert a.found
    assert a.offset == text.index("(当大)")
    assert a.end == a.offset + len("(当大)")


def test_missing_anchor_is_absent():
    a = locate_anchor("打込 5", "羽根拾")
    assert not a.found
    assert a.offset is None


def test_prefix_labels_resolve_independently():
    text = "リプレイ 3 リプ→V 2"
    anchors = locate_anchors(text, ["リプ→V", "リプ"])
    assert anchors["リプ→V"].offset == text.index("リプ→V")
    # the short label hits the first "リプ", inside リプレイ
    assert anchors["リプ"].offset == 0


def test_fuzzy_anchor_recovers_garbled_label():
    text = "対象ゲ一ム数 120 打込 5"  # OCR read ー as 一
    assert not locate_anchor(text, "対象ゲーム数").found
    a = locate_anchor(text, "対象ゲーム数", fuzzy_score=75)
    assert a.found
    assert a.fuzzy
    assert a.offset == 0


def test_fuzzy_anchor_ignores_short_labels():
    assert not locate_anchor("当中 1", "当大", fuzzy_score=10).found
