import pytest

from pachi_ocr.config import Settings
from pachi_ocr.daily import aggregate_pair, parse_day_lines, sum_daily

WINS = """大当り回数
本日 3
1日前 5
2日前 0
3日前 7
4日前 2
5日前 4
6日前 1"""

STARTS = """総スタート
本日 320
1日前 1200
2日前 150
3日前 2210
4日前 800
5日前 990
6日前 400"""


def test_partial_history_sums_present_days_in_canonical_order():
    res = sum_daily("2日前 20\n本日 50\n1日前 30")
    assert res.total == 100
    assert res.details == [("今日", 50), ("1日前", 30), ("2日前", 20)]
    assert res.mode == "lines"
    assert not res.is_fallback


def test_duplicate_day_first_occurrence_wins():
    res = sum_daily("本日 50\n1日前 30\n本日 50\n2日前 20")
    assert res.total == 100
    assert [d for d, _ in res.details] == ["今日", "1日前", "2日前"]

    res = sum_daily("本日 50\n本日 70")
    assert res.details == [("今日", 50)]


def test_dash_on_a_day_line_counts_as_zero():
    found = parse_day_lines("本日 4\n3日前－\n1日前 2")
    assert found == {"今日": 4, "3日前": 0, "1日前": 2}


def test_collapsed_lines_still_match():
    res = sum_daily("本日 3 1日前 5 2日前 6")
    assert res.total == 14
    assert len(res.details) == 3


def test_eleven_days_ago_is_not_one_day_ago():
    assert "1日前" not in parse_day_lines("11日前 9")


def test_full_week_confidence_beats_partial_week():
    full = sum_daily(WINS)
    partial = sum_daily("本日 3\n1日前 5")
    assert full.total == 22
    assert len(full.details) == 7
    assert "lines_all_days" in full.reasons
    assert full.confidence > partial.confidence


def test_fallback_sums_plausible_numbers_and_is_tagged():
    res = sum_daily("大当り 12:45 100% 0 3 9999 25")
    # 0 and 9999 are rejected by the default bound of 5000
    assert res.mode == "fallback"
    assert res.is_fallback
    assert res.total == 12 + 45 + 100 + 3 + 25
    assert res.details == []
    assert "fallback_aggregate" in res.reasons
    assert res.confidence < sum_daily("本日 1").confidence


def test_fallback_does_not_join_numbers_across_a_dash():
    res = sum_daily("大当り 12－3 7")
    assert res.mode == "fallback"
    assert res.total == 12 + 3 + 7


def test_fallback_bound_is_configurable():
    res = sum_daily("40 60 700", Settings(daily_max_value=100))
    assert res.total == 100


@pytest.mark.parametrize("text", ["", None, "  \n"])
def test_empty_text(text):
    res = sum_daily(text)
    assert res.total == 0
    assert res.mode == "empty"


def test_pair_detects_wins_screen_in_either_order():
    a = aggregate_pair(WINS, STARTS)
    b = aggregate_pair(STARTS, WINS)
    assert (a.total_wins, a.total_starts) == (22, 6070)
    assert (b.total_wins, b.total_starts) == (22, 6070)
    assert a.probability == pytest.approx(6070 / 22)


def test_pair_probability_undefined_without_wins():
    agg = aggregate_pair("大当り\n本日 0", STARTS)
    assert agg.total_wins == 0
    assert agg.probability is None
    assert agg.to_dict()["probability"] is None


def test_pair_to_dict_shape():
    out = aggregate_pair(WINS, STARTS).to_dict()
    assert out["totalWins"] == 22
    assert out["totalStarts"] == 6070
    assert out["probability"] == round(6070 / 22, 1)
    assert out["wins"]["mode"] == "lines"
    assert out["wins"]["details"][0] == {"day": "今日", "value": 3}
