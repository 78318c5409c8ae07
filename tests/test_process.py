from collections import Counter

import pytest

from conftest import coin
from data.models import SortMode
from data.process import TABLE_COLUMNS, apply_sort, format_usd, to_table_frame


@pytest.mark.parametrize("mode", [SortMode.PRICE, SortMode.VOLUME])
def test_sort_is_a_permutation(mode, snapshot):
    result = apply_sort(mode, snapshot)
    assert Counter(result) == Counter(snapshot)


def test_price_sort_descending_and_stable(snapshot):
    result = apply_sort(SortMode.PRICE, snapshot)
    assert [r.id for r in result] == ["btc", "eth", "sol", "doge"]
    prices = [r.current_price for r in result]
    assert prices == sorted(prices, reverse=True)


def test_volume_sort_descending_and_stable(snapshot):
    result = apply_sort(SortMode.VOLUME, snapshot)
    # eth and doge tie on volume and keep their input order
    assert [r.id for r in result] == ["btc", "eth", "doge", "sol"]


def test_sort_accepts_string_mode(snapshot):
    assert apply_sort("volume", snapshot) == apply_sort(SortMode.VOLUME, snapshot)


def test_sort_does_not_mutate_input(snapshot):
    as_list = list(snapshot)
    apply_sort(SortMode.PRICE, as_list)
    assert as_list == list(snapshot)


def test_sorting_twice_is_idempotent(snapshot):
    once = apply_sort(SortMode.PRICE, snapshot)
    assert apply_sort(SortMode.PRICE, once) == once


def test_empty_snapshot_sorts_to_empty():
    assert apply_sort(SortMode.PRICE, ()) == ()


def test_missing_values_sort_as_zero():
    rows = (coin("a", None, 1.0), coin("b", -1.0, 1.0), coin("c", 0.0, 1.0), coin("d", 2.0, 1.0))
    assert [r.id for r in apply_sort(SortMode.PRICE, rows)] == ["d", "a", "c", "b"]


def test_unknown_mode_rejected(snapshot):
    with pytest.raises(ValueError):
        apply_sort("market_cap", snapshot)


@pytest.mark.parametrize("value, expected", [
    (50000, "$50,000.00"),
    (1234.567, "$1,234.57"),
    (0.1, "$0.10"),
    (-2.5, "-$2.50"),
    (None, "—"),
])
def test_format_usd(value, expected):
    assert format_usd(value) == expected


def test_table_frame_ranks_rows_in_order(snapshot):
    df = to_table_frame(apply_sort(SortMode.PRICE, snapshot))
    assert list(df.columns) == ["id", *TABLE_COLUMNS]
    assert df["#"].tolist() == [1, 2, 3, 4]
    assert df["id"].tolist() == ["btc", "eth", "sol", "doge"]
    assert df.iloc[0]["Price (USD)"] == "$50,000.00"


def test_table_frame_handles_missing_numbers():
    df = to_table_frame((coin("x", None, None, cap=None),))
    assert df.iloc[0]["Market Cap (USD)"] == "—"
    assert df.iloc[0]["Volume (USD)"] == "—"


def test_table_frame_empty():
    df = to_table_frame(())
    assert df.empty
    assert list(df.columns) == ["id", *TABLE_COLUMNS]
