import pandas as pd
import pytest

from mcapfeed.constants import DAY_MS
from mcapfeed.data.transformer import (
    export_series_csv,
    filter_points_by_range,
    format_axis_label,
    format_market_cap,
    results_to_frame,
    series_to_frame,
)
from mcapfeed.models import MarketCapPoint, MarketCapSeries, Source, Token
from tests.helpers import HOUR_MS, START_MS


def make_series(symbol, points, source=Source.DEXPAPRIKA):
    token = Token(id=symbol.lower(), symbol=symbol, name=symbol, color="#000000", platform="base", contract="0x1")
    return MarketCapSeries(token=token, points=tuple(points), source=source)


POINTS = [
    MarketCapPoint(START_MS - 10 * DAY_MS, 1.0),
    MarketCapPoint(START_MS - 2 * DAY_MS, 2.0),
    MarketCapPoint(START_MS - HOUR_MS, 3.0),
]


@pytest.mark.parametrize(
    "days, expected",
    [
        (1, [3.0]),
        (7, [2.0, 3.0]),
        (30, [1.0, 2.0, 3.0]),
        ("max", [1.0, 2.0, 3.0]),
        (None, [1.0, 2.0, 3.0]),
    ],
)
def test_filter_points_by_range(days, expected):
    kept = filter_points_by_range(POINTS, days, now=START_MS)
    assert [p.value for p in kept] == expected


def test_filter_points_by_range_empty():
    assert filter_points_by_range([], 7, now=START_MS) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "N/A"),
        (1_234_567_890, "$1.23B"),
        (4_560_000, "$4.56M"),
        (7_890, "$7.89K"),
        (12.5, "$12.50"),
        (0, "$0.00"),
    ],
)
def test_format_market_cap(value, expected):
    assert format_market_cap(value) == expected


def test_format_axis_label():
    assert format_axis_label(2_500_000_000) == "2.5B"
    assert format_axis_label(3_400_000) == "3.4M"
    assert format_axis_label(12_000) == "12K"
    assert format_axis_label(None) == ""


def test_series_to_frame_uses_utc_index():
    df = series_to_frame(make_series("AAA", POINTS))

    assert list(df.columns) == ["market_cap_usd"]
    assert df.index[0] == pd.Timestamp(START_MS - 10 * DAY_MS, unit="ms", tz="UTC")
    assert df["market_cap_usd"].tolist() == [1.0, 2.0, 3.0]


def test_results_to_frame_aligns_columns_and_skips_empty():
    a = make_series("AAA", [MarketCapPoint(1000, 1.0), MarketCapPoint(1000, 1.5), MarketCapPoint(2000, 2.0)])
    b = make_series("BBB", [MarketCapPoint(2000, 5.0)])
    empty = make_series("CCC", [])

    df = results_to_frame([a, b, empty])

    assert list(df.columns) == ["AAA", "BBB"]
    assert len(df) == 2
    assert df["AAA"].tolist() == [1.5, 2.0]
    assert pd.isna(df["BBB"].iloc[0])


def test_results_to_frame_with_nothing():
    assert results_to_frame([make_series("AAA", [])]).empty


def test_export_series_csv(tmp_path):
    a = make_series("AAA", POINTS, source=Source.GECKOTERMINAL)
    empty = make_series("BBB", [])

    written = export_series_csv([a, empty], tmp_path / "out")

    assert written == [tmp_path / "out" / "AAA_geckoterminal_market_cap.csv"]
    df = pd.read_csv(written[0])
    assert list(df.columns) == ["date", "market_cap_usd"]
    assert len(df) == 3
