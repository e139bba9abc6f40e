from datetime import datetime, timezone

import pytest

from utils.barcode import barcode_png, barcode_svg
from utils.coercion import parse_timestamp, to_bool, to_float, to_int, to_list, to_mapping
from utils.formatting import format_date, format_inr, format_percent, humanize


@pytest.mark.parametrize(
    "amount,decimals,expected",
    [
        (0, 0, "₹0"),
        (999, 0, "₹999"),
        (1000, 0, "₹1,000"),
        (123456, 0, "₹1,23,456"),
        (1234567, 0, "₹12,34,567"),
        (1234.5, 2, "₹1,234.50"),
        (-2500, 0, "-₹2,500"),
    ],
)
def test_format_inr(amount, decimals, expected):
    assert format_inr(amount, decimals) == expected


def test_small_formatters():
    assert format_percent(-12.345) == "12.3%"
    assert format_date(None) == "N/A"
    assert format_date(datetime(2026, 3, 5)) == "05 Mar 2026"
    assert humanize("cash_on_delivery") == "Cash on delivery"
    assert humanize("") == ""


def test_coercion():
    assert to_float("") == 0.0
    assert to_float("2.5") == 2.5
    assert to_int(3.9) == 3
    assert to_bool("Yes") is True
    assert to_bool(None, default=True) is True
    with pytest.raises(ValueError):
        to_int(True)
    with pytest.raises(ValueError):
        to_float("ten")


def test_nested_shapes():
    assert to_mapping(None) == {}
    assert to_mapping("") == {}
    assert to_mapping({"a": 1}) == {"a": 1}
    assert to_list(None) == []
    assert to_list([1]) == [1]
    with pytest.raises(ValueError):
        to_mapping(250)
    with pytest.raises(ValueError):
        to_list({"product_id": "p1"})


def test_parse_timestamp():
    assert parse_timestamp("2026-10-18T10:00:00Z") == datetime(2026, 10, 18, 10, tzinfo=timezone.utc)
    assert parse_timestamp("2026-10-18T10:00:00").tzinfo == timezone.utc
    assert parse_timestamp(None) is None
    with pytest.raises(ValueError):
        parse_timestamp(12345)


def test_barcodes():
    assert barcode_svg("ORD-123").startswith("<svg")
    assert barcode_png("ORD-123")[:8] == b"\x89PNG\r\n\x1a\n"
    with pytest.raises(ValueError):
        barcode_svg("")
