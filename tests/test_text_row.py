import datetime

import pytest

from mariadb_wire.column import BINARY_CHARSET, ColumnDefinition, FieldType
from mariadb_wire.encoding import ProtocolError, write_lenenc_str
from mariadb_wire.text_row import parse_text_row

UTC = datetime.timezone.utc


def row(*fields):
    return b"".join(b"\xfb" if f is None else write_lenenc_str(f) for f in fields)


def col(kind, **kwargs):
    return ColumnDefinition(type=kind, **kwargs)


def test_null_value():
    assert parse_text_row(row(None), [col(FieldType.LONG)]) == [None]


@pytest.mark.parametrize("text,expected", [("123", 123), ("-42", -42), ("", 0)])
def test_integers(text, expected):
    assert parse_text_row(row(text), [col(FieldType.LONGLONG)]) == [expected]


def test_tinyint_one_is_bool():
    cols = [col(FieldType.TINY, length=1)] * 3
    assert parse_text_row(row("1", "0", ""), cols) == [True, False, False]


def test_tinyint_wider_is_int():
    assert parse_text_row(row("7"), [col(FieldType.TINY, length=4)]) == [7]


def test_float_and_invalid_float():
    cols = [col(FieldType.DOUBLE), col(FieldType.FLOAT)]
    assert parse_text_row(row("1.5", "abc"), cols) == [1.5, 0.0]


def test_decimal_is_text():
    assert parse_text_row(row("12.34"), [col(FieldType.NEWDECIMAL)]) == ["12.34"]


def test_date():
    result = parse_text_row(row("2024-03-15"), [col(FieldType.DATE)])
    assert result == [datetime.datetime(2024, 3, 15, tzinfo=UTC)]


def test_zero_and_short_dates_are_none():
    cols = [col(FieldType.DATE), col(FieldType.DATE), col(FieldType.DATETIME)]
    assert parse_text_row(row("0000-00-00", "2024", "0000-00-00 00:00:00"), cols) == [
        None,
        None,
        None,
    ]


def test_invalid_day_carries_over():
    result = parse_text_row(row("2021-02-29"), [col(FieldType.DATE)])
    assert result == [datetime.datetime(2021, 3, 1, tzinfo=UTC)]


def test_datetime_with_micros():
    result = parse_text_row(row("2024-03-15 10:20:30.123456"), [col(FieldType.DATETIME)])
    assert result == [datetime.datetime(2024, 3, 15, 10, 20, 30, 123456, tzinfo=UTC)]


def test_datetime_short_fraction_is_scaled():
    result = parse_text_row(row("2024-03-15 10:20:30.5"), [col(FieldType.TIMESTAMP)])
    assert result[0].microsecond == 500000


def test_time_negative_large_hours():
    result = parse_text_row(row("-838:59:59"), [col(FieldType.TIME)])
    assert result == [-datetime.timedelta(hours=838, minutes=59, seconds=59)]


def test_time_with_fraction():
    result = parse_text_row(row("01:02:03.000007"), [col(FieldType.TIME)])
    assert result == [datetime.timedelta(hours=1, minutes=2, seconds=3, microseconds=7)]


def test_time_too_short_is_zero():
    assert parse_text_row(row("1:2"), [col(FieldType.TIME)]) == [datetime.timedelta(0)]


def test_strings_and_binary():
    cols = [
        col(FieldType.VAR_STRING, charset=33),
        col(FieldType.BLOB, charset=BINARY_CHARSET),
        col(FieldType.JSON, charset=BINARY_CHARSET),
    ]
    assert parse_text_row(row("héllo", "raw", '{"a":1}'), cols) == [
        "héllo",
        b"raw",
        '{"a":1}',
    ]


def test_multiple_columns_in_order():
    cols = [col(FieldType.LONG), col(FieldType.VARCHAR), col(FieldType.LONG)]
    assert parse_text_row(row("1", None, "3"), cols) == [1, None, 3]


def test_truncated_row_raises():
    with pytest.raises(ProtocolError):
        parse_text_row(row("1"), [col(FieldType.LONG), col(FieldType.LONG)])


def test_value_longer_than_packet_raises():
    with pytest.raises(ProtocolError):
        parse_text_row(b"\x05ab", [col(FieldType.VARCHAR)])