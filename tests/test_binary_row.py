import datetime
import decimal
import struct

import pytest

from mariadb_wire.binary_row import encode_param_value, parse_binary_row
from mariadb_wire.column import BINARY_CHARSET, ColumnDefinition, ColumnFlag, FieldType
from mariadb_wire.encoding import ProtocolError, write_lenenc_str

UTC = datetime.timezone.utc


def col(kind, **kwargs):
    return ColumnDefinition(type=kind, **kwargs)


def row(ncols, *values, bitmap=None):
    size = (ncols + 9) // 8
    mask = bytes(size) if bitmap is None else bitmap
    return b"\x00" + mask + b"".join(values)


def roundtrip(value, column):
    return parse_binary_row(row(1, encode_param_value(value)), [column])[0]


def test_invalid_header():
    with pytest.raises(ProtocolError):
        parse_binary_row(b"\x01\x00", [col(FieldType.LONG)])


def test_empty_packet():
    with pytest.raises(ProtocolError):
        parse_binary_row(b"", [col(FieldType.LONG)])


def test_null_bitmap_offset_by_two():
    data = row(2, struct.pack("<i", 9), bitmap=b"\x08")
    assert parse_binary_row(data, [col(FieldType.LONG), col(FieldType.LONG)]) == [9, None]


def test_tinyint_one_is_bool():
    data = row(2, b"\x01", b"\x00")
    cols = [col(FieldType.TINY, length=1)] * 2
    assert parse_binary_row(data, cols) == [True, False]


def test_signed_and_unsigned_integers():
    data = row(
        3,
        struct.pack("<b", -5),
        struct.pack("<H", 65000),
        struct.pack("<h", -300),
    )
    cols = [
        col(FieldType.TINY, length=4),
        col(FieldType.SHORT, flags=ColumnFlag.UNSIGNED),
        col(FieldType.YEAR),
    ]
    assert parse_binary_row(data, cols) == [-5, 65000, -300]


def test_long_and_int24():
    data = row(2, struct.pack("<i", -70000), struct.pack("<I", 4000000000))
    cols = [col(FieldType.INT24), col(FieldType.LONG, flags=ColumnFlag.UNSIGNED)]
    assert parse_binary_row(data, cols) == [-70000, 4000000000]


@pytest.mark.parametrize("value", [0, -1, (1 << 63) - 1, -(1 << 63)])
def test_longlong_signed_roundtrip(value):
    assert roundtrip(value, col(FieldType.LONGLONG)) == value


def test_longlong_unsigned_roundtrip():
    value = (1 << 64) - 1
    assert roundtrip(value, col(FieldType.LONGLONG, flags=ColumnFlag.UNSIGNED)) == value


def test_integer_out_of_range():
    with pytest.raises(ValueError):
        encode_param_value(1 << 64)


def test_float_and_double():
    data = row(2, struct.pack("<f", 0.5), struct.pack("<d", 2.25))
    assert parse_binary_row(data, [col(FieldType.FLOAT), col(FieldType.DOUBLE)]) == [0.5, 2.25]


def test_double_roundtrip():
    assert roundtrip(3.141592653589793, col(FieldType.DOUBLE)) == 3.141592653589793


@pytest.mark.parametrize(
    "value,length_byte",
    [
        (datetime.datetime(2024, 5, 6, tzinfo=UTC), 4),
        (datetime.datetime(2024, 5, 6, 7, 8, 9, tzinfo=UTC), 7),
        (datetime.datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=UTC), 11),
    ],
)
def test_datetime_roundtrip(value, length_byte):
    encoded = encode_param_value(value)
    assert encoded[0] == length_byte
    assert len(encoded) == length_byte + 1
    assert roundtrip(value, col(FieldType.DATETIME)) == value


def test_naive_datetime_comes_back_as_utc():
    value = datetime.datetime(1999, 12, 31, 23, 59, 58)
    assert roundtrip(value, col(FieldType.TIMESTAMP)) == value.replace(tzinfo=UTC)


def test_zero_datetime_encoding_and_decoding():
    assert encode_param_value(datetime.datetime(1, 1, 1)) == b"\x00"
    assert parse_binary_row(row(1, b"\x00"), [col(FieldType.DATE)]) == [
        datetime.datetime(1, 1, 1, tzinfo=UTC)
    ]


def test_time_negative_with_micros():
    data = row(1, struct.pack("<BBIBBBI", 12, 1, 1, 2, 3, 4, 5))
    expected = -datetime.timedelta(days=1, hours=2, minutes=3, seconds=4, microseconds=5)
    assert parse_binary_row(data, [col(FieldType.TIME)]) == [expected]


def test_time_without_micros_and_zero():
    data = row(2, struct.pack("<BBIBBB", 8, 0, 0, 10, 20, 30), b"\x00")
    cols = [col(FieldType.TIME), col(FieldType.TIME)]
    assert parse_binary_row(data, cols) == [
        datetime.timedelta(hours=10, minutes=20, seconds=30),
        datetime.timedelta(0),
    ]


def test_strings_binary_and_json():
    data = row(3, write_lenenc_str("héllo"), write_lenenc_str(b"\x00\x01"), write_lenenc_str("[1]"))
    cols = [
        col(FieldType.VAR_STRING, charset=33),
        col(FieldType.BLOB, charset=BINARY_CHARSET),
        col(FieldType.JSON, charset=BINARY_CHARSET),
    ]
    assert parse_binary_row(data, cols) == ["héllo", b"\x00\x01", "[1]"]


def test_bytes_roundtrip():
    value = bytes(range(256))
    assert roundtrip(value, col(FieldType.BLOB, charset=BINARY_CHARSET)) == value


def test_string_roundtrip():
    assert roundtrip("a" * 300, col(FieldType.VARCHAR)) == "a" * 300


@pytest.mark.parametrize(
    "value,text",
    [(True, "true"), (False, "false"), (decimal.Decimal("1.5"), "1.5")],
)
def test_fallback_values_are_sent_as_text(value, text):
    assert roundtrip(value, col(FieldType.VAR_STRING)) == text


def test_unsupported_type():
    with pytest.raises(ProtocolError, match="unsupported field type"):
        parse_binary_row(row(1, b"\x00"), [col(FieldType.NEWDATE)])


def test_truncated_value():
    with pytest.raises(ProtocolError, match="failed to read column 0"):
        parse_binary_row(row(1, b"\x01\x02"), [col(FieldType.LONG)])