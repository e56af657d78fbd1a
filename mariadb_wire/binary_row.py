"""Decoding of binary-protocol rows and encoding of statement parameters."""

from __future__ import annotations

import datetime
import struct
from typing import Any, Sequence

from .column import BINARY_CHARSET, ColumnDefinition, ColumnFlag, FieldType
from .encoding import ProtocolError, read_lenenc_int, write_lenenc_str
from .text_row import _civil_datetime

__all__ = ["parse_binary_row", "encode_param_value"]

_UTC = datetime.timezone.utc
_ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=_UTC)

_INT64_MIN = -(1 << 63)
_UINT64_LIMIT = 1 << 64

_INTEGER_SIZES = {
    FieldType.TINY: 1,
    FieldType.SHORT: 2,
    FieldType.YEAR: 2,
    FieldType.LONG: 4,
    FieldType.INT24: 4,
    FieldType.LONGLONG: 8,
}
_DATE_TYPES = frozenset({FieldType.DATE, FieldType.DATETIME, FieldType.TIMESTAMP})
_LENENC_TYPES = frozenset(
    {
        FieldType.VARCHAR,
        FieldType.VAR_STRING,
        FieldType.STRING,
        FieldType.DECIMAL,
        FieldType.NEWDECIMAL,
        FieldType.BLOB,
        FieldType.TINY_BLOB,
        FieldType.MEDIUM_BLOB,
        FieldType.LONG_BLOB,
        FieldType.BIT,
        FieldType.ENUM,
        FieldType.SET,
        FieldType.GEOMETRY,
        FieldType.JSON,
    }
)


def _take(data: bytes, pos: int, size: int) -> bytes:
    if pos + size > len(data):
        raise ProtocolError("value exceeds packet boundary")
    return data[pos:pos + size]


def _read_date(data: bytes, pos: int) -> tuple[datetime.datetime, int]:
    length = _take(data, pos, 1)[0]
    pos += 1
    if length == 0:
        return _ZERO_TIME, pos
    body = _take(data, pos, max(length, 4))
    year = int.from_bytes(body[0:2], "little")
    month, day = body[2], body[3]
    hour = minute = second = micros = 0
    if length >= 7:
        hour, minute, second = body[4], body[5], body[6]
    if length == 11:
        micros = int.from_bytes(body[7:11], "little")
    return _civil_datetime(year, month, day, hour, minute, second, micros), pos + length


def _read_time(data: bytes, pos: int) -> tuple[datetime.timedelta, int]:
    length = _take(data, pos, 1)[0]
    pos += 1
    if length == 0:
        return datetime.timedelta(0), pos
    body = _take(data, pos, max(length, 8))
    negative = body[0] == 1
    days = int.from_bytes(body[1:5], "little")
    micros = int.from_bytes(body[8:12], "little") if length == 12 else 0
    duration = datetime.timedelta(
        days=days, hours=body[5], minutes=body[6], seconds=body[7], microseconds=micros
    )
    return (-duration if negative else duration), pos + length


def _read_value(data: bytes, pos: int, column: ColumnDefinition) -> tuple[Any, int]:
    kind = column.type
    size = _INTEGER_SIZES.get(kind)
    if size is not None:
        raw = _take(data, pos, size)
        if kind == FieldType.TINY and column.length == 1:
            return raw[0] != 0, pos + 1
        unsigned = bool(column.flags & ColumnFlag.UNSIGNED)
        return int.from_bytes(raw, "little", signed=not unsigned), pos + size
    if kind == FieldType.FLOAT:
        return struct.unpack("<f", _take(data, pos, 4))[0], pos + 4
    if kind == FieldType.DOUBLE:
        return struct.unpack("<d", _take(data, pos, 8))[0], pos + 8
    if kind in _DATE_TYPES:
        return _read_date(data, pos)
    if kind == FieldType.TIME:
        return _read_time(data, pos)
    if kind in _LENENC_TYPES:
        length, start = read_lenenc_int(data, pos)
        raw = _take(data, start, length)
        end = start + length
        if column.charset == BINARY_CHARSET and kind != FieldType.JSON:
            return raw, end
        return raw.decode("utf-8", errors="replace"), end
    raise ProtocolError(f"unsupported field type: {kind}")


def parse_binary_row(data: bytes, columns: Sequence[ColumnDefinition]) -> list[Any]:
    """Decode a binary-protocol row packet into Python values, one per column."""
    data = bytes(data)
    if not data or data[0] != 0x00:
        raise ProtocolError("invalid binary row packet")
    bitmap_len = (len(columns) + 9) // 8
    bitmap = _take(data, 1, bitmap_len)
    pos = 1 + bitmap_len
    values: list[Any] = []
    for index, column in enumerate(columns):
        bit = index + 2
        if bitmap[bit // 8] & (1 << (bit % 8)):
            values.append(None)
            continue
        try:
            value, pos = _read_value(data, pos, column)
        except ProtocolError as exc:
            raise ProtocolError(f"failed to read column {index}: {exc}") from exc
        values.append(value)
    return values


def _encode_datetime(value: datetime.datetime) -> bytes:
    fields = (value.year, value.month, value.day, value.hour, value.minute, value.second)
    if fields == (1, 1, 1, 0, 0, 0) and value.microsecond == 0:
        return b"\x00"
    date_part = value.year.to_bytes(2, "little") + bytes([value.month, value.day])
    clock = bytes([value.hour, value.minute, value.second])
    if value.microsecond:
        return b"\x0b" + date_part + clock + value.microsecond.to_bytes(4, "little")
    if any(clock):
        return b"\x07" + date_part + clock
    return b"\x04" + date_part


def encode_param_value(value: Any) -> bytes:
    """Encode a non-null statement parameter for COM_STMT_EXECUTE."""
    if isinstance(value, str):
        return write_lenenc_str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return write_lenenc_str(bytes(value))
    if isinstance(value, bool):
        return write_lenenc_str("true" if value else "false")
    if isinstance(value, int):
        if not _INT64_MIN <= value < _UINT64_LIMIT:
            raise ValueError(f"integer parameter out of 64-bit range: {value}")
        return (value % _UINT64_LIMIT).to_bytes(8, "little")
    if isinstance(value, float):
        return struct.pack("<d", value)
    if isinstance(value, datetime.datetime):
        return _encode_datetime(value)
    return write_lenenc_str(str(value))