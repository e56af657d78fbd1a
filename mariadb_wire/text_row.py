"""Decoding of result-set rows sent in the text protocol."""

from __future__ import annotations

import datetime
from typing import Any, Sequence

from .column import BINARY_CHARSET, ColumnDefinition, FieldType
from .encoding import ProtocolError, read_lenenc_int

__all__ = ["parse_text_row"]

_UTC = datetime.timezone.utc

_INTEGER_TYPES = frozenset(
    {FieldType.SHORT, FieldType.LONG, FieldType.INT24, FieldType.LONGLONG, FieldType.YEAR}
)
_FLOAT_TYPES = frozenset({FieldType.FLOAT, FieldType.DOUBLE})
_DECIMAL_TYPES = frozenset({FieldType.DECIMAL, FieldType.NEWDECIMAL})
_DATE_TYPES = frozenset({FieldType.DATE, FieldType.NEWDATE})
_DATETIME_TYPES = frozenset({FieldType.DATETIME, FieldType.TIMESTAMP})

_MINUS = ord("-")
_DOT = ord(".")


def _civil_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    microsecond: int = 0,
) -> datetime.datetime:
    """Build a UTC datetime, carrying out-of-range fields into the next unit."""
    months = year * 12 + (month - 1)
    try:
        base = datetime.datetime(months // 12, months % 12 + 1, 1, tzinfo=_UTC)
        return base + datetime.timedelta(
            days=day - 1,
            hours=hour,
            minutes=minute,
            seconds=second,
            microseconds=microsecond,
        )
    except (ValueError, OverflowError) as exc:
        raise ProtocolError(
            f"date out of range: {year:04d}-{month:02d}-{day:02d}"
        ) from exc


def _digits(raw: bytes) -> int:
    value = 0
    for byte in raw:
        value = value * 10 + (byte - 48)
    return value


def _text_int(raw: bytes) -> int:
    if not raw:
        return 0
    if raw[0] == _MINUS:
        return -_digits(raw[1:])
    return _digits(raw)


def _text_float(raw: bytes) -> float:
    try:
        return float(raw.decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        return 0.0


def _fraction_micros(frac: bytes) -> int:
    return _digits(frac[:6]) * 10 ** max(0, 6 - len(frac))


def _text_date(raw: bytes) -> datetime.datetime | None:
    if len(raw) < 10:
        return None
    year, month, day = _digits(raw[0:4]), _digits(raw[5:7]), _digits(raw[8:10])
    if year == 0 and month == 0 and day == 0:
        return None
    return _civil_datetime(year, month, day)


def _text_datetime(raw: bytes) -> datetime.datetime | None:
    if len(raw) < 19:
        return None
    year, month, day = _digits(raw[0:4]), _digits(raw[5:7]), _digits(raw[8:10])
    hour, minute, second = _digits(raw[11:13]), _digits(raw[14:16]), _digits(raw[17:19])
    micros = 0
    if len(raw) > 20 and raw[19] == _DOT:
        micros = _fraction_micros(raw[20:])
    if year == 0 and month == 0 and day == 0:
        return None
    return _civil_datetime(year, month, day, hour, minute, second, micros)


def _text_time(raw: bytes) -> datetime.timedelta:
    if not raw:
        return datetime.timedelta(0)
    negative = raw[0] == _MINUS
    body = raw[1:] if negative else raw
    colon = body.find(b":")
    if colon < 0:
        colon = len(body)
    if len(body) < colon + 6:
        return datetime.timedelta(0)
    hours = _text_int(body[:colon])
    minutes = _digits(body[colon + 1:colon + 3])
    seconds = _digits(body[colon + 4:colon + 6])
    micros = 0
    if len(body) > colon + 6 and body[colon + 6] == _DOT:
        micros = _fraction_micros(body[colon + 7:])
    duration = datetime.timedelta(
        hours=hours, minutes=minutes, seconds=seconds, microseconds=micros
    )
    return -duration if negative else duration


def _decode_text(raw: bytes, column: ColumnDefinition) -> Any:
    kind = column.type
    if kind == FieldType.TINY:
        if column.length == 1:
            return bool(raw) and raw[0] != ord("0")
        return _text_int(raw)
    if kind in _INTEGER_TYPES:
        return _text_int(raw)
    if kind in _FLOAT_TYPES:
        return _text_float(raw)
    if kind in _DATE_TYPES:
        return _text_date(raw)
    if kind in _DATETIME_TYPES:
        return _text_datetime(raw)
    if kind == FieldType.TIME:
        return _text_time(raw)
    if kind in _DECIMAL_TYPES or kind == FieldType.JSON:
        return raw.decode("utf-8", errors="replace")
    if column.charset == BINARY_CHARSET:
        return raw
    return raw.decode("utf-8", errors="replace")


def parse_text_row(data: bytes, columns: Sequence[ColumnDefinition]) -> list[Any]:
    """Decode a text-protocol row packet into Python values, one per column."""
    data = bytes(data)
    values: list[Any] = []
    pos = 0
    for index, column in enumerate(columns):
        if pos >= len(data):
            raise ProtocolError(f"failed to read column {index}: row truncated")
        if data[pos] == 0xFB:
            values.append(None)
            pos += 1
            continue
        try:
            length, start = read_lenenc_int(data, pos)
        except ProtocolError as exc:
            raise ProtocolError(f"failed to read column {index}: {exc}") from exc
        end = start + length
        if end > len(data):
            raise ProtocolError(f"failed to read column {index}: value exceeds packet")
        values.append(_decode_text(data[start:end], column))
        pos = end
    return values