"""Column definition packets and column type metadata."""

from __future__ import annotations

import datetime
import enum
import struct
from dataclasses import dataclass

from .encoding import ProtocolError, read_lenenc_int

__all__ = [
    "FieldType",
    "ColumnFlag",
    "ColumnDefinition",
    "BINARY_CHARSET",
    "parse_column_definition",
    "type_to_string",
    "scan_type",
]

BINARY_CHARSET = 63


class FieldType(enum.IntEnum):
    """Column type codes on the wire."""

    DECIMAL = 0
    TINY = 1
    SHORT = 2
    LONG = 3
    FLOAT = 4
    DOUBLE = 5
    NULL = 6
    TIMESTAMP = 7
    LONGLONG = 8
    INT24 = 9
    DATE = 10
    TIME = 11
    DATETIME = 12
    YEAR = 13
    NEWDATE = 14
    VARCHAR = 15
    BIT = 16
    JSON = 245
    NEWDECIMAL = 246
    ENUM = 247
    SET = 248
    TINY_BLOB = 249
    MEDIUM_BLOB = 250
    LONG_BLOB = 251
    BLOB = 252
    VAR_STRING = 253
    STRING = 254
    GEOMETRY = 255


class ColumnFlag(enum.IntFlag):
    """Column definition flags."""

    NOT_NULL = 0x0001
    PRI_KEY = 0x0002
    UNIQUE_KEY = 0x0004
    MULTIPLE_KEY = 0x0008
    BLOB = 0x0010
    UNSIGNED = 0x0020
    ZEROFILL = 0x0040
    BINARY = 0x0080
    ENUM = 0x0100
    AUTO_INCREMENT = 0x0200
    TIMESTAMP = 0x0400
    SET = 0x0800
    NO_DEFAULT_VALUE = 0x1000
    ON_UPDATE_NOW = 0x2000
    NUM = 0x8000


@dataclass
class ColumnDefinition:
    """Metadata describing one result-set column."""

    name: str = ""
    type: int = FieldType.NULL
    flags: int = 0
    charset: int = 0
    length: int = 0
    decimals: int = 0
    extended_type: bytes | None = None
    format: bytes | None = None


_FIXED_FIELDS = struct.Struct("<HIBHB")


def _skip_lenenc(data: bytes, pos: int, what: str) -> int:
    length, start = read_lenenc_int(data, pos)
    end = start + length
    if end > len(data):
        raise ProtocolError(f"column definition: {what} exceeds packet boundary")
    return end


def parse_column_definition(data: bytes, ext_metadata: bool) -> ColumnDefinition:
    """Decode a column definition packet.

    ``ext_metadata`` must be true when the extended-metadata capability was
    negotiated; the packet then carries a tagged block (tag 0 = extended
    type, tag 1 = format) or a single 0x00 marker before the fixed fields.
    """
    pos = 0
    for what in ("catalog", "schema", "table", "org_table"):
        pos = _skip_lenenc(data, pos, what)

    name_len, name_start = read_lenenc_int(data, pos)
    name_end = name_start + name_len
    if name_end > len(data):
        raise ProtocolError("column definition: name exceeds packet boundary")
    name = bytes(data[name_start:name_end]).decode("utf-8", errors="replace")
    pos = _skip_lenenc(data, name_end, "org_name")

    extended_type: bytes | None = None
    fmt: bytes | None = None
    if ext_metadata:
        if pos >= len(data):
            raise ProtocolError("column definition truncated before extended metadata marker")
        if data[pos] != 0x00:
            block_len, block_start = read_lenenc_int(data, pos)
            block_end = block_start + block_len
            if block_end > len(data):
                raise ProtocolError("extended metadata block exceeds packet boundary")
            sub = block_start
            while sub < block_end:
                tag = data[sub]
                sub += 1
                try:
                    value_len, value_start = read_lenenc_int(data, sub)
                except ProtocolError:
                    break
                value_end = value_start + value_len
                if value_end > len(data):
                    raise ProtocolError("extended metadata item exceeds packet boundary")
                value = bytes(data[value_start:value_end])
                if tag == 0:
                    extended_type = value
                elif tag == 1:
                    fmt = value
                sub = value_end
            pos = block_end
        else:
            pos += 1

    if pos >= len(data):
        raise ProtocolError("column definition truncated before fixed fields")
    fixed_len = data[pos]
    pos += 1
    if pos + max(fixed_len, _FIXED_FIELDS.size) > len(data):
        raise ProtocolError("column definition fixed fields truncated")
    charset, length, type_code, flags, decimals = _FIXED_FIELDS.unpack_from(data, pos)

    return ColumnDefinition(
        name=name,
        type=type_code,
        flags=flags,
        charset=charset,
        length=length,
        decimals=decimals,
        extended_type=extended_type,
        format=fmt,
    )


_TYPE_NAMES = {
    FieldType.DECIMAL: "DECIMAL",
    FieldType.TINY: "TINYINT",
    FieldType.SHORT: "SMALLINT",
    FieldType.LONG: "INT",
    FieldType.FLOAT: "FLOAT",
    FieldType.DOUBLE: "DOUBLE",
    FieldType.NULL: "NULL",
    FieldType.TIMESTAMP: "TIMESTAMP",
    FieldType.LONGLONG: "BIGINT",
    FieldType.INT24: "MEDIUMINT",
    FieldType.DATE: "DATE",
    FieldType.TIME: "TIME",
    FieldType.DATETIME: "DATETIME",
    FieldType.YEAR: "YEAR",
    FieldType.VARCHAR: "VARCHAR",
    FieldType.BIT: "BIT",
    FieldType.JSON: "JSON",
    FieldType.NEWDECIMAL: "DECIMAL",
    FieldType.ENUM: "ENUM",
    FieldType.SET: "SET",
    FieldType.TINY_BLOB: "TINYBLOB",
    FieldType.MEDIUM_BLOB: "MEDIUMBLOB",
    FieldType.LONG_BLOB: "LONGBLOB",
    FieldType.BLOB: "BLOB",
    FieldType.VAR_STRING: "VARCHAR",
    FieldType.STRING: "CHAR",
    FieldType.GEOMETRY: "GEOMETRY",
}


def type_to_string(type_code: int) -> str:
    """Return the SQL name of a column type code."""
    return _TYPE_NAMES.get(type_code, f"UNKNOWN({type_code})")


_SCAN_TYPES: dict[int, type] = {
    FieldType.TINY: int,
    FieldType.SHORT: int,
    FieldType.LONG: int,
    FieldType.INT24: int,
    FieldType.LONGLONG: int,
    FieldType.YEAR: int,
    FieldType.FLOAT: float,
    FieldType.DOUBLE: float,
    FieldType.DECIMAL: str,
    FieldType.NEWDECIMAL: str,
    FieldType.DATE: datetime.datetime,
    FieldType.DATETIME: datetime.datetime,
    FieldType.TIMESTAMP: datetime.datetime,
    FieldType.TIME: datetime.timedelta,
    FieldType.VARCHAR: str,
    FieldType.VAR_STRING: str,
    FieldType.STRING: str,
    FieldType.JSON: str,
    FieldType.ENUM: str,
    FieldType.SET: str,
    FieldType.BLOB: bytes,
    FieldType.TINY_BLOB: bytes,
    FieldType.MEDIUM_BLOB: bytes,
    FieldType.LONG_BLOB: bytes,
    FieldType.BIT: bytes,
    FieldType.GEOMETRY: bytes,
}


def scan_type(column: ColumnDefinition) -> type | None:
    """Return the Python type values of ``column`` decode to, or None if unknown."""
    if column.type == FieldType.TINY and column.length == 1:
        return bool
    return _SCAN_TYPES.get(column.type)