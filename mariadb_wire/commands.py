"""Payloads of the commands the client sends to the server."""

from __future__ import annotations

import datetime
import enum
from typing import Any, Iterable

from .binary_row import encode_param_value
from .column import FieldType

__all__ = [
    "Command",
    "PIPELINE_STMT_ID",
    "new_query",
    "new_prepare",
    "new_execute",
    "set_stmt_id",
    "new_stmt_close",
    "new_ping",
    "new_quit",
    "new_reset_connection",
]

PIPELINE_STMT_ID = 0xFFFFFFFF
"""Statement id meaning "the statement prepared just before" (pipelined prepare+execute)."""

_UNSIGNED_PARAM = 0x80
_INT64_MAX = (1 << 63) - 1


class Command(enum.IntEnum):
    """Command bytes that start a client payload."""

    QUIT = 0x01
    QUERY = 0x03
    PING = 0x0E
    STMT_PREPARE = 0x16
    STMT_EXECUTE = 0x17
    STMT_CLOSE = 0x19
    RESET_CONNECTION = 0x1F


def _u32(value: int) -> bytes:
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"statement id out of range: {value}")
    return value.to_bytes(4, "little")


def new_query(query: str) -> bytes:
    """COM_QUERY payload for ``query``."""
    return bytes([Command.QUERY]) + query.encode("utf-8")


def new_prepare(query: str) -> bytes:
    """COM_STMT_PREPARE payload for ``query``."""
    return bytes([Command.STMT_PREPARE]) + query.encode("utf-8")


def _param_type(value: Any) -> tuple[int, int]:
    if value is None:
        return FieldType.NULL, 0
    if isinstance(value, bool):
        return FieldType.VAR_STRING, 0
    if isinstance(value, int):
        return FieldType.LONGLONG, _UNSIGNED_PARAM if value > _INT64_MAX else 0
    if isinstance(value, float):
        return FieldType.DOUBLE, 0
    if isinstance(value, str):
        return FieldType.VAR_STRING, 0
    if isinstance(value, (bytes, bytearray, memoryview)):
        return FieldType.BLOB, 0
    if isinstance(value, datetime.datetime):
        return FieldType.DATETIME, 0
    return FieldType.VAR_STRING, 0


def new_execute(stmt_id: int, args: Iterable[Any]) -> bytes:
    """COM_STMT_EXECUTE payload binding ``args`` (None is SQL NULL)."""
    values = list(args)
    parts = [bytes([Command.STMT_EXECUTE]), _u32(stmt_id), b"\x00", _u32(1)]
    if values:
        bitmap = bytearray((len(values) + 7) // 8)
        for index, value in enumerate(values):
            if value is None:
                bitmap[index // 8] |= 1 << (index % 8)
        parts.append(bytes(bitmap))
        parts.append(b"\x01")
        parts.extend(bytes(_param_type(value)) for value in values)
        parts.extend(encode_param_value(value) for value in values if value is not None)
    return b"".join(parts)


def set_stmt_id(packet: bytes, stmt_id: int) -> bytes:
    """Return a copy of an execute payload with its statement id replaced."""
    if len(packet) < 5:
        raise ValueError("packet too short to hold a statement id")
    return bytes(packet[:1]) + _u32(stmt_id) + bytes(packet[5:])


def new_stmt_close(stmt_id: int) -> bytes:
    """COM_STMT_CLOSE payload; the server sends no reply."""
    return bytes([Command.STMT_CLOSE]) + _u32(stmt_id)


def new_ping() -> bytes:
    """COM_PING payload."""
    return bytes([Command.PING])


def new_quit() -> bytes:
    """COM_QUIT payload."""
    return bytes([Command.QUIT])


def new_reset_connection() -> bytes:
    """COM_RESET_CONNECTION payload."""
    return bytes([Command.RESET_CONNECTION])