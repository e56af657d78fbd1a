"""Command completions: OK and EOF packets and result-set bookkeeping."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol

from .column import ColumnDefinition
from .encoding import ProtocolError, read_lenenc_int, read_lenenc_str

__all__ = [
    "ServerStatus",
    "ContextUpdater",
    "Completion",
    "parse_ok_packet",
    "parse_eof_packet",
]


class ServerStatus(enum.IntFlag):
    """Server status flags carried by OK and EOF packets."""

    IN_TRANS = 0x0001
    AUTOCOMMIT = 0x0002
    MORE_RESULTS_EXISTS = 0x0008
    QUERY_NO_GOOD_INDEX_USED = 0x0010
    QUERY_NO_INDEX_USED = 0x0020
    CURSOR_EXISTS = 0x0040
    LAST_ROW_SENT = 0x0080
    DB_DROPPED = 0x0100
    NO_BACKSLASH_ESCAPES = 0x0200
    METADATA_CHANGED = 0x0400
    QUERY_WAS_SLOW = 0x0800
    PS_OUT_PARAMS = 0x1000
    IN_TRANS_READONLY = 0x2000
    SESSION_STATE_CHANGED = 0x4000


class ContextUpdater(Protocol):
    """Connection state that completion packets update."""

    def set_server_status(self, status: int) -> None: ...

    def set_warning_count(self, count: int) -> None: ...


@dataclass
class Completion:
    """Outcome of a command: OK/EOF fields plus any result set."""

    affected_rows: int = 0
    insert_id: int = 0
    warning_count: int = 0
    server_status: int = 0
    message: str = ""
    columns: list[ColumnDefinition] = field(default_factory=list)
    binary: bool = False
    rows: list[bytes] = field(default_factory=list)
    loaded: bool = False

    def has_result_set(self) -> bool:
        """Whether this completion carries a result set."""
        return bool(self.columns)


def _to_int64(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


def _update(ctx: ContextUpdater | None, status: int, warnings: int) -> None:
    if ctx is not None:
        ctx.set_server_status(status)
        ctx.set_warning_count(warnings)


def parse_ok_packet(data: bytes, ctx: ContextUpdater | None = None) -> Completion:
    """Decode an OK packet (header 0x00 or 0xFE) and report status to ``ctx``."""
    if len(data) < 7:
        raise ProtocolError("OK packet truncated")
    affected, pos = read_lenenc_int(data, 1)
    insert_id, pos = read_lenenc_int(data, pos)
    if pos + 4 > len(data):
        raise ProtocolError("OK packet truncated")
    status = int.from_bytes(data[pos:pos + 2], "little")
    warnings = int.from_bytes(data[pos + 2:pos + 4], "little")
    pos += 4
    _update(ctx, status, warnings)

    message = ""
    if pos < len(data):
        try:
            message, pos = read_lenenc_str(data, pos)
        except ProtocolError:
            pass

    return Completion(
        affected_rows=_to_int64(affected),
        insert_id=_to_int64(insert_id),
        warning_count=warnings,
        server_status=status,
        message=message,
        loaded=True,
    )


def parse_eof_packet(data: bytes, ctx: ContextUpdater | None = None) -> Completion:
    """Decode a classic EOF packet and report status to ``ctx``."""
    if len(data) < 5:
        raise ProtocolError("EOF packet truncated")
    warnings = int.from_bytes(data[1:3], "little")
    status = int.from_bytes(data[3:5], "little")
    _update(ctx, status, warnings)
    return Completion(warning_count=warnings, server_status=status, loaded=True)