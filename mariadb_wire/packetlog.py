"""Packet tracing: hex dumps of traffic and the process-wide packet logger."""

from __future__ import annotations

import abc
import datetime
import sys
from typing import TextIO

__all__ = [
    "PacketLogger",
    "DebugLogger",
    "NullLogger",
    "hex_dump",
    "set_logger",
    "get_logger",
]

_RULE_TOP = "       +--------------------------------------------------+\n"
_RULE_COLS = "       |  0  1  2  3  4  5  6  7   8  9  a  b  c  d  e  f |\n"
_RULE_ROW = "+------+--------------------------------------------------+------------------+\n"


def hex_dump(data: bytes) -> str:
    """Render ``data`` as a boxed hex dump with an ASCII column; empty input gives ""."""
    if not data:
        return ""
    parts = [_RULE_TOP, _RULE_COLS, _RULE_ROW]
    for start in range(0, len(data), 16):
        chunk = bytes(data[start:start + 16])
        parts.append(f"|{start:06X}| ")
        for index, value in enumerate(chunk):
            parts.append(f"{value:02X} ")
            if index == 7:
                parts.append(" ")
        for index in range(len(chunk), 16):
            parts.append("   ")
            if index == 8:
                parts.append(" ")
        text = "".join(chr(b) if 31 < b < 127 else "." for b in chunk)
        parts.append("| " + text.ljust(16) + " |\n")
    parts.append(_RULE_ROW)
    return "".join(parts)


class PacketLogger(abc.ABC):
    """Receives every packet sent to and received from the server."""

    @abc.abstractmethod
    def log_send(self, data: bytes, sequence: int) -> None:
        """Record a packet sent to the server."""

    @abc.abstractmethod
    def log_receive(self, data: bytes, sequence: int) -> None:
        """Record a packet received from the server."""

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        """Whether packets should be passed to this logger at all."""


class DebugLogger(PacketLogger):
    """Writes a timestamped hex dump of each packet to a text stream (stdout by default)."""

    PREFIX = "[MariaDB] "

    def __init__(self, enabled: bool = True, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self._stream = stream

    def is_enabled(self) -> bool:
        return self.enabled

    def log_send(self, data: bytes, sequence: int) -> None:
        self._emit("==> SEND", data, sequence)

    def log_receive(self, data: bytes, sequence: int) -> None:
        self._emit("<== RECV", data, sequence)

    def _emit(self, direction: str, data: bytes, sequence: int) -> None:
        if not self.enabled:
            return
        stream = self._stream if self._stream is not None else sys.stdout
        stamp = datetime.datetime.now().strftime("%Y/%m/%d %H:%M:%S.%f")
        stream.write(
            f"{self.PREFIX}{stamp} {direction} (seq={sequence}, len={len(data)})\n"
            f"{hex_dump(data)}"
        )


class NullLogger(PacketLogger):
    """Discards everything."""

    def log_send(self, data: bytes, sequence: int) -> None:
        pass

    def log_receive(self, data: bytes, sequence: int) -> None:
        pass

    def is_enabled(self) -> bool:
        return False


_current: PacketLogger = NullLogger()


def set_logger(logger: PacketLogger | None) -> None:
    """Install the process-wide packet logger; None restores the no-op logger."""
    global _current
    _current = NullLogger() if logger is None else logger


def get_logger() -> PacketLogger:
    """Return the process-wide packet logger."""
    return _current