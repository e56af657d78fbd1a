"""Framing of protocol packets: 3-byte length, 1-byte sequence, payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .encoding import ProtocolError
from .packetlog import PacketLogger, get_logger

__all__ = [
    "HEADER_SIZE",
    "MAX_PACKET_SIZE",
    "SequenceCounter",
    "PacketReader",
    "PacketWriter",
]

HEADER_SIZE = 4
MAX_PACKET_SIZE = 0xFFFFFF


@dataclass
class SequenceCounter:
    """Packet sequence number shared by a connection's reader and writer."""

    value: int = 0

    def _take(self) -> int:
        current = self.value
        self.value = (current + 1) & 0xFF
        return current


def _header(length: int, sequence: int) -> bytes:
    return length.to_bytes(3, "little") + bytes([sequence])


class PacketReader:
    """Reads logical packets from a binary stream, joining split payloads."""

    def __init__(
        self,
        stream: BinaryIO,
        sequence: SequenceCounter | None = None,
        logger: PacketLogger | None = None,
    ) -> None:
        self._stream = stream
        self.sequence = sequence if sequence is not None else SequenceCounter()
        self._logger = logger if logger is not None else get_logger()

    def _read_exact(self, size: int, what: str) -> bytes:
        buf = bytearray()
        while len(buf) < size:
            chunk = self._stream.read(size - len(buf))
            if not chunk:
                raise ProtocolError(f"failed to read {what}: unexpected end of stream")
            buf += chunk
        return bytes(buf)

    def _read_chunk(self) -> tuple[bytes, int]:
        header = self._read_exact(HEADER_SIZE, "packet header")
        length = int.from_bytes(header[:3], "little")
        received = header[3]
        expected = self.sequence.value
        if received != expected:
            raise ProtocolError(f"sequence mismatch: expected {expected}, got {received}")
        self.sequence._take()
        return self._read_exact(length, "packet data"), received

    def read_packet(self) -> bytes:
        """Read one packet; payloads of exactly the maximum size continue in the next."""
        data, sequence = self._read_chunk()
        if len(data) == MAX_PACKET_SIZE:
            parts = [data]
            while True:
                chunk, _ = self._read_chunk()
                parts.append(chunk)
                if len(chunk) < MAX_PACKET_SIZE:
                    break
            data = b"".join(parts)
        if self._logger.is_enabled():
            self._logger.log_receive(data, sequence)
        return data

    def reset_sequence(self) -> None:
        """Start a new command exchange at sequence 0."""
        self.sequence.value = 0


class PacketWriter:
    """Writes payloads to a binary stream, splitting those too large for one packet."""

    def __init__(
        self,
        stream: BinaryIO,
        sequence: SequenceCounter | None = None,
        logger: PacketLogger | None = None,
    ) -> None:
        self._stream = stream
        self.sequence = sequence if sequence is not None else SequenceCounter()
        self._logger = logger if logger is not None else get_logger()

    def write_packet(self, data: bytes) -> None:
        """Send ``data``; an empty payload or an exact-maximum final chunk sends an empty packet."""
        if self._logger.is_enabled():
            self._logger.log_send(bytes(data), self.sequence.value)

        if not data:
            self._stream.write(_header(0, self.sequence._take()))
            return

        view = memoryview(data)
        for offset in range(0, len(view), MAX_PACKET_SIZE):
            chunk = view[offset:offset + MAX_PACKET_SIZE]
            self._stream.write(_header(len(chunk), self.sequence._take()) + bytes(chunk))
        if len(view) % MAX_PACKET_SIZE == 0:
            self._stream.write(_header(0, self.sequence._take()))

    def reset_sequence(self) -> None:
        """Start a new command exchange at sequence 0."""
        self.sequence.value = 0