"""Length-encoded integers and strings used throughout the wire protocol."""

from __future__ import annotations

__all__ = [
    "ProtocolError",
    "read_lenenc_int",
    "read_lenenc_str",
    "write_lenenc_int",
    "write_lenenc_str",
    "read_null_terminated",
]

_MAX_LENENC = 1 << 64


class ProtocolError(Exception):
    """Raised when a packet is malformed or truncated."""


def _require(data: bytes, end: int, what: str) -> None:
    if end > len(data):
        raise ProtocolError(f"{what}: packet truncated")


def read_lenenc_int(data: bytes, pos: int) -> tuple[int, int]:
    """Read a length-encoded integer at ``pos``; return ``(value, new_pos)``."""
    _require(data, pos + 1, "length-encoded integer")
    first = data[pos]
    pos += 1
    if first < 0xFB:
        return first, pos
    widths = {0xFC: 2, 0xFD: 3, 0xFE: 8}
    width = widths.get(first)
    if width is None:
        raise ProtocolError(f"invalid length-encoded integer marker: 0x{first:x}")
    _require(data, pos + width, "length-encoded integer")
    return int.from_bytes(data[pos:pos + width], "little"), pos + width


def read_lenenc_str(data: bytes, pos: int) -> tuple[str, int]:
    """Read a length-encoded string at ``pos``; return ``(text, new_pos)``."""
    length, start = read_lenenc_int(data, pos)
    end = start + length
    _require(data, end, "length-encoded string")
    return bytes(data[start:end]).decode("utf-8", errors="replace"), end


def write_lenenc_int(value: int) -> bytes:
    """Encode ``value`` as a length-encoded integer."""
    if value < 0 or value >= _MAX_LENENC:
        raise ValueError(f"value out of range for a length-encoded integer: {value}")
    if value < 251:
        return bytes([value])
    if value < 1 << 16:
        return b"\xfc" + value.to_bytes(2, "little")
    if value < 1 << 24:
        return b"\xfd" + value.to_bytes(3, "little")
    return b"\xfe" + value.to_bytes(8, "little")


def write_lenenc_str(value: str | bytes) -> bytes:
    """Encode text (as UTF-8) or bytes with a length-encoded prefix."""
    raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    return write_lenenc_int(len(raw)) + raw


def read_null_terminated(data: bytes, pos: int) -> tuple[str, int]:
    """Read a NUL-terminated string at ``pos``; return ``(text, pos_after_nul)``."""
    end = bytes(data).find(b"\x00", pos)
    if end < 0:
        raise ProtocolError("null terminator not found")
    return bytes(data[pos:end]).decode("utf-8", errors="replace"), end + 1