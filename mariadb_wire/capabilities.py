"""Client capability flags and their negotiation with the server."""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = [
    "Capability",
    "CapabilityConfig",
    "DEFAULT_CLIENT_CAPABILITIES",
    "initialize_client_capabilities",
]


class Capability(enum.IntFlag):
    """Capability bits exchanged during the handshake (upper 32 bits are MariaDB-specific)."""

    CLIENT_MYSQL = 1
    FOUND_ROWS = 1 << 1
    LONG_FLAG = 1 << 2
    CONNECT_WITH_DB = 1 << 3
    NO_SCHEMA = 1 << 4
    COMPRESS = 1 << 5
    ODBC = 1 << 6
    LOCAL_FILES = 1 << 7
    IGNORE_SPACE = 1 << 8
    PROTOCOL_41 = 1 << 9
    INTERACTIVE = 1 << 10
    SSL = 1 << 11
    IGNORE_SIGPIPE = 1 << 12
    TRANSACTIONS = 1 << 13
    RESERVED = 1 << 14
    SECURE_CONNECTION = 1 << 15
    MULTI_STATEMENTS = 1 << 16
    MULTI_RESULTS = 1 << 17
    PS_MULTI_RESULTS = 1 << 18
    PLUGIN_AUTH = 1 << 19
    CONNECT_ATTRS = 1 << 20
    PLUGIN_AUTH_LENENC_CLIENT_DATA = 1 << 21
    CAN_HANDLE_EXPIRED_PASSWORDS = 1 << 22
    SESSION_TRACK = 1 << 23
    DEPRECATE_EOF = 1 << 24
    PROGRESS = 1 << 32
    COM_MULTI = 1 << 33
    STMT_BULK_OPERATIONS = 1 << 34
    EXTENDED_METADATA = 1 << 35
    CACHE_METADATA = 1 << 36
    BULK_UNIT_RESULTS = 1 << 37


DEFAULT_CLIENT_CAPABILITIES = (
    Capability.IGNORE_SPACE
    | Capability.PROTOCOL_41
    | Capability.TRANSACTIONS
    | Capability.SECURE_CONNECTION
    | Capability.MULTI_RESULTS
    | Capability.PS_MULTI_RESULTS
    | Capability.PLUGIN_AUTH
    | Capability.CONNECT_ATTRS
    | Capability.PLUGIN_AUTH_LENENC_CLIENT_DATA
    | Capability.DEPRECATE_EOF
)

_REQUESTED = (
    DEFAULT_CLIENT_CAPABILITIES
    | Capability.INTERACTIVE
    | Capability.CACHE_METADATA
    | Capability.EXTENDED_METADATA
)


@dataclass(frozen=True)
class CapabilityConfig:
    """Connection options that influence which capabilities are requested."""

    allow_multi_statements: bool = False
    use_affected_rows: bool = False
    allow_local_infile: bool = False
    use_compression: bool = False
    use_bulk_stmts: bool = False


def initialize_client_capabilities(
    config: CapabilityConfig, server_capabilities: int, database: str
) -> Capability:
    """Return the wanted client capabilities restricted to those the server offers."""
    capabilities = _REQUESTED
    if not config.use_affected_rows:
        capabilities |= Capability.FOUND_ROWS
    if config.allow_multi_statements:
        capabilities |= Capability.MULTI_STATEMENTS
    if config.allow_local_infile:
        capabilities |= Capability.LOCAL_FILES
    if config.use_compression:
        capabilities |= Capability.COMPRESS
    if database:
        capabilities |= Capability.CONNECT_WITH_DB
    return Capability(capabilities & server_capabilities)