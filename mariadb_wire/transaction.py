"""Transactions and savepoints on an open connection."""

from __future__ import annotations

from typing import Protocol

__all__ = [
    "BadConnectionError",
    "TransactionConnection",
    "Transaction",
    "escape_identifier",
]


class BadConnectionError(Exception):
    """The connection is closed or unusable."""


class TransactionConnection(Protocol):
    """What a transaction needs from its connection."""

    def is_closed(self) -> bool: ...

    def execute(self, query: str) -> object: ...


def escape_identifier(name: str) -> str:
    """Quote an SQL identifier with backticks, doubling any backticks inside it."""
    return "`" + name.replace("`", "``") + "`"


class Transaction:
    """An open transaction on a connection."""

    def __init__(self, connection: TransactionConnection) -> None:
        self.connection = connection

    def _run(self, query: str) -> None:
        if self.connection.is_closed():
            raise BadConnectionError("connection is closed")
        self.connection.execute(query)

    def commit(self) -> None:
        """Commit the transaction."""
        self._run("COMMIT")

    def rollback(self) -> None:
        """Abort the transaction."""
        self._run("ROLLBACK")

    def savepoint(self, name: str) -> None:
        """Create a savepoint called ``name``."""
        self._run(f"SAVEPOINT {escape_identifier(name)}")

    def rollback_to_savepoint(self, name: str) -> None:
        """Roll back to the savepoint called ``name``."""
        self._run(f"ROLLBACK TO SAVEPOINT {escape_identifier(name)}")

    def release_savepoint(self, name: str) -> None:
        """Release the savepoint called ``name``."""
        self._run(f"RELEASE SAVEPOINT {escape_identifier(name)}")