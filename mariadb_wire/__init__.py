"""Building blocks for the MariaDB/MySQL client/server wire protocol."""

__version__ = "0.1.0"

__all__ = [
    "binary_row",
    "capabilities",
    "column",
    "commands",
    "encoding",
    "packet",
    "packetlog",
    "result",
    "text_row",
    "transaction",
]