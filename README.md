# mariadb-wire

Pure-Python pieces of the MariaDB/MySQL client/server protocol: packet
framing, length-encoded values, capability negotiation, OK and EOF packets,
column definitions, text and binary result rows, statement parameters,
client command payloads and transaction statements. There are no
third-party dependencies.

The package does not open sockets. You give it binary streams and bytes and
it gives back Python values, so it can sit under a driver, a proxy or a test
harness.

## Install

```
pip install mariadb-wire
```

To run the test suite:

```
pip install "mariadb-wire[test]"
pytest
```

## Modules

- `mariadb_wire.encoding`: `read_lenenc_int`, `read_lenenc_str` and
  `read_null_terminated` return `(value, next_position)`;
  `write_lenenc_int` and `write_lenenc_str` return bytes. Truncated or
  malformed input raises `ProtocolError`.
- `mariadb_wire.packet`: `PacketReader.read_packet()` and
  `PacketWriter.write_packet(data)` add and strip the 4-byte headers, split
  and join payloads of 16 MiB and more, and check sequence numbers (a
  mismatch raises `ProtocolError`). A reader and a writer can share one
  `SequenceCounter`; `reset_sequence()` sets it back to 0.
- `mariadb_wire.capabilities`: the `Capability` flags,
  `DEFAULT_CLIENT_CAPABILITIES`, the `CapabilityConfig` options and
  `initialize_client_capabilities(config, server_capabilities, database)`,
  which returns the client's wanted flags limited to those the server offers.
- `mariadb_wire.result`: `Completion`, `parse_ok_packet`, `parse_eof_packet`
  and the `ServerStatus` flags. Both parsers accept an optional object with
  `set_server_status` and `set_warning_count` methods (`ContextUpdater`) and
  report the packet's status to it.
- `mariadb_wire.column`: `ColumnDefinition`,
  `parse_column_definition(data, ext_metadata)`, `FieldType`, `ColumnFlag`,
  `type_to_string` and `scan_type`. With `ext_metadata=True` the extended
  type and format of a column are read into `extended_type` and `format`.
- `mariadb_wire.text_row` and `mariadb_wire.binary_row`: `parse_text_row`,
  `parse_binary_row` and `encode_param_value`.
- `mariadb_wire.commands`: `new_query`, `new_prepare`, `new_execute`,
  `set_stmt_id`, `new_stmt_close`, `new_ping`, `new_quit`,
  `new_reset_connection`, the `Command` bytes and `PIPELINE_STMT_ID`. These
  return payloads without a header; send them with `PacketWriter`.
- `mariadb_wire.transaction`: `Transaction` with `commit`, `rollback`,
  `savepoint`, `rollback_to_savepoint` and `release_savepoint`, and
  `escape_identifier`. A transaction wraps any object with `is_closed()` and
  `execute(query)`; if the connection is closed, `BadConnectionError` is
  raised.
- `mariadb_wire.packetlog`: `DebugLogger` (hex dumps to standard output or a
  stream you pass), `NullLogger`, `set_logger`, `get_logger` and `hex_dump`.
  Readers and writers created without a logger use the one `get_logger()`
  returns at that moment.

## Example

```python
import io

from mariadb_wire.commands import new_query
from mariadb_wire.packet import PacketReader, PacketWriter, SequenceCounter

seq = SequenceCounter()
stream = io.BytesIO()
PacketWriter(stream, seq).write_packet(new_query("SELECT 1"))

stream.seek(0)
reader = PacketReader(stream, seq)
reader.reset_sequence()
payload = reader.read_packet()   # b"\x03SELECT 1"
```

Result rows are decoded with the column definitions that come before them:

```python
from mariadb_wire.column import parse_column_definition
from mariadb_wire.text_row import parse_text_row

columns = [parse_column_definition(packet, ext_metadata=False) for packet in column_packets]
values = parse_text_row(row_packet, columns)
```

## Value types

- Integer columns give `int`; TINYINT with display length 1 gives `bool`.
- FLOAT and DOUBLE give `float`; DECIMAL, JSON, ENUM, SET and character
  columns give `str`.
- DATE, DATETIME and TIMESTAMP give a UTC `datetime.datetime`. In the text
  protocol a zero date gives `None`; in the binary protocol it gives
  `datetime.datetime(1, 1, 1, tzinfo=timezone.utc)`.
- TIME gives `datetime.timedelta`.
- Columns with the binary character set give `bytes`.

`encode_param_value` and `new_execute` take `str`, `bytes`, `int` (signed or
unsigned 64-bit), `float`, `datetime.datetime` and `None` (SQL NULL); a
`bool` is sent as the text `true` or `false`, and anything else as its
`str()`.

## What it does not do

The package has no connection handshake or authentication, and it does not
decode server error packets (those starting with 0xFF): a driver built on it
has to handle both itself. There is no connection object, connection pool,
DSN parsing or command-line tool.