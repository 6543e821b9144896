"""
Serialization of task records.

A record is laid out as::

    flattask 1 <header-length> <body-length or ->\\n
    <header: YAML mapping, exactly header-length bytes>
    <body: exactly body-length bytes>

Both sections are length-prefixed, so nothing inside them is ever escaped or
scanned for delimiters: titles, authors and bodies may contain newlines, YAML
document markers or a copy of the preamble itself. A ``-`` body length means
the record has no body, which is not the same thing as an empty one (``0``).

Timestamps are written into the header in the absolute ``HH:MM YYYY-MM-DD``
form, or as ``null`` when the bound is absent.
"""
from typing import Any, BinaryIO, Dict, Optional, Tuple
import io

import yaml
from pydantic import ValidationError

from flattask.logs import get_logger
from flattask.models import RecordHeader, TaskRecord
from flattask.recovery import RecordFormatError
from flattask.schema import validate_header
from flattask.timeparse import format_datetime, parse_absolute
from flattask.version import RECORD_FORMAT_VERSION

log = get_logger("codec")

MAGIC = b"flattask"
NO_BODY = b"-"
BODY_ENCODING = "utf-8"
# Bodies are arbitrary bytes; undecodable ones survive a round trip intact.
BODY_ERRORS = "surrogateescape"

# Longest possible preamble line, newline included
MAX_PREAMBLE = 64
CHUNK_SIZE = 64 * 1024


def _header_data(record: TaskRecord) -> Dict[str, Any]:
    return {
        "title": record.title,
        "authors": list(record.authors),
        "start": format_datetime(record.start) if record.start is not None else None,
        "end": format_datetime(record.end) if record.end is not None else None,
    }


def encode_task(record: TaskRecord) -> bytes:
    """Serialize a record into its byte form."""
    # Non-ASCII is escaped so the YAML loader cannot fold exotic line breaks
    header = yaml.safe_dump(
        _header_data(record),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=False,
        width=float("inf"),
    ).encode("ascii")

    if record.body is None:
        body = b""
        body_length = NO_BODY
    else:
        body = record.body.encode(BODY_ENCODING, BODY_ERRORS)
        body_length = str(len(body)).encode("ascii")

    preamble = b" ".join([
        MAGIC,
        str(RECORD_FORMAT_VERSION).encode("ascii"),
        str(len(header)).encode("ascii"),
        body_length,
    ]) + b"\n"

    log.debug(f"Encoded task '{record.title}': header {len(header)} bytes, body {body_length.decode()}")
    return preamble + header + body


def _write_all(sink: BinaryIO, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = sink.write(view)
        if written is None:
            # Buffered sinks take everything in one call
            break
        view = view[written:]


def write_task(record: TaskRecord, sink: BinaryIO) -> None:
    """
    Write one record to a binary sink.

    Raw sinks that accept only part of the data are written to again until
    everything is out. Errors raised by the sink propagate unchanged.
    """
    _write_all(sink, encode_task(record))
    flush = getattr(sink, "flush", None)
    if flush is not None:
        flush()


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """Read exactly ``size`` bytes, retrying short reads until EOF."""
    buffer = bytearray()
    while len(buffer) < size:
        chunk = stream.read(min(size - len(buffer), CHUNK_SIZE))
        if not chunk:
            raise RecordFormatError(
                f"record truncated: expected {size} bytes of {what}, got {len(buffer)}"
            )
        buffer += chunk
    return bytes(buffer)


def _parse_length(raw: bytes, what: str) -> int:
    if not raw.isdigit():
        raise RecordFormatError(f"invalid {what} length {raw!r} in record preamble")
    return int(raw)


def _read_preamble(stream: BinaryIO) -> Tuple[int, Optional[int]]:
    line = stream.readline(MAX_PREAMBLE)
    if not line:
        raise RecordFormatError("empty record stream")
    if not line.endswith(b"\n"):
        raise RecordFormatError(f"record preamble is truncated or too long: {line!r}")

    fields = line[:-1].split(b" ")
    if len(fields) != 4 or fields[0] != MAGIC:
        raise RecordFormatError(f"not a task record: {line!r}")

    _, version, header_length, body_length = fields
    if version != str(RECORD_FORMAT_VERSION).encode("ascii"):
        raise RecordFormatError(
            f"unsupported record format version {version.decode('ascii', 'replace')!r}"
        )

    header_size = _parse_length(header_length, "header")
    if body_length == NO_BODY:
        body_size = None
    else:
        body_size = _parse_length(body_length, "body")
    return header_size, body_size


def _parse_timestamp(value: Optional[str], field: str):
    if value is None:
        return None
    parsed = parse_absolute(value)
    if parsed is None:
        raise RecordFormatError(f"invalid {field} time {value!r} in record header")
    return parsed


def _parse_header(raw: bytes) -> RecordHeader:
    try:
        data = yaml.safe_load(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise RecordFormatError(f"record header is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise RecordFormatError(f"record header is not valid YAML: {e}") from e

    validate_header(data)
    try:
        return RecordHeader.model_validate(data)
    except ValidationError as e:
        raise RecordFormatError(f"invalid record header: {e}") from e


def read_task(stream: BinaryIO) -> TaskRecord:
    """
    Read exactly one record from a binary stream.

    Anything following the record is left unread.

    Raises:
        RecordFormatError: The stream is empty, truncated, or does not hold a
            well-formed record.
    """
    header_size, body_size = _read_preamble(stream)
    header = _parse_header(_read_exact(stream, header_size, "header"))

    body = None
    if body_size is not None:
        body = _read_exact(stream, body_size, "body").decode(BODY_ENCODING, BODY_ERRORS)

    record = TaskRecord(
        title=header.title,
        authors=tuple(header.authors),
        start=_parse_timestamp(header.start, "start"),
        end=_parse_timestamp(header.end, "end"),
        body=body,
    )
    log.debug(f"Decoded task '{record.title}'")
    return record


def decode_task(data: bytes) -> TaskRecord:
    """Decode a record held in memory; trailing bytes are ignored."""
    return read_task(io.BytesIO(data))
