"""
flattask - a minimal personal task tracker.

Every task is a single file in a task directory. The package provides the
record format (``codec``), the date-time expression parser (``timeparse``),
the directory mapping (``store``) and the command-line tools built on them.
"""

from .version import VERSION, RECORD_FORMAT_VERSION
from .models import TaskRecord
from .timeparse import parse_datetime, format_datetime
from .codec import read_task, write_task, encode_task, decode_task
from .store import TaskStore
from .recovery import (
    TaskError,
    InvalidTaskError,
    ParseError,
    DateParseError,
    RecordFormatError,
    TaskExistsError,
    TaskNotFoundError,
)

__version__ = VERSION

__all__ = [
    "VERSION",
    "RECORD_FORMAT_VERSION",
    "TaskRecord",
    "parse_datetime",
    "format_datetime",
    "read_task",
    "write_task",
    "encode_task",
    "decode_task",
    "TaskStore",
    "TaskError",
    "InvalidTaskError",
    "ParseError",
    "DateParseError",
    "RecordFormatError",
    "TaskExistsError",
    "TaskNotFoundError",
]
