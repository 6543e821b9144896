"""
Item-processing loops behind the command-line tools.

Each loop handles its items one after another. A failing item is reported and
the loop moves on; the returned exit status is non-zero if anything failed.
"""
from datetime import datetime
from typing import BinaryIO, Iterable, Iterator, Optional, Sequence, Tuple

from pydantic import ValidationError

from flattask.codec import BODY_ENCODING, BODY_ERRORS, read_task
from flattask.logs import get_logger
from flattask.models import TaskRecord
from flattask.recovery import InvalidTaskError, InvalidTaskNameError, TaskError
from flattask.store import TaskStore
from flattask.timeparse import format_datetime, parse_datetime, utc_now

log = get_logger("commands")

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

STDIN_NAME = "-"

READ_SIZE = 8192


def read_body(stream: BinaryIO) -> Optional[str]:
    """Read a task body to EOF; no bytes at all means no body."""
    buffer = bytearray()
    while True:
        chunk = stream.read(READ_SIZE)
        if not chunk:
            break
        buffer += chunk
    if not buffer:
        return None
    return buffer.decode(BODY_ENCODING, BODY_ERRORS)


def build_task(title: str,
               authors: Iterable[str] = (),
               start: Optional[str] = None,
               end: Optional[str] = None,
               body: Optional[str] = None,
               reference: Optional[datetime] = None) -> TaskRecord:
    """
    Assemble a record from command-line style input.

    ``start`` and ``end`` are date-time expressions; both are resolved against
    the same reference time so ``-a . -u .`` gives an empty window.

    Raises:
        DateParseError: Either expression is malformed.
        InvalidTaskError: A field cannot be stored, such as undecodable text.
    """
    if not title:
        raise InvalidTaskNameError("task title must not be empty")
    if reference is None:
        reference = utc_now()

    start_time = parse_datetime(start, reference) if start is not None else None
    end_time = parse_datetime(end, reference) if end is not None else None

    try:
        record = TaskRecord(title=title, authors=tuple(authors),
                            start=start_time, end=end_time, body=body)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(p) for p in error["loc"]) or "task"
        raise InvalidTaskError(f"invalid {field}: {error['msg']}") from e
    if record.window_inverted:
        log.warning(f"Task '{title}' ends before it starts")
    return record


def import_sources(store: TaskStore, sources: Sequence[str], stdin: BinaryIO) -> int:
    """
    Decode each source and save it under the next sequence number.

    ``-`` (or an empty ``sources``) reads from ``stdin``.
    """
    if not sources:
        sources = [STDIN_NAME]

    status = EXIT_SUCCESS
    for source in sources:
        try:
            if source == STDIN_NAME:
                record = read_task(stdin)
            else:
                with open(source, "rb") as f:
                    record = read_task(f)
            path = store.import_record(record)
            log.info(f"Imported '{record.title}' from {source} as {path.name}")
        except (TaskError, OSError) as e:
            log.error(f"{source}: {e}")
            status = EXIT_FAILURE
    return status


def remove_tasks(store: TaskStore, names: Sequence[str]) -> int:
    status = EXIT_SUCCESS
    for name in names:
        try:
            store.remove(name)
        except TaskError as e:
            log.error(f"{name}: {e}")
            status = EXIT_FAILURE
    return status


def describe(name: str, record: TaskRecord) -> str:
    """One-line summary used by the listing."""
    start = format_datetime(record.start) if record.start is not None else "-"
    end = format_datetime(record.end) if record.end is not None else "-"
    return f"{name}\t{start}\t{end}\t{record.title}"


def load_tasks(store: TaskStore) -> Iterator[Tuple[str, Optional[TaskRecord], Optional[TaskError]]]:
    """Yield ``(name, record, error)`` for every file in the store."""
    for name in store.names():
        try:
            yield name, store.load(name), None
        except TaskError as e:
            yield name, None, e
