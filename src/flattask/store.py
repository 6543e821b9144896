"""
TaskStore - one regular file per task inside a single directory.

Files are named either after the task title or, for records imported from an
anonymous stream, after an 8-digit sequence number taken from the number of
regular files already in the directory.
"""
import os
from pathlib import Path
from typing import BinaryIO, List, Union

from flattask.codec import read_task, write_task
from flattask.logs import get_logger
from flattask.models import TaskRecord
from flattask.recovery import (
    FileOperationError,
    InvalidTaskNameError,
    TaskExistsError,
    TaskNotFoundError,
)

log = get_logger("store")

SEQUENCE_WIDTH = 8
FILE_MODE = 0o666


class TaskStore:
    """Maps task records to files in ``root``.

    There is no locking: the store assumes a single writer at a time.
    Exclusive creation still guarantees an existing task is never overwritten.
    """

    def __init__(self, root: Union[Path, str]):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"TaskStore({str(self.root)!r})"

    def ensure(self) -> "TaskStore":
        """Create the store directory if it does not exist yet."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error_msg = f"Cannot create task directory {self.root}: {e}"
            log.error(error_msg)
            raise FileOperationError(error_msg) from e
        return self

    @staticmethod
    def check_name(name: str) -> str:
        """Reject names that would not map to a single file inside the store."""
        if not name or name in (".", ".."):
            raise InvalidTaskNameError(f"invalid task name {name!r}")
        separators = {"/", "\0", os.sep}
        if os.altsep:
            separators.add(os.altsep)
        for sep in separators:
            if sep in name:
                raise InvalidTaskNameError(f"task name {name!r} must not contain {sep!r}")
        return name

    @staticmethod
    def sequence_name(number: int) -> str:
        return f"{number:0{SEQUENCE_WIDTH}d}"

    def path_for(self, name: str) -> Path:
        return self.root / self.check_name(name)

    def _regular_files(self) -> List[os.DirEntry]:
        try:
            with os.scandir(self.root) as entries:
                return [e for e in entries if e.is_file(follow_symlinks=False)]
        except OSError as e:
            raise FileOperationError(f"Cannot list task directory {self.root}: {e}") from e

    def next_sequence_id(self) -> int:
        """Number of regular files currently in the store."""
        return len(self._regular_files())

    def names(self) -> List[str]:
        """Sorted names of all task files."""
        return sorted(e.name for e in self._regular_files())

    def create_exclusive(self, name: str) -> BinaryIO:
        """
        Open a new task file for writing.

        Raises:
            TaskExistsError: Something named ``name`` is already in the store;
                it is left untouched.
            FileOperationError: The file could not be created.
        """
        path = self.path_for(name)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE)
        except FileExistsError as e:
            raise TaskExistsError(name) from e
        except OSError as e:
            raise FileOperationError(f"Cannot create task file {path}: {e}") from e
        return os.fdopen(fd, "wb")

    def write(self, name: str, record: TaskRecord) -> Path:
        """Write ``record`` to a new file called ``name``."""
        path = self.path_for(name)
        success = False
        with self.create_exclusive(name) as sink:
            try:
                write_task(record, sink)
                success = True
            except OSError as e:
                error_msg = f"I/O error writing task file {path}: {e}"
                log.error(error_msg)
                raise FileOperationError(error_msg) from e
            finally:
                if not success:
                    self._discard(path)
        log.debug(f"Saved task '{record.title}' as {path}")
        return path

    def _discard(self, path: Path) -> None:
        try:
            path.unlink()
            log.debug(f"Removed partial task file: {path}")
        except OSError as cleanup_error:
            log.warning(f"Could not remove partial task file {path}: {cleanup_error}")

    def add(self, record: TaskRecord) -> Path:
        """Save a record under its own title."""
        return self.write(record.title, record)

    def import_record(self, record: TaskRecord) -> Path:
        """Save a record under the next sequence number."""
        return self.write(self.sequence_name(self.next_sequence_id()), record)

    def load(self, name: str) -> TaskRecord:
        path = self.path_for(name)
        try:
            with open(path, "rb") as f:
                return read_task(f)
        except FileNotFoundError as e:
            raise TaskNotFoundError(f"no such task: '{name}'") from e
        except OSError as e:
            raise FileOperationError(f"Failed to read task file {path}: {e}") from e

    def remove(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise TaskNotFoundError(f"no such task: '{name}'") from e
        except OSError as e:
            raise FileOperationError(f"Cannot remove task file {path}: {e}") from e
        log.debug(f"Removed task file {path}")
