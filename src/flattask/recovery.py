class TaskError(Exception):
    """Base exception for all flattask errors."""
    pass

class RecoverableError(TaskError):
    """An error that only affects the item being processed."""
    pass

class FatalError(TaskError):
    """An error that cannot be worked around without different input."""
    pass

class FileOperationError(RecoverableError):
    """Reading or writing a store file failed."""
    pass

class TaskNotFoundError(FileOperationError):
    """The named task does not exist in the store."""
    pass

class TaskExistsError(RecoverableError):
    """A task with this name is already present in the store."""

    def __init__(self, name: str):
        super().__init__(f"task '{name}' already exists")
        self.name = name

class ConfigError(FatalError):
    """No usable store location could be determined."""
    pass

class InvalidTaskNameError(FatalError, ValueError):
    """The name cannot be used as a file name inside the store."""
    pass

class InvalidTaskError(FatalError, ValueError):
    """Task fields were rejected while building a record."""
    pass

class ParseError(FatalError, ValueError):
    """Input did not match the expected grammar."""
    pass

class DateParseError(ParseError):
    """A date-time expression was rejected."""
    pass

class RecordFormatError(ParseError):
    """A record stream is structurally invalid or truncated."""
    pass
