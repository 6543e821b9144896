"""
Location of the task store and of the log files.

The store lives in ``$XDG_DATA_HOME/tasks`` or, when that variable is unset or
empty, in ``$HOME/.tasks``. ``$FLATTASK_STORE`` (or ``--store`` on the command
line) overrides both.
"""
import os
from pathlib import Path
from typing import Mapping, Optional

from flattask.recovery import ConfigError

STORE_ENV = "FLATTASK_STORE"
LOG_LEVEL_ENV = "FLATTASK_LOG_LEVEL"
DEBUG_ENV = "FLATTASK_DEBUG"

XDG_STORE_DIR = "tasks"
HOME_STORE_DIR = ".tasks"

NOHOME = "the 'HOME' environment variable must be set"


def _data_home(environ: Mapping[str, str]) -> Optional[Path]:
    xdg = environ.get("XDG_DATA_HOME", "")
    if xdg:
        return Path(xdg)
    return None


def resolve_store_dir(override: Optional[str] = None,
                      environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Work out which directory holds the task files.

    Args:
        override: Explicit directory, e.g. from ``--store``.
        environ: Environment to read; defaults to ``os.environ``.

    Returns:
        The store directory. It is not created here.

    Raises:
        ConfigError: Neither ``XDG_DATA_HOME`` nor ``HOME`` is usable.
    """
    if environ is None:
        environ = os.environ

    if override:
        return Path(override).expanduser()
    if environ.get(STORE_ENV):
        return Path(environ[STORE_ENV]).expanduser()

    data_home = _data_home(environ)
    if data_home is not None:
        return data_home / XDG_STORE_DIR

    home = environ.get("HOME")
    if home is None:
        raise ConfigError(NOHOME)
    return Path(home) / HOME_STORE_DIR


def log_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Directory for the detailed log file."""
    if environ is None:
        environ = os.environ

    data_home = _data_home(environ)
    if data_home is None:
        home = environ.get("HOME")
        if home is None:
            raise ConfigError(NOHOME)
        data_home = Path(home) / ".local" / "share"
    return data_home / "flattask" / "logs"
