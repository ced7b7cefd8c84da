"""Process-wide logging to stdout and, after setup, a dated file."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import IO

_FORMAT = "[%(flag)s][%(filename)s:%(lineno)d] %(asctime)s %(message)s"
_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


@dataclass
class Settings:
    """Where and how the log file is named."""

    path: str
    name: str
    ext: str
    time_format: str


class _StdoutHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stdout`` is at the time of the record."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stdout
        super().emit(record)


def _make_handler(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(logging.Formatter(_FORMAT, _DATE_FORMAT))
    return handler


_log = logging.getLogger("tinyredis")
_log.setLevel(logging.DEBUG)
_log.propagate = False
_log.addHandler(_make_handler(_StdoutHandler()))


def must_open(file_name: str, directory: str) -> IO[str]:
    """Open ``directory/file_name`` for appending, creating the directory."""
    try:
        os.stat(directory)
    except PermissionError as exc:
        raise PermissionError(f"permission denied dir: {directory}") from exc
    except FileNotFoundError:
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise OSError(f"error during make dir {directory}, err: {exc}") from exc
    try:
        return open(os.path.join(directory, file_name), "a", encoding="utf-8")
    except OSError as exc:
        raise OSError(f"fail to open file, err: {exc}") from exc


def setup(settings: Settings) -> None:
    """Send log output to stdout and to a dated file named by the settings."""
    stamp = datetime.now().strftime(settings.time_format)
    file_name = f"{settings.name}-{stamp}.{settings.ext}"
    try:
        log_file = must_open(file_name, settings.path)
    except OSError as exc:
        raise SystemExit(f"logging.Setup err: {exc}") from exc

    for handler in list(_log.handlers):
        _log.removeHandler(handler)
        if not isinstance(handler, _StdoutHandler):
            handler.close()
    _log.addHandler(_make_handler(_StdoutHandler()))
    _log.addHandler(_make_handler(logging.StreamHandler(log_file)))


def _emit(level: int, flag: str, args: tuple) -> None:
    message = " ".join(str(a) for a in args)
    _log.log(level, message, extra={"flag": flag}, stacklevel=3)


def debug(*args) -> None:
    """Log at debug level."""
    _emit(logging.DEBUG, "DEBUG", args)


def info(*args) -> None:
    """Log at info level."""
    _emit(logging.INFO, "INFO", args)


def warn(*args) -> None:
    """Log a warning."""
    _emit(logging.WARNING, "WARN", args)


def error(*args) -> None:
    """Log an error."""
    _emit(logging.ERROR, "ERROR", args)


def fatal(*args) -> None:
    """Log a fatal error and stop the program."""
    _emit(logging.CRITICAL, "FATAL", args)
    raise SystemExit(1)