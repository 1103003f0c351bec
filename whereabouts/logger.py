"""Levelled logging to standard error and an optional log file."""

from __future__ import annotations

import sys
import traceback
from datetime import datetime
from enum import IntEnum
from typing import Optional, TextIO


class Level(IntEnum):
    """Logging levels; a message is written when its level is at most the current one."""

    PANIC = 0
    ERROR = 1
    VERBOSE = 2
    DEBUG = 3
    MAX = 4
    UNKNOWN = 5

    def __str__(self) -> str:
        return _LEVEL_NAMES.get(self, "unknown")


_LEVEL_NAMES = {
    Level.PANIC: "panic",
    Level.ERROR: "error",
    Level.VERBOSE: "verbose",
    Level.DEBUG: "debug",
}
_LEVELS_BY_NAME = {name: level for level, name in _LEVEL_NAMES.items()}


def parse_level(level_str: str) -> Level:
    """The level named by level_str, case-insensitively, or Level.UNKNOWN."""
    level = _LEVELS_BY_NAME.get(level_str.lower())
    if level is None:
        sys.stderr.write(f"Whereabouts logging: cannot set logging level to {level_str}\n")
        return Level.UNKNOWN
    return level


def _timestamp() -> str:
    stamp = datetime.now().astimezone().isoformat(timespec="seconds")
    return stamp[:-6] + "Z" if stamp.endswith("+00:00") else stamp


class Logger:
    """Writes timestamped, levelled messages to standard error and/or a file."""

    def __init__(self, level: Level = Level.DEBUG, to_stderr: bool = True) -> None:
        self.level = level
        self.to_stderr = to_stderr
        self.file: Optional[TextIO] = None

    def log(self, level: Level, message: str) -> None:
        if level > self.level:
            return
        line = f"{_timestamp()} [{level!s}] {message}\n"
        if self.to_stderr:
            sys.stderr.write(line)
        if self.file is not None:
            self.file.write(line)
            self.file.flush()

    def debug(self, message: str) -> None:
        self.log(Level.DEBUG, message)

    def verbose(self, message: str) -> None:
        self.log(Level.VERBOSE, message)

    def error(self, message: str) -> RuntimeError:
        """Log at error level and return an exception carrying the message."""
        self.log(Level.ERROR, message)
        return RuntimeError(message)

    def panic(self, message: str) -> None:
        """Log at panic level followed by the current stack trace."""
        self.log(Level.PANIC, message)
        self.log(Level.PANIC, "========= Stack trace output ========")
        stack = "".join(traceback.format_stack()[:-1]).rstrip("\n")
        self.log(Level.PANIC, f"Whereabouts Panic\n{stack}")
        self.log(Level.PANIC, "========= Stack trace output end ========")

    def set_level(self, level_str: str) -> None:
        """Set the level by name; unknown names leave it unchanged."""
        level = parse_level(level_str)
        if level < Level.MAX:
            self.level = level

    def set_stderr(self, enable: bool) -> None:
        self.to_stderr = enable

    def set_file(self, filename: str) -> None:
        """Append to filename from now on; an empty name changes nothing."""
        if not filename:
            return
        self.close()
        try:
            self.file = open(filename, "a", encoding="utf-8")
        except OSError:
            self.file = None
            sys.stderr.write(f"Whereabouts logging: cannot open {filename}")

    def close(self) -> None:
        if self.file is not None:
            self.file.close()
            self.file = None

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()