"""Core helpers: bit flags, timesteps, logging and assertions."""

from __future__ import annotations

import logging
import sys
from typing import Any, TypeVar

__all__ = [
    "TRACE",
    "AssertionFailure",
    "Timestep",
    "bit",
    "get_logger",
    "init_logging",
    "log_assert",
    "make_array",
]

T = TypeVar("T")

LOGGER_NAME = "GLCORE"
TRACE = 5
_HANDLER_NAME = "glcore-console"

logging.addLevelName(TRACE, "TRACE")


class AssertionFailure(AssertionError):
    """Raised when a checked condition does not hold."""


class Timestep:
    """A frame duration in seconds."""

    __slots__ = ("_time",)

    def __init__(self, time: float = 0.0) -> None:
        self._time = float(time)

    def __float__(self) -> float:
        return self._time

    @property
    def seconds(self) -> float:
        return self._time

    @property
    def milliseconds(self) -> float:
        return self._time * 1000.0

    def __mul__(self, other: Any) -> float:
        return self._time * float(other)

    __rmul__ = __mul__

    def __add__(self, other: Any) -> float:
        return self._time + float(other)

    __radd__ = __add__

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Timestep):
            return self._time == other._time
        if isinstance(other, (int, float)):
            return self._time == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._time)

    def __repr__(self) -> str:
        return f"Timestep({self._time!r})"


def bit(x: int) -> int:
    """Return an integer with only bit ``x`` set."""
    return 1 << x


def make_array(size: int, value: T) -> list[T]:
    """Return a list of ``size`` elements, each equal to ``value``."""
    if size < 0:
        raise ValueError(f"array size must not be negative, got {size}")
    return [value] * size


def init_logging() -> logging.Logger:
    """Configure the application logger and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(name)s: %(message)s", datefmt="%H:%M:%S")
        )
        logger.addHandler(handler)
    logger.setLevel(TRACE)
    return logger


def get_logger() -> logging.Logger:
    """Return the application logger."""
    return logging.getLogger(LOGGER_NAME)


def log_assert(condition: Any, message: str | None = None) -> None:
    """Log an error and raise AssertionFailure when ``condition`` is false."""
    if condition:
        return
    text = "Assertion failed" if message is None else f"Assertion failed: {message}"
    get_logger().error(text)
    raise AssertionFailure(text)