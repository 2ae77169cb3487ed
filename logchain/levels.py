# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Log levels: ordering, masks, filters, transforms and annotation.

Levels are bit flags whose values are increasing powers of two. The same
value therefore supports severity comparisons (``level >= Level.WARN``) and
set membership (``Level.DEBUG | Level.INFO``).
"""

import logging
from enum import IntFlag
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from . import encoding
from . import logger as logger_mod
from .context import MISSING, Context, Key, with_value
from .exceptions import UnknownLevelError


class Level(IntFlag):
    """Severity of a log event."""

    DEBUG = 1
    INFO = 2
    WARN = 4
    ERROR = 8
    FATAL = 16
    PANIC = 32


ALL_LEVELS: Tuple[Level, ...] = (
    Level.DEBUG,
    Level.INFO,
    Level.WARN,
    Level.ERROR,
    Level.FATAL,
    Level.PANIC,
)

ALL_MASK = Level.DEBUG | Level.INFO | Level.WARN | Level.ERROR | Level.FATAL | Level.PANIC


def _check_ordering(levels: Sequence[Level]) -> None:
    """Verify that bit positions preserve severity order under int comparison."""
    for lower, higher in zip(levels, levels[1:]):
        if not int(lower) < int(higher):
            raise RuntimeError(f"level {lower!r} must compare below {higher!r}")
        if int(lower) & int(higher):
            raise RuntimeError(f"levels {lower!r} and {higher!r} share mask bits")


_check_ordering(ALL_LEVELS)

_LEVEL_NAMES: Dict[str, Level] = {
    "DEBUG": Level.DEBUG,
    "INFO": Level.INFO,
    "WARN": Level.WARN,
    "WARNING": Level.WARN,
    "ERROR": Level.ERROR,
    "FATAL": Level.FATAL,
    "PANIC": Level.PANIC,
}

_STDLIB_LEVELS: Dict[Level, int] = {
    Level.DEBUG: logging.DEBUG,
    Level.INFO: logging.INFO,
    Level.WARN: logging.WARNING,
    Level.ERROR: logging.ERROR,
    Level.FATAL: logging.CRITICAL,
    Level.PANIC: logging.CRITICAL,
}

LEVEL_CODES: Mapping[Level, bytes] = {
    Level.DEBUG: b"D",
    Level.INFO: b"I",
    Level.WARN: b"W",
    Level.ERROR: b"E",
    Level.FATAL: b"F",
    Level.PANIC: b"P",
}


def parse_level(name: str) -> Level:
    """Parse a level name such as "info" or "WARNING".

    Raises:
        ValueError: If the name is not a known level
    """
    level = _LEVEL_NAMES.get(name.strip().upper())
    if level is None:
        raise ValueError(f"Invalid log level: {name}. Must be one of {list(_LEVEL_NAMES.keys())}")
    return level


def level_name(level: Level) -> str:
    """Return the canonical upper-case name of a single level."""
    if level not in LEVEL_CODES:
        raise UnknownLevelError(f"unexpected level: {int(level)!r}")
    return level.name


def to_stdlib(level: Level) -> int:
    """Map a Level to the matching stdlib ``logging`` level."""
    return _STDLIB_LEVELS.get(level, logging.INFO)


_level_key = Key("level")


def new_context(ctx: Context, level: Level) -> Context:
    """Return a Context carrying ``level``."""
    return with_value(ctx, _level_key, level)


def from_context(ctx: Context) -> Optional[Level]:
    """Extract the event Level, or None if the Context has none."""
    level = ctx.value(_level_key)
    if level is MISSING:
        return None
    return level


def logger_at(level: Level) -> logger_mod.Decorator:
    """Return a Logger decorator that injects ``level`` into each event's Context."""
    return logger_mod.with_context(lambda ctx: new_context(ctx, level))


class Filter:
    """Predicate over levels, combinable with ``|``, ``&`` and ``^``."""

    def __init__(self, predicate: Callable[[Level], bool]):
        self._predicate = predicate

    def __call__(self, level: Level) -> bool:
        return bool(self._predicate(level))

    def __or__(self, other: "Filter") -> "Filter":
        return Filter(lambda x: self(x) or other(x))

    def __and__(self, other: "Filter") -> "Filter":
        return Filter(lambda x: self(x) and other(x))

    def __xor__(self, other: "Filter") -> "Filter":
        return Filter(lambda x: self(x) != other(x))

    def __invert__(self) -> "Filter":
        return Filter(lambda x: not self(x))


def accept_all() -> Filter:
    return Filter(lambda _: True)


def match_any(mask: Level) -> Filter:
    """Accept levels sharing at least one bit with ``mask``."""
    return Filter(lambda x: (mask & x) != 0)


def match_exact(level: Level) -> Filter:
    """Accept only ``level`` itself."""
    return Filter(lambda x: x == level)


def match_at_or_above(level: Level) -> Filter:
    """Accept ``level`` and anything more severe."""
    return Filter(lambda x: x >= level)


TransformOp = Callable[[Level, logger_mod.Logger], Tuple[Level, logger_mod.Logger]]


class Transform(dict):
    """Maps levels to Logger decorators applied only at those levels."""

    def apply(self, level: Level, logs: logger_mod.Logger) -> Tuple[Level, logger_mod.Logger]:
        decorator = self.get(level)
        if decorator is not None:
            return level, decorator(logs)
        return level, logs

    __call__ = apply


class TransformOps(tuple):
    """Ordered TransformOps applied first to last."""

    def __new__(cls, ops: Iterable[Optional[TransformOp]] = ()) -> "TransformOps":
        return super().__new__(cls, ops)

    def apply(self, level: Level, logs: logger_mod.Logger) -> Tuple[Level, logger_mod.Logger]:
        for op in self:
            if op is not None:
                level, logs = op(level, logs)
        return level, logs


def accept(level_filter: Filter) -> TransformOp:
    """Drop events whose level is rejected by ``level_filter``."""

    def op(level: Level, logs: logger_mod.Logger) -> Tuple[Level, logger_mod.Logger]:
        if level_filter(level):
            return level, logs
        return level, logger_mod.null()

    return op


def min_transform(minimum: Level) -> TransformOp:
    """Replace loggers below ``minimum`` with the discarding Logger.

    The decision is made once, when the transform is applied, not per event.
    """
    return accept(match_at_or_above(minimum))


def broadcast(level_filter: Filter, replace: bool, *loggers: logger_mod.Logger) -> TransformOp:
    """Copy events at accepted levels to ``loggers``.

    With ``replace`` the original logger no longer receives accepted events;
    replacing with no loggers drops them. Rejected levels pass through.
    """

    def op(level: Level, logs: logger_mod.Logger) -> Tuple[Level, logger_mod.Logger]:
        if not level_filter(level):
            return level, logs
        if replace:
            if not loggers:
                return level, logger_mod.null()
            return level, logger_mod.multi(*loggers)
        if not loggers:
            return level, logs
        return level, logger_mod.multi(*loggers, logs)

    return op


def new_indexer(
    source: Callable[[Level], Optional[logger_mod.Logger]],
    levels: Optional[Iterable[Level]] = None,
    *ops: TransformOp,
) -> Dict[Level, logger_mod.Logger]:
    """Build a Logger for each level and run it through ``ops``.

    Args:
        source: Returns the starting Logger for a level, or None to skip it
        levels: Levels to build; all levels when None
        *ops: TransformOps applied to every level, first to last

    Returns:
        Mapping from level to its transformed Logger
    """
    chain = TransformOps(ops)
    result: Dict[Level, logger_mod.Logger] = {}
    for level in ALL_LEVELS if levels is None else levels:
        logs = source(level)
        if logs is None:
            continue
        level, logs = chain.apply(level, logs)
        result[level] = logs
    return result


def level_code(ctx: Context) -> Iterable[bytes]:
    """Prefix function yielding the one-letter code of the event's Level.

    Raises:
        UnknownLevelError: If the Context carries a level with no code
    """
    level = from_context(ctx)
    if level is None:
        return ()
    code = LEVEL_CODES.get(level)
    if code is None:
        raise UnknownLevelError(f"unexpected level: {int(level)!r}")
    return (code,)


def annotator() -> encoding.Decorator:
    """Return a marshaler prefix that writes D, I, W, E, F or P per event."""
    return encoding.prefix(level_code)


def system_logger(name: str = "logchain", stacklevel: Optional[int] = None) -> logger_mod.Logger:
    """Return a Logger routing events to stdlib ``logging`` at their mapped level."""

    def level_of(ctx: Context) -> int:
        level = from_context(ctx)
        return logging.INFO if level is None else to_stdlib(level)

    return logger_mod.SystemLogger(level_of, name=name, stacklevel=stacklevel)
