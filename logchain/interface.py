# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""The six-level logging surface handed to application code."""

from typing import Any, Mapping, Optional, Sequence

from .context import Getter, background
from .levels import Level
from .logger import Logger, null
from .terminal import CONTINUE, Action


class Interface:
    """Leveled logging methods backed by one Logger per level.

    The ``*f`` methods take a printf-style template followed by its
    arguments; the plain methods join their arguments with spaces. Every
    method returns the Action produced for the event, which is ``CONTINUE``
    for every level except FATAL and PANIC.

    Note:
        Caller tracking counts stack frames from the tracking layer to the
        user's call site. Every leveled method must reach ``_log`` directly
        and ``_log`` must call the level's Logger directly.
    """

    def __init__(self, loggers: Mapping[Level, Logger], getter: Optional[Getter] = None):
        self._loggers = dict(loggers)
        self._getter = getter or background

    def logger(self, level: Level) -> Logger:
        """Return the built Logger for ``level``; the discarding Logger if none."""
        return self._loggers.get(level) or null()

    def _log(self, level: Level, message: str, args: Sequence[Any]) -> Action:
        logs = self._loggers.get(level) or null()
        result = logs.logf(self._getter(), message, *args)
        if isinstance(result, Action):
            return result
        return CONTINUE

    def debugf(self, message: str, *args: Any) -> Action:
        return self._log(Level.DEBUG, message, args)

    def infof(self, message: str, *args: Any) -> Action:
        return self._log(Level.INFO, message, args)

    def warnf(self, message: str, *args: Any) -> Action:
        return self._log(Level.WARN, message, args)

    def errorf(self, message: str, *args: Any) -> Action:
        return self._log(Level.ERROR, message, args)

    def fatalf(self, message: str, *args: Any) -> Action:
        """Log at FATAL, then invoke the exit hook with the configured code."""
        return self._log(Level.FATAL, message, args)

    def panicf(self, message: str, *args: Any) -> Action:
        """Log at PANIC, then invoke the panic hook with the rendered message."""
        return self._log(Level.PANIC, message, args)

    def debug(self, *args: Any) -> Action:
        return self._log(Level.DEBUG, "", args)

    def info(self, *args: Any) -> Action:
        return self._log(Level.INFO, "", args)

    def warn(self, *args: Any) -> Action:
        return self._log(Level.WARN, "", args)

    def error(self, *args: Any) -> Action:
        return self._log(Level.ERROR, "", args)

    def fatal(self, *args: Any) -> Action:
        return self._log(Level.FATAL, "", args)

    def panic(self, *args: Any) -> Action:
        return self._log(Level.PANIC, "", args)
