# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Call-site tracking: attach file, line and function to each log event."""

import sys
from dataclasses import dataclass
from typing import Any, Optional

from .context import MISSING, Context, Key, with_value
from .logger import Logger

# Frames between CallerLogger.logf and user code when logging through an
# Interface method or a package-level function:
#   0 CallerLogger.logf, 1 Interface._log, 2 Interface.infof, 3 caller.
# Every Logger layer wrapped outside caller tracking adds one frame, and the
# depth passed to Tracking.decorate must grow with it.
DEFAULT_DEPTH = 3

UNKNOWN = "???"


@dataclass(frozen=True)
class Caller:
    """The file, line, and function that generated a log event."""

    file: str
    line: int
    func_name: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


_caller_key = Key("caller")


def new_context(ctx: Context, file: str, line: int, func_name: str) -> Context:
    """Return a Context annotated with a Caller."""
    return with_value(ctx, _caller_key, Caller(file=file, line=line, func_name=func_name))


def from_context(ctx: Context) -> Optional[Caller]:
    """Extract the Caller from ``ctx``, or None if it has none."""
    found = ctx.value(_caller_key)
    if found is MISSING:
        return None
    return found


class CallerLogger(Logger):
    """Inspects the call stack for every event and injects the Caller."""

    def __init__(self, logs: Logger, depth: int = DEFAULT_DEPTH):
        self._logs = logs
        self.depth = depth

    def logf(self, ctx: Context, message: str, *args: Any) -> Any:
        try:
            frame = sys._getframe(self.depth)
        except ValueError:
            ctx = new_context(ctx, UNKNOWN, 0, UNKNOWN)
        else:
            code = frame.f_code
            func_name = getattr(code, "co_qualname", code.co_name)
            ctx = new_context(ctx, code.co_filename, frame.f_lineno, func_name)
            del frame
        return self._logs.logf(ctx, message, *args)


@dataclass(frozen=True)
class Tracking:
    """Caller tracking settings.

    Attributes:
        enabled: Whether call sites are captured at all
        depth: Stack depth of the user frame, counted from the tracking layer
    """

    enabled: bool = False
    depth: int = DEFAULT_DEPTH

    def decorate(self, logs: Logger, extra_depth: int = 0) -> Logger:
        """Wrap ``logs`` with caller tracking, or return it unchanged when disabled.

        Args:
            logs: Logger to wrap
            extra_depth: Frames added by layers wrapped outside this one
        """
        if not self.enabled:
            return logs
        return CallerLogger(logs, self.depth + extra_depth)
