# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exit and panic behaviour for the FATAL and PANIC levels.

Each leveled call yields an Action describing what should happen once the
event has been logged. FATAL events yield ``Exit(code)`` and PANIC events
yield ``Abort(message)``; the configured hook realizes the action after the
event was handed to the wrapped logger, even if that logger raised.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from .context import Context
from .encoding import render
from .exceptions import FormatError, LogPanic
from .levels import Level, TransformOp
from .logger import Logger
from .redact import redact_args

logger = logging.getLogger(__name__)

ExitFunc = Callable[[int], Any]
PanicFunc = Callable[[str], Any]

DEFAULT_EXIT_CODE = 1


class Action:
    """What the caller should do after a log event."""


@dataclass(frozen=True)
class Continue(Action):
    """Keep running."""


@dataclass(frozen=True)
class Exit(Action):
    """Terminate the process with ``code``."""

    code: int = DEFAULT_EXIT_CODE


@dataclass(frozen=True)
class Abort(Action):
    """Abort the current flow of control with ``message``."""

    message: str = ""


CONTINUE = Continue()


def default_exit(code: int) -> None:
    """Exit the process through ``sys.exit``."""
    sys.exit(code)


def default_panic(message: str) -> None:
    """Raise LogPanic carrying the rendered message."""
    raise LogPanic(message)


def no_exit() -> ExitFunc:
    """Return an exit hook that does nothing."""
    return lambda code: None


def no_panic() -> PanicFunc:
    """Return a panic hook that does nothing."""
    return lambda message: None


def _abort_message(message: str, args: Tuple[Any, ...]) -> str:
    try:
        return render(message, redact_args(args))
    except FormatError as e:
        logger.debug("Panic message could not be rendered: %s", e)
        return message


class TerminalLogger(Logger):
    """Logs an event and then realizes the terminal Action for it."""

    def __init__(
        self,
        logs: Logger,
        make_action: Callable[[str, Tuple[Any, ...]], Action],
        realize: Callable[[Action], Any],
    ):
        """Initialize terminal logger.

        Args:
            logs: Logger receiving the event first
            make_action: Builds the Action from the message and its args
            realize: Hook that carries out the Action
        """
        self._logs = logs
        self._make_action = make_action
        self._realize = realize

    def logf(self, ctx: Context, message: str, *args: Any) -> Action:
        action = self._make_action(message, args)
        try:
            self._logs.logf(ctx, message, *args)
        finally:
            self._realize(action)
        return action


def exit_logger(logs: Logger, exit_code: int = DEFAULT_EXIT_CODE, exit_func: Optional[ExitFunc] = None) -> Logger:
    """Wrap ``logs`` so every event is followed by ``exit_func(exit_code)``."""
    hook = exit_func or default_exit
    return TerminalLogger(logs, lambda message, args: Exit(exit_code), lambda action: hook(action.code))


def panic_logger(logs: Logger, panic_func: Optional[PanicFunc] = None) -> Logger:
    """Wrap ``logs`` so every event is followed by ``panic_func(rendered message)``."""
    hook = panic_func or default_panic
    return TerminalLogger(
        logs,
        lambda message, args: Abort(_abort_message(message, args)),
        lambda action: hook(action.message),
    )


def terminal_transform(
    exit_code: int = DEFAULT_EXIT_CODE,
    exit_func: Optional[ExitFunc] = None,
    panic_func: Optional[PanicFunc] = None,
) -> TransformOp:
    """Return a TransformOp attaching exit to FATAL and panic to PANIC.

    Other levels pass through unchanged.
    """

    def op(level: Level, logs: Logger) -> Tuple[Level, Logger]:
        if level == Level.FATAL:
            return level, exit_logger(logs, exit_code, exit_func)
        if level == Level.PANIC:
            return level, panic_logger(logs, panic_func)
        return level, logs

    return op
