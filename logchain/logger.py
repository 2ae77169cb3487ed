# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract logger interface and the decorators that compose loggers."""

import logging
import queue
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .context import Context
from .context import Decorator as ContextDecorator
from .encoding import Marshaler, render
from .exceptions import FormatError
from .stream import Stream, caller_stacklevel

logger = logging.getLogger(__name__)

# how often a blocked error send re-checks whether the event's context is done
_SEND_POLL_SECONDS = 0.05


class Logger(ABC):
    """Abstract base class for loggers.

    A Logger consumes one log event per ``logf`` call. Write and format
    failures are never raised to the caller; they are reported out of band
    (see ``with_stream``) or dropped.
    """

    @abstractmethod
    def logf(self, ctx: Context, message: str, *args: Any) -> Any:
        """Log one event.

        Args:
            ctx: Context of the event
            message: Printf-style template, or "" to join args
            *args: Template arguments
        """
        pass


class FuncLogger(Logger):
    """Adapts a plain function to the Logger interface."""

    def __init__(self, func: Callable[..., Any]):
        self._func = func

    def logf(self, ctx: Context, message: str, *args: Any) -> Any:
        return self._func(ctx, message, *args)


Decorator = Callable[[Logger], Logger]


class NullLogger(Logger):
    """Logger that discards every event."""

    def logf(self, ctx: Context, message: str, *args: Any) -> None:
        pass


_null_logger = NullLogger()


def null() -> Logger:
    """Return the shared discarding Logger."""
    return _null_logger


class MultiLogger(Logger):
    """Fans each event out to several loggers, in order, on the calling thread.

    Dispatch is best-effort: every member receives the event even if an
    earlier one raised. Member exceptions are logged at DEBUG and dropped.
    """

    def __init__(self, *loggers: Logger):
        self.loggers = tuple(loggers)

    def logf(self, ctx: Context, message: str, *args: Any) -> None:
        for member in self.loggers:
            try:
                member.logf(ctx, message, *args)
            except Exception as e:
                logger.debug("Dropping error from member %r: %r", member, e)


def multi(*loggers: Logger) -> Logger:
    """Return a Logger that copies each event to all of ``loggers``."""
    return MultiLogger(*loggers)


def ignore_errors() -> Optional["queue.Queue[Exception]"]:
    """Readable stand-in for "no error sink" when calling ``with_stream``."""
    return None


def _send_error(ctx: Context, errors: "queue.Queue[Exception]", err: Exception) -> None:
    done = ctx.done()
    if done is None:
        errors.put(err)
        return
    while not done.is_set():
        try:
            errors.put(err, timeout=_SEND_POLL_SECONDS)
            return
        except queue.Full:
            continue
    logger.debug("Dropping log error after context was cancelled: %r", err)


class StreamLogger(Logger):
    """Logger that runs a marshaler against a Stream for each event."""

    def __init__(
        self,
        stream: Stream,
        marshaler: Marshaler,
        errors: Optional["queue.Queue[Exception]"] = None,
    ):
        """Initialize stream logger.

        Args:
            stream: Destination stream
            marshaler: Marshaler that writes each event and calls EOM
            errors: Optional queue receiving marshaling errors
        """
        self.stream = stream
        self.marshaler = marshaler
        self.errors = errors

    def logf(self, ctx: Context, message: str, *args: Any) -> None:
        err = self.marshaler(ctx, self.stream, message, *args)
        if err is None:
            return
        if self.errors is None:
            logger.debug("Dropping log error: %r", err)
            return
        _send_error(ctx, self.errors, err)


def with_stream(
    stream: Stream,
    marshaler: Marshaler,
    errors: Optional["queue.Queue[Exception]"] = None,
) -> Logger:
    """Adapt a Stream and Marshaler pair into a Logger.

    If the marshaler reports an error and ``errors`` is given, the error is
    put on the queue. The put waits for room unless the event's Context is
    done, in which case the error is dropped rather than blocking the caller.
    """
    return StreamLogger(stream, marshaler, errors)


class ContextLogger(Logger):
    """Rewrites each event's Context before delegating."""

    def __init__(self, logs: Logger, ctx_decorator: ContextDecorator):
        self._logs = logs
        self._ctx_decorator = ctx_decorator

    def logf(self, ctx: Context, message: str, *args: Any) -> Any:
        return self._logs.logf(self._ctx_decorator(ctx), message, *args)


def no_decorator() -> Decorator:
    """Return a decorator that leaves the Logger unchanged."""
    return lambda logs: logs


def with_context(ctx_decorator: Optional[ContextDecorator]) -> Decorator:
    """Return a Logger decorator that applies ``ctx_decorator`` to every event."""
    if ctx_decorator is None:
        return no_decorator()
    return lambda logs: ContextLogger(logs, ctx_decorator)


class LockedLogger(Logger):
    """Serializes events through a lock held for exactly one ``logf`` call."""

    def __init__(self, logs: Logger, lock: Any):
        self._logs = logs
        self._lock = lock

    def logf(self, ctx: Context, message: str, *args: Any) -> Any:
        with self._lock:
            return self._logs.logf(ctx, message, *args)


def locked(lock: Optional[Any] = None) -> Decorator:
    """Return a Logger decorator that guards delegation with ``lock``.

    Loggers decorated with the same lock are serialized with respect to each
    other; a fresh ``threading.Lock`` is created when none is given.
    """
    guard = lock if lock is not None else threading.Lock()
    return lambda logs: LockedLogger(logs, guard)


class SystemLogger(Logger):
    """Logger that forwards events to the stdlib ``logging`` package.

    Each event is rendered and logged at the stdlib level matching the
    event's Level; ``level_of`` extracts it from the Context. Records carry the
    file and line of the code that issued the log call, found by skipping
    logchain's own frames.
    """

    def __init__(
        self,
        level_of: Callable[[Context], int],
        name: str = "logchain",
        stacklevel: Optional[int] = None,
    ):
        """Initialize system logger.

        Args:
            level_of: Maps an event Context to a stdlib logging level
            name: Name of the stdlib logger
            stacklevel: Fixed stdlib ``stacklevel``, counted from ``logf``;
                the first frame outside logchain when None
        """
        self._level_of = level_of
        self._stdlib_logger = logging.getLogger(name)
        self.name = name
        self.stacklevel = stacklevel

    def logf(self, ctx: Context, message: str, *args: Any) -> None:
        level = self._level_of(ctx)
        if not self._stdlib_logger.isEnabledFor(level):
            return
        try:
            text = render(message, args)
        except FormatError as e:
            logger.debug("Dropping unformattable event: %s", e)
            return
        stacklevel = self.stacklevel if self.stacklevel is not None else caller_stacklevel()
        self._stdlib_logger.log(level, text, stacklevel=stacklevel)
