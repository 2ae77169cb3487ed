# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Marshalers: turn a message and its arguments into bytes on a Stream.

A Marshaler is any callable ``(ctx, stream, message, *args)`` returning the
event's error (or None). The final marshaler in a chain must call
``stream.eom`` exactly once per event. Decorators wrap marshalers to add
prefixes or rewrite the context; see ``Decorators.decorate`` for ordering.
"""

from collections.abc import Mapping
from functools import reduce
from typing import Any, Callable, Iterable, Optional, Sequence

from .context import Context
from .context import Decorator as ContextDecorator
from .exceptions import FormatError
from .stream import Stream

Marshaler = Callable[..., Optional[Exception]]
Decorator = Callable[[Marshaler], Marshaler]
PrefixFunc = Callable[[Context], Optional[Iterable[bytes]]]


def render(message: str, args: Sequence[Any]) -> str:
    """Render a log message the way the format marshaler does.

    A non-empty message is a printf-style template filled from ``args``; a
    single mapping argument fills ``%(name)s`` fields. A message without args
    is returned verbatim. An empty message joins ``str(arg)`` with spaces.

    Raises:
        FormatError: If the template does not match the arguments
    """
    if not message:
        return " ".join(str(a) for a in args)
    if not args:
        return message
    fill: Any = tuple(args)
    if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
        fill = args[0]
    try:
        return message % fill
    except (TypeError, ValueError, KeyError) as e:
        raise FormatError(f"cannot format {message!r} with {len(args)} argument(s): {e}") from e


def _null_marshaler(ctx: Context, stream: Stream, message: str, *args: Any) -> Optional[Exception]:
    return None


def null_marshaler() -> Marshaler:
    """Return a marshaler that discards every event without touching the stream."""
    return _null_marshaler


def no_decorator() -> Decorator:
    """Return a decorator that leaves the marshaler unchanged."""
    return lambda op: op


class Decorators(tuple):
    """Ordered collection of marshaler decorators.

    ``decorate`` folds the decorators onto a base marshaler in list order, so
    the last decorator ends up outermost and is the first to run on each call.
    """

    def __new__(cls, decorators: Iterable[Optional[Decorator]] = ()) -> "Decorators":
        return super().__new__(cls, decorators)

    def decorate(self, op: Marshaler) -> Marshaler:
        return reduce(lambda inner, d: d(inner) if d is not None else inner, self, op)


def _format(ctx: Context, stream: Stream, message: str, *args: Any) -> Optional[Exception]:
    err: Optional[Exception] = None
    try:
        stream.write(render(message, args).encode("utf-8"))
    except (FormatError, OSError) as e:
        err = e
    return stream.eom(err)


def format_marshaler(*decorators: Decorator) -> Marshaler:
    """Return the default marshaler, decorated with ``decorators``.

    The message is rendered with ``render`` and written in one call; EOM is
    then invoked once with the format or write error.
    """
    return Decorators(decorators).decorate(_format)


def singular(chunk: Optional[bytes]) -> Iterable[bytes]:
    """Return an iterable over a single chunk, or an empty one for no bytes."""
    if not chunk:
        return ()
    return (chunk,)


def prefix(prefix_func: Optional[PrefixFunc]) -> Decorator:
    """Return a decorator that writes a prefix before the wrapped marshaler runs.

    ``prefix_func(ctx)`` returns an iterable of byte chunks, or None for no
    prefix. Chunks are pulled lazily, so a generator can assemble a header
    from independent parts without joining them first. If writing a chunk
    fails, the event is closed with that error and the wrapped marshaler is
    skipped.
    """
    if prefix_func is None:
        return no_decorator()

    def decorator(op: Marshaler) -> Marshaler:
        def marshal(ctx: Context, stream: Stream, message: str, *args: Any) -> Optional[Exception]:
            chunks = prefix_func(ctx)
            try:
                for chunk in chunks or ():
                    if chunk:
                        stream.write(chunk)
            except OSError as e:
                return stream.eom(e)
            return op(ctx, stream, message, *args)

        return marshal

    return decorator


def with_context(ctx_decorator: Optional[ContextDecorator]) -> Decorator:
    """Return a decorator that rewrites the Context for the wrapped marshaler only."""
    if ctx_decorator is None:
        return no_decorator()

    def decorator(op: Marshaler) -> Marshaler:
        def marshal(ctx: Context, stream: Stream, message: str, *args: Any) -> Optional[Exception]:
            return op(ctx_decorator(ctx), stream, message, *args)

        return marshal

    return decorator
