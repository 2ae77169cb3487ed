# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Prefix functions for ``encoding.prefix``.

Each function here returns a PrefixFunc: given the event Context it yields
the byte chunks to write ahead of the message. ``join`` chains several of
them lazily, so a header is assembled chunk by chunk::

    header = prefixes.join(prefixes.level_code(), prefixes.timestamp(), prefixes.string(" "))
    op = encoding.format_marshaler(encoding.prefix(header))
"""

import os
from typing import Iterable, Iterator, Optional

from . import caller as caller_mod
from . import levels
from . import timestamp as timestamp_mod
from .context import Context
from .encoding import Decorator, PrefixFunc, prefix, singular

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
GLOG_FORMAT = "%m%d %H:%M:%S.%f"


def level_code() -> PrefixFunc:
    """Yield the one-letter code of the event's level."""
    return levels.level_code


def string(text: str) -> PrefixFunc:
    """Yield ``text`` for every event."""
    chunk = text.encode("utf-8")
    return lambda ctx: singular(chunk)


def timestamp(fmt: str = ISO_FORMAT, clock: Optional[timestamp_mod.Clock] = None) -> PrefixFunc:
    """Yield the event timestamp formatted with ``strftime(fmt)``.

    Args:
        fmt: strftime format
        clock: Used when the Context carries no timestamp; without it such
            events get no prefix
    """

    def prefix_func(ctx: Context) -> Iterable[bytes]:
        ts = timestamp_mod.from_context(ctx)
        if ts is None:
            if clock is None:
                return ()
            ts = clock()
        return singular(ts.strftime(fmt).encode("utf-8"))

    return prefix_func


def glog_timestamp(clock: Optional[timestamp_mod.Clock] = None) -> PrefixFunc:
    """Yield the timestamp as ``mmdd hh:mm:ss.uuuuuu``."""
    return timestamp(GLOG_FORMAT, clock)


def caller(suffix: str = " ") -> PrefixFunc:
    """Yield ``file:line`` of the call site followed by ``suffix``.

    Events without a Caller in their Context get no prefix; enable caller
    tracking in the Config to populate it.
    """

    def prefix_func(ctx: Context) -> Iterable[bytes]:
        found = caller_mod.from_context(ctx)
        if found is None:
            return ()
        return singular(f"{os.path.basename(found.file)}:{found.line}{suffix}".encode("utf-8"))

    return prefix_func


def join(*prefix_funcs: Optional[PrefixFunc]) -> PrefixFunc:
    """Chain prefix functions; their chunks are produced one after another."""
    funcs = tuple(f for f in prefix_funcs if f is not None)

    def prefix_func(ctx: Context) -> Iterator[bytes]:
        for f in funcs:
            yield from f(ctx) or ()

    return prefix_func


def glog_header(clock: Optional[timestamp_mod.Clock] = None) -> PrefixFunc:
    """Yield a glog-style header: ``Lmmdd hh:mm:ss.uuuuuu file:line] ``."""
    return join(
        level_code(),
        glog_timestamp(clock),
        string(" "),
        caller("] "),
    )


def decorator(*prefix_funcs: Optional[PrefixFunc]) -> Decorator:
    """Return a marshaler decorator writing the joined prefixes."""
    return prefix(join(*prefix_funcs))
