# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Timestamp metadata for log event contexts."""

from datetime import datetime, timezone
from typing import Callable, Optional

from .context import MISSING, Context, Decorator, Key, with_value

Clock = Callable[[], datetime]

_timestamp_key = Key("timestamp")


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(timezone.utc)


def new_context(ctx: Context, ts: datetime) -> Context:
    """Return a Context carrying ``ts`` as the event timestamp."""
    return with_value(ctx, _timestamp_key, ts)


def from_context(ctx: Context) -> Optional[datetime]:
    """Extract the event timestamp, or None if the Context has none."""
    ts = ctx.value(_timestamp_key)
    if ts is MISSING:
        return None
    return ts


def stamper(clock: Optional[Clock] = None) -> Decorator:
    """Return a context decorator that stamps each event with ``clock()``."""
    clock = clock or utc_now
    return lambda ctx: new_context(ctx, clock())
