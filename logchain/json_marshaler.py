# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Marshaler emitting one structured JSON object per log event."""

import json
from typing import Any, Dict, Optional

from . import caller as caller_mod
from . import levels
from . import timestamp as timestamp_mod
from .context import Context
from .encoding import Decorator, Decorators, Marshaler, render
from .exceptions import FormatError
from .stream import Stream


def _isoformat(ctx: Context, clock: timestamp_mod.Clock) -> str:
    ts = timestamp_mod.from_context(ctx) or clock()
    return ts.isoformat().replace("+00:00", "Z")


def json_marshaler(
    name: str = "logchain",
    clock: Optional[timestamp_mod.Clock] = None,
    *decorators: Decorator,
) -> Marshaler:
    """Return a marshaler writing each event as a single JSON object.

    The object has the keys ``timestamp``, ``level``, ``logger`` and
    ``message``, plus ``caller`` when the Context carries one. The event
    timestamp comes from the Context when stamped, otherwise from ``clock``.

    Args:
        name: Value of the ``logger`` key
        clock: Fallback time source; UTC now by default
        *decorators: Marshaler decorators applied around the JSON writer
    """
    clock = clock or timestamp_mod.utc_now

    def marshal(ctx: Context, stream: Stream, message: str, *args: Any) -> Optional[Exception]:
        err: Optional[Exception] = None
        try:
            level = levels.from_context(ctx)
            log_entry: Dict[str, Any] = {
                "timestamp": _isoformat(ctx, clock),
                "level": levels.level_name(level) if level is not None else None,
                "logger": name,
                "message": render(message, args),
            }
            found = caller_mod.from_context(ctx)
            if found is not None:
                log_entry["caller"] = {"file": found.file, "line": found.line, "function": found.func_name}
            stream.write(json.dumps(log_entry, default=str).encode("utf-8"))
        except (FormatError, OSError) as e:
            err = e
        return stream.eom(err)

    return Decorators(decorators).decorate(marshal)
