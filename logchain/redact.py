# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Redaction of sensitive values before they reach a marshaler.

Redaction is a capability: any argument with a ``redact()`` method returning
a string is rendered through that method instead of its own ``__str__``,
``__repr__`` or ``__format__``. Values without the capability are untouched.
"""

from collections.abc import Mapping
from typing import Any, Protocol, Sequence, Tuple, runtime_checkable

from .context import Context
from .logger import Decorator, Logger

MASK_CHAR = "*"


@runtime_checkable
class Redactable(Protocol):
    """A value that knows how to render itself safely for logs."""

    def redact(self) -> str:
        ...


def mask(text: str, char: str = MASK_CHAR, keep: int = 0) -> str:
    """Replace every character of ``text`` with ``char``.

    Args:
        text: Text to mask
        char: Mask character
        keep: Number of trailing characters left visible

    Returns:
        Masked text of the same length as ``text``
    """
    if keep <= 0:
        return char * len(text)
    if keep >= len(text):
        return text
    return char * (len(text) - keep) + text[-keep:]


class Sensitive:
    """Wraps a value whose rendered form must never appear in logs."""

    def __init__(self, value: Any, keep: int = 0, char: str = MASK_CHAR):
        """Initialize a sensitive value.

        Args:
            value: The raw value
            keep: Trailing characters of the rendered value left visible
            char: Mask character
        """
        self.value = value
        self.keep = keep
        self.char = char

    def redact(self) -> str:
        return mask(str(self.value), char=self.char, keep=self.keep)

    def __str__(self) -> str:
        return self.redact()

    def __repr__(self) -> str:
        return self.redact()


class Redacted:
    """Stand-in that renders a redactable value through ``redact()`` only."""

    __slots__ = ("_text",)

    def __init__(self, value: Redactable):
        self._text = str(value.redact())

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return self._text

    def __format__(self, spec: str) -> str:
        return format(self._text, spec)


def _redact(value: Any) -> Any:
    return Redacted(value) if isinstance(value, Redactable) else value


def redact_args(args: Sequence[Any]) -> Tuple[Any, ...]:
    """Return ``args`` with every redactable value replaced by its redacted form.

    A single mapping argument fills ``%(name)s`` fields, so it is rebuilt as a
    dict with its redactable values replaced.
    """
    if len(args) == 1 and isinstance(args[0], Mapping) and not isinstance(args[0], Redactable):
        return ({key: _redact(value) for key, value in args[0].items()},)
    return tuple(_redact(a) for a in args)


class RedactingLogger(Logger):
    """Replaces redactable arguments before delegating."""

    def __init__(self, logs: Logger):
        self._logs = logs

    def logf(self, ctx: Context, message: str, *args: Any) -> Any:
        return self._logs.logf(ctx, message, *redact_args(args))


def redacting() -> Decorator:
    """Return a Logger decorator that redacts capable arguments."""
    return RedactingLogger
