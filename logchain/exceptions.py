# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions for the logging pipeline."""


class LogError(Exception):
    """Base exception for logging pipeline errors."""
    pass


class FormatError(LogError, ValueError):
    """Raised when a message template cannot be filled with its arguments."""
    pass


class ShortWriteError(LogError, OSError):
    """Reported when a framed stream accepted fewer bytes than requested."""

    def __init__(self, expected: int, written: int):
        super().__init__(f"short write: wrote {written} of {expected} bytes")
        self.expected = expected
        self.written = written


class UnknownLevelError(LogError, LookupError):
    """Raised when a level has no entry in a static level table.

    This indicates an incomplete table rather than a transient condition,
    so it is never converted into a returned error.
    """
    pass


class LogPanic(LogError):
    """Raised by the default panic hook after a Panic-level event is logged."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
