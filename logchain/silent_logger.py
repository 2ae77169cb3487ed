# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Silent logger implementation for testing."""

import threading
from typing import Any, Dict, List, Optional, Union

from . import levels
from .context import Context
from .encoding import render
from .exceptions import FormatError
from .logger import Logger


class SilentLogger(Logger):
    """Logger that stores rendered events in memory without output.

    Useful for testing to verify logging behavior without cluttering test output.
    Note: SilentLogger does not filter by level; the Config threshold decides
    what reaches it.
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize silent logger.

        Args:
            name: Optional logger name for identification
        """
        self.name = name or "logchain"
        self.logs: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def logf(self, ctx: Context, message: str, *args: Any) -> None:
        level = levels.from_context(ctx)
        try:
            text = render(message, args)
        except FormatError as e:
            text = f"{message} (format failed: {e})"
        log_entry: Dict[str, Any] = {
            "level": level.name if level is not None else None,
            "message": text,
        }
        with self._lock:
            self.logs.append(log_entry)

    def messages(self) -> List[str]:
        """Return the rendered messages in the order they were logged."""
        with self._lock:
            return [log["message"] for log in self.logs]

    def clear_logs(self) -> None:
        """Clear all stored log messages (useful for testing)."""
        with self._lock:
            self.logs.clear()

    def get_logs(self, level: Optional[Union[levels.Level, str]] = None) -> List[Dict[str, Any]]:
        """Get stored log entries, optionally filtered by level.

        Args:
            level: Optional Level or level name to filter by

        Returns:
            List of log entries
        """
        with self._lock:
            if level is None:
                return list(self.logs)
            if isinstance(level, str):
                level = levels.parse_level(level)
            return [log for log in self.logs if log["level"] == level.name]

    def has_log(self, message: str, level: Optional[Union[levels.Level, str]] = None) -> bool:
        """Check if a specific log message exists.

        Args:
            message: Message to search for (substring match)
            level: Optional level to filter by

        Returns:
            True if message is found, False otherwise
        """
        return any(message in log["message"] for log in self.get_logs(level))
