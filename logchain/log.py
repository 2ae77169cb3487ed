# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Package-level logging functions backed by the process-wide default Interface.

Each function calls ``Interface._log`` directly so that caller tracking sees
the same stack depth as when an Interface method is called.
"""

from typing import Any

from .factory import get_default
from .levels import Level
from .terminal import Action


def debugf(message: str, *args: Any) -> Action:
    return get_default()._log(Level.DEBUG, message, args)


def infof(message: str, *args: Any) -> Action:
    return get_default()._log(Level.INFO, message, args)


def warnf(message: str, *args: Any) -> Action:
    return get_default()._log(Level.WARN, message, args)


def errorf(message: str, *args: Any) -> Action:
    return get_default()._log(Level.ERROR, message, args)


def fatalf(message: str, *args: Any) -> Action:
    """Log at FATAL through the default Interface, then run its exit hook."""
    return get_default()._log(Level.FATAL, message, args)


def panicf(message: str, *args: Any) -> Action:
    """Log at PANIC through the default Interface, then run its panic hook."""
    return get_default()._log(Level.PANIC, message, args)


def debug(*args: Any) -> Action:
    return get_default()._log(Level.DEBUG, "", args)


def info(*args: Any) -> Action:
    return get_default()._log(Level.INFO, "", args)


def warn(*args: Any) -> Action:
    return get_default()._log(Level.WARN, "", args)


def error(*args: Any) -> Action:
    return get_default()._log(Level.ERROR, "", args)


def fatal(*args: Any) -> Action:
    return get_default()._log(Level.FATAL, "", args)


def panic(*args: Any) -> Action:
    return get_default()._log(Level.PANIC, "", args)
