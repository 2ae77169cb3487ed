# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Composable leveled logging.

A small logging façade for library authors. Applications log through a
six-level Interface; where the events go, how they are rendered, and what
cross-cutting behaviour applies (timestamps, call sites, redaction, level
codes, exit on fatal) is assembled from decorators by a Config.

Example:
    >>> import logchain
    >>> from logchain import config, stream
    >>>
    >>> events = []
    >>> buf = stream.BufferedStream(stream.append_to(events))
    >>> log, undo = config.Config().with_options(config.stream(buf))
    >>> _ = log.warnf("x=%d", 7)
    >>> events
    ['Wx=7']
    >>>
    >>> # package-level functions use the process-wide default
    >>> _ = logchain.infof("service started on port %d", 8080)
"""

__version__ = "0.1.0"

from .config import Config, Option, Sink
from .exceptions import FormatError, LogError, LogPanic, ShortWriteError, UnknownLevelError
from .factory import configure, create_logger, get_default, get_logger, override, reset_default
from .interface import Interface
from .levels import Level
from .log import debug, debugf, error, errorf, fatal, fatalf, info, infof, panic, panicf, warn, warnf
from .logger import Logger
from .redact import Sensitive
from .terminal import CONTINUE, Abort, Action, Continue, Exit

__all__ = [
    "__version__",
    "CONTINUE",
    "Abort",
    "Action",
    "Config",
    "Continue",
    "Exit",
    "FormatError",
    "Interface",
    "Level",
    "LogError",
    "LogPanic",
    "Logger",
    "Option",
    "Sensitive",
    "ShortWriteError",
    "Sink",
    "UnknownLevelError",
    "configure",
    "create_logger",
    "debug",
    "debugf",
    "error",
    "errorf",
    "fatal",
    "fatalf",
    "get_default",
    "get_logger",
    "info",
    "infof",
    "override",
    "panic",
    "panicf",
    "reset_default",
    "warn",
    "warnf",
]
