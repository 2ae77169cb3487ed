# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory functions for creating Interfaces and the process-wide default."""

import logging
import os
import sys
import threading
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional

from . import config as cfg_mod
from . import encoding
from . import prefixes
from .caller import DEFAULT_DEPTH
from .config import Config, Option
from .interface import Interface
from .json_marshaler import json_marshaler
from .levels import parse_level, system_logger
from .logger import null
from .silent_logger import SilentLogger
from .stream import TextStream

logger = logging.getLogger(__name__)

LOGGER_TYPES = ("system", "stdout", "text", "silent", "null")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _default(value: Optional[str], env_var: str, fallback: str, environ: Mapping[str, str]) -> str:
    """Helper to pick an explicit value, then env var, then fallback."""
    return value or environ.get(env_var) or fallback


def _env_bool(environ: Mapping[str, str], env_var: str, fallback: bool) -> bool:
    raw = environ.get(env_var)
    if raw is None:
        return fallback
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


def _env_int(environ: Mapping[str, str], env_var: str, fallback: int) -> int:
    raw = environ.get(env_var)
    if raw is None or not raw.strip():
        return fallback
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid integer for {env_var}: {raw!r}") from None


def _sink_options(logger_type: str, name: str) -> Option:
    if logger_type == "system":
        return cfg_mod.logger_sink(system_logger(name))
    if logger_type == "stdout":
        # the no-op decorator keeps the level annotator out of the JSON
        return cfg_mod.chain(
            cfg_mod.stream(TextStream(sys.stdout)),
            cfg_mod.marshaler(json_marshaler(name)),
            cfg_mod.decorate(encoding.no_decorator()),
        )
    if logger_type == "text":
        return cfg_mod.chain(
            cfg_mod.stream(TextStream(sys.stderr)),
            cfg_mod.decorate(prefixes.decorator(prefixes.glog_header())),
        )
    if logger_type == "silent":
        return cfg_mod.logger_sink(SilentLogger(name))
    if logger_type == "null":
        return cfg_mod.logger_sink(null())
    raise ValueError(f"Unknown logger_type: {logger_type}. Must be one of: {', '.join(LOGGER_TYPES)}")


def config_from_env(
    logger_type: Optional[str] = None,
    level: Optional[str] = None,
    name: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Build a Config from explicit arguments, then environment variables, then defaults.

    Args:
        logger_type: One of "system", "stdout", "text", "silent", "null".
            Defaults to LOG_TYPE env or "system".
        level: Minimum level name. Defaults to LOG_LEVEL env or "INFO".
        name: Logger name. Defaults to LOG_NAME env or "logchain".
        environ: Environment mapping; ``os.environ`` when None

    Returns:
        Config ready to build

    Raises:
        ValueError: If a value is not recognized
    """
    env = os.environ if environ is None else environ
    logger_type = _default(logger_type, "LOG_TYPE", "system", env).lower()
    level = _default(level, "LOG_LEVEL", "INFO", env)
    name = _default(name, "LOG_NAME", "logchain", env)

    options = [
        cfg_mod.level(parse_level(level)),
        _sink_options(logger_type, name),
        cfg_mod.exit_code(_env_int(env, "LOG_EXIT_CODE", 1)),
    ]
    if _env_bool(env, "LOG_CALLER", False):
        options.append(cfg_mod.caller_tracking(True, _env_int(env, "LOG_CALLER_DEPTH", DEFAULT_DEPTH)))
    if _env_bool(env, "LOG_TIMESTAMPS", logger_type == "text"):
        options.append(cfg_mod.clock())

    cfg, _ = Config().apply(*options)
    return cfg


def create_logger(
    logger_type: Optional[str] = None,
    level: Optional[str] = None,
    name: Optional[str] = None,
) -> Interface:
    """Factory function to create a logging Interface.

    Args:
        logger_type: Type of sink. Options: "system", "stdout", "text",
            "silent", "null". Defaults to LOG_TYPE env or "system".
        level: Logging level. Options: DEBUG, INFO, WARN, ERROR, FATAL, PANIC.
            Defaults to LOG_LEVEL env or "INFO".
        name: Logger name for identification. Defaults to LOG_NAME env or "logchain".

    Returns:
        Interface instance

    Raises:
        ValueError: If logger_type or level is not recognized

    Example:
        >>> log = create_logger(logger_type="stdout", level="DEBUG", name="my-service")
        >>> log.infof("processed %d items", 3)
    """
    return config_from_env(logger_type, level, name).build()


class DefaultHolder:
    """Holds the current default Config and its built Interface.

    Swaps are guarded by a lock; readers always see a fully built Interface.
    The Config is read from the environment on first use.
    """

    def __init__(self, config: Optional[Config] = None):
        self._lock = threading.Lock()
        self._config = config
        self._interface: Optional[Interface] = None

    @property
    def config(self) -> Config:
        with self._lock:
            return self._current_config()

    def _current_config(self) -> Config:
        if self._config is None:
            self._config = config_from_env()
        return self._config

    def get(self) -> Interface:
        """Return the default Interface, building it if needed."""
        interface = self._interface
        if interface is not None:
            return interface
        with self._lock:
            if self._interface is None:
                self._interface = self._current_config().build()
            return self._interface

    def configure(self, *opts: Optional[Option]) -> Option:
        """Apply ``opts`` to the default Config and rebuild the Interface.

        Returns:
            Option that restores the previous default when passed back to ``configure``
        """
        with self._lock:
            cfg, undo = self._current_config().apply(*opts)
            interface = cfg.build()
            self._config = cfg
            self._interface = interface
        logger.debug("Default logging configuration replaced")
        return undo

    def set(self, config: Config) -> None:
        """Replace the default Config outright."""
        interface = config.build()
        with self._lock:
            self._config = config
            self._interface = interface

    @contextmanager
    def override(self, *opts: Optional[Option]) -> Iterator[Interface]:
        """Apply ``opts`` for the duration of a ``with`` block, then restore."""
        undo = self.configure(*opts)
        try:
            yield self.get()
        finally:
            self.configure(undo)

    def reset(self) -> None:
        """Forget the current default; the next use reads the environment again."""
        with self._lock:
            self._config = None
            self._interface = None


_holder = DefaultHolder()


def default_holder() -> DefaultHolder:
    return _holder


def get_default() -> Interface:
    """Return the process-wide default Interface."""
    return _holder.get()


def get_logger(name: Optional[str] = None) -> Interface:
    """Return the default Interface.

    Args:
        name: Accepted for call-site readability; every name shares the default

    Returns:
        The process-wide default Interface
    """
    return _holder.get()


def configure(*opts: Optional[Option]) -> Option:
    """Apply ``opts`` to the process-wide default; returns the undo Option."""
    return _holder.configure(*opts)


def override(*opts: Optional[Option]):
    """Context manager applying ``opts`` to the default for a block."""
    return _holder.override(*opts)


def set_default(config: Config) -> None:
    _holder.set(config)


def reset_default() -> None:
    """Drop the process-wide default so it is rebuilt from the environment."""
    _holder.reset()
