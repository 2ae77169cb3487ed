# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Config snapshots, reversible options, and the Interface builder.

A Config is a plain value. Options mutate a clone of it and hand back the
Option that undoes exactly that mutation, so a temporary override can be
rolled back without stashing the previous Config::

    cfg, undo = base.apply(level(Level.DEBUG), stream(buf))
    ...
    base, _ = cfg.apply(undo)
"""

import logging
import queue
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Tuple, Union

from . import context as context_mod
from . import encoding
from . import levels as levels_mod
from . import logger as logger_mod
from . import redact as redact_mod
from . import terminal
from . import timestamp
from .caller import DEFAULT_DEPTH, Tracking
from .interface import Interface
from .levels import Level
from .stream import Stream
from .terminal import ExitFunc, PanicFunc, no_exit, no_panic  # noqa: F401

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sink:
    """Destination of built loggers: a Stream or a Logger. The Stream wins when both are set."""

    stream: Optional[Stream] = None
    logger: Optional[logger_mod.Logger] = None


@dataclass
class Config:
    """Everything needed to build an Interface.

    Attributes:
        level: Minimum level delivered; lower levels are discarded at build time
        sink: Output Stream or Logger; stdlib logging when empty
        exit_func: Hook invoked after FATAL events; ``sys.exit`` when None
        exit_code: Code passed to ``exit_func``
        panic_func: Hook invoked after PANIC events; raises LogPanic when None
        tracking: Caller tracking settings
        marshaler: Marshaler for a Stream sink; the format marshaler when None
        decorators: Marshaler decorators for a Stream sink; the level
            annotator is used when there are none
        error_sink: Queue receiving marshaling errors from a Stream sink
        transforms: Extra per-level TransformOps
        context_decorators: Context decorators run for every event
        context_getter: Source of the initial Context for each event
        clock: When set, every event is stamped with ``clock()``
        redact: Whether redactable arguments are redacted
    """

    level: Level = Level.INFO
    sink: Sink = field(default_factory=Sink)
    exit_func: Optional[ExitFunc] = None
    exit_code: int = terminal.DEFAULT_EXIT_CODE
    panic_func: Optional[PanicFunc] = None
    tracking: Tracking = field(default_factory=Tracking)
    marshaler: Optional[encoding.Marshaler] = None
    decorators: Tuple[encoding.Decorator, ...] = ()
    error_sink: Optional["queue.Queue[Exception]"] = None
    transforms: Tuple[levels_mod.TransformOp, ...] = ()
    context_decorators: Tuple[context_mod.Decorator, ...] = ()
    context_getter: Optional[context_mod.Getter] = None
    clock: Optional[timestamp.Clock] = None
    redact: bool = True

    def apply(self, *opts: Optional["Option"]) -> Tuple["Config", "Option"]:
        """Clone this Config and apply ``opts`` to the clone, in order.

        Returns:
            Tuple of the new Config and the Option that reverts all of ``opts``
        """
        cfg = replace(self)
        undo = Chain(tuple(o for o in opts if o is not None)).apply(cfg)
        return cfg, undo

    def with_options(self, *opts: Optional["Option"]) -> Tuple[Interface, "Option"]:
        """Apply ``opts`` to a clone and build it.

        Returns:
            Tuple of the built Interface and the Option that reverts ``opts``
        """
        cfg, undo = self.apply(*opts)
        return cfg.build(), undo

    def _sink_logger(self) -> logger_mod.Logger:
        if self.sink.stream is not None:
            decorators = self.decorators or (levels_mod.annotator(),)
            op = encoding.Decorators(decorators).decorate(self.marshaler or encoding.format_marshaler())
            return logger_mod.with_stream(self.sink.stream, op, self.error_sink)
        if self.sink.logger is not None:
            return self.sink.logger
        return levels_mod.system_logger()

    def _context_decorators(self) -> context_mod.Decorators:
        stamp = (timestamp.stamper(self.clock),) if self.clock is not None else ()
        return context_mod.Decorators(stamp + tuple(self.context_decorators))

    def _track(self, level: Level, logs: logger_mod.Logger) -> Tuple[Level, logger_mod.Logger]:
        # the terminal wrapper adds one frame above caller tracking
        extra = 1 if level in (Level.FATAL, Level.PANIC) else 0
        return level, self.tracking.decorate(logs, extra_depth=extra)

    def build(self) -> Interface:
        """Build the six per-level loggers and assemble them into an Interface.

        Layers, innermost first: sink, context decorators, redaction, level
        injection, lock guard, user transforms, caller tracking, threshold,
        exit and panic hooks.
        """
        base = self._sink_logger()
        ctx_decorators = self._context_decorators()
        guard = logger_mod.locked()
        with_ctx = logger_mod.with_context(ctx_decorators.decorate if ctx_decorators else None)
        redacting = redact_mod.redacting() if self.redact else logger_mod.no_decorator()

        def source(at: Level) -> logger_mod.Logger:
            logs = with_ctx(base)
            logs = redacting(logs)
            logs = levels_mod.logger_at(at)(logs)
            return guard(logs)

        ops = tuple(self.transforms) + (
            self._track,
            levels_mod.min_transform(self.level),
            terminal.terminal_transform(self.exit_code, self.exit_func, self.panic_func),
        )
        loggers = levels_mod.new_indexer(source, None, *ops)
        logger.debug("Built interface: level=%s sink=%r tracking=%r", self.level.name, self.sink, self.tracking)
        return Interface(loggers, context_mod.new_getter(self.context_getter))


class Option(ABC):
    """A reversible change to a Config."""

    @abstractmethod
    def apply(self, cfg: Config) -> "Option":
        """Mutate ``cfg`` in place.

        Returns:
            The Option that undoes exactly this change
        """
        pass


@dataclass(frozen=True)
class NoOption(Option):
    """Leaves the Config unchanged; its own inverse."""

    def apply(self, cfg: Config) -> Option:
        return self


@dataclass(frozen=True)
class SetField(Option):
    """Replaces one Config field; the inverse restores the previous value."""

    name: str
    value: Any

    def apply(self, cfg: Config) -> Option:
        old = getattr(cfg, self.name)
        setattr(cfg, self.name, self.value)
        return SetField(self.name, old)


@dataclass(frozen=True)
class Extend(Option):
    """Appends items to a tuple field; the inverse restores the tuple as it was."""

    name: str
    items: Tuple[Any, ...]

    def apply(self, cfg: Config) -> Option:
        old = tuple(getattr(cfg, self.name))
        setattr(cfg, self.name, old + tuple(self.items))
        return Restore(self.name, old, tuple(self.items))


@dataclass(frozen=True)
class Restore(Option):
    """Puts back a tuple field; the inverse appends ``items`` again."""

    name: str
    value: Tuple[Any, ...]
    items: Tuple[Any, ...]

    def apply(self, cfg: Config) -> Option:
        setattr(cfg, self.name, self.value)
        return Extend(self.name, self.items)


@dataclass(frozen=True)
class Chain(Option):
    """Applies options in order; the inverse applies their inverses in reverse."""

    options: Tuple[Option, ...] = ()

    def apply(self, cfg: Config) -> Option:
        undo = [opt.apply(cfg) for opt in self.options]
        return Chain(tuple(reversed(undo)))


def no_option() -> Option:
    """Return an Option that changes nothing."""
    return NoOption()


def level(value: Union[Level, str]) -> Option:
    """Set the minimum level; accepts a Level or a name such as "warn"."""
    if isinstance(value, str):
        value = levels_mod.parse_level(value)
    return SetField("level", Level(value))


def sink(value: Sink) -> Option:
    return SetField("sink", value)


def stream(value: Stream) -> Option:
    """Send events to ``value`` through the configured marshaler."""
    return sink(Sink(stream=value))


def logger_sink(value: logger_mod.Logger) -> Option:
    """Send events to ``value``; marshaler and decorators are not used."""
    return sink(Sink(logger=value))


def marshaler(value: Optional[encoding.Marshaler]) -> Option:
    return SetField("marshaler", value)


def decorate(*decorators: encoding.Decorator) -> Option:
    """Append marshaler decorators; later ones wrap outermost."""
    return Extend("decorators", tuple(decorators))


def exit_func(value: Optional[ExitFunc]) -> Option:
    return SetField("exit_func", value)


def exit_code(value: int) -> Option:
    return SetField("exit_code", int(value))


def panic_func(value: Optional[PanicFunc]) -> Option:
    return SetField("panic_func", value)


def caller_tracking(enabled: bool = True, depth: int = DEFAULT_DEPTH) -> Option:
    """Enable or disable caller tracking.

    Args:
        enabled: Whether call sites are captured
        depth: Frames from the tracking layer to user code; raise it by one
            for each wrapper between user code and the Interface method
    """
    return SetField("tracking", Tracking(enabled=enabled, depth=depth))


def error_sink(value: Optional["queue.Queue[Exception]"]) -> Option:
    return SetField("error_sink", value)


def transform(*ops: levels_mod.TransformOp) -> Option:
    """Append per-level TransformOps, applied inside caller tracking and threshold."""
    return Extend("transforms", tuple(ops))


def context_decorators(*decorators: context_mod.Decorator) -> Option:
    return Extend("context_decorators", tuple(decorators))


def context_getter(value: Optional[context_mod.Getter]) -> Option:
    return SetField("context_getter", value)


def clock(value: Optional[timestamp.Clock] = timestamp.utc_now) -> Option:
    """Stamp every event with ``value()``; None disables stamping."""
    return SetField("clock", value)


def redaction(enabled: bool = True) -> Option:
    return SetField("redact", bool(enabled))


def chain(*opts: Optional[Option]) -> Option:
    """Combine options into one that applies them in order."""
    return Chain(tuple(o for o in opts if o is not None))
