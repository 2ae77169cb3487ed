# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Immutable, chainable key/value context carried by every log event.

A Context never changes once created: ``with_value`` returns a new node that
answers for one key and delegates every other lookup to its parent. Parents
are shared by reference, so decorating a context is cheap.
"""

import threading
from typing import Any, Callable, Iterable, Optional, Tuple


class _Missing:
    """Sentinel type returned for keys that are not present in a Context."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class Key:
    """Typed context key that only ever equals itself.

    Modules that store metadata in a Context should keep their Key private so
    that user-supplied values can never collide with it.
    """

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"Key({self.name!r})"


class Context:
    """Base context: never done and holding no values."""

    def done(self) -> Optional[threading.Event]:
        """Return an event that is set once the context is cancelled.

        Returns:
            The cancellation event, or None if this context can never be cancelled
        """
        return None

    def value(self, key: Any) -> Any:
        """Look up ``key``, returning ``MISSING`` when it is absent."""
        return MISSING


class _EmptyContext(Context):
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return f"context.{self._name}()"


_background = _EmptyContext("background")
_todo = _EmptyContext("todo")


def background() -> Context:
    """Return the blank Context that is never done."""
    return _background


def todo() -> Context:
    """Return a blank Context marking a call site that still needs a real one."""
    return _todo


class _ValueContext(Context):
    __slots__ = ("_parent", "_key", "_value")

    def __init__(self, parent: Context, key: Any, value: Any):
        self._parent = parent
        self._key = key
        self._value = value

    def done(self) -> Optional[threading.Event]:
        return self._parent.done()

    def value(self, key: Any) -> Any:
        ctx: Context = self
        # walk the chain iteratively; deep decorator stacks stay off the call stack
        while isinstance(ctx, _ValueContext):
            if ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return ctx.value(key)


def with_value(parent: Context, key: Any, value: Any) -> Context:
    """Return a Context that maps ``key`` to ``value`` on top of ``parent``.

    ``parent`` is never modified.
    """
    return _ValueContext(parent, key, value)


class _CancelContext(Context):
    def __init__(self, parent: Context):
        self._parent = parent
        self._done = threading.Event()

    def done(self) -> Optional[threading.Event]:
        parent_done = self._parent.done()
        if parent_done is not None and parent_done.is_set():
            self._done.set()
        return self._done

    def value(self, key: Any) -> Any:
        return self._parent.value(key)

    def cancel(self) -> None:
        self._done.set()


def with_cancel(parent: Context) -> Tuple[Context, Callable[[], None]]:
    """Derive a cancellable Context from ``parent``.

    Returns:
        Tuple of the new Context and a function that cancels it
    """
    ctx = _CancelContext(parent)
    return ctx, ctx.cancel


Decorator = Callable[[Context], Context]
Getter = Callable[[], Context]


class Decorators(tuple):
    """Ordered collection of context decorators.

    Decorators run first to last: each one receives the Context produced by
    the one before it.
    """

    def __new__(cls, decorators: Iterable[Optional[Decorator]] = ()) -> "Decorators":
        return super().__new__(cls, decorators)

    def decorate(self, ctx: Context) -> Context:
        for decorator in self:
            if decorator is not None:
                ctx = decorator(ctx)
        return ctx


def no_decorator() -> Decorator:
    """Return a decorator that hands back the original Context."""
    return lambda ctx: ctx


def new_decorator(key: Any, value: Any) -> Decorator:
    """Return a decorator that adds ``key``/``value`` to a Context."""
    return lambda ctx: with_value(ctx, key, value)


def new_getter(getter: Optional[Getter] = None, *decorators: Decorator) -> Getter:
    """Wrap ``getter`` so every Context it produces is decorated.

    A missing getter, or one that returns None, falls back to ``background()``.
    Getters may be invoked from any thread; the returned getter holds no state.
    """
    source = getter or background
    chain = Decorators(decorators)

    def get() -> Context:
        ctx = source()
        if ctx is None:
            ctx = background()
        return chain.decorate(ctx)

    return get
