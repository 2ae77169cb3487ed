# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for loggers and logger decorators."""

import logging
import os
import queue
import threading

import pytest

from logchain import context, encoding, levels, stream
from logchain import logger as logger_mod
from logchain.context import Key
from logchain.levels import Level


def recorder(into):
    return logger_mod.FuncLogger(lambda ctx, message, *args: into.append((message, args)))


def failing_marshaler(err):
    return lambda ctx, s, message, *args: s.eom(err)


class TestNullAndFunc:
    """Tests for the basic loggers."""

    def test_null_discards(self):
        """Test that the null logger accepts anything."""
        assert logger_mod.null().logf(context.background(), "x=%d", "bad") is None

    def test_func_logger_delegates(self):
        """Test FuncLogger."""
        seen = []
        recorder(seen).logf(context.background(), "m", 1, 2)

        assert seen == [("m", (1, 2))]


class TestMulti:
    """Tests for fan-out."""

    def test_all_members_receive_event_in_order(self):
        """Test that every member gets the event."""
        seen = []
        logs = logger_mod.multi(
            logger_mod.FuncLogger(lambda ctx, m, *a: seen.append("a")),
            logger_mod.FuncLogger(lambda ctx, m, *a: seen.append("b")),
        )

        logs.logf(context.background(), "m")

        assert seen == ["a", "b"]

    def test_failure_does_not_stop_dispatch(self, caplog):
        """Test that a raising member is dropped and later members still run."""
        caplog.set_level(logging.DEBUG, logger="logchain.logger")
        seen = []

        def boom(ctx, message, *args):
            raise RuntimeError("first failed")

        logs = logger_mod.multi(logger_mod.FuncLogger(boom), recorder(seen))

        assert logs.logf(context.background(), "m") is None
        assert seen == [("m", ())]
        assert any("first failed" in r.getMessage() for r in caplog.records)


class TestWithStream:
    """Tests for the stream-adapting logger."""

    def test_marshals_to_stream(self, events, buffered):
        """Test a plain event."""
        logs = logger_mod.with_stream(buffered, encoding.format_marshaler())

        logs.logf(context.background(), "n=%d", 3)

        assert events == ["n=3"]

    def test_errors_sent_to_queue(self):
        """Test that marshaler errors reach the error sink."""
        errors = queue.Queue()
        err = OSError("disk full")
        logs = logger_mod.with_stream(stream.BufferedStream(), failing_marshaler(err), errors)

        logs.logf(context.background(), "m")

        assert errors.get_nowait() is err

    def test_errors_ignored_without_sink(self):
        """Test that no sink means errors are dropped silently."""
        logs = logger_mod.with_stream(
            stream.BufferedStream(), failing_marshaler(OSError("x")), logger_mod.ignore_errors()
        )

        assert logs.logf(context.background(), "m") is None

    def test_cancelled_context_drops_error(self):
        """Test that a full sink never blocks a cancelled caller."""
        errors = queue.Queue(maxsize=1)
        errors.put(ValueError("already queued"))
        ctx, cancel = context.with_cancel(context.background())
        cancel()
        logs = logger_mod.with_stream(stream.BufferedStream(), failing_marshaler(OSError("x")), errors)

        logs.logf(ctx, "m")

        assert errors.qsize() == 1

    def test_send_waits_until_cancelled(self):
        """Test that a blocked send gives up once the context is cancelled."""
        errors = queue.Queue(maxsize=1)
        errors.put(ValueError("already queued"))
        ctx, cancel = context.with_cancel(context.background())
        logs = logger_mod.with_stream(stream.BufferedStream(), failing_marshaler(OSError("x")), errors)

        timer = threading.Timer(0.1, cancel)
        timer.start()
        try:
            logs.logf(ctx, "m")
        finally:
            timer.cancel()

        assert ctx.done().is_set()
        assert errors.qsize() == 1


class TestDecorators:
    """Tests for logger decorators."""

    def test_with_context_rewrites_context(self):
        """Test that the delegate sees the decorated Context."""
        k = Key("k")
        seen = []
        base = logger_mod.FuncLogger(lambda ctx, m, *a: seen.append(ctx.value(k)))

        logger_mod.with_context(context.new_decorator(k, 1))(base).logf(context.background(), "m")

        assert seen == [1]

    def test_with_context_none_is_identity(self):
        """Test with_context(None)."""
        base = logger_mod.null()
        assert logger_mod.with_context(None)(base) is base

    def test_locked_holds_lock_during_logf(self):
        """Test that the lock is held for exactly the delegated call."""
        lock = threading.Lock()
        held = []
        base = logger_mod.FuncLogger(lambda ctx, m, *a: held.append(lock.locked()))

        logger_mod.locked(lock)(base).logf(context.background(), "m")

        assert held == [True]
        assert not lock.locked()

    def test_locked_releases_on_error(self):
        """Test that a raising delegate releases the lock."""
        lock = threading.Lock()

        def boom(ctx, message, *args):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            logger_mod.locked(lock)(logger_mod.FuncLogger(boom)).logf(context.background(), "m")
        assert not lock.locked()


class TestSystemLogger:
    """Tests for the stdlib-backed logger."""

    def test_logs_at_mapped_level(self, caplog):
        """Test that the event Level selects the stdlib level."""
        caplog.set_level(logging.DEBUG, logger="logchain.test.system")
        logs = levels.system_logger(name="logchain.test.system")

        logs.logf(levels.new_context(context.background(), Level.WARN), "x=%d", 7)

        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [(logging.WARNING, "x=7")]

    def test_respects_stdlib_level(self, caplog):
        """Test that disabled stdlib levels are skipped."""
        caplog.set_level(logging.ERROR, logger="logchain.test.system")
        logs = levels.system_logger(name="logchain.test.system")

        logs.logf(levels.new_context(context.background(), Level.INFO), "quiet")

        assert caplog.records == []

    def test_record_names_calling_code(self, caplog):
        """Test that the record carries this file and function, not logger.py."""
        caplog.set_level(logging.INFO, logger="logchain.test.system")
        logs = levels.system_logger(name="logchain.test.system")

        logs.logf(levels.new_context(context.background(), Level.INFO), "here")

        (record,) = caplog.records
        assert os.path.samefile(record.pathname, __file__)
        assert record.funcName == "test_record_names_calling_code"

    def test_fixed_stacklevel_overrides_search(self, caplog):
        """Test that an explicit stacklevel of 1 names SystemLogger.logf."""
        caplog.set_level(logging.INFO, logger="logchain.test.system")
        logs = levels.system_logger(name="logchain.test.system", stacklevel=1)

        logs.logf(levels.new_context(context.background(), Level.INFO), "inside")

        (record,) = caplog.records
        assert os.path.basename(record.pathname) == "logger.py"
        assert record.funcName == "logf"

    def test_unformattable_event_dropped(self, caplog):
        """Test that a format error is not raised to the caller."""
        caplog.set_level(logging.INFO, logger="logchain.test.system")
        logs = levels.system_logger(name="logchain.test.system")

        logs.logf(levels.new_context(context.background(), Level.ERROR), "x=%d", "abc")

        assert [r for r in caplog.records if r.name == "logchain.test.system"] == []
