# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for marshalers and marshaler decorators."""

import pytest

from logchain import context, encoding, stream
from logchain.context import Key
from logchain.exceptions import FormatError


class CountingStream(stream.BufferedStream):
    """BufferedStream that counts EOM calls and can fail writes."""

    def __init__(self, fail_writes: bool = False):
        super().__init__()
        self.fail_writes = fail_writes
        self.eoms = []

    def write(self, data: bytes) -> int:
        if self.fail_writes:
            raise OSError("write failed")
        return super().write(data)

    def eom(self, err=None):
        self.eoms.append((self.getvalue(), err))
        return super().eom(err)


def literal(text: str) -> encoding.Decorator:
    return encoding.prefix(lambda ctx: encoding.singular(text.encode()))


class TestRender:
    """Tests for message rendering."""

    def test_template_with_args(self):
        """Test printf-style rendering."""
        assert encoding.render("x=%d y=%s", (7, "z")) == "x=7 y=z"

    def test_message_without_args_is_verbatim(self):
        """Test that a lone message is not treated as a template."""
        assert encoding.render("100% done", ()) == "100% done"

    def test_empty_message_joins_args(self):
        """Test the formatless form."""
        assert encoding.render("", ("a", 1, None)) == "a 1 None"

    def test_mapping_argument(self):
        """Test named fields filled from a single mapping."""
        assert encoding.render("%(user)s logged in", ({"user": "alice"},)) == "alice logged in"

    def test_mismatch_raises_format_error(self):
        """Test that a bad template raises FormatError."""
        with pytest.raises(FormatError):
            encoding.render("x=%d", ("not a number",))

    def test_too_few_args(self):
        """Test that missing arguments raise FormatError."""
        with pytest.raises(FormatError):
            encoding.render("%s and %s", ("one",))


class TestFormatMarshaler:
    """Tests for the default marshaler."""

    def test_writes_and_calls_eom_once(self):
        """Test that one event produces one EOM with no error."""
        s = CountingStream()
        op = encoding.format_marshaler()

        err = op(context.background(), s, "x=%d", 7)

        assert err is None
        assert s.eoms == [(b"x=7", None)]

    def test_format_error_returned(self):
        """Test that a template mismatch is returned, not raised."""
        s = CountingStream()

        err = encoding.format_marshaler()(context.background(), s, "x=%d", "abc")

        assert isinstance(err, FormatError)
        assert len(s.eoms) == 1
        assert s.eoms[0][1] is err

    def test_write_error_returned(self):
        """Test that an OSError from the stream is returned through EOM."""
        s = CountingStream(fail_writes=True)

        err = encoding.format_marshaler()(context.background(), s, "hello")

        assert isinstance(err, OSError)
        assert len(s.eoms) == 1

    def test_null_marshaler_touches_nothing(self):
        """Test null_marshaler."""
        s = CountingStream()

        assert encoding.null_marshaler()(context.background(), s, "x") is None
        assert s.eoms == []


class TestPrefix:
    """Tests for prefix decorators."""

    def test_prefix_written_before_message(self):
        """Test a single prefix."""
        s = CountingStream()
        op = encoding.format_marshaler(literal("> "))

        op(context.background(), s, "msg")

        assert s.eoms == [(b"> msg", None)]

    def test_chunks_are_written_lazily(self):
        """Test that a generator prefix is consumed chunk by chunk."""
        s = CountingStream()
        written_before = []

        def chunks(ctx):
            yield b"a"
            written_before.append(s.getvalue())
            yield b""
            yield b"b"

        encoding.format_marshaler(encoding.prefix(chunks))(context.background(), s, "c")

        assert written_before == [b"a"]
        assert s.eoms == [(b"abc", None)]

    def test_none_prefix_contributes_nothing(self):
        """Test a prefix function returning None."""
        s = CountingStream()

        encoding.format_marshaler(encoding.prefix(lambda ctx: None))(context.background(), s, "m")

        assert s.eoms == [(b"m", None)]

    def test_none_prefix_func_is_no_decorator(self):
        """Test prefix(None)."""
        op = encoding.format_marshaler()
        assert encoding.prefix(None)(op) is op

    def test_write_error_skips_marshaler_with_single_eom(self):
        """Test that a failed prefix closes the event once and stops the chain."""
        s = CountingStream(fail_writes=True)
        calls = []

        def inner(ctx, st, message, *args):
            calls.append(message)
            return st.eom(None)

        err = literal("P")(inner)(context.background(), s, "m")

        assert isinstance(err, OSError)
        assert calls == []
        assert len(s.eoms) == 1

    def test_later_decorators_run_first(self):
        """Test that the last decorator in the list wraps outermost."""
        s = CountingStream()
        op = encoding.Decorators([literal("1"), None, literal("2")]).decorate(encoding.format_marshaler())

        op(context.background(), s, "m")

        assert s.eoms == [(b"21m", None)]


class TestWithContext:
    """Tests for the marshaler context decorator."""

    def test_rewrites_context_for_wrapped_marshaler(self):
        """Test that the wrapped marshaler sees the decorated Context."""
        k = Key("k")
        seen = []

        def inner(ctx, st, message, *args):
            seen.append(ctx.value(k))
            return st.eom(None)

        op = encoding.with_context(context.new_decorator(k, "v"))(inner)
        op(context.background(), CountingStream(), "m")

        assert seen == ["v"]

    def test_none_is_no_decorator(self):
        """Test with_context(None)."""
        op = encoding.format_marshaler()
        assert encoding.with_context(None)(op) is op
