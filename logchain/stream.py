# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Output streams and the end-of-message (EOM) framing contract.

A marshaler writes one log event to a Stream with any number of ``write``
calls and then calls ``eom`` exactly once. EOM marks the event boundary and
carries the accumulated error status of the event; buffering streams use it
to flush, frame or drop the event as a whole.
"""

import io
import logging
import os
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterator, List, Optional, Tuple

from .exceptions import ShortWriteError

logger = logging.getLogger(__name__)

EOMFunc = Callable[[bytes, Optional[Exception]], Optional[Exception]]

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _in_package(filename: str) -> bool:
    return os.path.dirname(os.path.abspath(filename)) == _PACKAGE_DIR


def caller_stacklevel() -> int:
    """Return the stdlib ``stacklevel`` of the first frame outside this package.

    The function calling this one counts as level 1, which is how
    ``logging.Logger.log`` counts. Frames of logchain modules (Interface
    methods, decorators, marshalers, streams) are skipped, so a record is
    attributed to the code that issued the log call. A wrapper defined
    outside the package, such as a custom marshaler or transform, is where
    the walk stops.
    """
    frame = sys._getframe(1)
    level = 1
    while frame.f_back is not None and _in_package(frame.f_code.co_filename):
        frame = frame.f_back
        level += 1
    return level


class Stream(ABC):
    """Abstract byte sink for serialized log events."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write bytes belonging to the current event.

        Args:
            data: Bytes to write

        Returns:
            Number of bytes accepted

        Raises:
            OSError: If the underlying destination fails
        """
        pass

    @abstractmethod
    def eom(self, err: Optional[Exception] = None) -> Optional[Exception]:
        """Signal that the current event is complete.

        Args:
            err: Error encountered while producing the event, if any

        Returns:
            The error status of the event after framing, or None
        """
        pass


class NullStream(Stream):
    """Stream that swallows all output, akin to /dev/null."""

    def write(self, data: bytes) -> int:
        return len(data)

    def eom(self, err: Optional[Exception] = None) -> Optional[Exception]:
        return None


_null_stream = NullStream()


def null() -> Stream:
    """Return the shared discarding Stream."""
    return _null_stream


class BufferedStream(Stream):
    """Stream that buffers all writes in between calls to EOM.

    On EOM the optional callback receives a snapshot of the buffered event and
    the incoming error, and decides whether and where to forward it. The
    buffer is reset afterwards no matter what the callback does, so an event
    never carries bytes from the one before it.
    """

    def __init__(self, eom_func: Optional[EOMFunc] = None):
        """Initialize buffered stream.

        Args:
            eom_func: Optional callback invoked with (buffer, error) on EOM
        """
        self.eom_func = eom_func
        self._buf = bytearray()

    def write(self, data: bytes) -> int:
        self._buf += data
        return len(data)

    def __len__(self) -> int:
        return len(self._buf)

    def getvalue(self) -> bytes:
        """Return the bytes buffered for the current event."""
        return bytes(self._buf)

    def reset(self) -> None:
        self._buf.clear()

    def eom(self, err: Optional[Exception] = None) -> Optional[Exception]:
        try:
            if self.eom_func is None:
                return err
            return self.eom_func(bytes(self._buf), err)
        finally:
            self.reset()


def append_to(events: List[str], encoding: str = "utf-8") -> EOMFunc:
    """EOM callback that decodes each successful event and appends it to ``events``."""

    def collect(buf: bytes, err: Optional[Exception]) -> Optional[Exception]:
        if err is None:
            events.append(buf.decode(encoding, errors="replace"))
        return err

    return collect


def write_to(writer: Any) -> EOMFunc:
    """EOM callback that forwards each successful event unchanged to ``writer``."""

    def forward(buf: bytes, err: Optional[Exception]) -> Optional[Exception]:
        if err is not None:
            return err
        try:
            _write_all(writer, buf)
        except OSError as e:
            return e
        return None

    return forward


class SystemStream(BufferedStream):
    """Buffered stream that hands each event to a stdlib ``logging`` logger.

    Records are attributed to the code that issued the log call rather than
    to this module; see ``caller_stacklevel``.
    """

    def __init__(
        self,
        name: str = "logchain",
        level: int = logging.INFO,
        stacklevel: Optional[int] = None,
    ):
        """Initialize system stream.

        Args:
            name: Name of the stdlib logger that receives events
            level: Stdlib level used for every event
            stacklevel: Fixed stdlib ``stacklevel``, counted from the EOM
                callback; the first frame outside logchain when None
        """
        super().__init__(self._emit)
        self._stdlib_logger = logging.getLogger(name)
        self.level = level
        self.stacklevel = stacklevel

    def _emit(self, buf: bytes, err: Optional[Exception]) -> Optional[Exception]:
        if err is not None:
            return err
        self._stdlib_logger.log(
            self.level,
            buf.decode("utf-8", errors="replace"),
            stacklevel=self.stacklevel if self.stacklevel is not None else caller_stacklevel(),
        )
        return None


def system_stream(
    name: str = "logchain", level: int = logging.INFO, stacklevel: Optional[int] = None
) -> Stream:
    """Return a new buffered Stream that logs via the stdlib ``logging`` package."""
    return SystemStream(name=name, level=level, stacklevel=stacklevel)


def _write_all(writer: Any, data: bytes) -> None:
    if isinstance(writer, io.TextIOBase):
        writer.write(data.decode("utf-8", errors="replace"))
        return
    n = writer.write(data)
    # raw writers may legitimately return None; only a short count is an error
    if n is not None and n != len(data):
        raise ShortWriteError(len(data), n)


class TextStream(Stream):
    """Write-through stream that terminates every event with a newline.

    The last byte written is remembered so that EOM only appends ``\\n`` when
    the event did not already end with one.
    """

    def __init__(self, writer: Any, encoding: str = "utf-8"):
        """Initialize text stream.

        Args:
            writer: Text or binary file-like object
            encoding: Encoding used when ``writer`` is a text stream
        """
        self._writer = writer
        self._encoding = encoding
        self._text = isinstance(writer, io.TextIOBase)
        self._last: Optional[int] = None

    def write(self, data: bytes) -> int:
        if not data:
            return 0
        if self._text:
            self._writer.write(data.decode(self._encoding, errors="replace"))
            n = len(data)
        else:
            n = self._writer.write(data)
            if n is None:
                n = len(data)
        if n > 0:
            self._last = data[n - 1]
        return n

    def eom(self, err: Optional[Exception] = None) -> Optional[Exception]:
        last, self._last = self._last, None
        try:
            if last is not None and last != 0x0A:
                self.write(b"\n")
                self._last = None
            flush = getattr(self._writer, "flush", None)
            if flush is not None:
                flush()
        except OSError as e:
            return err or e
        return err


def encode_uvarint(value: int) -> bytes:
    """Encode a non-negative integer as an unsigned LEB128 varint."""
    if value < 0:
        raise ValueError(f"uvarint cannot encode negative value {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_uvarint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode an unsigned varint starting at ``offset``.

    Returns:
        Tuple of the decoded value and the offset just past it

    Raises:
        ValueError: If the data ends before the varint does
    """
    value = 0
    shift = 0
    pos = offset
    while pos < len(data):
        b = data[pos]
        pos += 1
        value |= (b & 0x7F) << shift
        if b < 0x80:
            return value, pos
        shift += 7
    raise ValueError("truncated uvarint")


def read_records(data: bytes) -> Iterator[bytes]:
    """Split length-prefixed records produced by ``RecordStream``.

    Raises:
        ValueError: If the final record is truncated
    """
    pos = 0
    while pos < len(data):
        size, pos = decode_uvarint(data, pos)
        end = pos + size
        if end > len(data):
            raise ValueError(f"truncated record: need {size} bytes, have {len(data) - pos}")
        yield data[pos:end]
        pos = end


class RecordStream(Stream):
    """Stream that frames each event as a uvarint length followed by the payload.

    The event is buffered until EOM and then written in two phases. Any
    partial write is reported as ``ShortWriteError`` instead of being
    silently truncated.
    """

    def __init__(self, writer: Any):
        """Initialize record stream.

        Args:
            writer: Binary file-like object whose ``write`` returns a byte count
        """
        self._writer = writer
        self._buf = bytearray()

    def write(self, data: bytes) -> int:
        self._buf += data
        return len(data)

    def eom(self, err: Optional[Exception] = None) -> Optional[Exception]:
        try:
            if err is not None:
                return err
            payload = bytes(self._buf)
            try:
                self._write_phase(encode_uvarint(len(payload)))
                self._write_phase(payload)
            except OSError as e:
                logger.debug("RecordStream: failed to write %d byte record: %s", len(payload), e)
                return e
            return None
        finally:
            self._buf.clear()

    def _write_phase(self, data: bytes) -> None:
        n = self._writer.write(data)
        if n is None or n != len(data):
            raise ShortWriteError(len(data), n or 0)


def record_stream(writer: Any) -> Stream:
    """Return a Stream writing length-prefixed records to ``writer``."""
    return RecordStream(writer)
