#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Example usage of the logchain package.

This script demonstrates how sinks, marshalers and decorators combine into a
leveled logging Interface.
"""

import io
import sys

import logchain
from logchain import config, encoding, prefixes, stream
from logchain.silent_logger import SilentLogger


def main():
    """Demonstrate logging functionality."""

    print("=" * 60)
    print("logchain Examples")
    print("=" * 60)
    print()

    # Example 1: Text stream with level annotation
    print("Example 1: TextStream with the default level annotator")
    print("-" * 60)
    log, _ = config.Config().with_options(
        config.stream(stream.TextStream(sys.stdout)),
        config.exit_func(config.no_exit()),
    )
    log.infof("Service started on port %d", 8080)
    log.warnf("Rate limit approaching: %d of %d", 95, 100)
    log.debugf("This debug message won't appear (below INFO level)")
    print()

    # Example 2: glog-style header with caller tracking
    print("Example 2: glog-style header with caller tracking")
    print("-" * 60)
    log, _ = config.Config().with_options(
        config.stream(stream.TextStream(sys.stdout)),
        config.decorate(prefixes.decorator(prefixes.glog_header())),
        config.caller_tracking(),
        config.clock(),
        config.level("debug"),
    )
    log.debugf("Now debug messages are visible")
    log.info("Formatless", "arguments", "are", "joined")
    print()

    # Example 3: JSON output
    print("Example 3: one JSON object per event")
    print("-" * 60)
    log = logchain.create_logger(logger_type="stdout", level="INFO", name="example-service")
    log.errorf("Failed to connect to %s", "localhost")
    print()

    # Example 4: Silent logger for testing
    print("Example 4: SilentLogger for testing")
    print("-" * 60)
    captured = SilentLogger(name="test-service")
    with logchain.override(config.logger_sink(captured), config.exit_func(config.no_exit())):
        logchain.infof("Test message %d", 1)
        logchain.warnf("Test warning")
        action = logchain.fatalf("Fatal but not exiting")

    print(f"Total logs captured: {len(captured.logs)}")
    print(f"Has 'Test message 1': {captured.has_log('Test message 1')}")
    print(f"Fatal returned: {action!r}")
    print()

    # Example 5: Redaction and length-prefixed records
    print("Example 5: redaction through a record stream")
    print("-" * 60)
    out = io.BytesIO()
    log, _ = config.Config().with_options(
        config.stream(stream.RecordStream(out)),
        config.decorate(encoding.no_decorator()),
    )
    log.infof("card=%s", logchain.Sensitive("4111111111111111", keep=4))
    for record in stream.read_records(out.getvalue()):
        print(record.decode("utf-8"))
    print()

    print("=" * 60)
    print("Examples completed!")
    print("=" * 60)


if __name__ == "__main__":
    main()
