# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for SilentLogger."""

from logchain import config
from logchain.levels import Level
from logchain.logger import Logger
from logchain.silent_logger import SilentLogger


def build(silent, *opts):
    log, _ = config.Config().with_options(config.logger_sink(silent), config.level("debug"), *opts)
    return log


class TestSilentLogger:
    """Tests for SilentLogger."""

    def test_default_values(self):
        """Test default initialization values."""
        logger = SilentLogger()

        assert isinstance(logger, Logger)
        assert logger.name == "logchain"
        assert logger.logs == []

    def test_records_level_and_message(self):
        """Test that each event stores its level and rendered message."""
        logger = SilentLogger()
        log = build(logger)

        log.warnf("Warning %s", "message")

        assert logger.logs == [{"level": "WARN", "message": "Warning message"}]

    def test_multiple_logs(self):
        """Test logging multiple messages."""
        logger = SilentLogger()
        log = build(logger)

        log.infof("Message 1")
        log.warnf("Message 2")
        log.errorf("Message 3")

        assert [entry["level"] for entry in logger.logs] == ["INFO", "WARN", "ERROR"]

    def test_clear_logs(self):
        """Test clearing stored logs."""
        logger = SilentLogger()
        log = build(logger)

        log.info("Message 1")
        log.info("Message 2")
        assert len(logger.logs) == 2

        logger.clear_logs()
        assert len(logger.logs) == 0

    def test_get_logs_filtered_by_level(self):
        """Test getting logs filtered by level name or Level."""
        logger = SilentLogger()
        log = build(logger)

        log.infof("Info 1")
        log.warnf("Warning 1")
        log.infof("Info 2")
        log.errorf("Error 1")

        assert len(logger.get_logs()) == 4
        assert len(logger.get_logs(level="INFO")) == 2
        warning_logs = logger.get_logs(level="WARNING")
        assert len(warning_logs) == 1
        assert warning_logs[0]["message"] == "Warning 1"
        assert len(logger.get_logs(Level.ERROR)) == 1

    def test_has_log_message(self):
        """Test checking if a log message exists."""
        logger = SilentLogger()
        log = build(logger)

        log.infof("User %s logged in", "alice")

        assert logger.has_log("logged in")
        assert logger.has_log("alice", level="INFO")
        assert not logger.has_log("alice", level="ERROR")
        assert not logger.has_log("logged out")

    def test_unformattable_message_kept(self):
        """Test that a template mismatch is still recorded."""
        logger = SilentLogger()
        log = build(logger)

        log.infof("x=%d", "abc")

        assert logger.logs[0]["message"].startswith("x=%d (format failed:")
