"""
Tests for structured logging
"""

import io
import json
import logging

import pytest

from fungible_ledger.errors import InsufficientBalance
from fungible_ledger.ledger import FungibleLedger
from fungible_ledger.logging_config import JSONFormatter, setup_logging, get_logger, log_action
from fungible_ledger.storage import InMemoryStorage


def capture(logger_name: str):
    """Attach a JSON handler writing to a buffer"""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger = logging.getLogger(logger_name)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger, handler, stream


def lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestJSONFormatter:
    """Test the structured record layout"""

    def setup_method(self):
        self.logger, self.handler, self.stream = capture("fungible.test.formatter")

    def teardown_method(self):
        self.logger.removeHandler(self.handler)

    def test_structured_fields(self):
        log_action(
            self.logger, "info", "Transfer completed",
            account="alice", action="transfer", resource="token:0",
            extra={"amount": "10"}
        )

        entry = lines(self.stream)[0]
        assert entry["level"] == "INFO"
        assert entry["logger"] == "fungible.test.formatter"
        assert entry["message"] == "Transfer completed"
        assert entry["account"] == "alice"
        assert entry["action"] == "transfer"
        assert entry["resource"] == "token:0"
        assert entry["extra"] == {"amount": "10"}
        assert "timestamp" in entry

    def test_none_fields_omitted(self):
        self.logger.info("plain")

        entry = lines(self.stream)[0]
        assert entry["message"] == "plain"
        assert "account" not in entry
        assert "extra" not in entry

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            self.logger.exception("failed")

        assert "RuntimeError: boom" in lines(self.stream)[0]["exception"]

    def test_disabled_level_skipped(self):
        self.logger.setLevel(logging.WARNING)
        log_action(self.logger, "info", "hidden")

        assert lines(self.stream) == []


class TestSetupLogging:
    """Test logger configuration"""

    def test_setup_replaces_handlers(self):
        logger = setup_logging("WARNING", logger_name="fungible.test.setup")
        logger = setup_logging("DEBUG", logger_name="fungible.test.setup", fmt="text")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_log_file(self, tmp_path):
        path = tmp_path / "ledger.log"
        logger = setup_logging("INFO", logger_name="fungible.test.file", log_file=str(path))
        logger.info("to file")
        for handler in logger.handlers:
            handler.flush()
            handler.close()

        assert json.loads(path.read_text().splitlines()[0])["message"] == "to file"

    def test_get_logger(self):
        assert get_logger("fungible.ledger") is logging.getLogger("fungible.ledger")


class TestLedgerLogging:
    """Test what the ledger writes to its log"""

    def setup_method(self):
        self.logger, self.handler, self.stream = capture("fungible.ledger")

    def teardown_method(self):
        self.logger.removeHandler(self.handler)

    def test_successful_operation_logged(self):
        ledger = FungibleLedger(InMemoryStorage())
        token = ledger.create_token("alice", 100)
        ledger.transfer("alice", token, "bob", 5)

        entries = lines(self.stream)
        assert [e["action"] for e in entries] == ["create_token", "transfer"]
        assert entries[1]["account"] == "alice"
        assert entries[1]["extra"] == {"to": "bob", "amount": "5"}

    def test_rejected_operation_logged(self):
        """Test that failures are logged as warnings with their error code"""
        ledger = FungibleLedger(InMemoryStorage())
        token = ledger.create_token("alice", 100)

        with pytest.raises(InsufficientBalance):
            ledger.transfer("bob", token, "alice", 5)

        entry = lines(self.stream)[-1]
        assert entry["level"] == "WARNING"
        assert entry["action"] == "transfer"
        assert entry["extra"]["code"] == "INSUFFICIENT_BALANCE"
