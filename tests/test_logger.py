"""Tests for logging setup."""

import json
import logging

import pytest

from uptime_worker.utils.logger import get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestSetupLogging:
    """Test formatter selection and file output."""

    def test_json_lines_carry_extra_fields(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "app" / "worker.log"
        setup_logging(level="INFO", log_format="json", log_file=str(log_file), console=False)

        get_logger("uptime_worker.tests").info("Probe completed", extra={"check_id": "abc"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["message"] == "Probe completed"
        assert record["name"] == "uptime_worker.tests"
        assert record["check_id"] == "abc"
        assert "timestamp" in record

    def test_text_format(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "worker.log"
        setup_logging(level="WARNING", log_format="text", log_file=str(log_file), console=False)

        logger = get_logger("uptime_worker.tests")
        logger.info("hidden")
        logger.warning("Check skipped")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "hidden" not in content
        assert " - uptime_worker.tests - WARNING - Check skipped" in content
