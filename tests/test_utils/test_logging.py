"""Tests for logging setup and formatters."""

import json
import logging
import sys

from audiolab.utils.logging import (
    ROOT_LOGGER_NAME,
    ColoredFormatter,
    JSONFormatter,
    configure_logging,
    create_logger_with_context,
    get_logger,
    setup_logging,
)


def _record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("audiolab.test", level, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestGetLogger:
    def test_prefixes_namespace(self):
        assert get_logger("engine").name == "audiolab.engine"

    def test_keeps_qualified_names(self):
        assert get_logger("audiolab.plugins").name == "audiolab.plugins"
        assert get_logger(ROOT_LOGGER_NAME).name == "audiolab"


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "audiolab.test"
        assert data["message"] == "hello"
        assert "context" not in data

    def test_extra_fields_become_context(self):
        data = json.loads(JSONFormatter().format(_record(sample_rate=44100)))
        assert data["context"] == {"sample_rate": 44100}

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "audiolab.test", logging.ERROR, __file__, 1, "oops", (), sys.exc_info()
            )
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in data["exception"]


class TestColoredFormatter:
    def test_restores_levelname(self):
        record = _record(level=logging.WARNING)
        output = ColoredFormatter("%(levelname)s %(message)s").format(record)
        assert "\033[33m" in output
        assert record.levelname == "WARNING"


class TestSetupLogging:
    def test_level_and_handlers(self):
        logger = setup_logging(level="debug", console_enabled=True)
        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_json_file_output(self, tmp_path):
        log_file = tmp_path / "logs" / "audiolab.log"
        setup_logging(log_file=str(log_file), console_enabled=False)
        get_logger("engine").info("written", extra={"file_path": "kick.wav"})
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        data = json.loads(line)
        assert data["message"] == "written"
        assert data["logger"] == "audiolab.engine"
        assert data["context"]["file_path"] == "kick.wav"

    def test_configure_from_config(self):
        logger = configure_logging({"logging": {"level": "WARNING", "format": "json"}})
        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)


class TestContextAdapter:
    def test_context_attached(self, caplog):
        log = create_logger_with_context("engine", {"file_path": "snare.wav"})
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            log.info("loading", extra={"sample_rate": 48000})
        record = caplog.records[-1]
        assert record.file_path == "snare.wav"
        assert record.sample_rate == 48000
