import logging
import re

from seqtrack.utils.logger import Logger


def test_singleton_behavior():
    logger1 = Logger(log_file="test_logger.log")
    logger2 = Logger(log_file="another_file.log")

    assert logger1 is logger2
    assert logger1.logger.name == "SeqTrackLogger"


def test_logging_to_file(tmp_path):
    logger = Logger(log_file="seqtrack.log")
    logger.log("Added sample S1", "INFO")

    log_path = tmp_path / "seqtrack.log"
    assert log_path.exists(), "Log file was not created"
    content = log_path.read_text()
    assert "Added sample S1" in content
    assert re.search(
        r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3} - INFO - Added sample S1$",
        content,
        re.MULTILINE,
    )


def test_file_handler_can_be_disabled(tmp_path):
    logger = Logger(log_file=None)
    logger.log("console only", "WARNING")

    assert logger.log_path is None
    assert not any(isinstance(h, logging.FileHandler) for h in logger.logger.handlers)
    assert list(tmp_path.glob("*.log")) == []


def test_log_level_changes():
    logger = Logger(log_file=None)

    logger.set_log_level("DEBUG")
    assert logger.logger.level == logging.DEBUG

    logger.set_log_level("error")
    assert logger.logger.level == logging.ERROR


def test_reset_drops_handlers():
    Logger(log_file=None)
    Logger.reset()

    assert Logger._instance is None
    assert logging.getLogger("SeqTrackLogger").handlers == []


def test_messages_below_level_are_dropped(tmp_path):
    logger = Logger(log_file="levels.log", log_level="WARNING")

    logger.log("debug test", "DEBUG")
    logger.log("warn test", "WARNING")

    content = (tmp_path / "levels.log").read_text()
    assert "debug test" not in content
    assert "warn test" in content


def test_colored_formatter_formatting():
    formatter = Logger.ColoredFormatter()
    record = logging.LogRecord(
        name="test",
        level=logging.WARNING,
        pathname="",
        lineno=0,
        msg="BAM already recorded: %s",
        args=("/o/S1.bam",),
        exc_info=None,
    )
    formatted = formatter.format(record)
    assert "[WARNING]" in formatted
    assert "BAM already recorded: /o/S1.bam" in formatted
