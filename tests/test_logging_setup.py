import logging

import pytest

from flatcsv.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("flatcsv")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


def test_console_only_by_default(tmp_path):
    logger = setup_logging(log_level="warning")

    assert logger.name == "flatcsv"
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING


def test_log_dir_adds_a_debug_file(tmp_path):
    log_dir = tmp_path / "logs"

    logger = setup_logging(log_level="INFO", log_dir=str(log_dir), component="export")
    logging.getLogger("flatcsv.grid").debug("column %r created", "Name")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    files = list(log_dir.glob("export_*.log"))
    assert len(files) == 1
    text = files[0].read_text(encoding="utf-8")
    assert "Logging initialised" in text
    assert "column 'Name' created" in text


def test_repeated_setup_replaces_handlers():
    setup_logging()
    logger = setup_logging()

    assert len(logger.handlers) == 1
