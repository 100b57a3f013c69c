"""
Brief: Tests for plugstore.config.logging_config.

Inputs:
  - None

Outputs:
  - None
"""

import logging

import pytest

from plugstore.config.logging_config import (
    BracketLevelFormatter,
    StorePrefixAdapter,
    get_store_logger,
    init_logging,
    parse_level,
)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("warning", logging.WARNING),
        ("error", logging.ERROR),
        ("crit", logging.CRITICAL),
        (None, logging.WARNING),
        (15, 15),
    ],
)
def test_parse_level(name, expected):
    """
    Brief: Level names and ints map to logging constants.

    Inputs:
      - name: level input

    Outputs:
      - None: Asserts mapped level
    """
    assert parse_level(name) == expected


def test_parse_level_rejects_unknown():
    """
    Brief: Unknown names and booleans raise ValueError.

    Inputs:
      - invalid levels

    Outputs:
      - None: Asserts ValueError
    """
    with pytest.raises(ValueError):
        parse_level("loud")
    with pytest.raises(ValueError):
        parse_level(True)


def test_store_logger_prefix(caplog):
    """
    Brief: Store loggers prefix messages with "[name]".

    Inputs:
      - caplog: pytest fixture

    Outputs:
      - None: Asserts prefix and logger name
    """
    log = get_store_logger("c9", "info")
    assert isinstance(log, StorePrefixAdapter)
    assert log.logger.name == "plugstore.store.c9"
    with caplog.at_level(logging.INFO):
        log.info("hello %s", "world")
    assert "[c9] hello world" in caplog.text


def test_bracket_formatter_tags():
    """
    Brief: Formatter adds lowercase bracketed level tags and UTC timestamps.

    Inputs:
      - synthetic log record

    Outputs:
      - None: Asserts formatted string
    """
    fmt = BracketLevelFormatter("%(asctime)s %(level_tag)s %(message)s")
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "msg", None, None)
    record.created = 0
    assert fmt.format(record) == "1970-01-01T00:00:00Z [warn] msg"


def test_init_logging_file_handler(tmp_path, restore_root_logging):
    """
    Brief: init_logging writes formatted entries to the configured file.

    Inputs:
      - cfg: file path, stderr disabled

    Outputs:
      - None: Asserts handlers and file content
    """
    log_path = tmp_path / "nested" / "plugstore.log"
    init_logging({"level": "info", "stderr": False, "file": str(log_path)})
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert all(isinstance(h, logging.FileHandler) for h in root.handlers)
    logging.getLogger("test").info("file message")
    for h in root.handlers:
        h.flush()
    content = log_path.read_text()
    assert "[info] test: file message" in content
