"""Tests for logging setup and the crawler log adapter."""

import json
import logging

from minisearch.utils.config import LoggingConfig
from minisearch.utils.logger import JSONFormatter, get_crawler_logger, setup_logging


def test_json_formatter_includes_url():
    record = logging.LogRecord("minisearch.test", logging.WARNING, __file__, 10,
                               "failed %s", ("page",), None)
    record.url = "http://x/1"
    record.event_type = "url_event"

    entry = json.loads(JSONFormatter().format(record))

    assert entry['message'] == "failed page"
    assert entry['level'] == "WARNING"
    assert entry['url'] == "http://x/1"
    assert entry['event_type'] == "url_event"


def test_log_url_event_attaches_url(caplog):
    logger = get_crawler_logger("minisearch.test", run="r1")

    with caplog.at_level(logging.INFO, logger="minisearch.test"):
        logger.log_url_event(logging.INFO, "http://x/1", "indexed")

    record = caplog.records[-1]
    assert record.getMessage() == "indexed"
    assert record.url == "http://x/1"
    assert record.run == "r1"


def test_setup_logging_writes_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "crawl.log"
    setup_logging(LoggingConfig(level="DEBUG", file=str(log_file)))

    logging.getLogger("minisearch.test").info("hello file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello file" in log_file.read_text(encoding='utf-8')


def test_setup_logging_without_file(restore_root_logger):
    root = setup_logging(LoggingConfig(file=None, json=True))
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)
