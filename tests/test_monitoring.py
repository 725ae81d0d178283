"""Tests for the Prometheus crawl monitor."""

import logging
import socket

from minisearch.utils.monitoring import CrawlerMonitor


def test_summary_counts():
    monitor = CrawlerMonitor()
    monitor.record_page_indexed(100, 0.1)
    monitor.record_page_indexed(50, 0.2)
    monitor.record_error('fetch')
    monitor.update_queue_size(4)

    summary = monitor.get_summary()
    assert summary['pages_indexed'] == 2
    assert summary['bytes_downloaded'] == 150
    assert summary['fetch_errors'] == 1
    assert summary['extract_errors'] == 0
    assert summary['queue_size'] == 4


def test_start_server_without_port_is_a_no_op():
    assert CrawlerMonitor().start_server() is False


def test_start_server_on_busy_port_logs_and_continues(caplog):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("0.0.0.0", 0))
        sock.listen(1)
        port = sock.getsockname()[1]

        monitor = CrawlerMonitor(prometheus_port=port)
        with caplog.at_level(logging.ERROR, logger="minisearch.utils.monitoring"):
            assert monitor.start_server() is False

    assert "Could not start metrics server" in caplog.text
