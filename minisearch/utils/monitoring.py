"""
Monitoring and metrics collection for crawl runs.
"""

import logging
import time
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server


class CrawlerMonitor:
    """
    Prometheus metrics for a crawler.

    Each monitor owns its own registry so several crawlers (or tests) can
    coexist in one process.
    """

    def __init__(self, prometheus_port: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.prometheus_port = prometheus_port
        self.registry = CollectorRegistry()
        self.start_time = time.time()

        self.pages_indexed = Counter(
            'crawler_pages_indexed_total',
            'Total number of pages added to the index',
            registry=self.registry
        )
        self.errors = Counter(
            'crawler_errors_total',
            'Total number of per-page crawl errors',
            ['error_type'],
            registry=self.registry
        )
        self.bytes_downloaded = Counter(
            'crawler_bytes_downloaded_total',
            'Total bytes downloaded',
            registry=self.registry
        )
        self.fetch_duration = Histogram(
            'crawler_fetch_duration_seconds',
            'Time spent fetching a page',
            registry=self.registry
        )
        self.queue_size = Gauge(
            'crawler_queue_size',
            'Number of URLs waiting in the frontier',
            registry=self.registry
        )

    def start_server(self) -> bool:
        """
        Start Prometheus metrics HTTP server.

        A port that cannot be bound is logged and the crawl goes on without
        an exporter. Returns whether the server is running.
        """
        if self.prometheus_port is None:
            return False
        try:
            start_http_server(self.prometheus_port, registry=self.registry)
        except OSError as e:
            self.logger.error(f"Could not start metrics server on port {self.prometheus_port}: {e}")
            return False
        self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")
        return True

    def record_page_indexed(self, content_size: int, fetch_time: float):
        self.pages_indexed.inc()
        self.bytes_downloaded.inc(content_size)
        self.fetch_duration.observe(fetch_time)

    def record_error(self, error_type: str):
        self.errors.labels(error_type=error_type).inc()

    def update_queue_size(self, size: int):
        self.queue_size.set(size)

    def get_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Current value of a sample, 0.0 if it has not been recorded."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the crawl metrics."""
        runtime = time.time() - self.start_time
        pages = self.get_value('crawler_pages_indexed_total')
        return {
            'runtime_seconds': runtime,
            'pages_indexed': pages,
            'fetch_errors': self.get_value('crawler_errors_total', {'error_type': 'fetch'}),
            'extract_errors': self.get_value('crawler_errors_total', {'error_type': 'extract'}),
            'bytes_downloaded': self.get_value('crawler_bytes_downloaded_total'),
            'queue_size': self.get_value('crawler_queue_size'),
            'pages_per_minute': pages / (runtime / 60) if runtime > 0 else 0,
        }
