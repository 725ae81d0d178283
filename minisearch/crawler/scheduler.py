"""
Crawler that drives the fetch, extract and index loop over a URL frontier.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .url_frontier import URLFrontier
from .fetcher import WebFetcher, FetchError
from .parser import ContentExtractor, ExtractedPage, ExtractError
from ..storage.inverted_index import InvertedIndex, StorageError
from ..utils.logger import get_crawler_logger
from ..utils.monitoring import CrawlerMonitor


class CrawlState(Enum):
    """Lifecycle of a crawler."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass
class CrawlStats:
    """Statistics for a crawl run."""
    start_time: float
    end_time: Optional[float] = None
    pages_indexed: int = 0
    fetch_errors: int = 0
    extract_errors: int = 0
    duplicates_skipped: int = 0
    total_bytes_downloaded: int = 0
    urls_in_queue: int = 0
    stopped: bool = False

    @property
    def elapsed_time(self) -> float:
        end_time = self.end_time if self.end_time is not None else time.time()
        return end_time - self.start_time

    @property
    def pages_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.pages_indexed / elapsed_minutes if elapsed_minutes > 0 else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pages_indexed': self.pages_indexed,
            'fetch_errors': self.fetch_errors,
            'extract_errors': self.extract_errors,
            'duplicates_skipped': self.duplicates_skipped,
            'total_bytes_downloaded': self.total_bytes_downloaded,
            'urls_in_queue': self.urls_in_queue,
            'elapsed_time': self.elapsed_time,
            'pages_per_minute': self.pages_per_minute,
            'stopped': self.stopped,
        }


class Crawler:
    """
    Breadth-first crawler that fills an inverted index.

    The crawler owns the index while a crawl is running and is its only
    writer. Pages are processed one at a time: a page is either fully added
    to the index or not at all. Per-page failures are logged and counted,
    never raised.
    """

    def __init__(self, index: InvertedIndex, fetcher: WebFetcher,
                 extractor: Optional[ContentExtractor] = None,
                 monitor: Optional[CrawlerMonitor] = None,
                 save_path: Optional[Union[str, Path]] = None,
                 save_interval: int = 0):
        self.index = index
        self.fetcher = fetcher
        self.extractor = extractor or ContentExtractor()
        self.monitor = monitor
        self.save_path = save_path
        self.save_interval = save_interval

        self.logger = get_crawler_logger(__name__)
        self.state = CrawlState.IDLE
        self.frontier: Optional[URLFrontier] = None
        self.stats: Optional[CrawlStats] = None
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self.state is CrawlState.RUNNING

    def stop(self):
        """Ask a running crawl to finish after the current page."""
        if self.is_running:
            self.logger.info("Stop requested, finishing current page")
        self._stop_requested = True

    async def crawl(self, seed_url: str, limit: int) -> CrawlStats:
        """
        Crawl breadth-first from ``seed_url``.

        Args:
            seed_url: Absolute http(s) URL to start from
            limit: Maximum number of distinct URLs to visit, failures included

        Returns:
            CrawlStats for the run
        """
        if self.is_running:
            raise RuntimeError("Crawler is already running")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        seed = self.extractor.normalize_url(seed_url)
        if seed is None:
            raise ValueError(f"Seed must be an absolute http(s) URL, got {seed_url!r}")

        self.state = CrawlState.RUNNING
        self._stop_requested = False
        self.frontier = URLFrontier([seed])
        self.stats = CrawlStats(start_time=time.time())
        self.logger.info(f"Starting crawl from {seed} (limit={limit})")

        try:
            while self.frontier.visited_count < limit:
                if self._stop_requested:
                    self.stats.stopped = True
                    self.logger.info("Crawl stopped before reaching the limit")
                    break

                url = self.frontier.pop()
                if url is None:
                    self.logger.info("Frontier exhausted")
                    break

                if self.frontier.is_visited(url):
                    self.stats.duplicates_skipped += 1
                    continue

                await self._process_url(url)

                self.stats.urls_in_queue = len(self.frontier)
                if self.monitor:
                    self.monitor.update_queue_size(len(self.frontier))
        finally:
            self.stats.end_time = time.time()
            self.stats.urls_in_queue = len(self.frontier)
            self.state = CrawlState.DONE

        self._log_final_stats()
        return self.stats

    async def _process_url(self, url: str):
        """Fetch, extract and index a single URL."""
        self.frontier.mark_visited(url)

        try:
            fetch_result = await self.fetcher.fetch(url)
        except FetchError as e:
            self.stats.fetch_errors += 1
            if self.monitor:
                self.monitor.record_error('fetch')
            self.logger.log_url_event(logging.WARNING, url, f"Failed to fetch {url}: {e.reason}")
            return

        base_url = fetch_result.final_url or url
        try:
            page = self.extractor.extract(
                base_url, fetch_result.content, fetch_result.encoding
            )
        except ExtractError as e:
            self.stats.extract_errors += 1
            if self.monitor:
                self.monitor.record_error('extract')
            self.logger.log_url_event(logging.WARNING, url, str(e))
            page = ExtractedPage(url=url)

        doc_id = self.index.add_doc(url, page.words)
        added_count = self.frontier.add_many(page.links)

        self.stats.pages_indexed += 1
        self.stats.duplicates_skipped += len(page.links) - added_count
        self.stats.total_bytes_downloaded += len(fetch_result.content)
        if self.monitor:
            self.monitor.record_page_indexed(len(fetch_result.content), fetch_result.fetch_time)

        self.logger.log_url_event(
            logging.DEBUG, url,
            f"Indexed {url} as document {doc_id}: {len(page.words)} words, "
            f"{added_count} new links"
        )

        if self.save_path and self.save_interval > 0 and len(self.index) % self.save_interval == 0:
            self._checkpoint()

    def _checkpoint(self):
        """Save the index mid-crawl; a failed checkpoint does not stop the crawl."""
        try:
            self.index.save(self.save_path)
        except StorageError as e:
            self.logger.error(f"Checkpoint failed: {e}")

    def _log_final_stats(self):
        """Log final crawl statistics."""
        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Pages indexed: {self.stats.pages_indexed}")
        self.logger.info(f"Fetch errors: {self.stats.fetch_errors}")
        self.logger.info(f"Extract errors: {self.stats.extract_errors}")
        self.logger.info(f"Duplicates skipped: {self.stats.duplicates_skipped}")
        self.logger.info(f"URLs remaining in queue: {self.stats.urls_in_queue}")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds")
        self.logger.info(f"Average rate: {self.stats.pages_per_minute:.1f} pages/min")
        self.logger.info(f"Index stats: {self.index.get_stats()}")

    def get_stats(self) -> Dict[str, Any]:
        """Get current crawl statistics."""
        stats = self.stats.to_dict() if self.stats else {}
        stats['state'] = self.state.value
        return stats
