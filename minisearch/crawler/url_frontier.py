"""
URL Frontier implementation for managing URLs to crawl.
Breadth-first FIFO queue with enqueue-time deduplication.
"""

import logging
from collections import deque
from typing import Deque, Dict, Iterable, Optional, Set


class URLFrontier:
    """
    Queue of discovered-but-unvisited URLs plus the visited set.

    A URL is only ever enqueued once: ``seen`` holds every URL that has been
    enqueued or visited, ``visited`` holds the URLs that were fetched or
    abandoned.
    """

    def __init__(self, seed_urls: Iterable[str] = ()):
        self.logger = logging.getLogger(__name__)
        self.queue: Deque[str] = deque()
        self.seen: Set[str] = set()
        self.visited: Set[str] = set()

        self.add_many(seed_urls)

    def add(self, url: str) -> bool:
        """
        Add a URL to the frontier.
        Returns True if URL was added, False if already seen.
        """
        if url in self.seen:
            return False

        self.seen.add(url)
        self.queue.append(url)
        self.logger.debug(f"Added URL to frontier: {url}")
        return True

    def add_many(self, urls: Iterable[str]) -> int:
        """Add multiple URLs to the frontier. Returns count of added URLs."""
        added_count = 0
        for url in urls:
            if self.add(url):
                added_count += 1
        return added_count

    def pop(self) -> Optional[str]:
        """Get the next URL in discovery order, or None when empty."""
        if not self.queue:
            return None
        return self.queue.popleft()

    def mark_visited(self, url: str):
        """Mark a URL as visited."""
        self.seen.add(url)
        self.visited.add(url)

    def is_visited(self, url: str) -> bool:
        return url in self.visited

    @property
    def visited_count(self) -> int:
        return len(self.visited)

    def is_empty(self) -> bool:
        """Check if the frontier is empty."""
        return not self.queue

    def __len__(self) -> int:
        return len(self.queue)

    def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        return {
            'total_queued': len(self.queue),
            'total_seen': len(self.seen),
            'total_visited': len(self.visited),
        }
