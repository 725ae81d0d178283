"""Helpers shared by the crawler tests."""

from typing import Dict, Iterable, List, Optional

from minisearch.crawler.fetcher import FetchError, FetchResult


def make_page(words: str = "", links: Iterable[str] = (), title: Optional[str] = None) -> str:
    """Build a small HTML page with the given text and hyperlinks."""
    anchors = "".join(f'<a href="{link}">link</a>' for link in links)
    head = f"<head><title>{title}</title></head>" if title else ""
    return f"<html>{head}<body><p>{words}</p>{anchors}</body></html>"


class FakeFetcher:
    """Serves pages from a dict; URLs in ``failures`` fail like a timeout."""

    def __init__(self, pages: Dict[str, str], failures: Iterable[str] = ()):
        self.pages = pages
        self.failures = set(failures)
        self.requested: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.requested.append(url)
        if url in self.failures:
            raise FetchError(url, "Request timeout after 1.0s")
        if url not in self.pages:
            raise FetchError(url, "HTTP 404", 404)

        content = self.pages[url].encode('utf-8')
        return FetchResult(
            url=url,
            status_code=200,
            content=content,
            final_url=url,
            content_type='text/html; charset=utf-8',
            encoding='utf-8',
            fetch_time=0.01
        )
