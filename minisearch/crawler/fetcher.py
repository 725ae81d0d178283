"""
Web page fetcher built on aiohttp with a bounded per-request timeout.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from ..utils.config import DEFAULT_USER_AGENT


class FetchError(Exception):
    """Raised when a single URL cannot be fetched."""

    def __init__(self, url: str, reason: str, status_code: int = 0):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


@dataclass
class FetchResult:
    """Result of a successful fetch."""
    url: str
    status_code: int
    content: bytes
    final_url: Optional[str] = None
    content_type: Optional[str] = None
    encoding: Optional[str] = None
    fetch_time: float = 0.0


class WebFetcher:
    """
    Fetches web pages one request at a time.

    Any failure (timeout, connection error, HTTP error status, non-text
    content, oversized body) is raised as FetchError. Nothing is retried.
    """

    TEXT_TYPES = (
        'text/html',
        'text/plain',
        'application/xhtml+xml',
    )

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: float = 10.0,
                 max_content_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_content_size = max_content_size

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.request_timeout),
                headers={'User-Agent': self.user_agent},
            )
            self.logger.info("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.info("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult with the raw response body

        Raises:
            FetchError: If the page could not be retrieved
        """
        if self.session is None:
            await self.start()

        start_time = time.monotonic()
        self.stats['total_requests'] += 1

        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise FetchError(url, f"HTTP {response.status}", response.status)

                content_type = response.headers.get('content-type', '').lower()
                if not self._is_text_content(content_type):
                    raise FetchError(
                        url, f"Non-text content type: {content_type or 'unknown'}",
                        response.status
                    )

                content = await self._read_content(url, response)
                result = FetchResult(
                    url=url,
                    status_code=response.status,
                    content=content,
                    final_url=str(response.url),
                    content_type=content_type,
                    encoding=response.charset,
                    fetch_time=time.monotonic() - start_time
                )

        except FetchError:
            self.stats['failed_requests'] += 1
            raise

        except asyncio.TimeoutError as e:
            self.stats['failed_requests'] += 1
            raise FetchError(url, f"Request timeout after {self.request_timeout}s") from e

        except ClientError as e:
            self.stats['failed_requests'] += 1
            raise FetchError(url, f"Client error: {e}") from e

        except (ValueError, OSError) as e:
            # Unencodable hosts (IDNA label too long) surface here, not as ClientError
            self.stats['failed_requests'] += 1
            raise FetchError(url, f"Invalid URL: {e}") from e

        self.stats['successful_requests'] += 1
        self.stats['total_bytes_downloaded'] += len(result.content)
        self.logger.debug(f"Fetched {url}: {result.status_code} ({len(result.content)} bytes)")
        return result

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is text-based."""
        if not content_type:
            return True
        return any(text_type in content_type for text_type in self.TEXT_TYPES)

    async def _read_content(self, url: str, response: ClientResponse) -> bytes:
        """Read the response body, refusing anything over the size limit."""
        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_size:
            raise FetchError(url, f"Content too large ({content_length} bytes)", response.status)

        content = bytearray()
        async for chunk in response.content.iter_chunked(8192):
            content.extend(chunk)
            if len(content) > self.max_content_size:
                raise FetchError(url, "Content exceeded size limit during reading", response.status)
        return bytes(content)

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
