"""
HTML content extraction: hyperlinks and visible words.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Union
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Comment


class ExtractError(Exception):
    """Raised when page content cannot be parsed."""
    pass


@dataclass
class ExtractedPage:
    """Links and words extracted from a single page."""
    url: str
    links: List[str] = field(default_factory=list)
    words: List[str] = field(default_factory=list)
    title: Optional[str] = None


class ContentExtractor:
    """
    Extracts absolute links and word tokens from HTML.

    Text inside script, style, noscript and template elements and HTML comments is
    not part of the visible text and produces no words.
    """

    INVISIBLE_TAGS = ["script", "style", "noscript", "template"]
    ALLOWED_SCHEMES = ('http', 'https')

    def __init__(self, parser_features: str = 'lxml'):
        self.parser_features = parser_features
        self.logger = logging.getLogger(__name__)
        self.word_pattern = re.compile(r'\w+')

    def extract(self, base_url: str, content: Union[bytes, str],
                encoding: Optional[str] = None) -> ExtractedPage:
        """
        Parse page content.

        Args:
            base_url: The URL the content was fetched from
            content: Raw page content
            encoding: Charset from the HTTP response, if known

        Returns:
            ExtractedPage with fragment-free absolute links and words

        Raises:
            ExtractError: If the content cannot be parsed
        """
        try:
            if isinstance(content, bytes) and encoding:
                soup = BeautifulSoup(content, self.parser_features, from_encoding=encoding)
            else:
                soup = BeautifulSoup(content, self.parser_features)

            for element in soup(self.INVISIBLE_TAGS):
                element.decompose()

            for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
                comment.extract()

            page = ExtractedPage(url=base_url)
            page.title = self._extract_title(soup)
            page.links = self._extract_links(soup, self._document_base(soup, base_url))
            page.words = self.tokenize(soup.get_text(separator=' '))

        except Exception as e:
            raise ExtractError(f"Error parsing content from {base_url}: {e}") from e

        self.logger.debug(f"Parsed content from {base_url}: {len(page.words)} words, "
                          f"{len(page.links)} links")
        return page

    def tokenize(self, text: str) -> List[str]:
        """Split text into word tokens, preserving case."""
        return self.word_pattern.findall(text)

    def _extract_title(self, soup: BeautifulSoup) -> Optional[str]:
        title_tag = soup.find('title')
        if title_tag:
            return ' '.join(title_tag.get_text().split())
        return None

    def _document_base(self, soup: BeautifulSoup, page_url: str) -> str:
        """Honour <base href> when the page declares one."""
        base_tag = soup.find('base', href=True)
        if base_tag and base_tag['href'].strip():
            return urljoin(page_url, base_tag['href'].strip())
        return page_url

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> List[str]:
        """Extract absolute links in document order, without duplicates."""
        links = []
        seen = set()

        for anchor in soup.find_all('a', href=True):
            href = anchor['href'].strip()
            if not href:
                continue

            url = self.normalize_url(urljoin(base_url, href))
            if url and url not in seen:
                seen.add(url)
                links.append(url)

        return links

    def normalize_url(self, url: str) -> Optional[str]:
        """Strip the fragment; return None for URLs that cannot be crawled."""
        url, _ = urldefrag(url)
        try:
            parsed = urlparse(url)
        except ValueError:
            return None

        if parsed.scheme not in self.ALLOWED_SCHEMES or not parsed.netloc:
            return None
        return url
