"""
Web crawler core components.
"""

from .url_frontier import URLFrontier
from .fetcher import WebFetcher, FetchResult, FetchError
from .parser import ContentExtractor, ExtractedPage, ExtractError
from .scheduler import Crawler, CrawlState, CrawlStats

__all__ = [
    'URLFrontier',
    'WebFetcher', 'FetchResult', 'FetchError',
    'ContentExtractor', 'ExtractedPage', 'ExtractError',
    'Crawler', 'CrawlState', 'CrawlStats'
]
