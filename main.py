#!/usr/bin/env python3
"""
Main entry point for the minisearch crawler and index lookup.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from minisearch.crawler import ContentExtractor, Crawler, WebFetcher
from minisearch.storage import InvertedIndex, StorageError
from minisearch.utils.config import Config, load_config, validate_config
from minisearch.utils.logger import setup_logging
from minisearch.utils.monitoring import CrawlerMonitor


class CrawlerApp:
    """Main application class for the crawler."""

    def __init__(self, config: Config):
        self.config = config
        self.crawler: Optional[Crawler] = None
        self.logger = logging.getLogger(__name__)

    def setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            if self.crawler:
                self.crawler.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def crawl(self) -> int:
        """Run a crawl and save the resulting index."""
        crawler_config = self.config.crawler
        index_path = Path(self.config.index.path)

        self.logger.info("=== CRAWLER STARTING ===")
        self.logger.info(f"Seed URL: {crawler_config.seed_url}")
        self.logger.info(f"Visit limit: {crawler_config.limit}")
        self.logger.info(f"Request timeout: {crawler_config.request_timeout}s")
        self.logger.info(f"Index path: {index_path}")

        monitor = None
        if self.config.monitoring.metrics_enabled:
            monitor = CrawlerMonitor(self.config.monitoring.prometheus_port)
            monitor.start_server()

        index = InvertedIndex()
        async with WebFetcher(
            user_agent=crawler_config.user_agent,
            request_timeout=crawler_config.request_timeout,
            max_content_size=crawler_config.max_content_size
        ) as fetcher:
            self.crawler = Crawler(
                index,
                fetcher,
                extractor=ContentExtractor(),
                monitor=monitor,
                save_path=index_path,
                save_interval=crawler_config.save_interval
            )
            self.setup_signal_handlers()
            await self.crawler.crawl(crawler_config.seed_url, crawler_config.limit)

        index.save(index_path)
        self.logger.info("=== CRAWLER FINISHED ===")
        return 0

    def search(self, word: str) -> int:
        """Print the URLs of documents containing ``word``."""
        index = InvertedIndex.load(self.config.index.path)
        for url in sorted(index.get_docs(word)):
            print(url)
        return 0


def build_config(args: argparse.Namespace) -> Config:
    """Load the config file (if any) and apply command line overrides."""
    if args.config:
        config = load_config(args.config)
    elif Path('config.yaml').exists():
        config = load_config('config.yaml')
    else:
        config = Config()

    if getattr(args, 'seed', None):
        config.crawler.seed_url = args.seed
    if getattr(args, 'limit', None) is not None:
        config.crawler.limit = args.limit
    if getattr(args, 'timeout', None) is not None:
        config.crawler.request_timeout = args.timeout
    if args.index:
        config.index.path = args.index
    if args.log_level:
        config.logging.level = args.log_level

    validate_config(config)
    return config


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Minimal web search engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py crawl --seed https://example.com/ --limit 50
  python main.py crawl --config my_config.yaml --timeout 5
  python main.py search python --index data/index.json
        """
    )
    parser.add_argument(
        '--version',
        action='version',
        version='minisearch 1.0.0'
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--config', help='Path to configuration file (default: config.yaml if present)')
    common.add_argument('--index', help='Path to the index file')
    common.add_argument('--log-level', help='Logging level (DEBUG, INFO, ...)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    crawl_parser = subparsers.add_parser('crawl', parents=[common], help='Crawl from a seed URL')
    crawl_parser.add_argument('--seed', help='Seed URL to start crawling from')
    crawl_parser.add_argument('--limit', type=int, help='Maximum number of URLs to visit')
    crawl_parser.add_argument('--timeout', type=float, help='Per-request timeout in seconds')

    search_parser = subparsers.add_parser('search', parents=[common], help='Look up a word in the index')
    search_parser.add_argument('word', help='Word to look up (case-sensitive)')

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = create_parser().parse_args(argv)

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == 'crawl' and not config.crawler.seed_url:
        print("Error: no seed URL; pass --seed or set crawler.seed_url", file=sys.stderr)
        return 1

    app = CrawlerApp(config)
    try:
        if args.command == 'crawl':
            setup_logging(config.logging)
            return asyncio.run(app.crawl())
        return app.search(args.word)
    except (StorageError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
