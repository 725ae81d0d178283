"""
Minimal Web Search Engine

A breadth-first crawler that builds a single-word inverted index.
"""

__version__ = "1.0.0"
__description__ = "A minimal web search engine: breadth-first crawler and inverted index"
