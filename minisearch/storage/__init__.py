"""
Storage layer: the inverted index and its document store.
"""

from .inverted_index import InvertedIndex, DocumentStore, StorageError

__all__ = ['InvertedIndex', 'DocumentStore', 'StorageError']
