"""
Inverted index over crawled documents with JSON persistence.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Set, Union, Any


class StorageError(Exception):
    """Raised when an index cannot be read from or written to disk."""
    pass


class DocumentStore:
    """Append-only sequence of URLs. A document's id is its position."""

    def __init__(self, urls: Iterable[str] = ()):
        self._urls: List[str] = list(urls)

    def append(self, url: str) -> int:
        doc_id = len(self._urls)
        self._urls.append(url)
        return doc_id

    def url_for(self, doc_id: int) -> str:
        if doc_id < 0:
            raise IndexError(f"Invalid document id: {doc_id}")
        return self._urls[doc_id]

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)

    def __contains__(self, doc_id: object) -> bool:
        return isinstance(doc_id, int) and 0 <= doc_id < len(self._urls)


class InvertedIndex:
    """
    Maps words to the set of documents containing them.

    Only ``add_doc`` mutates the index. Document ids are assigned in
    insertion order and never change for the lifetime of the instance.
    The index does not deduplicate URLs; callers are expected to do that.
    """

    def __init__(self):
        self.docs = DocumentStore()
        self._words: Dict[str, Set[int]] = {}
        self.logger = logging.getLogger(__name__)

    def add_doc(self, url: str, words: Iterable[str]) -> int:
        """
        Add a document and record every word it contains.

        Args:
            url: Canonical URL of the document
            words: Tokens found in the document, repeats allowed

        Returns:
            The id assigned to the new document
        """
        doc_id = self.docs.append(url)
        for word in words:
            self._words.setdefault(word, set()).add(doc_id)
        return doc_id

    def get_docs(self, word: str) -> List[str]:
        """Return the URLs of documents containing ``word`` (unordered)."""
        doc_ids = self._words.get(word)
        if not doc_ids:
            return []
        return [self.docs.url_for(doc_id) for doc_id in doc_ids]

    def doc_ids(self, word: str) -> FrozenSet[int]:
        return frozenset(self._words.get(word, ()))

    @property
    def word_count(self) -> int:
        return len(self._words)

    def __len__(self) -> int:
        return len(self.docs)

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def get_stats(self) -> Dict[str, int]:
        """Get index statistics."""
        return {
            'documents': len(self.docs),
            'words': len(self._words),
            'postings': sum(len(ids) for ids in self._words.values()),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON shape."""
        return {
            'Docs': list(self.docs),
            'Words': {
                word: {str(doc_id): True for doc_id in sorted(doc_ids)}
                for word, doc_ids in self._words.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'InvertedIndex':
        """
        Rebuild an index from its persisted shape.

        Raises:
            StorageError: If ``data`` is not a valid persisted index
        """
        if not isinstance(data, dict):
            raise StorageError("Index data must be a JSON object")

        docs = data.get('Docs')
        words = data.get('Words')
        if not isinstance(docs, list) or not isinstance(words, dict):
            raise StorageError("Index data must contain 'Docs' list and 'Words' object")

        index = cls()
        for url in docs:
            if not isinstance(url, str):
                raise StorageError(f"Document URL must be a string, got {url!r}")
            index.docs.append(url)

        for word, raw_ids in words.items():
            # Ids may be stored as {"3": true} or as a plain list
            if isinstance(raw_ids, dict):
                raw_ids = [raw_id for raw_id, present in raw_ids.items() if present]
            elif not isinstance(raw_ids, list):
                raise StorageError(f"Document ids for {word!r} must be an object or list")

            doc_ids = set()
            for raw_id in raw_ids:
                doc_id = cls._parse_doc_id(raw_id)
                if doc_id not in index.docs:
                    raise StorageError(
                        f"Document id {doc_id} for {word!r} is out of range "
                        f"(0..{len(index.docs) - 1})"
                    )
                doc_ids.add(doc_id)
            index._words[word] = doc_ids

        return index

    @staticmethod
    def _parse_doc_id(raw_id: Any) -> int:
        if isinstance(raw_id, bool):
            raise StorageError(f"Invalid document id: {raw_id!r}")
        if isinstance(raw_id, int):
            return raw_id
        if isinstance(raw_id, str):
            try:
                return int(raw_id)
            except ValueError:
                pass
        raise StorageError(f"Invalid document id: {raw_id!r}")

    def save(self, path: Union[str, Path]):
        """
        Write the index to ``path`` as JSON.

        The file is written to a temporary sibling first and then moved into
        place, so an existing index is never left half-written.

        Raises:
            StorageError: If the file cannot be written
        """
        path = Path(path)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix='.tmp', dir=path.parent
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, ensure_ascii=False)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save index to {path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    self.logger.warning(f"Could not remove temporary file {tmp_name}")

        self.logger.info(
            f"Saved index to {path}: {len(self.docs)} documents, {len(self._words)} words"
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'InvertedIndex':
        """
        Read an index previously written by ``save``.

        Raises:
            StorageError: If the file is missing, unreadable or malformed
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise StorageError(f"Index file not found: {path}") from e
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise StorageError(f"Failed to read index from {path}: {e}") from e

        index = cls.from_dict(data)
        index.logger.info(
            f"Loaded index from {path}: {len(index.docs)} documents, {index.word_count} words"
        )
        return index
