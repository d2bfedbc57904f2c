"""Documents, chunks and the records persisted for them."""
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from indexing.fingerprint import content_hash


def record_id(path: str, chunk_index: int) -> str:
    """Derive the point id for one chunk of a file.

    The id only depends on the file identity and the chunk position, so
    re-indexing a file overwrites the same points.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f'{path}#{chunk_index}'))


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class Document:
    """One source file's extracted text and identity."""

    path: str
    text: str
    language: str = 'unknown'
    author: Optional[str] = None
    fingerprint: str = ''

    def __post_init__(self):
        """Fingerprint the text unless one was supplied."""
        if not self.fingerprint:
            self.fingerprint = content_hash(self.text)

    def metadata(self) -> Dict:
        """Return the metadata every chunk of this document inherits."""
        metadata = {
            'language': self.language,
            'filename': self.path,
            'filePath': self.path,
        }
        if self.author:
            metadata['author'] = self.author
        return metadata


@dataclass
class Chunk:
    """An ordered window of a document's text."""

    document: Document
    index: int
    total: int
    text: str


@dataclass
class EmbeddingRecord:
    """A chunk, its vector and its provenance, as stored in a collection."""

    chunk: Chunk
    vector: List[float]
    last_updated: int = field(default_factory=now_ms)

    @property
    def id(self) -> str:
        """Return the deterministic point id."""
        return record_id(self.chunk.document.path, self.chunk.index)

    def payload(self) -> Dict:
        """Return the stored payload using the collection's field names."""
        return {
            'text': self.chunk.text,
            'chunkIndex': self.chunk.index,
            'totalChunks': self.chunk.total,
            'contentHash': self.chunk.document.fingerprint,
            'lastUpdated': self.last_updated,
            **self.chunk.document.metadata(),
        }
