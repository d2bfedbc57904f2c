"""Provide configuration details."""
import json
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from indexing.errors import ConfigurationError

CHUNK_SIZE = 1000
CHUNK_OVERLAP = 200

EMBEDDING_MODEL = 'text-embedding-ada-002'
EMBEDDING_CONCURRENCY = 8

QDRANT_COLLECTION = 'code_embeddings'
SEGMENT_NUMBER = 2
REPLICATION_FACTOR = 1

FILE_LIMIT = 200


@dataclass
class QdrantConfig:
    """Where to index and with which credentials."""

    qdrant_url: str = ''
    collection_name: str = QDRANT_COLLECTION
    openai_api_key: str = ''
    qdrant_api_key: Optional[str] = None
    embedding_model: str = EMBEDDING_MODEL
    # None means the embedding model's own dimensionality.
    vector_size: Optional[int] = None
    chunk_size: int = CHUNK_SIZE
    chunk_overlap: int = CHUNK_OVERLAP

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ):
        """Read the settings from environment variables."""
        return cls(
            qdrant_url=environ.get('QDRANT_URL', ''),
            collection_name=environ.get('QDRANT_COLLECTION', QDRANT_COLLECTION),
            openai_api_key=environ.get('OPENAI_API_KEY', ''),
            qdrant_api_key=environ.get('QDRANT_API_KEY') or None,
            embedding_model=environ.get('EMBEDDING_MODEL', EMBEDDING_MODEL),
        )

    @classmethod
    def from_json(cls, text: Optional[str]):
        """Parse the settings object sent by the editor's settings panel."""
        if not text:
            raise ConfigurationError('Configuration is required')
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ConfigurationError(f'Invalid configuration: {exc}') from exc
        if not isinstance(data, dict):
            raise ConfigurationError('Configuration must be a JSON object')
        return cls(
            qdrant_url=data.get('qdrantUrl') or '',
            collection_name=data.get('collectionName') or '',
            openai_api_key=data.get('openaiApiKey') or '',
            qdrant_api_key=data.get('qdrantApiKey') or None,
        )

    def validate(self):
        """Raise ConfigurationError unless indexing can start."""
        missing = [
            label for label, value in (
                ('Qdrant URL', self.qdrant_url),
                ('Collection Name', self.collection_name),
                ('OpenAI API Key', self.openai_api_key),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'}"
                ' required'
            )
        if self.vector_size is not None and self.vector_size <= 0:
            raise ConfigurationError('vector_size must be positive')
        if self.chunk_size <= 0:
            raise ConfigurationError('chunk_size must be positive')
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigurationError(
                'chunk_overlap must be smaller than chunk_size'
            )
