import hashlib
from typing import List

import pytest_asyncio

from qdrant_client import AsyncQdrantClient

from indexing.embed import EmbeddingProvider
from indexing.errors import ProviderError
from indexing.store import QdrantVectorStore

DIMENSIONS = 8


class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic vectors derived from the text's digest."""

    def __init__(self, dimensions: int = DIMENSIONS):
        self._dimensions = dimensions
        self.calls: List[str] = []
        self.fail_on: List[str] = []
        self.closed = False

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise ProviderError('rate limited')
        digest = hashlib.sha256(text.encode('utf-8')).digest()
        return [b / 255.0 + 0.01 for b in digest[:self._dimensions]]

    async def aclose(self):
        self.closed = True


class SpyVectorStore(QdrantVectorStore):
    """Record the write calls made against a real in-memory store."""

    def __init__(self, client):
        super().__init__(client)
        self.calls: List[str] = []
        self.fail_finds = False

    async def find_by_filter(self, collection, query, limit=1):
        self.calls.append('find')
        if self.fail_finds:
            # Go through the wrapper with a missing collection so the
            # failure is a real StoreError.
            return await super().find_by_filter('missing', query, limit)
        return await super().find_by_filter(collection, query, limit)

    async def delete_by_filter(self, collection, query):
        self.calls.append('delete')
        await super().delete_by_filter(collection, query)

    async def upsert(self, collection, records, wait=True):
        self.calls.append('upsert')
        await super().upsert(collection, records, wait=wait)

    @property
    def writes(self) -> List[str]:
        return [c for c in self.calls if c != 'find']


@pytest_asyncio.fixture
async def store():
    client = AsyncQdrantClient(location=':memory:')
    spy = SpyVectorStore(client)
    yield spy
    await client.close()


@pytest_asyncio.fixture
async def provider():
    return FakeEmbeddingProvider()


async def stored_chunks(store, collection, filename):
    """Return the payloads stored for one file, in chunk order."""
    points, _ = await store.client.scroll(
        collection_name=collection,
        limit=1000,
        with_payload=True,
    )
    chunks = [p.payload for p in points if p.payload['filename'] == filename]
    return sorted(chunks, key=lambda p: p['chunkIndex'])
