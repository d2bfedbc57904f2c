"""Index one document at a time into the vector store.

For each document the pipeline takes its fingerprint, asks the store
whether it already holds it, and otherwise splits, embeds, deletes the
file's previous chunks and upserts the new ones. The delete and the
upsert are two separate store calls: a crash between them leaves the file
with no chunks until the next run indexes it again.
"""
import asyncio
import enum
import logging
from typing import Callable, List, Optional

from indexing.chunk import TextChunker
from indexing.embed import EmbeddingProvider
from indexing.errors import StoreError
from indexing.models import Chunk, Document, EmbeddingRecord, now_ms
from indexing.store import QdrantVectorStore, all_of, any_of, match

logger = logging.getLogger(__name__)

FILENAME_KEY = 'filename'
HASH_KEY = 'contentHash'


class DedupPolicy(enum.Enum):
    """Which stored records make a document count as already indexed."""

    UNCHANGED = 'unchanged'  # same filename and same fingerprint
    ANY_MATCH = 'any_match'  # same filename or same fingerprint
    CONTENT = 'content'  # same fingerprint under any filename
    NEVER = 'never'


class Outcome(enum.Enum):
    """What happened to a document."""

    INDEXED = 'indexed'
    SKIPPED = 'skipped'
    EMPTY = 'empty'


class IndexingPipeline:
    """Keep one collection's records in step with the documents given."""

    def __init__(
        self,
        store: QdrantVectorStore,
        provider: EmbeddingProvider,
        collection: str,
        chunker: Optional[TextChunker] = None,
        policy: DedupPolicy = DedupPolicy.UNCHANGED,
        embedding_concurrency: int = 8,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the attributes."""
        self.store = store
        self.provider = provider
        self.collection = collection
        self.chunker = chunker or TextChunker()
        self.policy = policy
        self.clock = clock
        self._semaphore = asyncio.Semaphore(embedding_concurrency)

    async def _exists(self, query) -> bool:
        # A failed lookup counts as "not indexed" so a changed file is
        # never skipped because the store was briefly unreachable.
        try:
            found = await self.store.find_by_filter(
                self.collection, query, limit=1
            )
        except StoreError as exc:
            logger.warning('Dedup check failed, reindexing: %s', exc)
            return False
        return bool(found)

    async def path_indexed(self, document: Document) -> bool:
        """Tell whether any record exists for this file."""
        return await self._exists(
            all_of(match(FILENAME_KEY, document.path))
        )

    async def content_indexed(self, document: Document) -> bool:
        """Tell whether any record carries this content fingerprint."""
        return await self._exists(
            all_of(match(HASH_KEY, document.fingerprint))
        )

    async def unchanged(self, document: Document) -> bool:
        """Tell whether this file is stored with this exact content."""
        return await self._exists(all_of(
            match(FILENAME_KEY, document.path),
            match(HASH_KEY, document.fingerprint),
        ))

    async def already_indexed(self, document: Document) -> bool:
        """Apply the dedup policy to a document."""
        if self.policy is DedupPolicy.NEVER:
            return False
        if self.policy is DedupPolicy.UNCHANGED:
            return await self.unchanged(document)
        if self.policy is DedupPolicy.CONTENT:
            return await self.content_indexed(document)
        return await self._exists(any_of(
            match(FILENAME_KEY, document.path),
            match(HASH_KEY, document.fingerprint),
        ))

    async def _embed_chunk(self, chunk: Chunk, timestamp: int):
        async with self._semaphore:
            vector = await self.provider.embed(chunk.text)
        return EmbeddingRecord(chunk, vector, last_updated=timestamp)

    async def embed_chunks(self, chunks: List[Chunk]) -> List[EmbeddingRecord]:
        """Embed every chunk concurrently, failing on the first error.

        Records come back in chunk order.
        """
        timestamp = self.clock()
        tasks = [
            asyncio.ensure_future(self._embed_chunk(chunk, timestamp))
            for chunk in chunks
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def replace(self, document: Document, records: List[EmbeddingRecord]):
        """Swap the file's stored chunks for the new records."""
        await self.store.delete_by_filter(
            self.collection, all_of(match(FILENAME_KEY, document.path))
        )
        await self.store.upsert(self.collection, records, wait=True)

    async def index_document(self, document: Document) -> Outcome:
        """Bring the store up to date for one document.

        ProviderError and StoreError propagate; when they do, nothing has
        been written for the document unless the failure hit the upsert
        after the delete.
        """
        if not document.text:
            logger.debug('Nothing to index in %s', document.path)
            return Outcome.EMPTY

        if await self.already_indexed(document):
            logger.info(
                "Content for %s hasn't changed, skipping reindexing",
                document.path,
            )
            return Outcome.SKIPPED

        chunks = self.chunker.chunk_text(document)
        records = await self.embed_chunks(chunks)
        await self.replace(document, records)
        logger.info(
            'Stored %d chunks for file: %s', len(records), document.path
        )
        return Outcome.INDEXED
