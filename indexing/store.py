"""Read and write embedding records in a Qdrant collection."""
import logging
from typing import Any, List, Sequence

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    MatchValue,
    OptimizersConfigDiff,
    PointStruct,
    Record,
    VectorParams,
)

from indexing.errors import StoreError
from indexing.models import EmbeddingRecord

logger = logging.getLogger(__name__)


def match(key: str, value: Any) -> FieldCondition:
    """Build a condition matching one payload field exactly."""
    return FieldCondition(key=key, match=MatchValue(value=value))


def all_of(*conditions: FieldCondition) -> Filter:
    """Match records satisfying every condition."""
    return Filter(must=list(conditions))


def any_of(*conditions: FieldCondition) -> Filter:
    """Match records satisfying at least one condition."""
    return Filter(should=list(conditions))


class QdrantVectorStore:
    """Thin wrapper over the async Qdrant client.

    Every client failure is re-raised as StoreError so callers only deal
    with one exception type.
    """

    def __init__(self, client: AsyncQdrantClient):
        """Initialize the attributes."""
        self.client = client

    async def collection_exists(self, name: str) -> bool:
        """Tell whether a collection with this name exists."""
        try:
            response = await self.client.get_collections()
        except Exception as exc:
            raise StoreError(f'Could not list collections: {exc}') from exc
        return any(c.name == name for c in response.collections)

    async def vector_params(self, name: str) -> VectorParams:
        """Return the vector size and distance a collection was made with."""
        try:
            info = await self.client.get_collection(name)
        except Exception as exc:
            raise StoreError(
                f'Could not read collection {name}: {exc}'
            ) from exc
        vectors = info.config.params.vectors
        if isinstance(vectors, dict):
            # Named vectors; indexing only writes the unnamed default.
            vectors = vectors.get('')
        if vectors is None:
            raise StoreError(f'Collection {name} has no default vector')
        return vectors

    async def ensure_collection(
        self,
        name: str,
        size: int,
        distance: Distance = Distance.COSINE,
        segment_number: int = 2,
        replication_factor: int = 1,
    ) -> bool:
        """Create the collection unless it exists.

        Returns True when the collection was created by this call.
        """
        if await self.collection_exists(name):
            return False
        try:
            await self.client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=size, distance=distance),
                optimizers_config=OptimizersConfigDiff(
                    default_segment_number=segment_number
                ),
                replication_factor=replication_factor,
            )
        except Exception as exc:
            raise StoreError(
                f'Could not create collection {name}: {exc}'
            ) from exc
        logger.info('Created collection %s (%d, %s)', name, size, distance)
        return True

    async def find_by_filter(
        self, collection: str, query: Filter, limit: int = 1
    ) -> List[Record]:
        """Return up to limit records matching the filter."""
        try:
            points, _ = await self.client.scroll(
                collection_name=collection,
                scroll_filter=query,
                limit=limit,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as exc:
            raise StoreError(
                f'Could not query {collection}: {exc}'
            ) from exc
        return points

    async def delete_by_filter(self, collection: str, query: Filter):
        """Delete every record matching the filter."""
        try:
            await self.client.delete(
                collection_name=collection,
                points_selector=FilterSelector(filter=query),
                wait=True,
            )
        except Exception as exc:
            raise StoreError(
                f'Could not delete from {collection}: {exc}'
            ) from exc

    async def upsert(
        self,
        collection: str,
        records: Sequence[EmbeddingRecord],
        wait: bool = True,
    ):
        """Insert or overwrite records by id."""
        points = [
            PointStruct(id=r.id, vector=r.vector, payload=r.payload())
            for r in records
        ]
        if not points:
            return
        try:
            await self.client.upsert(
                collection_name=collection,
                points=points,
                wait=wait,
            )
        except Exception as exc:
            raise StoreError(
                f'Could not upsert {len(points)} points into'
                f' {collection}: {exc}'
            ) from exc

    async def aclose(self):
        """Close the underlying client."""
        await self.client.close()

