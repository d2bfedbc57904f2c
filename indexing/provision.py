"""Make sure the target collection exists before indexing."""
import logging
from dataclasses import dataclass

from qdrant_client.models import Distance

from indexing.errors import ConfigurationError
from indexing.store import QdrantVectorStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collection:
    """A provisioned collection."""

    name: str
    size: int
    distance: Distance
    created: bool = False


class CollectionProvisioner:
    """Create the collection once and check it on later runs."""

    def __init__(
        self,
        store: QdrantVectorStore,
        segment_number: int = 2,
        replication_factor: int = 1,
    ):
        """Initialize the attributes."""
        self.store = store
        self.segment_number = segment_number
        self.replication_factor = replication_factor

    async def ensure(
        self,
        name: str,
        size: int,
        distance: Distance = Distance.COSINE,
    ) -> Collection:
        """Create the collection if needed and return a handle to it.

        An existing collection built for a different vector size or
        distance is rejected with ConfigurationError, since every upsert
        into it would fail.
        """
        created = await self.store.ensure_collection(
            name,
            size,
            distance,
            segment_number=self.segment_number,
            replication_factor=self.replication_factor,
        )
        if created:
            return Collection(name, size, distance, created=True)

        params = await self.store.vector_params(name)
        if params.size != size or params.distance != distance:
            raise ConfigurationError(
                f'Collection {name} stores {params.size}-dimensional'
                f' {params.distance} vectors but the embedding provider'
                f' produces {size}-dimensional {distance} vectors'
            )
        logger.debug('Reusing collection %s', name)
        return Collection(name, size, distance)
