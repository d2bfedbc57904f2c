"""Index a directory tree into a collection."""
import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Callable, Iterable, List, Optional, Tuple

from qdrant_client import AsyncQdrantClient

from tqdm import tqdm

from config import (
    EMBEDDING_CONCURRENCY, FILE_LIMIT, REPLICATION_FACTOR, SEGMENT_NUMBER,
    QdrantConfig
)
from indexing.chunk import TextChunker
from indexing.embed import EmbeddingProvider, OpenAIEmbeddingProvider
from indexing.errors import ExtractionSkip
from indexing.extract import extract_text, language_for
from indexing.fingerprint import file_fingerprint
from indexing.listing import list_files
from indexing.models import Document
from indexing.pipeline import DedupPolicy, IndexingPipeline, Outcome
from indexing.provision import CollectionProvisioner
from indexing.store import QdrantVectorStore

logger = logging.getLogger(__name__)


class Notifier:
    """Receive human-readable progress messages."""

    def info(self, message: str):
        """Report progress."""

    def warning(self, message: str):
        """Report something the user should know about."""

    def error(self, message: str):
        """Report a failure."""


class LoggingNotifier(Notifier):
    """Send notifications to the log."""

    def info(self, message: str):
        """Report progress."""
        logger.info(message)

    def warning(self, message: str):
        """Report something the user should know about."""
        logger.warning(message)

    def error(self, message: str):
        """Report a failure."""
        logger.error(message)


@dataclass
class RunReport:
    """What a run did to each file."""

    indexed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    empty: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    truncated: bool = False
    cancelled: bool = False


def relative_name(path: Path, root: Optional[Path]) -> str:
    """Return the stable identity of a file: its path relative to root."""
    path = Path(path)
    if root is not None:
        try:
            path = path.relative_to(root)
        except ValueError:
            pass
    return path.as_posix()


@asynccontextmanager
async def open_clients(
    config: QdrantConfig,
) -> AsyncIterator[Tuple[QdrantVectorStore, EmbeddingProvider]]:
    """Open the store and provider clients for one run and close them after."""
    async with AsyncExitStack() as stack:
        store = QdrantVectorStore(AsyncQdrantClient(
            url=config.qdrant_url,
            api_key=config.qdrant_api_key or None,
        ))
        stack.push_async_callback(store.aclose)
        provider = OpenAIEmbeddingProvider(
            api_key=config.openai_api_key,
            model=config.embedding_model,
            dimensions=config.vector_size,
        )
        stack.push_async_callback(provider.aclose)
        yield store, provider


async def run_indexing(
    config: QdrantConfig,
    files: Iterable[Path],
    store: QdrantVectorStore,
    provider: EmbeddingProvider,
    *,
    root: Optional[Path] = None,
    truncated: bool = False,
    extractor: Callable[[Path], Optional[str]] = extract_text,
    notifier: Optional[Notifier] = None,
    policy: DedupPolicy = DedupPolicy.UNCHANGED,
    cancel: Optional[asyncio.Event] = None,
    progress: bool = False,
) -> RunReport:
    """Provision the collection and index every file in order.

    A failing file is reported and left behind; only provisioning errors
    abort the run.
    """
    notifier = notifier or LoggingNotifier()
    report = RunReport(truncated=truncated)
    files = list(files)

    notifier.info(
        'Starting embeddings generation for collection:'
        f' {config.collection_name}'
    )
    if truncated:
        notifier.warning('File limit reached. Some files may be skipped.')
    notifier.info(f'Found {len(files)} files to process')

    provisioner = CollectionProvisioner(
        store,
        segment_number=SEGMENT_NUMBER,
        replication_factor=REPLICATION_FACTOR,
    )
    collection = await provisioner.ensure(
        config.collection_name, provider.dimensions
    )
    if collection.created:
        notifier.info(
            f'Collection {collection.name} created successfully'
        )

    pipeline = IndexingPipeline(
        store,
        provider,
        collection.name,
        chunker=TextChunker(config.chunk_size, config.chunk_overlap),
        policy=policy,
        embedding_concurrency=EMBEDDING_CONCURRENCY,
    )

    for path in tqdm(files, desc='Indexing', disable=not progress):
        if cancel is not None and cancel.is_set():
            notifier.warning('Embeddings generation cancelled')
            report.cancelled = True
            break

        name = relative_name(path, root)
        try:
            text = extractor(path)
            if not text:
                continue
            logger.debug('Processing file: %s', name)
            document = Document(
                name,
                text,
                language=language_for(path),
                fingerprint=file_fingerprint(path),
            )
            outcome = await pipeline.index_document(document)
        except ExtractionSkip as exc:
            logger.debug('Skipping %s: %s', name, exc)
            continue
        except Exception as exc:
            logger.error('Error processing file %s: %s', path, exc)
            notifier.error(f'Failed to process file: {path}')
            report.failed.append((name, str(exc)))
            continue

        if outcome is Outcome.INDEXED:
            report.indexed.append(name)
        elif outcome is Outcome.SKIPPED:
            report.skipped.append(name)
        else:
            report.empty.append(name)

    if not report.cancelled:
        notifier.info('Embeddings generation completed successfully!')
    return report


async def index_workspace(
    config: QdrantConfig,
    root: Path,
    *,
    limit: int = FILE_LIMIT,
    notifier: Optional[Notifier] = None,
    policy: DedupPolicy = DedupPolicy.UNCHANGED,
    cancel: Optional[asyncio.Event] = None,
    progress: bool = False,
) -> RunReport:
    """Index the files under root using clients built from config."""
    config.validate()
    root = Path(root).resolve()
    files, truncated = list_files(root, limit)
    async with open_clients(config) as (store, provider):
        return await run_indexing(
            config,
            files,
            store,
            provider,
            root=root,
            truncated=truncated,
            notifier=notifier,
            policy=policy,
            cancel=cancel,
            progress=progress,
        )
