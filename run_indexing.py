#!/usr/bin/env python3
"""Index a source tree into a Qdrant collection."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from config import FILE_LIMIT, QdrantConfig

from indexing.errors import IndexingError
from indexing.pipeline import DedupPolicy
from indexing.runner import index_workspace


def parse_args(argv=None):
    """Parse the command line."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        'root', nargs='?', default='.', type=Path,
        help='directory to index (default: current directory)'
    )
    parser.add_argument('--collection', help='override QDRANT_COLLECTION')
    parser.add_argument(
        '--limit', type=int, default=FILE_LIMIT,
        help='maximum number of files to index'
    )
    parser.add_argument(
        '--dedup', choices=[p.value for p in DedupPolicy],
        default=DedupPolicy.UNCHANGED.value,
        help='when to treat a file as already indexed'
    )
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


def main(argv=None):
    """Run the logic."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('openai').setLevel(logging.WARNING)

    load_dotenv()
    config = QdrantConfig.from_env()
    if args.collection:
        config.collection_name = args.collection

    try:
        report = asyncio.run(index_workspace(
            config,
            args.root,
            limit=args.limit,
            policy=DedupPolicy(args.dedup),
            progress=True,
        ))
    except IndexingError as exc:
        logging.getLogger(__name__).error('%s', exc)
        return 1

    print('\n=== Indexing Complete ===')
    print(f'Indexed: {len(report.indexed)}')
    print(f'Unchanged: {len(report.skipped)}')
    print(f'Failed: {len(report.failed)}')
    for name, reason in report.failed:
        print(f'  {name}: {reason}')
    return 1 if report.failed else 0


if __name__ == '__main__':
    sys.exit(main())
