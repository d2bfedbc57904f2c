"""Fingerprint document content."""
import hashlib
from pathlib import Path
from typing import Union

READ_BLOCK = 1 << 16


def content_hash(content: Union[str, bytes]) -> str:
    """Return the SHA-256 hex digest of the content.

    Text is encoded as UTF-8 first. Files on disk are fingerprinted by
    file_fingerprint instead, so bytes lost while decoding still count.
    """
    if isinstance(content, str):
        content = content.encode('utf-8')
    return hashlib.sha256(content).hexdigest()


def file_fingerprint(path: Path) -> str:
    """Return the SHA-256 hex digest of a file's raw bytes."""
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for block in iter(lambda: f.read(READ_BLOCK), b''):
            digest.update(block)
    return digest.hexdigest()
