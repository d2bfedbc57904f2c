"""Break the text into chunks."""
from typing import Iterator, List

from indexing.errors import ConfigurationError
from indexing.models import Chunk, Document

SEPARATORS = ('\n\n', '\n', ' ')


class TextChunker:
    """Break the text into overlapping character windows.

    Every window is at most chunk_size characters long and starts exactly
    overlap characters before the previous window ended, so dropping the
    first overlap characters of every window but the first gives back the
    input text.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 200):
        """Initialize the attributes."""
        if chunk_size <= 0:
            raise ConfigurationError(
                f'chunk_size must be positive, got {chunk_size}'
            )
        if overlap < 0 or overlap >= chunk_size:
            raise ConfigurationError(
                f'overlap must be in [0, {chunk_size}), got {overlap}'
            )
        self.chunk_size = chunk_size
        self.overlap = overlap

    def _window_end(self, text: str, start: int) -> int:
        """Pick where the window starting at start should end."""
        limit = start + self.chunk_size
        # The window has to reach past the overlap or the next one
        # would not move forward.
        floor = start + self.overlap + 1
        for separator in SEPARATORS:
            position = text.rfind(separator, floor, limit)
            if position != -1:
                return position + len(separator)
        return limit

    def split_text(self, text: str) -> Iterator[str]:
        """Yield the overlapping windows of text, in order."""
        start = 0
        length = len(text)
        while start < length:
            if length - start <= self.chunk_size:
                yield text[start:]
                return
            end = self._window_end(text, start)
            yield text[start:end]
            start = end - self.overlap

    def chunk_text(self, document: Document) -> List[Chunk]:
        """Split a document into chunks that know their position."""
        texts = list(self.split_text(document.text))
        return [
            Chunk(document=document, index=i, total=len(texts), text=text)
            for i, text in enumerate(texts)
        ]
