"""Embed the text."""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from langchain_openai import OpenAIEmbeddings

import openai

from pydantic import SecretStr

from indexing.errors import ProviderError

logger = logging.getLogger(__name__)

MODEL_DIMENSIONS = {
    'text-embedding-3-large': 3072,
    'text-embedding-3-small': 1536,
    'text-embedding-ada-002': 1536,
}


class EmbeddingProvider(ABC):
    """Turn one chunk of text into one fixed-length vector."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector this provider returns."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Embed a single text, raising ProviderError on failure."""

    async def aclose(self):
        """Release any connections held by the provider."""


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text with the OpenAI embeddings endpoint.

    Requests are not retried here; a failed call surfaces as a
    ProviderError and the caller decides what to do with the document.
    """

    def __init__(
        self,
        api_key: str,
        model: str = 'text-embedding-ada-002',
        dimensions: Optional[int] = None,
    ):
        """Initialize the attributes."""
        self.model = model
        self._dimensions = dimensions or MODEL_DIMENSIONS.get(model, 1536)
        self._http = httpx.AsyncClient()
        self._client = OpenAIEmbeddings(
            model=model,
            api_key=SecretStr(api_key),
            max_retries=0,
            http_async_client=self._http,
        )

    @property
    def dimensions(self) -> int:
        """Length of every vector this provider returns."""
        return self._dimensions

    async def embed(self, text: str) -> List[float]:
        """Embed a single text."""
        try:
            vector = await self._client.aembed_query(text)
        except openai.OpenAIError as exc:
            raise ProviderError(
                f'Embedding request to {self.model} failed: {exc}'
            ) from exc
        if len(vector) != self._dimensions:
            raise ProviderError(
                f'{self.model} returned {len(vector)} dimensions,'
                f' expected {self._dimensions}'
            )
        return vector

    async def aclose(self):
        """Close the HTTP connection pool."""
        logger.debug('Closing embedding client for %s', self.model)
        await self._http.aclose()
