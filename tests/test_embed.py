"""Tests for the OpenAI embedding provider wrapper."""
import openai

import pytest

from indexing.embed import OpenAIEmbeddingProvider
from indexing.errors import ProviderError


class FakeEmbeddings:

    def __init__(self, vector=None, error=None):
        self.vector = vector
        self.error = error
        self.texts = []

    async def aembed_query(self, text):
        self.texts.append(text)
        if self.error:
            raise self.error
        return self.vector


def make_provider(client, dimensions=4):
    provider = OpenAIEmbeddingProvider('sk-test', dimensions=dimensions)
    provider._client = client
    return provider


def test_dimensions_follow_the_model() -> None:
    assert OpenAIEmbeddingProvider('sk-test').dimensions == 1536
    assert OpenAIEmbeddingProvider(
        'sk-test', model='text-embedding-3-large'
    ).dimensions == 3072


@pytest.mark.asyncio
async def test_embed_returns_the_vector() -> None:
    client = FakeEmbeddings(vector=[0.1, 0.2, 0.3, 0.4])
    provider = make_provider(client)

    assert await provider.embed('hello') == [0.1, 0.2, 0.3, 0.4]
    assert client.texts == ['hello']
    await provider.aclose()


@pytest.mark.asyncio
async def test_client_errors_become_provider_errors() -> None:
    provider = make_provider(FakeEmbeddings(error=openai.OpenAIError('429')))

    with pytest.raises(ProviderError, match='429'):
        await provider.embed('hello')
    await provider.aclose()


@pytest.mark.asyncio
async def test_wrong_vector_length_is_rejected() -> None:
    provider = make_provider(FakeEmbeddings(vector=[0.1, 0.2]))

    with pytest.raises(ProviderError, match='2 dimensions'):
        await provider.embed('hello')
    await provider.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_the_connection_pool() -> None:
    provider = make_provider(FakeEmbeddings(vector=[0.0] * 4))

    await provider.aclose()

    assert provider._http.is_closed
