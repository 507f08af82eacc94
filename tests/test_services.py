import httpx
import pytest

from poem_collector.core import FetchDecodeError, FetchTransportError
from poem_collector.poems.application import IPoemFetcher, IPoemRepository, PoemCollectionService
from poem_collector.poems.domain import Poem
from poem_collector.poems.infrastructure import JinrishiciClient, SQLAlchemyPoemRepository

from conftest import fetch_rows


class FakeRepository(IPoemRepository):
    def __init__(self):
        self.stored = []

    async def store(self, poem: Poem) -> None:
        self.stored.append(poem)


class FailingFetcher(IPoemFetcher):
    def __init__(self, error):
        self.error = error
        self.tokens = []

    async def fetch(self, token: str) -> Poem:
        self.tokens.append(token)
        raise self.error


async def test_decode_error_never_reaches_store():
    repository = FakeRepository()
    fetcher = FailingFetcher(FetchDecodeError("Error analyze poem body"))
    service = PoemCollectionService(fetcher, repository, "token")

    with pytest.raises(FetchDecodeError):
        await service.collect()

    assert fetcher.tokens == ["token"]
    assert repository.stored == []


async def test_transport_error_never_reaches_store():
    repository = FakeRepository()
    service = PoemCollectionService(
        FailingFetcher(FetchTransportError("connection refused")), repository, "token"
    )

    with pytest.raises(FetchTransportError):
        await service()

    assert repository.stored == []


async def test_end_to_end_sample_is_stored(engine, sample_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-User-Token"] == "abc123"
        return httpx.Response(200, json=sample_payload)

    fetcher = JinrishiciClient(timeout=1.0, transport=httpx.MockTransport(handler))
    service = PoemCollectionService(fetcher, SQLAlchemyPoemRepository(engine), "abc123")

    try:
        poem = await service.collect()
    finally:
        await fetcher.close()

    assert poem.title == "水调歌头"
    assert await fetch_rows(engine) == [{
        "title": "水调歌头",
        "dynasty": "宋",
        "author": "苏轼",
        "content": "明月几时有",
        "all": "明月几时有把酒问青天",
        "translate": "",
        "tag": "月, 思乡",
    }]


async def test_truncated_body_stores_nothing(engine):
    fetcher = JinrishiciClient(
        timeout=1.0,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b'{"data": {"con')),
    )
    service = PoemCollectionService(fetcher, SQLAlchemyPoemRepository(engine), "abc123")

    with pytest.raises(FetchDecodeError):
        await service.collect()
    await fetcher.close()

    assert await fetch_rows(engine) == []
