"""
Poem Application Services
=========================

Orchestrates one collection run: fetch a poem, then store it.
"""

from abc import ABC, abstractmethod

from poem_collector.poems.domain import Poem
from poem_collector.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


# ========== Interfaces ==========

class IPoemFetcher(ABC):
    """Interface for the poem API client."""

    @abstractmethod
    async def fetch(self, token: str) -> Poem:
        """Fetch and normalize one poem."""


class IPoemRepository(ABC):
    """Interface for poem persistence."""

    @abstractmethod
    async def store(self, poem: Poem) -> None:
        """Insert one poem."""


# ========== Services ==========

class PoemCollectionService:
    """
    Fetch-then-store task run on every scheduled trigger.

    Errors from either step propagate unchanged; the scheduler logs them.
    A failed fetch never reaches the repository.
    """

    def __init__(self, fetcher: IPoemFetcher, repository: IPoemRepository, token: str):
        self._fetcher = fetcher
        self._repository = repository
        self._token = token

    async def collect(self) -> Poem:
        """Run one collection and return the stored poem."""
        logger.info("Start Get Poem!")
        with log_latency(logger, "collect_poem"):
            poem = await self._fetcher.fetch(self._token)
            await self._repository.store(poem)
        return poem

    async def __call__(self) -> Poem:
        return await self.collect()
