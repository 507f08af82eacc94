"""
Poem Infrastructure Layer
=========================

Infrastructure implementations for the poem pipeline:
- Models: SQLAlchemy Core table
- Repositories: Data access layer
- External: Jinrishici API client
- Scheduler: APScheduler cron wrapper
"""

from poem_collector.poems.infrastructure.models import poem_table
from poem_collector.poems.infrastructure.repositories import SQLAlchemyPoemRepository
from poem_collector.poems.infrastructure.external import JinrishiciClient
from poem_collector.poems.infrastructure.scheduler import PoemScheduler, build_trigger

__all__ = [
    "poem_table",
    "SQLAlchemyPoemRepository",
    "JinrishiciClient",
    "PoemScheduler",
    "build_trigger",
]
