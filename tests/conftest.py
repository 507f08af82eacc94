import copy
import logging

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from poem_collector.config import get_settings
from poem_collector.infrastructure.database import create_tables
from poem_collector.poems.infrastructure.models import poem_table

SAMPLE_RESPONSE = {
    "status": "success",
    "data": {
        "content": "明月几时有",
        "origin": {
            "title": "水调歌头",
            "dynasty": "宋",
            "author": "苏轼",
            "content": ["明月几时有", "把酒问青天"],
            "translate": None,
        },
        "matchTags": ["月", "思乡"],
    },
}


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_payload():
    return copy.deepcopy(SAMPLE_RESPONSE)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'poems.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


async def fetch_rows(engine):
    async with engine.connect() as conn:
        result = await conn.execute(select(poem_table))
        return [dict(row) for row in result.mappings().all()]


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
