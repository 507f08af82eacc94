"""
Poem Infrastructure Repositories
================================

SQLAlchemy implementation of the poem repository.
"""

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from poem_collector.core import StoreExecError, StorePrepareError
from poem_collector.poems.application import IPoemRepository
from poem_collector.poems.domain import Poem
from poem_collector.poems.infrastructure.models import POEM_COLUMNS, poem_table
from poem_collector.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

INSERT_POEM = insert(poem_table)


def poem_to_row(poem: Poem) -> dict:
    """Map a ``Poem`` onto the ``t_poem`` columns."""
    values = (
        poem.title,
        poem.dynasty,
        poem.author,
        poem.content,
        poem.full_text,
        poem.translation,
        poem.tags,
    )
    return dict(zip(POEM_COLUMNS, values))


class SQLAlchemyPoemRepository(IPoemRepository):
    """
    Writes poems with a single parameterized INSERT.

    The engine is injected; the repository never opens or disposes it.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def store(self, poem: Poem) -> None:
        """
        Insert one poem.

        Raises:
            StorePrepareError: If no connection can be acquired or the
                statement does not compile for the dialect
            StoreExecError: If the database rejects the insert
        """
        try:
            conn = await self._engine.connect()
        except (SQLAlchemyError, OSError) as e:
            raise StorePrepareError(
                f"Error preparing SQL statement: {e}",
                {"table": poem_table.name}
            ) from e

        try:
            try:
                INSERT_POEM.compile(dialect=conn.dialect)
            except SQLAlchemyError as e:
                raise StorePrepareError(
                    f"Error preparing SQL statement: {e}",
                    {"table": poem_table.name}
                ) from e

            try:
                async with conn.begin():
                    await conn.execute(INSERT_POEM, poem_to_row(poem))
            except SQLAlchemyError as e:
                raise StoreExecError(
                    f"Error executing SQL statement: {e}",
                    {"table": poem_table.name, "title": poem.title}
                ) from e
        finally:
            await conn.close()

        logger.info(
            "Success Get Poem",
            extra={"title": poem.title, "author": poem.author, "dynasty": poem.dynasty}
        )
