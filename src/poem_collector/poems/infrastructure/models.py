"""
Poem Infrastructure Models
==========================

SQLAlchemy Core table for poems.

The table is owned outside this service and written with INSERT only.
``all`` and ``translate`` are reserved words in several dialects and are
always emitted as quoted identifiers.
"""

from sqlalchemy import Column, Table, Text

from poem_collector.infrastructure.database import metadata

POEM_TABLE_NAME = "t_poem"

poem_table = Table(
    POEM_TABLE_NAME,
    metadata,
    Column("title", Text, nullable=False),
    Column("dynasty", Text, nullable=False),
    Column("author", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("all", Text, nullable=False, quote=True),
    Column("translate", Text, nullable=False, quote=True),
    Column("tag", Text, nullable=False),
)

# Insert column order; values are bound in this order
POEM_COLUMNS = ("title", "dynasty", "author", "content", "all", "translate", "tag")
