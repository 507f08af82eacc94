"""
Poem Domain Layer
=================

Pure Python business objects; no infrastructure dependencies.
"""

from poem_collector.poems.domain.entities import Poem

__all__ = ["Poem"]
