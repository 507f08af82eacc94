"""
Poem Collector
==============

Periodically fetches a poem from the Jinrishici API and stores it in a
relational table.
"""

__version__ = "1.0.0"
