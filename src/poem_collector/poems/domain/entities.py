"""
Poem Domain Entities
====================
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Poem:
    """
    A normalized poem, ready to be stored.

    ``content`` is the featured sentence, ``full_text`` the whole poem.
    ``translation`` and ``tags`` are empty strings when the API has none.
    """

    title: str
    dynasty: str
    author: str
    content: str
    full_text: str
    translation: str = ""
    tags: str = ""

    def __post_init__(self):
        """Reject missing mandatory fields."""
        for name in ("title", "dynasty", "author", "content", "full_text", "translation", "tags"):
            if getattr(self, name) is None:
                raise ValueError(f"Poem.{name} must not be None")
