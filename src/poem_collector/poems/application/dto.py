"""
Poem Application DTOs
=====================

Pydantic models for the Jinrishici ``/sentence`` response and the pure
mapping from that response to the domain ``Poem``.

Response shape:
    {
        "status": "success",
        "data": {
            "content": "...",
            "origin": {
                "title": "...", "dynasty": "...", "author": "...",
                "content": ["...", "..."],
                "translate": ["..."] | null
            },
            "matchTags": ["...", "..."]
        }
    }
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from poem_collector.poems.domain import Poem

TAG_SEPARATOR = ", "


class PoemOriginDTO(BaseModel):
    """The poem a sentence comes from."""
    model_config = ConfigDict(frozen=True)

    title: str
    dynasty: str
    author: str
    content: List[str]
    translate: Optional[List[str]] = Field(
        default=None,
        description="Translation lines; absent or null when there is none"
    )


class PoemDataDTO(BaseModel):
    """Payload of a successful response."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str
    origin: PoemOriginDTO
    match_tags: List[str] = Field(default_factory=list, alias="matchTags")


class PoemResponseDTO(BaseModel):
    """Full ``/sentence`` response body."""
    model_config = ConfigDict(frozen=True)

    status: str = ""
    data: PoemDataDTO


def normalize_poem(response: PoemResponseDTO) -> Poem:
    """
    Map an API response to a ``Poem``.

    Origin lines are concatenated with no separator, tags are joined with
    ``", "`` and a missing translation becomes an empty string.
    """
    data = response.data
    origin = data.origin

    if origin.translate is None:
        translation = ""
    else:
        translation = "".join(origin.translate)

    return Poem(
        title=origin.title,
        dynasty=origin.dynasty,
        author=origin.author,
        content=data.content,
        full_text="".join(origin.content),
        translation=translation,
        tags=TAG_SEPARATOR.join(data.match_tags),
    )
