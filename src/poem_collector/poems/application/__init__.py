"""
Poem Application Layer
======================

Contains:
- DTOs: the API response models and their normalization
- Services: the collection task and the interfaces it depends on
"""

from poem_collector.poems.application.dto import (
    PoemOriginDTO,
    PoemDataDTO,
    PoemResponseDTO,
    normalize_poem,
)
from poem_collector.poems.application.services import (
    IPoemFetcher,
    IPoemRepository,
    PoemCollectionService,
)

__all__ = [
    # DTOs
    "PoemOriginDTO",
    "PoemDataDTO",
    "PoemResponseDTO",
    "normalize_poem",
    # Services
    "PoemCollectionService",
    # Interfaces
    "IPoemFetcher",
    "IPoemRepository",
]
