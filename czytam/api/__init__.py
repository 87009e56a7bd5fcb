"""Remote store client package: async HTTP interface to words, sets, and syllabify.

WHY: The trainer reads its word library and learning sets from a hosted
store and asks a serverless function to syllabify old booklet sentences.
This package encapsulates that communication behind an async client.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Records are parsed
into typed dataclasses defined in models.py.

RULES:
- All HTTP calls go through CzytamClient (no direct httpx usage elsewhere)
- Authentication is via the anon key from config
"""

from czytam.api.client import CzytamClient, UpstreamServiceError
from czytam.api.models import LearningMode, LearningSet, Sentence, SetType, Word

__all__ = [
    "CzytamClient",
    "LearningMode",
    "LearningSet",
    "Sentence",
    "SetType",
    "UpstreamServiceError",
    "Word",
]
