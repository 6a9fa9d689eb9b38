"""Identity verifiers for the external providers.

Each verifier checks a single handle and returns a LookupResult; provider
errors never escape as exceptions.
"""

from .base import BaseVerifier, LookupResult, LookupStatus
from .discord import DiscordVerifier
from .twitter import TwitterVerifier

__all__ = [
    "BaseVerifier",
    "LookupResult",
    "LookupStatus",
    "DiscordVerifier",
    "TwitterVerifier",
]
