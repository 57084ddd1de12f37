"""Domain services."""

from .base import Service
from .count_formatter import format_count
from .vote_service import VoteService
from .voteable import LoadedRelations, VoteCounts, Voteable

__all__ = [
    "LoadedRelations",
    "Service",
    "VoteCounts",
    "VoteService",
    "Voteable",
    "format_count",
]
