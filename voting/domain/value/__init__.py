"""Domain value objects for the vote ledger."""

from voting.domain.value.identifiers import EntityKey, VoteableId, VoteId, VoterId
from voting.domain.value.types import RoundingMode, VoteableRef

__all__ = [
    # Identifiers
    "EntityKey",
    "VoteId",
    "VoterId",
    "VoteableId",
    # Types
    "RoundingMode",
    "VoteableRef",
]
