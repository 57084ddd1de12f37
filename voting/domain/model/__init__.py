"""Domain model entities for the vote ledger."""

from voting.domain.model.vote import Vote, VoterPivot

__all__ = [
    "Vote",
    "VoterPivot",
]
