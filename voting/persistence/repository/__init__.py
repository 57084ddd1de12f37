"""SQL repository implementations."""

from voting.persistence.repository.vote import SqlVoteRepository

__all__ = [
    "SqlVoteRepository",
]
