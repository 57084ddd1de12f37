"""Repository interfaces for the vote ledger.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from voting.domain.repository.vote import VoteRepository

__all__ = [
    "VoteRepository",
]
