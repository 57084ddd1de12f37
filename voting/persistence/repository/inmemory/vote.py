"""In-memory vote repository for testing."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from voting.domain.model import Vote, VoterPivot
from voting.domain.repository import VoteRepository
from voting.domain.value import VoteableRef, VoteId, VoterId


class InMemoryVoteRepository(VoteRepository):
    """In-memory implementation of VoteRepository for testing.

    Mirrors the unique constraint of the vote table by raising
    IntegrityError on duplicate voter/subject pairs.
    """

    def __init__(self, voter_type: str) -> None:
        self.voter_type = voter_type
        self._votes: list[Vote] = []

    def _matches(
        self,
        vote: Vote,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> bool:
        if vote.voteable_type != voteable.type or vote.voteable_id != voteable.id:
            return False
        if voter_id is not None and (
            vote.voter_type != self.voter_type or vote.voter_id != voter_id
        ):
            return False
        return upvote is None or vote.upvote is upvote

    async def find_by_id(self, vote_id: VoteId) -> Optional[Vote]:
        """Find a vote by ID."""
        for vote in self._votes:
            if vote.id == vote_id:
                return vote
        return None

    async def find_by_voter_and_voteable(
        self, voter_id: VoterId, voteable: VoteableRef
    ) -> Optional[Vote]:
        """Find a voter's vote on a specific subject."""
        for vote in self._votes:
            if self._matches(vote, voteable, voter_id=voter_id):
                return vote
        return None

    async def find_by_voteable(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> list[Vote]:
        """Find votes on a specific subject."""
        return [v for v in self._votes if self._matches(v, voteable, voter_id, upvote)]

    async def find_by_voter(self, voter_id: VoterId) -> list[Vote]:
        """Find all votes cast by a voter."""
        return [
            v
            for v in self._votes
            if v.voter_type == self.voter_type and v.voter_id == voter_id
        ]

    async def find_voters(
        self, voteable: VoteableRef, upvote: Optional[bool] = None
    ) -> list[VoterPivot]:
        """Find the voters of a subject with their pivot data."""
        return [
            VoterPivot.from_vote(v)
            for v in self._votes
            if v.voter_type == self.voter_type
            and self._matches(v, voteable, upvote=upvote)
        ]

    async def count_by_voteable(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> int:
        """Count votes on a specific subject."""
        return sum(1 for v in self._votes if self._matches(v, voteable, voter_id, upvote))

    async def save(self, vote: Vote) -> Vote:
        """Save a vote.

        Raises:
            IntegrityError: If vote already exists (duplicate)
        """
        for existing in self._votes:
            if (
                existing.voter_type == vote.voter_type
                and existing.voter_id == vote.voter_id
                and existing.voteable == vote.voteable
            ):
                raise IntegrityError("Duplicate vote", None, Exception())

        self._votes.append(vote)
        return vote

    async def update_direction(self, vote_id: VoteId, upvote: bool) -> Optional[Vote]:
        """Change the direction of an existing vote."""
        for i, vote in enumerate(self._votes):
            if vote.id == vote_id:
                updated = vote.model_copy(
                    update={"upvote": upvote, "updated_at": datetime.now()}
                )
                self._votes[i] = updated
                return updated
        return None

    async def delete(self, vote_id: VoteId) -> None:
        """Delete a vote by ID."""
        self._votes = [v for v in self._votes if v.id != vote_id]

    async def delete_by_voter_and_voteable(
        self, voter_id: VoterId, voteable: VoteableRef
    ) -> bool:
        """Delete a vote by voter and subject."""
        for i, vote in enumerate(self._votes):
            if self._matches(vote, voteable, voter_id=voter_id):
                self._votes.pop(i)
                return True
        return False
