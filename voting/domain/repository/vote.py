"""Vote repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from voting.domain.model.vote import Vote, VoterPivot
from voting.domain.value import VoteableRef, VoteId, VoterId


class VoteRepository(ABC):
    """Repository for Vote entity.

    Defines the contract for vote persistence operations.
    Implementations live in the infrastructure layer.

    Every voter-scoped query is implicitly restricted to the configured
    voter type.
    """

    @abstractmethod
    async def find_by_id(self, vote_id: VoteId) -> Optional[Vote]:
        """Find a vote by ID.

        Args:
            vote_id: The vote's unique identifier

        Returns:
            The vote if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_voter_and_voteable(
        self, voter_id: VoterId, voteable: VoteableRef
    ) -> Optional[Vote]:
        """Find a voter's vote on a specific subject.

        Args:
            voter_id: The voter's ID
            voteable: Reference to the voted subject

        Returns:
            The vote if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_voteable(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> List[Vote]:
        """Find votes on a specific subject.

        Args:
            voteable: Reference to the voted subject
            voter_id: Only votes cast by this voter
            upvote: Only votes in this direction

        Returns:
            List of matching votes
        """
        pass

    @abstractmethod
    async def find_by_voter(self, voter_id: VoterId) -> List[Vote]:
        """Find all votes cast by a voter.

        Args:
            voter_id: The voter's ID

        Returns:
            List of votes by the voter
        """
        pass

    @abstractmethod
    async def find_voters(
        self, voteable: VoteableRef, upvote: Optional[bool] = None
    ) -> List[VoterPivot]:
        """Find the voters of a subject with their pivot data.

        Args:
            voteable: Reference to the voted subject
            upvote: Only voters who voted in this direction

        Returns:
            List of voter pivots
        """
        pass

    @abstractmethod
    async def count_by_voteable(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> int:
        """Count votes on a specific subject.

        Args:
            voteable: Reference to the voted subject
            voter_id: Only votes cast by this voter
            upvote: Only votes in this direction

        Returns:
            Number of matching votes
        """
        pass

    @abstractmethod
    async def save(self, vote: Vote) -> Vote:
        """Save a vote (create).

        Args:
            vote: The vote to save

        Returns:
            The saved vote

        Raises:
            IntegrityError: If a vote already exists for this voter/subject pair
        """
        pass

    @abstractmethod
    async def update_direction(self, vote_id: VoteId, upvote: bool) -> Optional[Vote]:
        """Change the direction of an existing vote.

        Args:
            vote_id: The vote ID to update
            upvote: New direction

        Returns:
            The updated vote, None if it does not exist
        """
        pass

    @abstractmethod
    async def delete(self, vote_id: VoteId) -> None:
        """Delete a vote.

        Args:
            vote_id: The vote ID to delete
        """
        pass

    @abstractmethod
    async def delete_by_voter_and_voteable(
        self, voter_id: VoterId, voteable: VoteableRef
    ) -> bool:
        """Delete a vote by voter and subject.

        Args:
            voter_id: The voter's ID
            voteable: Reference to the voted subject

        Returns:
            True if a vote was deleted, False if no vote existed
        """
        pass
