"""Vote domain service."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import uuid4

import logfire

from voting.domain.error import InvalidVoterError
from voting.domain.model.vote import Vote
from voting.domain.repository import VoteRepository
from voting.domain.value import VoteId, VoterId
from voting.persistence.tables import VoteSchema

from .base import Service
from .voteable import LoadedRelations, VoteCounts, Voteable


class VoteService(Service):
    """Domain service for casting, flipping and retracting votes."""

    def __init__(self, vote_repository: VoteRepository, schema: VoteSchema) -> None:
        """Initialize vote service.

        Args:
            vote_repository: Vote repository
            schema: Resolved vote schema
        """
        self.vote_repository = vote_repository
        self.schema = schema

    def voteable(
        self,
        subject: Any,
        loaded: Optional[LoadedRelations] = None,
        counts: Optional[VoteCounts] = None,
    ) -> Voteable:
        """Voting facet of a subject, bound to this service's repository."""
        return Voteable(
            subject,
            schema=self.schema,
            vote_repository=self.vote_repository,
            loaded=loaded,
            counts=counts,
        )

    def _voter_id(self, voter: Any) -> VoterId:
        if not self.schema.is_voter(voter):
            logfire.warn(
                "Vote by non-voter entity",
                entity_type=type(voter).__name__,
                voter_type=self.schema.voter_type,
            )
            raise InvalidVoterError(type(voter).__name__, self.schema.voter_type)
        return self.schema.voter_id_of(voter)

    async def vote(self, voter: Any, subject: Any, upvote: bool = True) -> Vote:
        """Cast a vote, or flip the direction of an existing one.

        Never creates a second row for the same voter and subject. A
        concurrent insert for the same pair surfaces as IntegrityError.

        Args:
            voter: Entity of the configured voter type
            subject: Registered entity being voted on
            upvote: Direction of the vote

        Returns:
            The vote as stored

        Raises:
            InvalidVoterError: If the voter is not of the configured voter type
            IntegrityError: If a concurrent vote for the pair was inserted
        """
        voter_id = self._voter_id(voter)
        voteable = self.schema.registry.ref_of(subject)

        with logfire.span(
            "vote", voter_id=str(voter_id), voteable=str(voteable), upvote=upvote
        ):
            existing = await self.vote_repository.find_by_voter_and_voteable(
                voter_id, voteable
            )

            if existing is not None:
                if existing.upvote is upvote:
                    logfire.info("Vote unchanged", vote_id=str(existing.id))
                    return existing

                updated = await self.vote_repository.update_direction(
                    existing.id, upvote
                )
                if updated is not None:
                    logfire.info(
                        "Vote direction changed", vote_id=str(existing.id), upvote=upvote
                    )
                    return updated

                # Retracted between the lookup and the update
                logfire.warn("Vote vanished before update", vote_id=str(existing.id))

            now = datetime.now()
            vote = Vote(
                id=VoteId(uuid4()),
                voter_type=self.schema.voter_type,
                voter_id=voter_id,
                voteable_type=voteable.type,
                voteable_id=voteable.id,
                upvote=upvote,
                created_at=now,
                updated_at=now,
            )

            # Will raise IntegrityError if a duplicate slipped in concurrently
            saved_vote = await self.vote_repository.save(vote)
            logfire.info("Vote cast", vote_id=str(saved_vote.id), upvote=upvote)
            return saved_vote

    async def upvote(self, voter: Any, subject: Any) -> Vote:
        """Upvote a subject."""
        return await self.vote(voter, subject, upvote=True)

    async def downvote(self, voter: Any, subject: Any) -> Vote:
        """Downvote a subject."""
        return await self.vote(voter, subject, upvote=False)

    async def cancel_vote(self, voter: Any, subject: Any) -> bool:
        """Retract a voter's vote on a subject.

        Returns:
            True if a vote was removed, False if no vote existed
        """
        voter_id = self._voter_id(voter)
        voteable = self.schema.registry.ref_of(subject)

        with logfire.span(
            "cancel_vote", voter_id=str(voter_id), voteable=str(voteable)
        ):
            deleted = await self.vote_repository.delete_by_voter_and_voteable(
                voter_id, voteable
            )
            if deleted:
                logfire.info("Vote removed", voter_id=str(voter_id))
            else:
                logfire.info("No vote to remove", voter_id=str(voter_id))
            return deleted

    async def votes_by(self, voter: Any) -> List[Vote]:
        """All votes cast by a voter."""
        return await self.vote_repository.find_by_voter(self._voter_id(voter))
