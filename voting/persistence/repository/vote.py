"""SQLAlchemy implementation of Vote repository."""

from datetime import datetime
from typing import List, Optional

import logfire
from sqlalchemy import ColumnElement, and_, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from voting.domain.model import Vote, VoterPivot
from voting.domain.repository import VoteRepository
from voting.domain.value import VoteableRef, VoteId, VoterId
from voting.persistence.mappers import row_to_vote, row_to_voter_pivot, vote_to_dict
from voting.persistence.tables import VoteSchema


class SqlVoteRepository(VoteRepository):
    """SQLAlchemy implementation of VoteRepository."""

    def __init__(self, session: AsyncSession, schema: VoteSchema) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            schema: Resolved vote schema
        """
        self.session = session
        self.schema = schema

    @property
    def _votes(self):
        return self.schema.table

    def _scope(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> ColumnElement[bool]:
        """Filter on a subject, optionally on a voter and a direction."""
        votes = self._votes
        clauses = [
            votes.c.voteable_type == voteable.type,
            votes.c.voteable_id == voteable.id,
        ]
        if voter_id is not None:
            clauses.append(votes.c.voter_type == self.schema.voter_type)
            clauses.append(self.schema.voter_key_column == voter_id)
        if upvote is not None:
            clauses.append(votes.c.upvote == upvote)
        return and_(*clauses)

    async def find_by_id(self, vote_id: VoteId) -> Optional[Vote]:
        """Find a vote by ID."""
        stmt = select(self._votes).where(self._votes.c.id == vote_id)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_vote(row._asdict(), self.schema) if row else None

    async def find_by_voter_and_voteable(
        self, voter_id: VoterId, voteable: VoteableRef
    ) -> Optional[Vote]:
        """Find a voter's vote on a specific subject."""
        stmt = select(self._votes).where(self._scope(voteable, voter_id=voter_id))
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_vote(row._asdict(), self.schema) if row else None

    async def find_by_voteable(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> List[Vote]:
        """Find votes on a specific subject."""
        stmt = select(self._votes).where(self._scope(voteable, voter_id, upvote))
        result = await self.session.execute(stmt)
        return [row_to_vote(row._asdict(), self.schema) for row in result.fetchall()]

    async def find_by_voter(self, voter_id: VoterId) -> List[Vote]:
        """Find all votes cast by a voter."""
        stmt = select(self._votes).where(
            self._votes.c.voter_type == self.schema.voter_type,
            self.schema.voter_key_column == voter_id,
        )
        result = await self.session.execute(stmt)
        return [row_to_vote(row._asdict(), self.schema) for row in result.fetchall()]

    async def find_voters(
        self, voteable: VoteableRef, upvote: Optional[bool] = None
    ) -> List[VoterPivot]:
        """Find the voters of a subject with their pivot data."""
        votes = self._votes
        stmt = select(
            self.schema.voter_key_column,
            votes.c.upvote,
            votes.c.created_at,
            votes.c.updated_at,
        ).where(
            self._scope(voteable, upvote=upvote),
            votes.c.voter_type == self.schema.voter_type,
        )
        result = await self.session.execute(stmt)
        return [
            row_to_voter_pivot(row._asdict(), self.schema) for row in result.fetchall()
        ]

    async def count_by_voteable(
        self,
        voteable: VoteableRef,
        voter_id: Optional[VoterId] = None,
        upvote: Optional[bool] = None,
    ) -> int:
        """Count votes on a specific subject."""
        stmt = (
            select(func.count())
            .select_from(self._votes)
            .where(self._scope(voteable, voter_id, upvote))
        )
        result = await self.session.execute(stmt)
        count = result.scalar() or 0
        logfire.debug(
            "Votes counted",
            voteable=str(voteable),
            voter_id=str(voter_id) if voter_id is not None else None,
            upvote=upvote,
            count=count,
        )
        return count

    async def save(self, vote: Vote) -> Vote:
        """Save a vote (create)."""
        stmt = insert(self._votes).values(**vote_to_dict(vote, self.schema))
        await self.session.execute(stmt)
        await self.session.flush()
        return vote

    async def update_direction(self, vote_id: VoteId, upvote: bool) -> Optional[Vote]:
        """Change the direction of an existing vote."""
        stmt = (
            update(self._votes)
            .where(self._votes.c.id == vote_id)
            .values(upvote=upvote, updated_at=datetime.now())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount == 0:  # type: ignore[attr-defined]
            return None
        return await self.find_by_id(vote_id)

    async def delete(self, vote_id: VoteId) -> None:
        """Delete a vote."""
        stmt = delete(self._votes).where(self._votes.c.id == vote_id)
        await self.session.execute(stmt)
        await self.session.flush()

    async def delete_by_voter_and_voteable(
        self, voter_id: VoterId, voteable: VoteableRef
    ) -> bool:
        """Delete a vote by voter and subject."""
        stmt = delete(self._votes).where(self._scope(voteable, voter_id=voter_id))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined]
