"""Voteable facet.

A ``Voteable`` is attached to one subject instance (a post, a comment, any
registered entity) and answers questions about the votes cast on it:
membership checks, relation queries, counts and human readable counts.

Pre-fetched relations are passed in explicitly through ``LoadedRelations``:
a relation that is ``None`` has not been fetched and is queried on demand,
a fetched relation is scanned in memory instead.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from sqlalchemy import ColumnElement, Select

from voting.domain.model import Vote, VoterPivot
from voting.domain.repository import VoteRepository
from voting.domain.value import RoundingMode, VoterId
from voting.persistence.query import VoteableQueries
from voting.persistence.tables import VoteSchema

from .count_formatter import format_count

RELATIONS = ("votes", "voters", "upvoters", "downvoters")


class LoadedRelations(BaseModel):
    """Relations already fetched for a subject.

    Voter relations hold voter entities or ``VoterPivot`` entries.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    votes: Optional[list[Vote]] = None
    voters: Optional[list[Any]] = None
    upvoters: Optional[list[Any]] = None
    downvoters: Optional[list[Any]] = None


class VoteCounts(BaseModel):
    """Vote counts cached on a facet instance (None until computed)."""

    voters: Optional[int] = None
    upvoters: Optional[int] = None
    downvoters: Optional[int] = None


class Voteable:
    """Voting facet of a single subject instance.

    Counts are cached on the instance once computed and are never
    invalidated by new votes; call ``refresh()`` to see them.
    """

    def __init__(
        self,
        subject: Any,
        schema: VoteSchema,
        vote_repository: VoteRepository,
        loaded: Optional[LoadedRelations] = None,
        counts: Optional[VoteCounts] = None,
    ) -> None:
        """Initialize the facet.

        Args:
            subject: Registered entity instance being voted on
            schema: Resolved vote schema
            vote_repository: Vote store
            loaded: Relations already fetched for the subject
            counts: Counts already computed for the subject

        Raises:
            UnregisteredEntityError: If the subject's class is not registered
        """
        self.subject = subject
        self.schema = schema
        self.vote_repository = vote_repository
        self.ref = schema.registry.ref_of(subject)
        self.queries = VoteableQueries(schema, self.ref.type)
        self.loaded = loaded or LoadedRelations()
        self.counts = counts or VoteCounts()

    @staticmethod
    def scopes(schema: VoteSchema, subject_type: str) -> VoteableQueries:
        """Filter predicates for listing many subjects of a type."""
        return VoteableQueries(schema, subject_type)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def _voter_key(self, item: Union[VoterPivot, Any]) -> VoterId:
        if isinstance(item, VoterPivot):
            return item.voter_id
        return self.schema.voter_id_of(item)

    async def _has_vote_by(
        self, voter: Any, relation: str, upvote: Optional[bool]
    ) -> bool:
        # Entities of another type never count as voters
        if not self.schema.is_voter(voter):
            return False

        voter_id = self.schema.voter_id_of(voter)

        voters = getattr(self.loaded, relation)
        if voters is not None:
            return any(self._voter_key(item) == voter_id for item in voters)

        if self.loaded.votes is not None:
            return any(
                vote.voter_type == self.schema.voter_type
                and vote.is_by(voter_id, upvote)
                for vote in self.loaded.votes
            )

        count = await self.vote_repository.count_by_voteable(
            self.ref, voter_id=voter_id, upvote=upvote
        )
        return count > 0

    async def is_voted_by(self, voter: Any) -> bool:
        """Whether the voter voted on the subject, in either direction."""
        return await self._has_vote_by(voter, "voters", None)

    async def is_upvoted_by(self, voter: Any) -> bool:
        """Whether the voter upvoted the subject."""
        return await self._has_vote_by(voter, "upvoters", True)

    async def is_downvoted_by(self, voter: Any) -> bool:
        """Whether the voter downvoted the subject."""
        return await self._has_vote_by(voter, "downvoters", False)

    async def is_not_voted_by(self, voter: Any) -> bool:
        return not await self.is_voted_by(voter)

    async def is_not_upvoted_by(self, voter: Any) -> bool:
        return not await self.is_upvoted_by(voter)

    async def is_not_downvoted_by(self, voter: Any) -> bool:
        return not await self.is_downvoted_by(voter)

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def votes(self) -> Select:
        """Vote rows of the subject."""
        return self.queries.votes(self.ref.id)

    def voters(self) -> Select:
        """Voters of the subject, with pivot columns."""
        return self.queries.voters(self.ref.id)

    def upvoters(self) -> Select:
        """Voters who upvoted the subject."""
        return self.queries.upvoters(self.ref.id)

    def downvoters(self) -> Select:
        """Voters who downvoted the subject."""
        return self.queries.downvoters(self.ref.id)

    async def load(self, *relations: str) -> "Voteable":
        """Fetch relations from the store so later checks scan them.

        Args:
            relations: Any of ``votes``, ``voters``, ``upvoters``, ``downvoters``

        Returns:
            The facet itself

        Raises:
            ValueError: If a relation name is unknown
        """
        unknown = set(relations) - set(RELATIONS)
        if unknown:
            raise ValueError(f"Unknown relations: {sorted(unknown)}")

        for relation in relations:
            if relation == "votes":
                self.loaded.votes = await self.vote_repository.find_by_voteable(
                    self.ref
                )
            elif relation == "voters":
                self.loaded.voters = await self.vote_repository.find_voters(self.ref)
            elif relation == "upvoters":
                self.loaded.upvoters = await self.vote_repository.find_voters(
                    self.ref, upvote=True
                )
            else:
                self.loaded.downvoters = await self.vote_repository.find_voters(
                    self.ref, upvote=False
                )
        return self

    def refresh(self) -> None:
        """Forget fetched relations and cached counts."""
        self.loaded = LoadedRelations()
        self.counts = VoteCounts()

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    async def voters_count(self) -> int:
        """Number of voters, cached after the first call."""
        if self.counts.voters is None:
            self.counts.voters = await self.vote_repository.count_by_voteable(
                self.ref
            )
        return self.counts.voters

    async def upvoters_count(self) -> int:
        """Number of upvoters, cached after the first call."""
        if self.counts.upvoters is None:
            self.counts.upvoters = await self.vote_repository.count_by_voteable(
                self.ref, upvote=True
            )
        return self.counts.upvoters

    async def downvoters_count(self) -> int:
        """Number of downvoters, cached after the first call."""
        if self.counts.downvoters is None:
            self.counts.downvoters = await self.vote_repository.count_by_voteable(
                self.ref, upvote=False
            )
        return self.counts.downvoters

    async def load_counts(self) -> "Voteable":
        """Compute all counts that are not cached yet."""
        await self.voters_count()
        await self.upvoters_count()
        await self.downvoters_count()
        return self

    def _count_for_humans(
        self,
        number: int,
        precision: int,
        mode: RoundingMode,
        divisors: Optional[dict[int, str]],
    ) -> str:
        return format_count(
            number,
            divisors=self.schema.divisors if divisors is None else divisors,
            precision=precision,
            mode=mode,
        )

    async def voters_count_for_humans(
        self,
        precision: int = 1,
        mode: RoundingMode = RoundingMode.HALF_UP,
        divisors: Optional[dict[int, str]] = None,
    ) -> str:
        """Number of voters formatted with a magnitude suffix."""
        return self._count_for_humans(
            await self.voters_count(), precision, mode, divisors
        )

    async def upvoters_count_for_humans(
        self,
        precision: int = 1,
        mode: RoundingMode = RoundingMode.HALF_UP,
        divisors: Optional[dict[int, str]] = None,
    ) -> str:
        """Number of upvoters formatted with a magnitude suffix."""
        return self._count_for_humans(
            await self.upvoters_count(), precision, mode, divisors
        )

    async def downvoters_count_for_humans(
        self,
        precision: int = 1,
        mode: RoundingMode = RoundingMode.HALF_UP,
        divisors: Optional[dict[int, str]] = None,
    ) -> str:
        """Number of downvoters formatted with a magnitude suffix."""
        return self._count_for_humans(
            await self.downvoters_count(), precision, mode, divisors
        )

    # ------------------------------------------------------------------
    # Filter predicates
    # ------------------------------------------------------------------

    def where_voted_by(self, voter: Any) -> ColumnElement[bool]:
        return self.queries.where_voted_by(voter)

    def where_not_voted_by(self, voter: Any) -> ColumnElement[bool]:
        return self.queries.where_not_voted_by(voter)

    def where_upvoted_by(self, voter: Any) -> ColumnElement[bool]:
        return self.queries.where_upvoted_by(voter)

    def where_not_upvoted_by(self, voter: Any) -> ColumnElement[bool]:
        return self.queries.where_not_upvoted_by(voter)

    def where_downvoted_by(self, voter: Any) -> ColumnElement[bool]:
        return self.queries.where_downvoted_by(voter)

    def where_not_downvoted_by(self, voter: Any) -> ColumnElement[bool]:
        return self.queries.where_not_downvoted_by(voter)
