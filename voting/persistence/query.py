"""Query builders for voteable subjects.

Statements are plain SQLAlchemy constructs: they are lazy, can be executed
any number of times and composed into larger queries.

Usage:
    queries = VoteableQueries(schema, "post")

    # Posts the user voted on
    stmt = select(posts_table).where(queries.where_voted_by(user))

    # Upvoters of a post with pivot data
    rows = (await session.execute(queries.upvoters(post.id))).fetchall()
"""

from typing import Any, Optional

from sqlalchemy import ColumnElement, Select, String, and_, cast, select

from voting.domain.value import VoteableId
from voting.persistence.tables import VoteSchema


class VoteableQueries:
    """Relation statements and filter predicates for one subject type."""

    def __init__(self, schema: VoteSchema, subject_type: str) -> None:
        """Initialize queries for a subject type.

        Args:
            schema: Resolved vote schema
            subject_type: Registered type name of the voteable subject

        Raises:
            UnregisteredEntityError: If the subject type is not registered
        """
        self.schema = schema
        self.subject = schema.registry.entity(subject_type)

    @property
    def subject_type(self) -> str:
        """Type discriminator of the subject."""
        return self.subject.type_name

    def votes(self, voteable_id: VoteableId) -> Select:
        """Vote rows of one subject."""
        votes = self.schema.table
        return select(votes).where(
            votes.c.voteable_type == self.subject_type,
            votes.c.voteable_id == voteable_id,
        )

    def voters(self, voteable_id: VoteableId, upvote: Optional[bool] = None) -> Select:
        """Voter rows of one subject, joined through the vote table.

        The vote's direction and timestamps are selected alongside the voter
        columns as ``pivot_upvote``, ``pivot_created_at`` and
        ``pivot_updated_at``.
        """
        votes = self.schema.table
        voters = self.schema.voter.table
        stmt = (
            select(
                voters,
                votes.c.upvote.label("pivot_upvote"),
                votes.c.created_at.label("pivot_created_at"),
                votes.c.updated_at.label("pivot_updated_at"),
            )
            .select_from(
                voters.join(
                    votes,
                    and_(
                        self.schema.voter_key_column == self.schema.voter.key_column,
                        votes.c.voter_type == self.schema.voter_type,
                    ),
                )
            )
            .where(
                votes.c.voteable_type == self.subject_type,
                votes.c.voteable_id == voteable_id,
            )
        )
        if upvote is not None:
            stmt = stmt.where(votes.c.upvote == upvote)
        return stmt

    def upvoters(self, voteable_id: VoteableId) -> Select:
        """Voters who upvoted one subject."""
        return self.voters(voteable_id, upvote=True)

    def downvoters(self, voteable_id: VoteableId) -> Select:
        """Voters who downvoted one subject."""
        return self.voters(voteable_id, upvote=False)

    def _voted_by(self, voter: Any, upvote: Optional[bool]) -> ColumnElement[bool]:
        """EXISTS clause matching subjects with a voter relationship entry.

        The vote and voter tables are aliased so the clause correlates only
        with the subject table of the enclosing query, even when subjects
        are themselves voters.
        """
        votes = self.schema.table.alias()
        voters = self.schema.voter.table.alias()
        voter_key = voters.c[self.schema.voter.key]

        stmt = (
            select(votes.c.id)
            .select_from(
                voters.join(
                    votes,
                    and_(
                        votes.c[self.schema.voter_key] == voter_key,
                        votes.c.voter_type == self.schema.voter_type,
                    ),
                )
            )
            .where(
                votes.c.voteable_type == self.subject_type,
                votes.c.voteable_id == cast(self.subject.key_column, String),
                voter_key == self.schema.registry.key_of(voter),
            )
        )
        if upvote is not None:
            stmt = stmt.where(votes.c.upvote == upvote)
        return stmt.exists()

    def where_voted_by(self, voter: Any) -> ColumnElement[bool]:
        """Subjects the voter voted on."""
        return self._voted_by(voter, None)

    def where_not_voted_by(self, voter: Any) -> ColumnElement[bool]:
        """Subjects the voter did not vote on."""
        return ~self._voted_by(voter, None)

    def where_upvoted_by(self, voter: Any) -> ColumnElement[bool]:
        """Subjects the voter upvoted."""
        return self._voted_by(voter, True)

    def where_not_upvoted_by(self, voter: Any) -> ColumnElement[bool]:
        """Subjects the voter did not upvote."""
        return ~self._voted_by(voter, True)

    def where_downvoted_by(self, voter: Any) -> ColumnElement[bool]:
        """Subjects the voter downvoted."""
        return self._voted_by(voter, False)

    def where_not_downvoted_by(self, voter: Any) -> ColumnElement[bool]:
        """Subjects the voter did not downvote."""
        return ~self._voted_by(voter, False)
