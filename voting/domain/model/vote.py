"""Vote entity.

A vote records which voter cast which directional (up/down) vote on which
voteable subject. Voter and subject are both polymorphic references: a type
discriminator stored alongside the key.
"""

from datetime import datetime

from pydantic import Field

from voting.domain.model.common import DomainModel
from voting.domain.value import VoteableId, VoteableRef, VoteId, VoterId


class Vote(DomainModel):
    """Vote entity.

    Business rules:
    - One vote per voter per subject (enforced by database unique constraint)
    - Direction may flip by updating the row, never by adding a second one
    - Retracting a vote deletes the row
    """

    id: VoteId
    voter_type: str
    voter_id: VoterId
    voteable_type: str
    voteable_id: VoteableId
    upvote: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def voteable(self) -> VoteableRef:
        """Reference to the voted subject."""
        return VoteableRef(type=self.voteable_type, id=self.voteable_id)

    def is_by(self, voter_id: VoterId, upvote: bool | None = None) -> bool:
        """Whether this vote was cast by the voter, optionally in a direction."""
        if self.voter_id != voter_id:
            return False
        return upvote is None or self.upvote is upvote


class VoterPivot(DomainModel):
    """A voter key together with the pivot data of its vote."""

    voter_id: VoterId
    upvote: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_vote(cls, vote: Vote) -> "VoterPivot":
        """Build the pivot entry for a vote row."""
        return cls(
            voter_id=vote.voter_id,
            upvote=vote.upvote,
            created_at=vote.created_at,
            updated_at=vote.updated_at,
        )
