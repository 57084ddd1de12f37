"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping. The voter key column
name is configurable, so mapping goes through the resolved schema.
"""

from typing import Any, Dict

from voting.domain.model import Vote, VoterPivot
from voting.domain.value import VoteableId, VoteId
from voting.persistence.tables import VoteSchema


def _voteable_id(row: Dict[str, Any], schema: VoteSchema) -> VoteableId:
    """Subject key in the type of the subject's key column."""
    voteable_type = row["voteable_type"]
    if voteable_type not in schema.registry:
        return row["voteable_id"]
    return schema.registry.entity(voteable_type).coerce_key(row["voteable_id"])


def row_to_vote(row: Dict[str, Any], schema: VoteSchema) -> Vote:
    """Convert database row to Vote domain model.

    Args:
        row: Database row as dict
        schema: Resolved vote schema

    Returns:
        Vote domain model
    """
    return Vote(
        id=VoteId(row["id"]),
        voter_type=row["voter_type"],
        voter_id=row[schema.voter_key],
        voteable_type=row["voteable_type"],
        voteable_id=_voteable_id(row, schema),
        upvote=bool(row["upvote"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def vote_to_dict(vote: Vote, schema: VoteSchema) -> Dict[str, Any]:
    """Convert Vote domain model to database dict.

    Args:
        vote: Vote domain model
        schema: Resolved vote schema

    Returns:
        Dict suitable for database insertion/update
    """
    return {
        "id": vote.id,
        "voter_type": vote.voter_type,
        schema.voter_key: vote.voter_id,
        "voteable_type": vote.voteable_type,
        "voteable_id": vote.voteable_id,
        "upvote": vote.upvote,
        "created_at": vote.created_at,
        "updated_at": vote.updated_at,
    }


def row_to_voter_pivot(row: Dict[str, Any], schema: VoteSchema) -> VoterPivot:
    """Convert a vote row to the voter pivot it describes."""
    return VoterPivot(
        voter_id=row[schema.voter_key],
        upvote=bool(row["upvote"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
