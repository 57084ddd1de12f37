"""Strongly typed identifiers for the vote ledger.

Votes are owned by the ledger and keyed by UUID. Voters and subjects are
host application entities, so their keys take whatever type the host's
tables use.
"""

from typing import NewType, Union
from uuid import UUID

VoteId = NewType("VoteId", UUID)

# Primary key of a registered entity: UUID, integer or string
EntityKey = Union[UUID, int, str]

# Primary key of an entity of the configured voter type
VoterId = EntityKey

# Primary key of any voteable entity (polymorphic)
VoteableId = EntityKey
