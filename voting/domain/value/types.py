"""Domain value objects for the vote ledger."""

from decimal import ROUND_HALF_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP
from enum import Enum

from pydantic import field_validator

from voting.domain.value.common import ValueObject
from voting.domain.value.identifiers import VoteableId


class RoundingMode(str, Enum):
    """Rounding applied when formatting counts for humans."""

    HALF_UP = "half_up"  # ties away from zero
    HALF_DOWN = "half_down"  # ties towards zero
    HALF_EVEN = "half_even"  # ties to the even neighbour

    @property
    def decimal_rounding(self) -> str:
        """Equivalent ``decimal`` rounding constant."""
        return {
            RoundingMode.HALF_UP: ROUND_HALF_UP,
            RoundingMode.HALF_DOWN: ROUND_HALF_DOWN,
            RoundingMode.HALF_EVEN: ROUND_HALF_EVEN,
        }[self]


class VoteableRef(ValueObject):
    """Polymorphic reference to a voteable subject.

    Pairs the type discriminator stored in ``voteable_type`` with the key
    stored in ``voteable_id``.
    """

    type: str
    id: VoteableId

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate the discriminator is not empty."""
        if not v:
            raise ValueError("Voteable type must not be empty")
        return v

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"
