"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class UnregisteredEntityError(DomainError):
    """Raised when an entity or type name is not known to the entity registry."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"Entity is not registered: {entity}")


class InvalidVoterError(DomainError):
    """Raised when a vote is cast by an entity that is not of the voter type."""

    def __init__(self, voter_type: str, expected_type: str):
        self.voter_type = voter_type
        self.expected_type = expected_type
        super().__init__(
            f"Entity of type {voter_type} cannot vote, expected {expected_type}"
        )
