"""Domain layer DI providers."""

from dishka import Scope, provide

from voting.domain.repository import VoteRepository
from voting.domain.service import VoteService
from voting.persistence.tables import VoteSchema
from voting.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_vote_service(
        self, vote_repository: VoteRepository, schema: VoteSchema
    ) -> VoteService:
        """Provide vote domain service."""
        return VoteService(vote_repository=vote_repository, schema=schema)
