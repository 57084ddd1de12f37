"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from voting.config import Settings, VoteSettings
from voting.persistence.registry import EntityRegistry, get_registry
from voting.persistence.tables import VoteSchema
from voting.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    The vote schema is resolved once per container, against the process-wide
    entity registry the host application registered its entities in.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_vote_settings(self, settings: Settings) -> VoteSettings:
        """Provide vote settings."""
        return settings.vote

    @provide(scope=Scope.APP)
    def provide_registry(self) -> EntityRegistry:
        """Provide the entity registry."""
        return get_registry()

    @provide(scope=Scope.APP)
    def provide_vote_schema(
        self, vote_settings: VoteSettings, registry: EntityRegistry
    ) -> VoteSchema:
        """Provide the resolved vote schema.

        Raises:
            ConfigurationError: If the vote settings cannot be resolved
        """
        return VoteSchema.build(vote_settings, registry)
