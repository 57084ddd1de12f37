"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from voting.config import Settings
from voting.util.di import PROVIDERS, get_provider
from voting.util.logging import setup_logging
from voting.util.observability import configure_logfire


def create_container() -> AsyncContainer:
    """Build production container (all prod implementations).

    Settings are loaded from environment variables automatically. Entities
    must be registered in the entity registry before the vote schema is
    first requested.

    Returns:
        Configured DI container with production providers
    """
    # Get provider instances - all are instantiated without arguments
    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*provider_instances)


def bootstrap() -> AsyncContainer:
    """Configure logging and observability, then build the container.

    Uses the same environment the container's settings are loaded from.

    Returns:
        Configured DI container with production providers
    """
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)
    return create_container()
