"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from dog_matcher.adapters.catalog_client import CatalogClient, HttpxCatalogClient
from dog_matcher.config import Settings, parse_sort_key
from dog_matcher.domain.search import FilterState
from dog_matcher.services.breeds import BreedCatalog
from dog_matcher.services.cache import InMemoryCache
from dog_matcher.services.search import SearchOrchestrator
from dog_matcher.services.session import SearchSession


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_client: CatalogClient
    breed_catalog: BreedCatalog
    session: SearchSession
    close_resources: Callable[[], Awaitable[None]]


def build_session(
    settings: Settings, client: CatalogClient, breed_catalog: BreedCatalog
) -> SearchSession:
    """Create a search session configured from settings."""
    orchestrator = SearchOrchestrator(
        client=client,
        page_size=settings.page_size,
        retry_attempts=settings.search_retry_attempts,
        retry_delay_seconds=settings.retry_delay_seconds,
        debug=settings.debug,
    )
    return SearchSession(
        client=client,
        breed_catalog=breed_catalog,
        orchestrator=orchestrator,
        default_filters=FilterState(sort=parse_sort_key(settings.default_sort)),
        debug=settings.debug,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    catalog_client = HttpxCatalogClient.create(
        base_url=resolved_settings.catalog_api_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    breed_catalog = BreedCatalog(
        client=catalog_client,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.breeds_ttl_seconds,
        retry_attempts=resolved_settings.breeds_retry_attempts,
        retry_delay_seconds=resolved_settings.retry_delay_seconds,
        debug=resolved_settings.debug,
    )
    session = build_session(resolved_settings, catalog_client, breed_catalog)

    async def close_resources() -> None:
        await catalog_client.close()

    return AppContainer(
        settings=resolved_settings,
        catalog_client=catalog_client,
        breed_catalog=breed_catalog,
        session=session,
        close_resources=close_resources,
    )
