"""Provider layer - football data providers.

This is the SINGLE place where provider adapters are registered.
ProviderRegistry.from_credentials() builds adapters from PROVIDER_FACTORIES,
so no other code branches on a provider name.

Adding a new provider:
1. Create provider module (providers/newprovider/) with a client and a
   FootballProvider subclass
2. Add a factory here and list it in PROVIDER_FACTORIES
3. Add its env defaults to config.PROVIDER_DEFAULTS
"""

from collections.abc import Callable

import httpx

from matchrank.config import Config
from matchrank.core import FootballProvider, ProviderCredential
from matchrank.providers.api_football import APIFootballClient, APIFootballProvider
from matchrank.providers.apifootball_com import APIFootballComClient, APIFootballComProvider
from matchrank.providers.football_data import FootballDataClient, FootballDataProvider
from matchrank.providers.registry import ProviderEntry, ProviderPass, ProviderRegistry
from matchrank.providers.soccersapi import SoccersAPIClient, SoccersAPIProvider
from matchrank.providers.tsdb import CURATED_LEAGUES, TSDBClient, TSDBProvider

ProviderFactory = Callable[[ProviderCredential, httpx.BaseTransport | None], FootballProvider]

# =============================================================================
# PROVIDER FACTORY FUNCTIONS
# =============================================================================
# Factories receive the credential and an optional transport (tests inject
# httpx.MockTransport here).


def _create_football_data_provider(
    credential: ProviderCredential, transport: httpx.BaseTransport | None = None
) -> FootballDataProvider:
    client = FootballDataClient(
        credential.base_url,
        credential.api_key,
        timeout=Config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
    return FootballDataProvider(client)


def _create_api_football_provider(
    credential: ProviderCredential, transport: httpx.BaseTransport | None = None
) -> APIFootballProvider:
    client = APIFootballClient(
        credential.base_url,
        credential.api_key,
        timeout=Config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
    return APIFootballProvider(client)


def _create_apifootball_com_provider(
    credential: ProviderCredential, transport: httpx.BaseTransport | None = None
) -> APIFootballComProvider:
    client = APIFootballComClient(
        credential.base_url,
        credential.api_key,
        timeout=Config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
    return APIFootballComProvider(client)


def _create_soccersapi_provider(
    credential: ProviderCredential, transport: httpx.BaseTransport | None = None
) -> SoccersAPIProvider:
    client = SoccersAPIClient(
        credential.base_url,
        credential.api_key,
        timeout=Config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
        username=credential.username,
    )
    return SoccersAPIProvider(client)


def _create_tsdb_provider(
    credential: ProviderCredential, transport: httpx.BaseTransport | None = None
) -> TSDBProvider:
    client = TSDBClient(
        base_url=credential.base_url,
        api_key=credential.api_key or None,
        timeout=Config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
    return TSDBProvider(client)


# =============================================================================
# PROVIDER REGISTRATION
# =============================================================================
# Priority comes from the credential store (lower = tried first).
# FREE_PROVIDER_NAME is never part of the ordered list; it is the last resort.

PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "football_data": _create_football_data_provider,
    "api_football": _create_api_football_provider,
    "apifootball_com": _create_apifootball_com_provider,
    "soccersapi": _create_soccersapi_provider,
    "tsdb": _create_tsdb_provider,
}

FREE_PROVIDER_NAME = "tsdb"


def build_registry(
    credential_source,
    transport: httpx.BaseTransport | None = None,
    **kwargs,
) -> ProviderRegistry:
    """Create a ProviderRegistry from a credential store using PROVIDER_FACTORIES."""
    kwargs.setdefault("health_ttl_seconds", Config.PROVIDER_HEALTH_TTL_SECONDS)
    return ProviderRegistry.from_credentials(
        credential_source,
        PROVIDER_FACTORIES,
        free_provider=FREE_PROVIDER_NAME,
        transport=transport,
        **kwargs,
    )


__all__ = [
    "build_registry",
    "CURATED_LEAGUES",
    "FREE_PROVIDER_NAME",
    "PROVIDER_FACTORIES",
    "APIFootballClient",
    "APIFootballComClient",
    "APIFootballComProvider",
    "APIFootballProvider",
    "FootballDataClient",
    "FootballDataProvider",
    "ProviderEntry",
    "ProviderFactory",
    "ProviderPass",
    "ProviderRegistry",
    "SoccersAPIClient",
    "SoccersAPIProvider",
    "TSDBClient",
    "TSDBProvider",
]
