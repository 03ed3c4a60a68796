"""FastAPI dependency providers.

Routes receive their configuration and statistics gateway through
``Depends`` so tests can swap in an in-memory gateway with
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from ..core.config import Config
from ..discover.statistics_gateway import StatisticsGateway, create_gateway


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Process-wide configuration, loaded once."""
    return Config()


def get_gateway(config: Config = Depends(get_config)) -> StatisticsGateway:
    """A fresh PostgreSQL gateway per request, built from explicit settings."""
    return create_gateway(config.connection_settings())
