"""Infrastructure layer - API clients and repositories."""
from .api import HaloStatsClient, AuthConfig, IdentityClient
from .repositories import StatsRepository

__all__ = [
    'HaloStatsClient',
    'AuthConfig',
    'IdentityClient',
    'StatsRepository',
]
