"""Infrastructure API module."""
from .halo_client import HaloStatsClient
from .identity_client import AuthConfig, IdentityClient

__all__ = [
    'HaloStatsClient',
    'AuthConfig',
    'IdentityClient',
]
