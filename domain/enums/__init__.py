"""Domain enumerations."""
from .auth_step import AuthStep
from .grant_type import GrantType

__all__ = [
    'AuthStep',
    'GrantType',
]
