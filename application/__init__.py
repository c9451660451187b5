"""Application layer - Services and use cases."""
from .services import CredentialChain, SkillBatchLoader
from .use_cases import PlayerQuery, PlayerQueryResolver, QueryContext

__all__ = [
    'CredentialChain',
    'SkillBatchLoader',
    'PlayerQuery',
    'PlayerQueryResolver',
    'QueryContext',
]
