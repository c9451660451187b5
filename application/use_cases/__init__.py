"""Application use cases."""
from .resolve_player_query import (
    PageArgs, PlayerQuery, PlayerQueryResolver, QueryContext, QueryError, SkillSummary,
)

__all__ = [
    'PageArgs',
    'PlayerQuery',
    'PlayerQueryResolver',
    'QueryContext',
    'QueryError',
    'SkillSummary',
]
