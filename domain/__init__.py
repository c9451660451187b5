"""Domain layer - Entities, enums, errors and interfaces."""
from .entities import (
    Connection, Edge, PageInfo, PaginationWindow,
    MatchHistoryEntry, MatchHistoryPage, MatchStats, Player,
    SkillKey, SkillRecord, SpartanSession,
)
from .enums import AuthStep, GrantType
from .exceptions import (
    GatewayError, ConfigurationError, AuthChainError, InvalidCursor,
    InvalidPaginationArgument, UpstreamError, NotFound,
)
from .interfaces import IStatsRepository

__all__ = [
    # Entities
    'Connection',
    'Edge',
    'PageInfo',
    'PaginationWindow',
    'MatchHistoryEntry',
    'MatchHistoryPage',
    'MatchStats',
    'Player',
    'SkillKey',
    'SkillRecord',
    'SpartanSession',
    # Enums
    'AuthStep',
    'GrantType',
    # Errors
    'GatewayError',
    'ConfigurationError',
    'AuthChainError',
    'InvalidCursor',
    'InvalidPaginationArgument',
    'UpstreamError',
    'NotFound',
    # Interfaces
    'IStatsRepository',
]
