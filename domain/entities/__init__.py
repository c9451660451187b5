"""Domain entities."""
from .connection import Connection, Edge, PageInfo, PaginationWindow
from .match import AssetReference, MatchInfo, MatchHistoryEntry, MatchHistoryPage
from .match_stats import (
    CoreStats, MatchStats, MatchStatsPlayer, MatchStatsTeam, ParticipationInfo,
    PlayerTeamStat, ScoreChange, TeamStats, ZonesStats,
)
from .player import Gamerpic, Player
from .skill import Csr, KillsDeaths, SkillKey, SkillRecord, StatPerformance, bare_xuid
from .tokens import (
    AuthToken, SecurityToken, ServiceToken, SpartanSession, UserToken, XboxTicket,
    parse_instant,
)

__all__ = [
    # Pagination
    'Connection',
    'Edge',
    'PageInfo',
    'PaginationWindow',
    # Match history
    'AssetReference',
    'MatchInfo',
    'MatchHistoryEntry',
    'MatchHistoryPage',
    # Match stats
    'CoreStats',
    'MatchStats',
    'MatchStatsPlayer',
    'MatchStatsTeam',
    'ParticipationInfo',
    'PlayerTeamStat',
    'ScoreChange',
    'TeamStats',
    'ZonesStats',
    # Player
    'Gamerpic',
    'Player',
    # Skill
    'Csr',
    'KillsDeaths',
    'SkillKey',
    'SkillRecord',
    'StatPerformance',
    'bare_xuid',
    # Tokens
    'AuthToken',
    'SecurityToken',
    'ServiceToken',
    'SpartanSession',
    'UserToken',
    'XboxTicket',
    'parse_instant',
]
