"""Repository interfaces for upstream data access."""
from abc import ABC, abstractmethod
from typing import List, Sequence
from ..entities import MatchHistoryPage, MatchStats, Player, SkillRecord


class IStatsRepository(ABC):
    """Interface for the Halo stats, skill and profile services."""

    @abstractmethod
    async def get_match_history(self, xuid: str, start: int, count: int) -> MatchHistoryPage:
        """Get an offset window of a player's matches, most recent first."""
        pass

    @abstractmethod
    async def get_match_stats(self, match_id: str) -> MatchStats:
        """Get teams, players and core stats of one match."""
        pass

    @abstractmethod
    async def get_skill(self, match_id: str, player_ids: Sequence[str]) -> List[SkillRecord]:
        """Get skill rows for several players of one match in one call."""
        pass

    @abstractmethod
    async def get_player(self, gamertag: str) -> Player:
        """Resolve a gamertag to a profile."""
        pass
