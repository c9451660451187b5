"""Match history entities."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class AssetReference:
    """Pointer to a versioned UGC asset (map or game variant)."""

    asset_id: str
    asset_kind: int
    version_id: str

    def to_dict(self) -> dict:
        return {
            'asset_id': self.asset_id,
            'asset_kind': self.asset_kind,
            'version_id': self.version_id,
        }


@dataclass
class MatchInfo:
    """Match metadata shared by the history and stats endpoints."""

    start_time: str
    end_time: str
    duration: str
    playable_duration: str = ""
    clearance_id: str = ""
    game_variant_category: int = 0
    gameplay_interaction: int = 0
    level_id: str = ""
    lifecycle_mode: int = 0
    map_variant: Optional[AssetReference] = None
    ugc_game_variant: Optional[AssetReference] = None
    playlist: Optional[Any] = None
    playlist_experience: Optional[Any] = None
    playlist_map_mode_pair: Optional[Any] = None
    season_id: Optional[Any] = None
    team_scoring_enabled: bool = False
    teams_enabled: bool = False

    def to_dict(self) -> dict:
        return {
            'start_time': self.start_time,
            'end_time': self.end_time,
            'duration': self.duration,
            'playable_duration': self.playable_duration,
            'clearance_id': self.clearance_id,
            'game_variant_category': self.game_variant_category,
            'gameplay_interaction': self.gameplay_interaction,
            'level_id': self.level_id,
            'lifecycle_mode': self.lifecycle_mode,
            'map_variant': self.map_variant.to_dict() if self.map_variant else None,
            'ugc_game_variant': self.ugc_game_variant.to_dict() if self.ugc_game_variant else None,
            'playlist': self.playlist,
            'playlist_experience': self.playlist_experience,
            'playlist_map_mode_pair': self.playlist_map_mode_pair,
            'season_id': self.season_id,
            'team_scoring_enabled': self.team_scoring_enabled,
            'teams_enabled': self.teams_enabled,
        }


@dataclass
class MatchHistoryEntry:
    """One row of a player's match history.

    ``last_team_id``, ``outcome``, ``present_at_end_of_match`` and ``rank``
    describe the requesting player in that match, not the match itself.
    """

    match_id: str
    match_info: MatchInfo
    last_team_id: int = 0
    outcome: int = 0
    present_at_end_of_match: bool = False
    rank: int = 0

    def to_dict(self) -> dict:
        return {
            'id': self.match_id,
            **self.match_info.to_dict(),
            'last_team_id': self.last_team_id,
            'outcome': self.outcome,
            'present_at_end_of_match': self.present_at_end_of_match,
            'rank': self.rank,
        }


@dataclass
class MatchHistoryPage:
    """Offset window returned by the match history endpoint."""

    start: int
    count: int
    result_count: int
    results: list[MatchHistoryEntry] = field(default_factory=list)
