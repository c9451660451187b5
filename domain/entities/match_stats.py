"""Match stats entities (teams, players, per-team core stats)."""
from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from .match import MatchInfo


@dataclass
class ScoreChange:
    """A medal or personal-score award and how often it was earned."""

    name_id: int
    count: int
    total_personal_score_awarded: int


@dataclass
class CoreStats:
    """Core combat stats, reported per team and per player-on-team."""

    score: int = 0
    personal_score: int = 0
    rounds_won: int = 0
    rounds_lost: int = 0
    rounds_tied: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    kda: float = 0.0
    suicides: int = 0
    betrayals: int = 0
    average_life_duration: str = ""
    grenade_kills: int = 0
    headshot_kills: int = 0
    melee_kills: int = 0
    power_weapon_kills: int = 0
    shots_fired: int = 0
    shots_hit: int = 0
    accuracy: float = 0.0
    damage_dealt: int = 0
    damage_taken: int = 0
    callout_assists: int = 0
    vehicle_destroys: int = 0
    driver_assists: int = 0
    hijacks: int = 0
    emp_assists: int = 0
    max_killing_spree: int = 0
    medals: list[ScoreChange] = field(default_factory=list)
    personal_scores: list[ScoreChange] = field(default_factory=list)
    deprecated_damage_dealt: float = 0.0
    deprecated_damage_taken: float = 0.0
    spawns: int = 0
    objectives_completed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ZonesStats:
    """Stronghold stats. Only present for zone-based modes."""

    captures: int = 0
    defensive_kills: int = 0
    offensive_kills: int = 0
    secures: int = 0
    occupation_time: str = ""
    scoring_ticks: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TeamStats:
    core_stats: CoreStats
    zones_stats: Optional[ZonesStats] = None


@dataclass
class MatchStatsTeam:
    team_id: int
    outcome: int
    rank: int
    stats: TeamStats


@dataclass
class ParticipationInfo:
    first_joined_time: str = ""
    last_leave_time: Optional[str] = None
    present_at_beginning: bool = False
    joined_in_progress: bool = False
    left_in_progress: bool = False
    present_at_completion: bool = False
    time_played: str = ""
    confirmed_participation: Optional[Any] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PlayerTeamStat:
    """A player's stats while on one team (players can switch teams)."""

    team_id: int
    stats: TeamStats


@dataclass
class MatchStatsPlayer:
    """A participant. ``player_id`` is the raw ``xuid(...)`` form for humans."""

    player_id: str
    player_type: int
    last_team_id: int
    outcome: int
    rank: int
    participation_info: ParticipationInfo
    bot_attributes: Optional[Any] = None
    player_team_stats: list[PlayerTeamStat] = field(default_factory=list)

    def stats_for_team(self, team_id: int) -> Optional[PlayerTeamStat]:
        return next((s for s in self.player_team_stats if s.team_id == team_id), None)


@dataclass
class MatchStats:
    match_id: str
    match_info: MatchInfo
    teams: list[MatchStatsTeam] = field(default_factory=list)
    players: list[MatchStatsPlayer] = field(default_factory=list)
