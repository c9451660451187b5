"""Projections of one match-stats response into team and player records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from domain.entities import (
    CoreStats, MatchStats, ParticipationInfo, SkillKey, ZonesStats, bare_xuid,
)


@dataclass
class TeamPlayer:
    """A player's stats while on a given team."""

    player_id: str
    stats: CoreStats
    stronghold: Optional[ZonesStats] = None

    def to_dict(self) -> dict:
        return {
            'player_id': self.player_id,
            **self.stats.to_dict(),
            'stronghold_stats': self.stronghold.to_dict() if self.stronghold else None,
        }


@dataclass
class TeamProjection:
    team_id: int
    rank: int
    outcome: int
    stats: CoreStats
    stronghold: Optional[ZonesStats] = None
    players: List[TeamPlayer] = field(default_factory=list)


@dataclass
class PlayerProjection:
    """One participant of a match, keyed for skill lookups."""

    match_id: str
    player_id: str
    player_type: int
    last_team_id: int
    outcome: int
    rank: int
    participation: ParticipationInfo
    bot_attributes: Optional[Any] = None

    @property
    def is_human(self) -> bool:
        return self.bot_attributes is None

    @property
    def skill_key(self) -> SkillKey:
        return SkillKey.for_player(self.player_id, self.match_id)

    def to_dict(self) -> dict:
        return {
            'match_id': self.match_id,
            'player_id': self.player_id,
            'player_type': self.player_type,
            'bot_attributes': self.bot_attributes,
            'last_team_id': self.last_team_id,
            'outcome': self.outcome,
            'rank': self.rank,
            **self.participation.to_dict(),
        }


def team_projections(stats: MatchStats) -> List[TeamProjection]:
    """Teams in response order, each with the players who played for it."""
    teams = []
    for team in stats.teams:
        roster = []
        for player in stats.players:
            team_stat = player.stats_for_team(team.team_id)
            if team_stat is None:
                continue
            roster.append(TeamPlayer(
                player_id=bare_xuid(player.player_id),
                stats=team_stat.stats.core_stats,
                stronghold=team_stat.stats.zones_stats,
            ))
        teams.append(TeamProjection(
            team_id=team.team_id,
            rank=team.rank,
            outcome=team.outcome,
            stats=team.stats.core_stats,
            stronghold=team.stats.zones_stats,
            players=roster,
        ))
    return teams


def player_projections(stats: MatchStats) -> List[PlayerProjection]:
    return [
        PlayerProjection(
            match_id=stats.match_id,
            player_id=bare_xuid(p.player_id),
            player_type=p.player_type,
            last_team_id=p.last_team_id,
            outcome=p.outcome,
            rank=p.rank,
            participation=p.participation_info,
            bot_attributes=p.bot_attributes,
        )
        for p in stats.players
    ]
