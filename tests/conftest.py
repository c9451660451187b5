"""Shared fixtures: an in-memory stats repository and upstream payload factories."""
from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

from domain.entities import (
    CoreStats, Csr, Gamerpic, MatchHistoryEntry, MatchHistoryPage, MatchInfo,
    MatchStats, MatchStatsPlayer, MatchStatsTeam, ParticipationInfo, Player,
    PlayerTeamStat, SkillRecord, StatPerformance, TeamStats, ZonesStats,
)
from domain.exceptions import UpstreamError
from domain.interfaces import IStatsRepository
from infrastructure.api import AuthConfig


# ── Domain builders ────────────────────────────────────────────────────

def match_info() -> MatchInfo:
    return MatchInfo(start_time="2022-01-01T00:00:00Z", end_time="2022-01-01T00:10:00Z", duration="PT10M")


def history_entry(match_id: str) -> MatchHistoryEntry:
    return MatchHistoryEntry(match_id=match_id, match_info=match_info(), last_team_id=0, outcome=2, rank=1)


def match_stats(match_id: str, humans: Sequence[str] = ("1", "2"), bots: Sequence[str] = ()) -> MatchStats:
    """Two teams; humans go to team 0, bots to team 1."""
    players = [
        MatchStatsPlayer(
            player_id=f"xuid({xuid})",
            player_type=1,
            last_team_id=0,
            outcome=2,
            rank=i + 1,
            participation_info=ParticipationInfo(present_at_completion=True),
            player_team_stats=[PlayerTeamStat(team_id=0, stats=TeamStats(core_stats=CoreStats(kills=10 + i)))],
        )
        for i, xuid in enumerate(humans)
    ]
    players += [
        MatchStatsPlayer(
            player_id=f"bid({bot})",
            player_type=2,
            last_team_id=1,
            outcome=3,
            rank=len(humans) + i + 1,
            participation_info=ParticipationInfo(),
            bot_attributes={"Difficulty": 2},
            player_team_stats=[PlayerTeamStat(team_id=1, stats=TeamStats(core_stats=CoreStats(kills=1)))],
        )
        for i, bot in enumerate(bots)
    ]
    teams = [
        MatchStatsTeam(team_id=0, outcome=2, rank=1, stats=TeamStats(
            core_stats=CoreStats(score=50, kills=sum(10 + i for i in range(len(humans)))),
            zones_stats=ZonesStats(captures=3),
        )),
        MatchStatsTeam(team_id=1, outcome=3, rank=2, stats=TeamStats(core_stats=CoreStats(score=20))),
    ]
    return MatchStats(match_id=match_id, match_info=match_info(), teams=teams, players=players)


def skill_record(player_id: str, csr: int = 1200, expected_kills: float = 12.5, result_code: int = 0) -> SkillRecord:
    return SkillRecord(
        player_id=player_id,
        result_code=result_code,
        pre_match_csr=Csr(value=csr, tier="Diamond"),
        post_match_csr=Csr(value=csr + 10, tier="Diamond"),
        kills=StatPerformance(count=14, expected=expected_kills, std_dev=3.0),
        deaths=StatPerformance(count=9, expected=11.0, std_dev=2.5),
    )


SkillSource = Union[List[SkillRecord], Exception, Callable[[Sequence[str]], List[SkillRecord]]]


class FakeStatsRepository(IStatsRepository):
    """In-memory repository recording every call it receives."""

    def __init__(
        self,
        history: Optional[List[MatchHistoryEntry]] = None,
        stats: Optional[Dict[str, Union[MatchStats, Exception]]] = None,
        skill: Optional[Dict[str, SkillSource]] = None,
        players: Optional[Dict[str, Player]] = None,
    ):
        self.history = history or []
        self.stats = stats or {}
        self.skill = skill or {}
        self.players = players or {}
        self.calls: Dict[str, List[Any]] = defaultdict(list)

    async def get_match_history(self, xuid: str, start: int, count: int) -> MatchHistoryPage:
        self.calls["history"].append((xuid, start, count))
        rows = self.history[start:start + count]
        return MatchHistoryPage(start=start, count=len(rows), result_count=len(rows), results=rows)

    async def get_match_stats(self, match_id: str) -> MatchStats:
        self.calls["stats"].append(match_id)
        await asyncio.sleep(0)
        value = self.stats[match_id]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_skill(self, match_id: str, player_ids: Sequence[str]) -> List[SkillRecord]:
        self.calls["skill"].append((match_id, list(player_ids)))
        await asyncio.sleep(0)
        source = self.skill.get(match_id)
        if source is None:
            return [skill_record(p, csr=1000 + i) for i, p in enumerate(player_ids)]
        if isinstance(source, Exception):
            raise source
        if callable(source):
            return source(player_ids)
        return list(source)

    async def get_player(self, gamertag: str) -> Player:
        self.calls["player"].append(gamertag)
        if gamertag not in self.players:
            raise UpstreamError("profile", "HTTP 404", status_code=404)
        return self.players[gamertag]


@pytest.fixture
def make_repo() -> Callable[..., FakeStatsRepository]:
    return FakeStatsRepository


@pytest.fixture
def player() -> Player:
    return Player(xuid="2533274800000001", gamertag="Chief", gamerpic=Gamerpic(small="s.png"))


# ── Upstream payloads ──────────────────────────────────────────────────

def _iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).strftime("%Y-%m-%dT%H:%M:%S.%f0Z")


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(
        base_url="https://login.example.test/oauth20_authorize.srf",
        token_url="https://login.example.test/oauth20_token.srf",
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="https://localhost/callback",
        xbox_auth_url="https://user.example.test/user/authenticate",
        xbox_xsts_url="https://xsts.example.test/xsts/authorize",
        spartan_token_url="https://settings.example.test/spartan-token",
    )


@pytest.fixture
def oauth_payload() -> Dict[str, Any]:
    return {
        "token_type": "bearer",
        "expires_in": 3600,
        "scope": "Xboxlive.signin Xboxlive.offline_access",
        "access_token": "access-1",
        "refresh_token": "refresh-2",
        "user_id": "user-1",
    }


@pytest.fixture
def ticket_payload() -> Callable[..., Dict[str, Any]]:
    def build(token: str, expired: bool = False) -> Dict[str, Any]:
        return {
            "IssueInstant": _iso(timedelta(hours=-1)),
            "NotAfter": _iso(timedelta(hours=-1 if expired else 12)),
            "Token": token,
            "DisplayClaims": {"xui": [{"uhs": "1234"}]},
        }
    return build


@pytest.fixture
def spartan_payload() -> Callable[..., Dict[str, Any]]:
    def build(token: str = "spartan-1", expired: bool = False) -> Dict[str, Any]:
        return {
            "SpartanToken": token,
            "ExpiresUtc": {"ISO8601Date": _iso(timedelta(hours=-1 if expired else 4))},
            "TokenDuration": "PT4H",
        }
    return build


@pytest.fixture
def stats_payload() -> Dict[str, Any]:
    return {
        "MatchId": "m-1",
        "MatchInfo": {"StartTime": "2022-01-01T00:00:00Z", "EndTime": "2022-01-01T00:10:00Z", "Duration": "PT10M",
                      "MapVariant": {"AssetId": "map-1", "AssetKind": 2, "VersionId": "v-1"}},
        "Teams": [
            {"TeamId": 0, "Outcome": 2, "Rank": 1, "Stats": {
                "CoreStats": {"Score": 50, "Kills": 25, "Medals": [{"NameId": 7, "Count": 2, "TotalPersonalScoreAwarded": 100}]},
                "ZonesStats": {"StrongholdCaptures": 4, "StrongholdOccupationTime": "PT3M"},
            }},
            {"TeamId": 1, "Outcome": 3, "Rank": 2, "Stats": {"CoreStats": {"Score": 30, "Kills": 20}}},
        ],
        "Players": [
            {"PlayerId": "xuid(111)", "PlayerType": 1, "LastTeamId": 0, "Outcome": 2, "Rank": 1,
             "ParticipationInfo": {"FirstJoinedTime": "2022-01-01T00:00:00Z", "PresentAtCompletion": True},
             "PlayerTeamStats": [{"TeamId": 0, "Stats": {"CoreStats": {"Kills": 15, "KDA": 1.5}}}]},
            {"PlayerId": "bid(1.0.0)", "PlayerType": 2, "LastTeamId": 1, "Outcome": 3, "Rank": 2,
             "BotAttributes": {"Difficulty": 2},
             "ParticipationInfo": {},
             "PlayerTeamStats": [{"TeamId": 1, "Stats": {"CoreStats": {"Kills": 3}}}]},
        ],
    }


@pytest.fixture
def skill_row() -> Callable[..., Dict[str, Any]]:
    def build(xuid: Optional[str], csr: int = 1450, result_code: int = 0) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "ResultCode": result_code,
            "Result": {
                "TeamId": 0,
                "TeamMmr": 1300.5,
                "TeamMmrs": {"0": 1300.5, "1": 1280.0},
                "RankRecap": {
                    "PreMatchCsr": {"Value": csr, "Tier": "Diamond", "SubTier": 2},
                    "PostMatchCsr": {"Value": csr + 12, "Tier": "Diamond", "SubTier": 2},
                },
                "StatPerformances": {
                    "Kills": {"Count": 15, "Expected": 13.2, "StdDev": 4.1},
                    "Deaths": {"Count": 10, "Expected": 12.8, "StdDev": 3.9},
                },
                "Counterfactuals": {
                    "SelfCounterfactuals": {"Kills": 13.2, "Deaths": 12.8},
                    "TierCounterfactuals": {"Gold": {"Kills": 10.0, "Deaths": 14.0}},
                },
            },
        }
        if xuid is not None:
            row["Id"] = f"xuid({xuid})"
        return row
    return build
