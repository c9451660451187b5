"""Stats repository implementation."""
import logging
from typing import Any, Dict, List, Optional, Sequence

from domain.entities import (
    AssetReference, CoreStats, Csr, Gamerpic, KillsDeaths, MatchHistoryEntry,
    MatchHistoryPage, MatchInfo, MatchStats, MatchStatsPlayer, MatchStatsTeam,
    ParticipationInfo, Player, PlayerTeamStat, ScoreChange, SkillRecord,
    StatPerformance, TeamStats, ZonesStats, bare_xuid,
)
from domain.exceptions import UpstreamError
from domain.interfaces import IStatsRepository
from infrastructure.api import HaloStatsClient

logger = logging.getLogger(__name__)

TIERS = ('Bronze', 'Silver', 'Gold', 'Platinum', 'Diamond', 'Onyx')


class StatsRepository(IStatsRepository):
    """Repository for match, skill and profile data using the Halo API."""

    def __init__(self, api_client: HaloStatsClient):
        """
        Initialize stats repository.

        Args:
            api_client: Halo stats client bound to the caller's spartan token
        """
        self.api_client = api_client

    async def get_match_history(self, xuid: str, start: int, count: int) -> MatchHistoryPage:
        data = await self.api_client.get_matches(xuid, start, count)
        return self._parse(self._parse_history_page, data, "matches")

    async def get_match_stats(self, match_id: str) -> MatchStats:
        data = await self.api_client.get_match_stats(match_id)
        return self._parse(self._parse_match_stats, data, "match_stats")

    async def get_skill(self, match_id: str, player_ids: Sequence[str]) -> List[SkillRecord]:
        """
        Get skill rows for several players of one match.

        Rows come back in the service's order; they are not re-attributed
        here. ``SkillRecord.player_id`` is taken from the row's own ``Id``
        and is empty when the service omits it.
        """
        rows = await self.api_client.get_skill(match_id, [bare_xuid(p) for p in player_ids])
        return [self._parse(self._parse_skill, row, "skill") for row in rows]

    async def get_player(self, gamertag: str) -> Player:
        data = await self.api_client.get_profile(gamertag)
        return self._parse(self._parse_player, data, "profile")

    @staticmethod
    def _parse(parser, data: Any, resource: str):
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Error parsing {resource} response: {e!r}")
            raise UpstreamError(resource, f"unexpected response shape: {e!r}") from e

    # ── Match history ──────────────────────────────────────────────────

    def _parse_history_page(self, data: Dict[str, Any]) -> MatchHistoryPage:
        results = [self._parse_history_entry(r) for r in data.get('Results', [])]
        return MatchHistoryPage(
            start=data.get('Start', 0),
            count=data.get('Count', len(results)),
            result_count=data.get('ResultCount', len(results)),
            results=results,
        )

    def _parse_history_entry(self, data: Dict[str, Any]) -> MatchHistoryEntry:
        return MatchHistoryEntry(
            match_id=data['MatchId'],
            match_info=self._parse_match_info(data.get('MatchInfo', {})),
            last_team_id=data.get('LastTeamId', 0),
            outcome=data.get('Outcome', 0),
            present_at_end_of_match=data.get('PresentAtEndOfMatch', False),
            rank=data.get('Rank', 0),
        )

    def _parse_asset(self, data: Optional[Dict[str, Any]]) -> Optional[AssetReference]:
        if not data:
            return None
        return AssetReference(
            asset_id=data.get('AssetId', ''),
            asset_kind=data.get('AssetKind', 0),
            version_id=data.get('VersionId', ''),
        )

    def _parse_match_info(self, data: Dict[str, Any]) -> MatchInfo:
        return MatchInfo(
            start_time=data.get('StartTime', ''),
            end_time=data.get('EndTime', ''),
            duration=data.get('Duration', ''),
            playable_duration=data.get('PlayableDuration', ''),
            clearance_id=data.get('ClearanceId', ''),
            game_variant_category=data.get('GameVariantCategory', 0),
            gameplay_interaction=data.get('GameplayInteraction', 0),
            level_id=data.get('LevelId', ''),
            lifecycle_mode=data.get('LifecycleMode', 0),
            map_variant=self._parse_asset(data.get('MapVariant')),
            ugc_game_variant=self._parse_asset(data.get('UgcGameVariant')),
            playlist=data.get('Playlist'),
            playlist_experience=data.get('PlaylistExperience'),
            playlist_map_mode_pair=data.get('PlaylistMapModePair'),
            season_id=data.get('SeasonId'),
            team_scoring_enabled=data.get('TeamScoringEnabled', False),
            teams_enabled=data.get('TeamsEnabled', False),
        )

    # ── Match stats ────────────────────────────────────────────────────

    def _parse_match_stats(self, data: Dict[str, Any]) -> MatchStats:
        return MatchStats(
            match_id=data['MatchId'],
            match_info=self._parse_match_info(data.get('MatchInfo', {})),
            teams=[self._parse_team(t) for t in data.get('Teams', [])],
            players=[self._parse_match_player(p) for p in data.get('Players', [])],
        )

    def _parse_team(self, data: Dict[str, Any]) -> MatchStatsTeam:
        return MatchStatsTeam(
            team_id=data['TeamId'],
            outcome=data.get('Outcome', 0),
            rank=data.get('Rank', 0),
            stats=self._parse_team_stats(data.get('Stats', {})),
        )

    def _parse_match_player(self, data: Dict[str, Any]) -> MatchStatsPlayer:
        info = data.get('ParticipationInfo', {})
        return MatchStatsPlayer(
            player_id=data['PlayerId'],
            player_type=data.get('PlayerType', 0),
            last_team_id=data.get('LastTeamId', 0),
            outcome=data.get('Outcome', 0),
            rank=data.get('Rank', 0),
            bot_attributes=data.get('BotAttributes'),
            participation_info=ParticipationInfo(
                first_joined_time=info.get('FirstJoinedTime', ''),
                last_leave_time=info.get('LastLeaveTime'),
                present_at_beginning=info.get('PresentAtBeginning', False),
                joined_in_progress=info.get('JoinedInProgress', False),
                left_in_progress=info.get('LeftInProgress', False),
                present_at_completion=info.get('PresentAtCompletion', False),
                time_played=info.get('TimePlayed', ''),
                confirmed_participation=info.get('ConfirmedParticipation'),
            ),
            player_team_stats=[
                PlayerTeamStat(team_id=s['TeamId'], stats=self._parse_team_stats(s.get('Stats', {})))
                for s in data.get('PlayerTeamStats', [])
            ],
        )

    def _parse_team_stats(self, data: Dict[str, Any]) -> TeamStats:
        zones = data.get('ZonesStats')
        return TeamStats(
            core_stats=self._parse_core_stats(data.get('CoreStats', {})),
            zones_stats=ZonesStats(
                captures=zones.get('StrongholdCaptures', 0),
                defensive_kills=zones.get('StrongholdDefensiveKills', 0),
                offensive_kills=zones.get('StrongholdOffensiveKills', 0),
                secures=zones.get('StrongholdSecures', 0),
                occupation_time=zones.get('StrongholdOccupationTime', ''),
                scoring_ticks=zones.get('StrongholdScoringTicks', 0),
            ) if zones else None,
        )

    def _parse_score_changes(self, rows: List[Dict[str, Any]]) -> List[ScoreChange]:
        return [
            ScoreChange(
                name_id=r.get('NameId', 0),
                count=r.get('Count', 0),
                total_personal_score_awarded=r.get('TotalPersonalScoreAwarded', 0),
            )
            for r in rows
        ]

    def _parse_core_stats(self, data: Dict[str, Any]) -> CoreStats:
        return CoreStats(
            score=data.get('Score', 0),
            personal_score=data.get('PersonalScore', 0),
            rounds_won=data.get('RoundsWon', 0),
            rounds_lost=data.get('RoundsLost', 0),
            rounds_tied=data.get('RoundsTied', 0),
            kills=data.get('Kills', 0),
            deaths=data.get('Deaths', 0),
            assists=data.get('Assists', 0),
            kda=data.get('KDA', 0.0),
            suicides=data.get('Suicides', 0),
            betrayals=data.get('Betrayals', 0),
            average_life_duration=data.get('AverageLifeDuration', ''),
            grenade_kills=data.get('GrenadeKills', 0),
            headshot_kills=data.get('HeadshotKills', 0),
            melee_kills=data.get('MeleeKills', 0),
            power_weapon_kills=data.get('PowerWeaponKills', 0),
            shots_fired=data.get('ShotsFired', 0),
            shots_hit=data.get('ShotsHit', 0),
            accuracy=data.get('Accuracy', 0.0),
            damage_dealt=data.get('DamageDealt', 0),
            damage_taken=data.get('DamageTaken', 0),
            callout_assists=data.get('CalloutAssists', 0),
            vehicle_destroys=data.get('VehicleDestroys', 0),
            driver_assists=data.get('DriverAssists', 0),
            hijacks=data.get('Hijacks', 0),
            emp_assists=data.get('EmpAssists', 0),
            max_killing_spree=data.get('MaxKillingSpree', 0),
            medals=self._parse_score_changes(data.get('Medals', [])),
            personal_scores=self._parse_score_changes(data.get('PersonalScores', [])),
            deprecated_damage_dealt=data.get('DeprecatedDamageDealt', 0.0),
            deprecated_damage_taken=data.get('DeprecatedDamageTaken', 0.0),
            spawns=data.get('Spawns', 0),
            objectives_completed=data.get('ObjectivesCompleted', 0),
        )

    # ── Skill ──────────────────────────────────────────────────────────

    def _parse_csr(self, data: Optional[Dict[str, Any]]) -> Csr:
        data = data or {}
        return Csr(
            value=data.get('Value', 0),
            measurement_matches_remaining=data.get('MeasurementMatchesRemaining', 0),
            tier=data.get('Tier', ''),
            tier_start=data.get('TierStart', 0),
            sub_tier=data.get('SubTier', 0),
            next_tier=data.get('NextTier', ''),
            next_tier_start=data.get('NextTierStart', 0),
            next_sub_tier=data.get('NextSubTier', 0),
            initial_measurement_matches=data.get('InitialMeasurementMatches', 0),
        )

    def _parse_performance(self, data: Optional[Dict[str, Any]]) -> Optional[StatPerformance]:
        if not data:
            return None
        return StatPerformance(
            count=data.get('Count', 0),
            expected=data.get('Expected', 0.0),
            std_dev=data.get('StdDev', 0.0),
        )

    def _parse_kills_deaths(self, data: Optional[Dict[str, Any]]) -> KillsDeaths:
        data = data or {}
        return KillsDeaths(kills=data.get('Kills', 0.0), deaths=data.get('Deaths', 0.0))

    def _parse_skill(self, data: Dict[str, Any]) -> SkillRecord:
        result = data.get('Result') or {}
        recap = result.get('RankRecap') or {}
        performances = result.get('StatPerformances') or {}
        counterfactuals = result.get('Counterfactuals') or {}
        tiers = counterfactuals.get('TierCounterfactuals') or {}
        return SkillRecord(
            player_id=bare_xuid(data.get('Id') or ''),
            result_code=data.get('ResultCode', 0),
            team_id=result.get('TeamId', 0),
            team_mmr=result.get('TeamMmr', 0.0),
            pre_match_csr=self._parse_csr(recap.get('PreMatchCsr')),
            post_match_csr=self._parse_csr(recap.get('PostMatchCsr')),
            kills=self._parse_performance(performances.get('Kills')),
            deaths=self._parse_performance(performances.get('Deaths')),
            team_mmrs=dict(result.get('TeamMmrs') or {}),
            self_counterfactuals=(
                self._parse_kills_deaths(counterfactuals['SelfCounterfactuals'])
                if counterfactuals.get('SelfCounterfactuals') else None
            ),
            tier_counterfactuals={
                tier.lower(): self._parse_kills_deaths(tiers[tier]) for tier in TIERS if tier in tiers
            },
        )

    # ── Profile ────────────────────────────────────────────────────────

    def _parse_player(self, data: Dict[str, Any]) -> Player:
        pic = data.get('gamerpic') or {}
        return Player(
            xuid=data['xuid'],
            gamertag=data['gamertag'],
            gamerpic=Gamerpic(
                small=pic.get('small', ''),
                medium=pic.get('medium', ''),
                large=pic.get('large', ''),
                xlarge=pic.get('xlarge', ''),
            ),
        )
