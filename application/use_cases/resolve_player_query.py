"""Use case resolving a player query tree with per-query batching."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.logging import context as log_context, get_logger, new_query_id
from domain.entities import Connection, Csr, MatchHistoryEntry, MatchStats, Player
from domain.exceptions import GatewayError, NotFound
from domain.interfaces import IStatsRepository
from application.services.aggregator import (
    PlayerProjection, TeamProjection, player_projections, team_projections,
)
from application.services.cursor_paginator import paginate, paginate_sequence
from application.services.skill_batch_loader import SkillBatchLoader

logger = get_logger(__name__, service="query")


@dataclass
class PageArgs:
    after: Optional[str] = None
    before: Optional[str] = None
    first: Optional[int] = None
    last: Optional[int] = None

    def as_kwargs(self) -> Dict[str, Any]:
        return {'after': self.after, 'before': self.before, 'first': self.first, 'last': self.last}


@dataclass
class PlayerQuery:
    """
    Selection of a player query.

    ``teams``/``players`` are ``None`` when the field is not requested.
    ``skill`` adds CSR and expected kills/deaths to every player edge and
    only has an effect when ``players`` is selected.
    """

    gamertag: str
    matches: PageArgs = field(default_factory=PageArgs)
    teams: Optional[PageArgs] = None
    players: Optional[PageArgs] = None
    skill: bool = False


@dataclass
class QueryError:
    path: List[Any]
    message: str
    type: str

    def to_dict(self) -> dict:
        return {'path': self.path, 'message': self.message, 'type': self.type}


@dataclass
class SkillSummary:
    pre_match_csr: Csr
    post_match_csr: Csr
    expected_kills: Optional[float]
    expected_deaths: Optional[float]

    def to_dict(self) -> dict:
        return {
            'pre_match_csr': self.pre_match_csr.to_dict(),
            'post_match_csr': self.post_match_csr.to_dict(),
            'expected_kills': self.expected_kills,
            'expected_deaths': self.expected_deaths,
        }


class QueryContext:
    """
    Everything one query shares between its branches.

    Holds the repository (bound to the caller's spartan token), a fresh
    ``SkillBatchLoader`` and a memo of match-stats calls so that the
    ``teams`` and ``players`` branches of the same match share one
    upstream request. Nothing here outlives ``__aexit__``.
    """

    def __init__(
        self,
        repository: IStatsRepository,
        loader: Optional[SkillBatchLoader] = None,
        *,
        auto_dispatch: bool = True,
        query_id: Optional[str] = None,
    ):
        self.repository = repository
        self.query_id = query_id or new_query_id()
        self.skill_loader = loader or SkillBatchLoader(repository, auto_dispatch=auto_dispatch)
        self._match_stats: Dict[str, asyncio.Task] = {}

    async def __aenter__(self) -> "QueryContext":
        return self

    async def __aexit__(self, *_) -> None:
        await self.close()

    async def match_stats(self, match_id: str) -> MatchStats:
        task = self._match_stats.get(match_id)
        if task is None:
            task = asyncio.ensure_future(self.repository.get_match_stats(match_id))
            self._match_stats[match_id] = task
        return await asyncio.shield(task)

    async def close(self) -> None:
        await self.skill_loader.close()
        for task in self._match_stats.values():
            if not task.done():
                task.cancel()
        if self._match_stats:
            await asyncio.gather(*self._match_stats.values(), return_exceptions=True)
        self._match_stats.clear()


class PlayerQueryResolver:
    """
    Resolves player → matches → teams/players → skill.

    Each field is resolved independently: a ``GatewayError`` in one field
    nulls that field, records an error with its path, and leaves sibling
    fields untouched. Skill lookups for every player of every match are
    registered first and dispatched at a single ``flush()`` barrier.
    """

    def __init__(self, ctx: QueryContext):
        self.ctx = ctx
        self.errors: List[QueryError] = []

    # ── Field resolvers ────────────────────────────────────────────────

    async def resolve_player(self, gamertag: str) -> Player:
        return await self.ctx.repository.get_player(gamertag)

    async def resolve_matches(self, xuid: str, args: PageArgs) -> Connection[MatchHistoryEntry]:
        async def fetch(start: int, count: int) -> List[MatchHistoryEntry]:
            page = await self.ctx.repository.get_match_history(xuid, start, count)
            return page.results

        return await paginate(fetch, **args.as_kwargs())

    async def resolve_teams(self, match_id: str, args: PageArgs) -> Connection[TeamProjection]:
        stats = await self.ctx.match_stats(match_id)
        return await paginate_sequence(team_projections(stats), **args.as_kwargs())

    async def resolve_players(self, match_id: str, args: PageArgs) -> Connection[PlayerProjection]:
        stats = await self.ctx.match_stats(match_id)
        return await paginate_sequence(player_projections(stats), **args.as_kwargs())

    async def resolve_skill(self, player: PlayerProjection) -> Optional[SkillSummary]:
        """Skill fields of one player edge; ``None`` when there is no record."""
        if not player.is_human:
            return None
        try:
            record = await self.ctx.skill_loader.load(player.skill_key)
        except NotFound as e:
            logger.debug(lambda: f"no skill for {player.skill_key}: {e.reason}")
            return None
        return SkillSummary(
            pre_match_csr=record.pre_match_csr,
            post_match_csr=record.post_match_csr,
            expected_kills=record.expected_kills,
            expected_deaths=record.expected_deaths,
        )

    # ── Whole query ────────────────────────────────────────────────────

    async def execute(self, query: PlayerQuery) -> Dict[str, Any]:
        with log_context(query_id=self.ctx.query_id, gamertag=query.gamertag):
            logger.info(lambda: "query start")
            data = {'player': await self._player_tree(query)}
            logger.info(lambda: f"query done errors={len(self.errors)} skill_calls={self.ctx.skill_loader.upstream_calls}")
        result: Dict[str, Any] = {'data': data}
        if self.errors:
            result['errors'] = [e.to_dict() for e in self.errors]
        return result

    def _fail(self, path: List[Any], exc: GatewayError) -> None:
        logger.warning(lambda: f"field {'.'.join(map(str, path))} failed: {exc}")
        self.errors.append(QueryError(path=path, message=str(exc), type=type(exc).__name__))

    async def _player_tree(self, query: PlayerQuery) -> Optional[Dict[str, Any]]:
        path: List[Any] = ['player']
        try:
            player = await self.resolve_player(query.gamertag)
        except GatewayError as e:
            self._fail(path, e)
            return None

        node = player.to_dict()
        try:
            matches = await self.resolve_matches(player.xuid, query.matches)
        except GatewayError as e:
            self._fail(path + ['matches'], e)
            node['matches'] = None
            return node

        branches = await asyncio.gather(*(
            self._match_branch(edge.node, query, path + ['matches', i])
            for i, edge in enumerate(matches.edges)
        ))

        if query.skill and query.players is not None:
            await self._attach_skill(branches)

        node['matches'] = matches.to_dict(lambda m: m.to_dict())
        for edge, branch in zip(node['matches']['edges'], branches):
            edge['node'].update(branch['fields'])
        return node

    async def _match_branch(
        self,
        entry: MatchHistoryEntry,
        query: PlayerQuery,
        path: List[Any],
    ) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        players: Optional[Connection[PlayerProjection]] = None

        async def teams() -> None:
            try:
                conn = await self.resolve_teams(entry.match_id, query.teams)
                fields['teams'] = conn.to_dict(_render_team)
            except GatewayError as e:
                self._fail(path + ['teams'], e)
                fields['teams'] = None

        async def players_() -> None:
            nonlocal players
            try:
                players = await self.resolve_players(entry.match_id, query.players)
                fields['players'] = players.to_dict(lambda p: p.to_dict())
            except GatewayError as e:
                self._fail(path + ['players'], e)
                fields['players'] = None

        work = []
        if query.teams is not None:
            work.append(teams())
        if query.players is not None:
            work.append(players_())
        await asyncio.gather(*work)
        return {'fields': fields, 'players': players}

    async def _attach_skill(self, branches: List[Dict[str, Any]]) -> None:
        loader = self.ctx.skill_loader
        targets = []
        for branch in branches:
            conn = branch['players']
            if conn is None:
                continue
            for edge_dict, player in zip(branch['fields']['players']['edges'], conn.nodes):
                if player.is_human:
                    loader.register(player.skill_key)
                targets.append((edge_dict['node'], player))

        # barrier: everything is registered, dispatch once
        await loader.flush()

        summaries = await asyncio.gather(*(self.resolve_skill(p) for _, p in targets))
        for (node, _), summary in zip(targets, summaries):
            rendered = summary.to_dict() if summary else {}
            for name in ('pre_match_csr', 'post_match_csr', 'expected_kills', 'expected_deaths'):
                node[name] = rendered.get(name)


def _render_team(team: TeamProjection) -> dict:
    return {
        'team_id': team.team_id,
        'rank': team.rank,
        'outcome': team.outcome,
        **team.stats.to_dict(),
        'stronghold_stats': team.stronghold.to_dict() if team.stronghold else None,
        'players': [p.to_dict() for p in team.players],
    }
