"""Per-query batching loader for skill lookups."""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence

from core.logging import get_logger
from domain.entities import SkillKey, SkillRecord
from domain.exceptions import NotFound, UpstreamError
from domain.interfaces import IStatsRepository

logger = get_logger(__name__, service="skill-loader")


class SkillBatchLoader:
    """
    Coalesces ``(player, match)`` skill lookups into one call per match.

    Keys are buffered by ``register``/``load`` and dispatched together:
    explicitly at a ``flush()`` barrier, or (when ``auto_dispatch`` is on)
    once the tick that enqueued the first pending key has drained. Each
    key maps to a single future for the lifetime of the loader, so a
    repeated key never costs another upstream call.

    The pending buffer and the cache are only touched synchronously on
    the event loop thread; a flush swaps the buffer out before its first
    await, so keys registered while a flush is in flight go to the next
    dispatch.

    One loader belongs to one query. Do not share it across queries.
    """

    def __init__(self, repository: IStatsRepository, *, auto_dispatch: bool = True):
        self.repository = repository
        self.auto_dispatch = auto_dispatch
        self._cache: Dict[SkillKey, asyncio.Future] = {}
        self._pending: Dict[str, List[str]] = {}
        self._dispatch_handle: Optional[asyncio.Handle] = None
        self._inflight: set[asyncio.Task] = set()
        self._closed = False
        self.upstream_calls = 0

    # ── Registration ───────────────────────────────────────────────────

    def register(self, key: SkillKey) -> asyncio.Future:
        """Buffer ``key`` without dispatching; return its (shared) future."""
        if self._closed:
            raise RuntimeError("SkillBatchLoader is closed")
        future = self._cache.get(key)
        if future is not None:
            return future
        future = asyncio.get_running_loop().create_future()
        self._cache[key] = future
        self._pending.setdefault(key.match_id, []).append(key.player_id)
        return future

    def register_many(self, keys: Sequence[SkillKey]) -> List[asyncio.Future]:
        return [self.register(k) for k in keys]

    def cached(self, key: SkillKey) -> Optional[SkillRecord]:
        """Already-resolved record for ``key``, without awaiting."""
        future = self._cache.get(key)
        if future is None or not future.done() or future.cancelled() or future.exception():
            return None
        return future.result()

    @property
    def pending_keys(self) -> int:
        return sum(len(p) for p in self._pending.values())

    # ── Loading ────────────────────────────────────────────────────────

    async def load(self, key: SkillKey) -> SkillRecord:
        """Skill record for ``key``; raises ``NotFound`` when it has none."""
        future = self.register(key)
        if not future.done() and self.auto_dispatch:
            self._schedule_dispatch()
        # shield: one caller being cancelled must not cancel the shared result
        return await asyncio.shield(future)

    async def load_many(self, keys: Sequence[SkillKey]) -> List[Optional[SkillRecord]]:
        """Records in ``keys`` order, ``None`` where a key has no record."""
        futures = self.register_many(keys)
        await self.flush()
        results: List[Optional[SkillRecord]] = []
        for future in futures:
            try:
                results.append(await asyncio.shield(future))
            except NotFound:
                results.append(None)
        return results

    def _schedule_dispatch(self) -> None:
        if self._dispatch_handle is not None:
            return
        loop = asyncio.get_running_loop()

        def _start() -> None:
            self._dispatch_handle = None
            task = loop.create_task(self.flush())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

        # call_soon queues behind every callback already scheduled for this
        # tick, so sibling tasks get to enqueue their keys first
        self._dispatch_handle = loop.call_soon(_start)

    # ── Dispatch ───────────────────────────────────────────────────────

    async def flush(self) -> None:
        """Dispatch every buffered key: one concurrent call per match."""
        pending, self._pending = self._pending, {}
        if not pending:
            return
        logger.debug(
            lambda: f"dispatch matches={len(pending)} keys={sum(len(p) for p in pending.values())}"
        )
        await asyncio.gather(*(
            self._dispatch_match(match_id, player_ids) for match_id, player_ids in pending.items()
        ))

    async def _dispatch_match(self, match_id: str, player_ids: List[str]) -> None:
        self.upstream_calls += 1
        try:
            records = await self.repository.get_skill(match_id, player_ids)
            by_player = self._attribute(match_id, player_ids, records)
        except UpstreamError as e:
            logger.warning(lambda: f"skill lookup failed match={match_id}: {e}")
            for player_id in player_ids:
                self._reject(SkillKey(player_id, match_id), NotFound(
                    SkillKey(player_id, match_id), f"skill lookup failed: {e}"
                ), cause=e)
            return
        except asyncio.CancelledError:
            for player_id in player_ids:
                future = self._cache.get(SkillKey(player_id, match_id))
                if future is not None and not future.done():
                    future.cancel()
            raise
        except Exception as e:
            logger.error(lambda: f"skill lookup crashed match={match_id}: {e!r}")
            for player_id in player_ids:
                key = SkillKey(player_id, match_id)
                self._reject(key, NotFound(key, f"skill lookup crashed: {e!r}"), cause=e)
            return

        for player_id in player_ids:
            key = SkillKey(player_id, match_id)
            record = by_player.get(player_id)
            if record is None:
                self._reject(key, NotFound(key, "absent from skill response"))
            elif not record.ok:
                self._reject(key, NotFound(key, f"skill result code {record.result_code}"))
            else:
                self._resolve(key, record)

    @staticmethod
    def _attribute(
        match_id: str,
        player_ids: List[str],
        records: Sequence[SkillRecord],
    ) -> Dict[str, SkillRecord]:
        """
        Pair response rows with requested players.

        Rows that all carry their own player id are matched by id, which
        survives reordering and omissions. Without ids the only option is
        position, and that is only trusted when the row count matches.
        """
        if records and all(r.player_id for r in records):
            requested = set(player_ids)
            unexpected = [r.player_id for r in records if r.player_id not in requested]
            if unexpected:
                logger.warning(lambda: f"skill response for {match_id} has unrequested players {unexpected}")
            return {r.player_id: r for r in records if r.player_id in requested}
        if len(records) != len(player_ids):
            raise UpstreamError(
                "skill",
                f"match {match_id}: {len(records)} unlabelled rows for {len(player_ids)} players",
            )
        return dict(zip(player_ids, records))

    def _resolve(self, key: SkillKey, record: SkillRecord) -> None:
        future = self._cache.get(key)
        if future is not None and not future.done():
            future.set_result(record)

    def _reject(self, key: SkillKey, exc: BaseException, cause: Optional[BaseException] = None) -> None:
        future = self._cache.get(key)
        if future is not None and not future.done():
            if cause is not None:
                exc.__cause__ = cause
            future.set_exception(exc)

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def close(self) -> None:
        """Cancel what is still outstanding and drop the cache."""
        self._closed = True
        if self._dispatch_handle is not None:
            self._dispatch_handle.cancel()
            self._dispatch_handle = None
        for task in list(self._inflight):
            task.cancel()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
        for future in self._cache.values():
            if not future.done():
                future.cancel()
            elif not future.cancelled():
                # mark rejected futures as retrieved so asyncio does not warn
                future.exception()
        self._cache.clear()
        self._pending.clear()
