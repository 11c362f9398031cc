"""Periodic refresh loop: fetch, normalize, rank, diff and publish a snapshot."""
from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

from ..adapters.base import MarketDataSource
from ..adapters.http import HttpSource
from ..config import ProviderShape, Settings, get_settings
from ..core.normalize import normalize
from ..core.ranking import rank_records
from ..engine.streaming import SnapshotBroadcast
from ..errors import RefreshError
from ..models import AssetRecord, Snapshot
from ..observability import record_cycle, record_error

LOGGER = logging.getLogger(__name__)

PUBLISHED = "published"
UNCHANGED = "unchanged"
STALE = "stale"
STOPPED = "stopped"
ERROR = "error"

GENERIC_ERROR_MESSAGE = "Failed to fetch data"


class RefreshLoop:
    """Keep a ranked Snapshot current by polling one data source on a fixed period.

    The timer never waits on a tick: each period spawns a new tick task, so
    a slow upstream cannot stretch the schedule. Because ticks may overlap,
    every tick takes a sequence number when it starts and re-validates at
    publish time. A result from a stopped loop, or one older than a result
    already accepted, is dropped.

    Published snapshots are replaced whole by a single reference assignment,
    so readers never observe a half-built snapshot.
    """

    def __init__(
        self,
        source: MarketDataSource,
        shape: ProviderShape | str,
        interval_sec: float,
        *,
        settings: Settings | None = None,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self._source = source
        self._shape = ProviderShape(shape)
        self._interval = interval_sec
        self._settings = settings or get_settings()
        self.broadcast = SnapshotBroadcast(lambda: self._snapshot)

        self._timer: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None
        self._inflight: set[asyncio.Task[str]] = set()
        # Bumped by stop(); ticks from an older epoch never publish.
        self._epoch = 0
        self._seq = 0
        self._accepted_seq = 0

        self._last_fetched: list[AssetRecord] | None = None
        self._snapshot: Snapshot | None = None
        self._error: str | None = None
        self._loading = False

        self._health: dict[str, Any] = {
            "provider": self._shape.value,
            "interval_sec": interval_sec,
            "running": False,
            "cycle_count": 0,
            "failure_streak": 0,
            "published_count": 0,
            "skipped_count": 0,
            "stale_discarded": 0,
            "last_cycle_ms": 0.0,
            "last_success": None,
            "last_error": None,
            "records": 0,
        }

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "RefreshLoop":
        settings = settings or get_settings()
        source = HttpSource(settings.data_source_url, settings.effective_fetch_timeout, settings=settings)
        return cls(source, settings.provider_shape, settings.refresh_interval_sec, settings=settings, **kwargs)

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def shape(self) -> ProviderShape:
        return self._shape

    def start(self) -> None:
        """Tick immediately, then every interval. Must be called from a running event loop."""

        if self.running:
            return
        self._loading = True
        self._stop_event = asyncio.Event()
        self._timer = asyncio.get_running_loop().create_task(self._run(self._stop_event), name="refresh-timer")
        self._health["running"] = True
        LOGGER.info("Refresh loop started (provider=%s, interval=%.1fs)", self._shape.value, self._interval)

    def stop(self) -> None:
        """Cancel the schedule. Idempotent; no fetch starts after this returns."""

        if self._timer is None:
            return
        self._epoch += 1
        if self._stop_event is not None:
            self._stop_event.set()
        self._timer.cancel()
        self._timer = None
        self._stop_event = None
        self._loading = False
        self._health["running"] = False
        LOGGER.info("Refresh loop stopped")

    async def aclose(self) -> None:
        """Stop, let in-flight ticks drain (their results are discarded), close the source."""

        self.stop()
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
        await self._source.aclose()

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            self._spawn_tick()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass

    def _spawn_tick(self) -> None:
        task = asyncio.get_running_loop().create_task(self.tick(epoch=self._epoch))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def tick(self, *, epoch: int | None = None) -> str:
        """Run one fetch-normalize-rank-publish cycle and return its outcome.

        Never raises: every failure becomes error state and the previously
        published snapshot stays in place.
        """

        epoch = self._epoch if epoch is None else epoch
        if epoch != self._epoch:
            return STOPPED
        self._seq += 1
        seq = self._seq
        started = time.perf_counter()
        try:
            payload = await self._source.fetch()
            records = normalize(payload, self._shape, self._settings)
        except RefreshError as exc:
            return self._fail(epoch, seq, started, exc, exc.user_message)
        except Exception as exc:  # pragma: no cover - defensive
            LOGGER.exception("Unexpected refresh error: %s", exc)
            return self._fail(epoch, seq, started, exc, GENERIC_ERROR_MESSAGE)
        return self._publish(epoch, seq, started, records)

    def _discard_reason(self, epoch: int, seq: int) -> str | None:
        if epoch != self._epoch:
            return STOPPED
        if seq < self._accepted_seq:
            return STALE
        return None

    def _publish(self, epoch: int, seq: int, started: float, records: list[AssetRecord]) -> str:
        reason = self._discard_reason(epoch, seq)
        if reason is not None:
            if reason == STALE:
                self._health["stale_discarded"] += 1
            self._finish(started, reason, len(records))
            return reason

        self._accepted_seq = seq
        self._error = None
        self._health["failure_streak"] = 0
        self._health["last_error"] = None
        self._health["last_success"] = datetime.now(timezone.utc).isoformat()

        if self._last_fetched is not None and records == self._last_fetched:
            self._health["skipped_count"] += 1
            self._finish(started, UNCHANGED, len(records))
            return UNCHANGED

        snapshot = Snapshot.from_ranked(rank_records(records), self._shape)
        self._last_fetched = records
        self._snapshot = snapshot
        self._health["published_count"] += 1
        self._health["records"] = len(snapshot)
        self.broadcast.publish(snapshot)
        self._finish(started, PUBLISHED, len(records))
        return PUBLISHED

    def _fail(self, epoch: int, seq: int, started: float, exc: BaseException, message: str) -> str:
        kind = type(exc).__name__
        reason = self._discard_reason(epoch, seq)
        if reason is not None:
            LOGGER.debug("Ignoring %s from superseded tick %d: %s", kind, seq, exc)
            self._finish(started, reason, None)
            return reason

        LOGGER.warning("Refresh cycle failed (%s): %s", kind, exc)
        record_error(kind, self._settings)
        self._error = message
        self._health["failure_streak"] += 1
        self._health["last_error"] = f"{kind}: {exc}"
        self._finish(started, ERROR, None)
        return ERROR

    def _finish(self, started: float, outcome: str, count: int | None) -> None:
        duration = time.perf_counter() - started
        if outcome != STOPPED:
            self._loading = False
        self._health["cycle_count"] += 1
        self._health["last_cycle_ms"] = round(duration * 1000, 2)
        record_cycle(
            duration,
            outcome,
            self._health["records"] if outcome == PUBLISHED else None,
            settings=self._settings,
        )
        log_payload = {
            "outcome": outcome,
            "cycle_ms": self._health["last_cycle_ms"],
            "records": count,
            "provider": self._shape.value,
        }
        level = logging.INFO if outcome in (PUBLISHED, ERROR) else logging.DEBUG
        LOGGER.log(level, "refresh_cycle %s", json.dumps(log_payload))

    def health_state(self) -> dict[str, Any]:
        state = dict(self._health)
        state["running"] = self.running
        state["loading"] = self._loading
        state["error"] = self._error
        return json.loads(json.dumps(state))


__all__ = ["RefreshLoop", "PUBLISHED", "UNCHANGED", "STALE", "STOPPED", "ERROR"]
