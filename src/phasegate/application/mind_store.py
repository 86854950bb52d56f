"""
MindArtifactStore: load-once cache for the mind artifact bundle.

The first ``load()`` reads and compiles the mind document; later calls return
the cached bundle. Concurrent callers awaiting an uncached load share one
in-flight read. Failures never raise: they resolve to MindUnavailable so the
orchestrator can fall back to Generic mode.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from phasegate.domain.exceptions import MindArtifactError
from phasegate.domain.interfaces import (
    MetricsInterface,
    MindSourceInterface,
    NullMetrics,
)
from phasegate.domain.models import MindArtifactBundle, MindState, MindUnavailable

from .mind_document import build_bundle

logger = logging.getLogger(__name__)


class MindArtifactStore:
    """
    Per-owner cache of one mind bundle.

    Not a singleton: every store owns its cache, so independent stores never
    see each other's state. The cached value is written once per generation
    and only replaced after ``invalidate()``.

    Args:
        source: Where the mind document lives
        metrics: Hooks for load timing, cache hits/misses and fallbacks
    """

    def __init__(
        self,
        source: MindSourceInterface,
        metrics: MetricsInterface | None = None,
    ) -> None:
        self._source = source
        self._metrics = metrics or NullMetrics()
        self._state: MindState | None = None
        self._fingerprint: str | None = None
        self._pending: asyncio.Future[MindState] | None = None
        self._generation = 0
        self.reads = 0  # source reads performed, for diagnostics

    @property
    def cached(self) -> MindState | None:
        """The cached load result, or None before the first load."""
        return self._state

    async def load(self) -> MindState:
        """
        Return the mind bundle, reading the source at most once.

        Returns:
            MindArtifactBundle, or MindUnavailable when the source is absent or
            malformed
        """
        if self._state is not None:
            self._metrics.record_cache_hit({"cache": "mind"})
            return self._state

        if self._pending is None:
            self._metrics.record_cache_miss({"cache": "mind"})
            self._pending = asyncio.ensure_future(
                self._load_from_source(self._generation)
            )
        # shield: one cancelled waiter must not cancel the shared read
        return await asyncio.shield(self._pending)

    def invalidate(self) -> None:
        """Drop the cache so the next ``load()`` re-reads the source."""
        self._generation += 1
        self._state = None
        self._fingerprint = None
        self._pending = None
        logger.info("Mind cache invalidated (generation %d)", self._generation)

    async def has_source_changed(self) -> bool:
        """Compare the source fingerprint with the one the cache was built from."""
        if self._state is None:
            return False
        try:
            current = await self._source.fingerprint()
        except MindArtifactError:
            # source vanished; only a change if we had something loaded
            return self._fingerprint is not None
        return current != self._fingerprint

    async def reload_if_changed(self) -> bool:
        """Invalidate and reload when the source changed. Returns True if it did."""
        if not await self.has_source_changed():
            return False
        logger.info("Mind source changed, reloading")
        self.invalidate()
        await self.load()
        return True

    async def _load_from_source(self, generation: int) -> MindState:
        try:
            state, fingerprint = await self._read_state()
        finally:
            if generation == self._generation:
                self._pending = None
        if generation == self._generation:
            self._state = state
            self._fingerprint = fingerprint
        return state

    async def _read_state(self) -> tuple[MindState, str | None]:
        timer_id = f"mind_load:{uuid.uuid4()}"
        self._metrics.start_timer(timer_id, "mind_load", {"cache": "mind"})
        self.reads += 1
        fingerprint: str | None = None
        try:
            snapshot = await self._source.read()
            fingerprint = snapshot.fingerprint
            bundle: MindArtifactBundle = build_bundle(snapshot)
        except MindArtifactError as e:
            logger.warning("Mind artifacts unavailable (%s): %s", e.source, e)
            self._metrics.record_fallback("mind_load_failed", {"source": e.source})
            return (
                MindUnavailable(
                    reason=str(e),
                    source=e.source,
                    detected_at=datetime.now(timezone.utc).isoformat(),
                ),
                fingerprint,
            )
        finally:
            self._metrics.end_timer(timer_id, {"cache": "mind"})

        logger.info(
            "Loaded mind %s from %s (%d heuristics, %d axioma dimensions)",
            bundle.version,
            bundle.source,
            len(bundle.heuristics),
            len(bundle.axiomas.dimensions),
        )
        return bundle, fingerprint
