"""Tests for MindArtifactStore."""

import asyncio
import copy

import pytest

from phasegate.application.mind_store import MindArtifactStore
from phasegate.domain.models import HeuristicId, MindArtifactBundle, MindUnavailable
from phasegate.infrastructure.metrics import MetricsCollector
from phasegate.infrastructure.persistence.mind_sources import InMemoryMindSource


class TestLoad:
    """Load-once caching."""

    def test_first_load_compiles_bundle(self, mind_store):
        bundle = asyncio.run(mind_store.load())

        assert isinstance(bundle, MindArtifactBundle)
        assert set(bundle.heuristics) == set(HeuristicId)
        assert bundle.axiomas.dimension_names == (
            "completeness",
            "actionOrientation",
            "progressIndicators",
            "riskMitigation",
        )
        assert bundle.source == "test-mind"
        assert mind_store.cached is bundle

    def test_repeated_loads_hit_cache(self, mind_source):
        metrics = MetricsCollector()
        store = MindArtifactStore(mind_source, metrics)

        async def load_twice():
            return await store.load(), await store.load()

        first, second = asyncio.run(load_twice())

        assert first is second
        assert mind_source.reads == 1
        assert metrics.get_summary()["cache"] == {
            "hits": 1,
            "misses": 1,
            "hit_rate": 50.0,
        }

    def test_concurrent_loads_share_one_read(self, mind_store, mind_source):
        """Callers racing on an empty cache trigger exactly one source read."""

        async def race():
            return await asyncio.gather(*(mind_store.load() for _ in range(10)))

        results = asyncio.run(race())

        assert mind_source.reads == 1
        assert all(r is results[0] for r in results)

    def test_cancelled_waiter_does_not_cancel_shared_load(self, mind_store):
        async def scenario():
            first = asyncio.ensure_future(mind_store.load())
            second = asyncio.ensure_future(mind_store.load())
            await asyncio.sleep(0)
            first.cancel()
            bundle = await second
            with pytest.raises(asyncio.CancelledError):
                await first
            return bundle

        assert isinstance(asyncio.run(scenario()), MindArtifactBundle)

    def test_bundle_is_immutable(self, mind_store):
        bundle = asyncio.run(mind_store.load())
        with pytest.raises(TypeError):
            bundle.heuristics[HeuristicId.COHERENCE_SCAN] = None  # type: ignore[index]


class TestUnavailable:
    """Load failures fail closed to MindUnavailable."""

    def test_absent_source(self):
        metrics = MetricsCollector()
        store = MindArtifactStore(InMemoryMindSource(None, location="gone"), metrics)

        state = asyncio.run(store.load())

        assert isinstance(state, MindUnavailable)
        assert state.source == "gone"
        assert "absent" in state.reason
        assert metrics.fallback_counts() == {"mind_load_failed": 1}

    def test_unavailable_state_is_cached(self):
        source = InMemoryMindSource(None)
        store = MindArtifactStore(source)

        async def load_twice():
            return await store.load(), await store.load()

        first, second = asyncio.run(load_twice())

        assert first is second
        assert source.reads == 1

    def test_schema_violation(self, mind_document):
        broken = copy.deepcopy(mind_document)
        del broken["axiomas"]

        state = asyncio.run(MindArtifactStore(InMemoryMindSource(broken)).load())

        assert isinstance(state, MindUnavailable)
        assert "schema validation" in state.reason
        assert "axiomas" in state.reason

    def test_inconsistent_weights(self, mind_document):
        broken = copy.deepcopy(mind_document)
        broken["axiomas"]["dimensions"][0]["weight"] = 0.9

        state = asyncio.run(MindArtifactStore(InMemoryMindSource(broken)).load())

        assert isinstance(state, MindUnavailable)
        assert "Sum should equal 1.0" in state.reason

    def test_duplicate_dimensions(self, mind_document):
        broken = copy.deepcopy(mind_document)
        broken["axiomas"]["dimensions"] = [
            {"name": "completeness", "weight": 0.5},
            {"name": "completeness", "weight": 0.5},
        ]

        state = asyncio.run(MindArtifactStore(InMemoryMindSource(broken)).load())

        assert isinstance(state, MindUnavailable)
        assert "duplicate names ['completeness']" in state.reason


class TestInvalidation:
    """Explicit invalidation and change detection."""

    def test_invalidate_forces_reread(self, mind_store, mind_source):
        async def scenario():
            first = await mind_store.load()
            mind_store.invalidate()
            assert mind_store.cached is None
            second = await mind_store.load()
            return first, second

        first, second = asyncio.run(scenario())

        assert first is not second
        assert mind_source.reads == 2

    def test_unchanged_source_is_not_reloaded(self, mind_store, mind_source):
        async def scenario():
            await mind_store.load()
            return await mind_store.reload_if_changed()

        assert asyncio.run(scenario()) is False
        assert mind_source.reads == 1

    def test_changed_source_is_reloaded(self, mind_store, mind_source, mind_document):
        updated = copy.deepcopy(mind_document)
        updated["version"] = "2.0"

        async def scenario():
            await mind_store.load()
            mind_source.update(updated)
            changed = await mind_store.reload_if_changed()
            return changed, mind_store.cached

        changed, state = asyncio.run(scenario())

        assert changed is True
        assert state.version == "2.0"

    def test_removed_source_counts_as_change(self, mind_store, mind_source):
        async def scenario():
            await mind_store.load()
            mind_source.remove()
            return await mind_store.has_source_changed()

        assert asyncio.run(scenario()) is True

    def test_nothing_loaded_means_no_change(self, mind_store):
        assert asyncio.run(mind_store.has_source_changed()) is False

    def test_recovery_after_fix(self, mind_document):
        """A source fixed after a failed load is picked up on reload."""
        source = InMemoryMindSource(None)
        store = MindArtifactStore(source)

        async def scenario():
            first = await store.load()
            source.update(mind_document)
            await store.reload_if_changed()
            return first, store.cached

        first, second = asyncio.run(scenario())

        assert isinstance(first, MindUnavailable)
        assert isinstance(second, MindArtifactBundle)
