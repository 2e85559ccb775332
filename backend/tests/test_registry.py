"""Tests for the analyzer registry."""

import pytest

from formcheck.registry import AnalyzerNotFoundError, AnalyzerRegistry, RegistryFullError


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestAnalyzerRegistry:
    """Test suite for AnalyzerRegistry."""

    def test_create_and_acquire(self):
        registry = AnalyzerRegistry(max_analyzers=2)
        handle = registry.create()
        with registry.acquire(handle.analyzer_id) as acquired:
            assert acquired is handle
            assert acquired.lock.locked()
        assert not handle.lock.locked()
        assert len(registry) == 1

    def test_limit_without_idle_timeout(self):
        registry = AnalyzerRegistry(max_analyzers=2)
        registry.create()
        registry.create()
        with pytest.raises(RegistryFullError):
            registry.create()

    def test_remove(self):
        registry = AnalyzerRegistry(max_analyzers=2)
        handle = registry.create()
        handle.engine.start_session("squat")
        registry.remove(handle.analyzer_id)

        assert len(registry) == 0
        assert not handle.engine.is_active
        with pytest.raises(AnalyzerNotFoundError):
            registry.remove(handle.analyzer_id)

    def test_acquire_unknown(self):
        registry = AnalyzerRegistry(max_analyzers=2)
        with pytest.raises(AnalyzerNotFoundError):
            with registry.acquire("missing"):
                pass


class TestIdleEviction:
    """Test suite for evicting abandoned analyzers."""

    def test_abandoned_analyzers_free_their_slots(self, clock):
        registry = AnalyzerRegistry(max_analyzers=3, idle_timeout_s=60.0, clock=clock)
        abandoned = [registry.create() for _ in range(3)]
        abandoned[0].engine.start_session("squat")

        clock.now = 61.0
        fresh = registry.create()

        assert len(registry) == 1
        assert not abandoned[0].engine.is_active
        with pytest.raises(AnalyzerNotFoundError):
            with registry.acquire(abandoned[0].analyzer_id):
                pass
        with registry.acquire(fresh.analyzer_id) as handle:
            assert handle is fresh

    def test_recently_used_analyzers_are_kept(self, clock):
        registry = AnalyzerRegistry(max_analyzers=3, idle_timeout_s=60.0, clock=clock)
        handles = [registry.create() for _ in range(3)]

        clock.now = 50.0
        with registry.acquire(handles[1].analyzer_id):
            pass

        clock.now = 70.0
        registry.create()

        assert len(registry) == 2
        with registry.acquire(handles[1].analyzer_id) as handle:
            assert handle is handles[1]

    def test_full_when_nothing_is_idle(self, clock):
        registry = AnalyzerRegistry(max_analyzers=2, idle_timeout_s=60.0, clock=clock)
        registry.create()
        registry.create()

        clock.now = 30.0
        with pytest.raises(RegistryFullError):
            registry.create()
        assert len(registry) == 2
