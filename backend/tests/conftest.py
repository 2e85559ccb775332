"""Shared fixtures."""

import pytest

from formcheck.engine import FormAnalysisEngine


@pytest.fixture
def engine():
    """Engine with explicit settings so tests don't depend on the environment."""
    return FormAnalysisEngine(feedback_log_capacity=50, min_visibility=0.5)


@pytest.fixture
def squat_engine(engine):
    engine.start_session("squat")
    return engine
