"""Pytest fixtures shared by the enhancement engine tests."""

import pytest

from enhancement_core import Configuration


class ScriptedRandom:
    """Random source that replays fixed draws and counts how many were taken."""

    def __init__(self, draws):
        self._draws = list(draws)
        self.calls = 0

    def random(self):
        value = self._draws[self.calls]
        self.calls += 1
        return value


@pytest.fixture
def scripted_random():
    """Factory for scripted random sources."""
    return ScriptedRandom


@pytest.fixture
def certain_config():
    """Three stages and a final upgrade that always succeed."""
    return Configuration(
        stage_count=3,
        stage_probabilities=(1.0, 1.0, 1.0),
        final_probability=1.0,
        cost_per_attempt=100,
        stage_pity_threshold=6,
        final_pity_threshold=6,
    )


@pytest.fixture
def zero_config():
    """Probability zero everywhere; only pity ever succeeds."""
    return Configuration(
        stage_count=2,
        stage_probabilities=(0.0, 0.0),
        final_probability=0.0,
        cost_per_attempt=100,
        stage_pity_threshold=2,
        final_pity_threshold=2,
    )


@pytest.fixture
def typical_config():
    """Default-like configuration with four stages at 20%."""
    return Configuration(
        stage_count=4,
        stage_probabilities=(0.2, 0.2, 0.2, 0.2),
        final_probability=0.2,
        cost_per_attempt=170000,
        stage_pity_threshold=6,
        final_pity_threshold=6,
    )


@pytest.fixture
def reset_config():
    """Stage pity wiped on any failure, with reachable probabilities."""
    return Configuration(
        stage_count=2,
        stage_probabilities=(0.5, 0.5),
        final_probability=0.5,
        cost_per_attempt=10,
        stage_pity_threshold=3,
        final_pity_threshold=3,
        reset_all_stage_pity_on_any_failure=True,
    )
