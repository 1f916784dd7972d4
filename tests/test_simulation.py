"""Tests for the stochastic stage-build and full-run simulators."""

import pytest

from enhancement_core import (
    Configuration,
    InvalidBatchRequest,
    LcgRandom,
    NonTerminatingConfiguration,
    ensure_terminating,
    full_run_worst_case,
    simulate_batch,
    simulate_full_run,
    simulate_stages_only,
)


class TestCertainSuccess:
    """Every probability at 1."""

    def test_stages_then_full_run_on_shared_stream(self, certain_config):
        """Stages-only takes 3 attempts and the following full run takes 4."""
        rng = LcgRandom(1)
        stages = simulate_stages_only(certain_config, rng)
        full = simulate_full_run(certain_config, rng)
        assert stages.total_attempts == 3
        assert stages.attempts_per_stage == (1, 1, 1)
        assert full.total_attempts == 4
        assert full.attempts_per_stage == (1, 1, 1)

    def test_cost_is_attempts_times_cost(self, certain_config):
        """Cost follows the attempt count exactly."""
        full = simulate_full_run(certain_config, LcgRandom(1))
        assert full.total_cost == 400


class TestZeroProbability:
    """Only pity can succeed when probabilities are 0."""

    @pytest.mark.parametrize("seed", [1, 42, 12345, 2**40 + 3])
    def test_full_run_equals_worst_case(self, zero_config, seed):
        """The run is deterministic and matches the adversarial bound."""
        full = simulate_full_run(zero_config, LcgRandom(seed))
        assert full.total_attempts == full_run_worst_case(zero_config).total_attempts == 39

    def test_zero_threshold_always_succeeds(self):
        """A pity threshold of 0 guarantees every attempt."""
        config = Configuration(
            stage_count=3,
            stage_probabilities=(0.0, 0.0, 0.0),
            final_probability=0.0,
            cost_per_attempt=1,
            stage_pity_threshold=0,
            final_pity_threshold=0,
        )
        full = simulate_full_run(config, LcgRandom(5))
        assert full.total_attempts == 4
        assert full.attempts_per_stage == (1, 1, 1)


class TestPityBookkeeping:
    """Scripted draws pin down the pity and reset rules."""

    def test_reset_on_any_failure_wipes_own_counter(self, scripted_random):
        """With reset enabled a failing stage never accumulates pity."""
        config = Configuration(
            stage_count=2,
            stage_probabilities=(0.5, 0.5),
            final_probability=0.5,
            cost_per_attempt=1,
            stage_pity_threshold=1,
            final_pity_threshold=1,
            reset_all_stage_pity_on_any_failure=True,
        )
        rng = scripted_random([0.9, 0.1, 0.9, 0.1, 0.1])
        outcome = simulate_stages_only(config, rng)
        assert outcome.total_attempts == 5
        assert outcome.attempts_per_stage == (3, 2)
        assert rng.calls == 5

    def test_guaranteed_attempts_skip_the_draw(self, scripted_random):
        """Without reset, pity guarantees success and consumes no draw."""
        config = Configuration(
            stage_count=2,
            stage_probabilities=(0.5, 0.5),
            final_probability=0.5,
            cost_per_attempt=1,
            stage_pity_threshold=1,
            final_pity_threshold=1,
        )
        rng = scripted_random([0.9, 0.9, 0.1])
        outcome = simulate_stages_only(config, rng)
        assert outcome.total_attempts == 5
        assert outcome.attempts_per_stage == (3, 2)
        assert rng.calls == 3

    def test_final_pity_persists_across_rebuilds(self, scripted_random):
        """A failed final forces a rebuild; the next final is guaranteed."""
        config = Configuration(
            stage_count=1,
            stage_probabilities=(0.5,),
            final_probability=0.5,
            cost_per_attempt=1,
            stage_pity_threshold=10,
            final_pity_threshold=1,
        )
        rng = scripted_random([0.1, 0.9, 0.1])
        outcome = simulate_full_run(config, rng)
        assert outcome.total_attempts == 4
        assert outcome.attempts_per_stage == (2,)
        assert rng.calls == 3

    def test_stage_attempts_exclude_final_attempts(self, typical_config):
        """Per-stage counts sum to the total minus the final attempts."""
        rng = LcgRandom(99)
        stages = simulate_stages_only(typical_config, rng)
        assert sum(stages.attempts_per_stage) == stages.total_attempts
        full = simulate_full_run(typical_config, rng)
        assert sum(full.attempts_per_stage) < full.total_attempts


class TestTermination:
    """Termination guard and attempt ceiling."""

    def test_guard_rejects_unreachable_stage(self):
        """Reset on failure with a zero-probability stage never terminates."""
        config = Configuration(
            stage_count=2,
            stage_probabilities=(0.0, 0.0),
            final_probability=0.0,
            cost_per_attempt=1,
            stage_pity_threshold=2,
            final_pity_threshold=2,
            reset_all_stage_pity_on_any_failure=True,
        )
        with pytest.raises(NonTerminatingConfiguration):
            ensure_terminating(config)
        with pytest.raises(NonTerminatingConfiguration):
            simulate_full_run(config, LcgRandom(1))
        with pytest.raises(NonTerminatingConfiguration):
            simulate_stages_only(config, LcgRandom(1))

    def test_guard_allows_zero_threshold(self):
        """A zero pity threshold still guarantees every stage under reset."""
        config = Configuration(
            stage_count=2,
            stage_probabilities=(0.0, 0.0),
            final_probability=0.0,
            cost_per_attempt=1,
            stage_pity_threshold=0,
            final_pity_threshold=3,
            reset_all_stage_pity_on_any_failure=True,
        )
        ensure_terminating(config)
        assert simulate_stages_only(config, LcgRandom(1)).total_attempts == 2

    def test_attempt_ceiling_reports_non_convergence(self, zero_config):
        """Exceeding the ceiling raises instead of looping."""
        with pytest.raises(NonTerminatingConfiguration, match="10 attempts"):
            simulate_full_run(zero_config, LcgRandom(1), max_attempts=10)

    def test_ceiling_can_be_disabled(self, zero_config):
        """``None`` removes the ceiling."""
        assert simulate_full_run(zero_config, LcgRandom(1), max_attempts=None).total_attempts == 39


class TestSimulateBatch:
    """Tests for the shared-stream batch loop."""

    def test_matches_interleaved_manual_runs(self, typical_config):
        """Each trial draws stages-only first, then the full run."""
        stages_outcomes, full_outcomes = simulate_batch(typical_config, trial_count=25, seed=777)
        rng = LcgRandom(777)
        for stages, full in zip(stages_outcomes, full_outcomes):
            assert simulate_stages_only(typical_config, rng) == stages
            assert simulate_full_run(typical_config, rng) == full

    def test_same_seed_is_bit_identical(self, typical_config):
        """Identical seeds produce identical outcome sequences."""
        assert simulate_batch(typical_config, 50, 3) == simulate_batch(typical_config, 50, 3)

    def test_cost_identity_holds_for_every_outcome(self, typical_config):
        """Cost is attempts times cost per attempt for every run."""
        stages_outcomes, full_outcomes = simulate_batch(typical_config, 100, 11)
        for outcome in (*stages_outcomes, *full_outcomes):
            assert outcome.total_cost == outcome.total_attempts * typical_config.cost_per_attempt
            assert outcome.total_attempts >= typical_config.stage_count

    @pytest.mark.parametrize("trial_count", [0, -3, 2.5, True])
    def test_rejects_bad_trial_count(self, typical_config, trial_count):
        """Trial counts must be positive integers."""
        with pytest.raises(InvalidBatchRequest):
            simulate_batch(typical_config, trial_count, 1)
