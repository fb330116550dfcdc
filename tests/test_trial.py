"""Tests for the trial evaluator."""

import pytest

from patternrace.config import ExperimentConfig
from patternrace.patterns import PATTERN_PAIRS, PATTERNS, PatternPair
from patternrace.random_source import create_random_source
from patternrace.sequence import generate_sequence
from patternrace.trial import TrialResult, evaluate_sequence, run_trial
from patternrace.utils.seed_manager import SeedManager


def test_expectations_keyed_by_pattern():
    result = evaluate_sequence("UDUDDUUU")
    expectations = result.expectations()
    assert list(expectations) == list(PATTERNS)
    assert expectations["UDU"] == 3
    assert expectations["DUD"] == 4
    assert expectations["UDD"] == 5
    assert expectations["DDU"] == 6
    assert expectations["DUU"] == 7
    assert expectations["UUU"] == 8
    # Not present: sentinel is the sequence length
    assert expectations["DDD"] == 8
    assert expectations["UUD"] == 8


def test_win_map_has_all_pairs_with_strict_semantics():
    result = evaluate_sequence("UDUDDUUU")
    wins = result.wins_by_pair()
    assert len(wins) == 56
    assert set(wins) == set(PATTERN_PAIRS)
    assert wins[PatternPair("UDU", "DUD")] is True
    assert wins[PatternPair("DUD", "UDU")] is False
    # UUU ends at 8, same as the sentinel for DDD: a tie, neither wins
    assert wins[PatternPair("UUU", "DDD")] is False
    assert wins[PatternPair("DDD", "UUU")] is False
    # Both absent: neither wins
    assert wins[PatternPair("DDD", "UUD")] is False
    assert wins[PatternPair("UUD", "DDD")] is False


def test_no_pattern_present_gives_all_sentinels_and_no_wins():
    """A short sequence cannot contain any length-3 pattern."""
    result = evaluate_sequence("UD")
    assert set(result.expectations().values()) == {2}
    assert not any(result.wins)
    assert result.strict_orderings() == 0


@pytest.mark.parametrize("seed", range(20))
def test_pairwise_wins_are_antisymmetric(seed):
    """win(A, B) and win(B, A) are never both true."""
    sequence = generate_sequence(create_random_source("mt19937", seed), 30)
    wins = evaluate_sequence(sequence).wins_by_pair()
    for a, b in PATTERN_PAIRS:
        assert not (wins[PatternPair(a, b)] and wins[PatternPair(b, a)])


@pytest.mark.parametrize("seed", range(10))
def test_strict_orderings_count_distinct_position_pairs(seed):
    """Number of wins equals the number of ordered pairs with distinct positions."""
    sequence = generate_sequence(create_random_source("pcg64", seed), 25)
    result = evaluate_sequence(sequence)
    pos = result.expectations()
    expected = sum(1 for a, b in PATTERN_PAIRS if pos[a] < pos[b])
    assert result.strict_orderings() == expected
    assert result.strict_orderings() <= 56


def test_custom_pattern_set():
    result = evaluate_sequence("DUUD", patterns=("UU", "DU"))
    assert result.positions == (3, 2)
    assert result.wins == (False, True)
    assert result.wins_by_pair() == {
        PatternPair("UU", "DU"): False,
        PatternPair("DU", "UU"): True,
    }


def test_run_trial_is_deterministic_for_a_seed():
    config = ExperimentConfig(trials=1, seed=5)
    a = run_trial(17, config, SeedManager(5))
    b = run_trial(17, config, SeedManager(5))
    assert isinstance(a, TrialResult)
    assert a == b


def test_run_trial_uses_an_independent_source_per_index():
    config = ExperimentConfig(trials=50, seed=5)
    seed_mgr = SeedManager(5)
    results = [run_trial(i, config, seed_mgr) for i in range(50)]
    assert len({r.positions for r in results}) > 1
