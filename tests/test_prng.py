"""Tests for the Mulberry32 generator."""

import numpy as np
import pytest

from py_worldgen.core.prng import Mulberry32PRNG, hash_seed


class TestSeedHashing:
    """Test string seed hashing."""

    def test_single_character(self):
        """A one-character seed hashes to its code unit."""
        assert hash_seed("a") == 97

    def test_rolling_hash(self):
        """Each code unit is added to 31 times the running hash."""
        assert hash_seed("ab") == 97 * 31 + 98

    def test_empty_seed_is_non_zero(self):
        """A zero hash is replaced so the state is never zero."""
        assert hash_seed("") == 1

    def test_hash_is_positive_32_bit(self):
        """Hashes of long seeds are positive and fit in 32 bits."""
        for seed in ["fantasy-world", "a much longer seed string with spaces", "ÄÖÜ-ß"]:
            value = hash_seed(seed)
            assert 0 < value <= 2 ** 31

    def test_numeric_seeds(self):
        """Numbers are used directly as the 32-bit state."""
        assert Mulberry32PRNG(5).state == 5
        assert Mulberry32PRNG(-1).state == 0xFFFFFFFF
        assert Mulberry32PRNG(0).state == 1


class TestMulberry32PRNG:
    """Test generator behaviour."""

    def test_deterministic_sequence(self):
        """Same seed yields the same sequence."""
        prng1 = Mulberry32PRNG("fantasy-world")
        prng2 = Mulberry32PRNG("fantasy-world")

        assert [prng1.random() for _ in range(20)] == [prng2.random() for _ in range(20)]

    def test_different_seeds_differ(self):
        """Different seeds yield different sequences."""
        prng1 = Mulberry32PRNG("alpha")
        prng2 = Mulberry32PRNG("beta")

        assert [prng1.random() for _ in range(5)] != [prng2.random() for _ in range(5)]

    def test_range(self):
        """Draws lie in [0, 1)."""
        prng = Mulberry32PRNG("range")
        values = [prng.random() for _ in range(1000)]

        assert min(values) >= 0.0
        assert max(values) < 1.0

    def test_next_alias(self):
        """next() is the same draw as random()."""
        prng1 = Mulberry32PRNG("alias")
        prng2 = Mulberry32PRNG("alias")

        assert prng1.next() == prng2.random()

    def test_call_count(self):
        """Every draw is counted."""
        prng = Mulberry32PRNG("count")
        prng.random()
        prng.uniform(0, 10)
        prng.chance(0.5)

        assert prng.call_count == 3

    def test_randint_inclusive(self):
        """randint covers both bounds and nothing outside them."""
        prng = Mulberry32PRNG("ints")
        values = {prng.randint(1, 3) for _ in range(1000)}

        assert values == {1, 2, 3}

    def test_uniform_bounds(self):
        """uniform stays in [min, max)."""
        prng = Mulberry32PRNG("uniform")
        values = [prng.uniform(0.3, 0.9) for _ in range(500)]

        assert all(0.3 <= v < 0.9 for v in values)

    def test_chance_extremes(self):
        """Probability 0 never succeeds and 1 always does."""
        prng = Mulberry32PRNG("chance")

        assert not any(prng.chance(0.0) for _ in range(100))
        assert all(prng.chance(1.0) for _ in range(100))

    def test_choice(self):
        """choice picks from the sequence and rejects empty ones."""
        prng = Mulberry32PRNG("choice")
        items = ["a", "b", "c"]

        assert all(prng.choice(items) in items for _ in range(50))
        with pytest.raises(IndexError):
            prng.choice([])

    def test_shuffle_is_permutation(self):
        """shuffle reorders in place without losing items."""
        prng = Mulberry32PRNG("shuffle")
        items = list(range(20))
        result = prng.shuffle(items)

        assert result is items
        assert sorted(items) == list(range(20))

    def test_gaussian_distribution(self):
        """Gaussian draws centre on the requested mean."""
        prng = Mulberry32PRNG("gauss")
        values = np.array([prng.gaussian(5.0, 2.0) for _ in range(2000)])

        assert abs(values.mean() - 5.0) < 0.3
        assert 1.5 < values.std() < 2.5

    def test_random_array_matches_draws(self):
        """random_array returns sequential draws."""
        prng1 = Mulberry32PRNG("array")
        prng2 = Mulberry32PRNG("array")

        values = prng1.random_array(10)

        assert values.dtype == np.float64
        assert values.tolist() == [prng2.random() for _ in range(10)]


class TestFork:
    """Test forked sub-streams."""

    def test_fork_consumes_one_draw(self):
        """Forking advances the parent by exactly one draw."""
        parent1 = Mulberry32PRNG("fork")
        parent2 = Mulberry32PRNG("fork")

        parent1.fork()
        parent2.random()

        assert parent1.random() == parent2.random()

    def test_fork_is_deterministic(self):
        """Forks from identical parents are identical."""
        child1 = Mulberry32PRNG("fork").fork()
        child2 = Mulberry32PRNG("fork").fork()

        assert [child1.random() for _ in range(10)] == [child2.random() for _ in range(10)]

    def test_child_independent_of_parent_usage(self):
        """Draining a child does not affect the parent's next fork."""
        parent1 = Mulberry32PRNG("streams")
        parent2 = Mulberry32PRNG("streams")

        child = parent1.fork()
        for _ in range(100):
            child.random()
        parent2.fork()

        assert parent1.fork().random() == parent2.fork().random()
