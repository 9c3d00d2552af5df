"""Tests for the seeded xorshift stream."""

import pytest

from civcascade.core.rng import DeterministicRandom, fold_seed


class TestSeedFolding:
    def test_integer_seed_is_masked_to_32_bits(self):
        assert fold_seed(42) == 42
        assert fold_seed(-1) == 0xFFFFFFFF
        assert fold_seed(1 << 32) == 0

    def test_string_seed_hash(self):
        assert fold_seed("a") == 97
        assert fold_seed("ab") == (97 * 31 + 98)

    def test_zero_state_is_replaced(self):
        rng = DeterministicRandom(0)
        assert rng.state == 0x9E3779B9
        assert rng.next() > 0.0

    def test_empty_string_seed_is_replaced(self):
        assert DeterministicRandom("").state == 0x9E3779B9


class TestStream:
    def test_first_step_from_seed_one(self):
        rng = DeterministicRandom(1)
        value = rng.next()
        assert rng.state == 270369
        assert value == pytest.approx(270369 / 2**32)

    def test_values_in_unit_interval(self):
        rng = DeterministicRandom("unit")
        for _ in range(2000):
            v = rng.next()
            assert 0.0 <= v < 1.0

    def test_same_seed_same_sequence(self):
        a = DeterministicRandom("replay")
        b = DeterministicRandom("replay")
        assert [a.next() for _ in range(50)] == [b.next() for _ in range(50)]

    def test_different_seeds_diverge(self):
        a = DeterministicRandom(1)
        b = DeterministicRandom(2)
        assert [a.next() for _ in range(5)] != [b.next() for _ in range(5)]


class TestHelpers:
    def test_int_between_is_inclusive(self):
        rng = DeterministicRandom(7)
        seen = {rng.int_between(0, 4) for _ in range(500)}
        assert seen == {0, 1, 2, 3, 4}

    def test_int_between_degenerate_range(self):
        rng = DeterministicRandom(7)
        assert all(rng.int_between(3, 3) == 3 for _ in range(20))

    def test_pick_returns_member(self):
        rng = DeterministicRandom(9)
        values = ["a", "b", "c"]
        for _ in range(50):
            assert rng.pick(values) in values

    def test_pick_empty_raises(self):
        with pytest.raises(ValueError):
            DeterministicRandom(9).pick([])

    def test_repr_shows_seed(self):
        assert "seed='x'" in repr(DeterministicRandom("x"))
