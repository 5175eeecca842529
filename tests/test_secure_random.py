"""Tests for keyforge.generators.secure_random."""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from shared.math_utils import chi_squared_test, frequency_counts

from keyforge.core.errors import InvalidArgument
from keyforge.generators.secure_random import UINT32_MAX, SecureRandomSource

from tests.conftest import ScriptedEntropy


class TestRandomInt:

    def test_result_within_range(self, secure_random):
        for _ in range(500):
            value = secure_random.random_int(10, 17)
            assert 10 <= value < 17

    def test_draws_above_limit_are_rejected(self):
        # For a span of 10 the limit is 2**32 - 1 - 5; both leading draws
        # fall in the rejected tail.
        source = SecureRandomSource(ScriptedEntropy([UINT32_MAX, UINT32_MAX - 5, 7]))
        assert source.random_int(0, 10) == 7

    def test_offset_is_applied(self):
        source = SecureRandomSource(ScriptedEntropy([3]))
        assert source.random_int(100, 110) == 103

    @pytest.mark.parametrize("low,high", [(5, 5), (6, 5)])
    def test_empty_range_rejected(self, secure_random, low, high):
        with pytest.raises(InvalidArgument):
            secure_random.random_int(low, high)

    def test_range_wider_than_source_rejected(self, secure_random):
        with pytest.raises(InvalidArgument):
            secure_random.random_int(0, UINT32_MAX + 1)

    def test_every_bucket_is_reachable(self, secure_random):
        seen = Counter(secure_random.random_int(0, 6) for _ in range(3000))
        assert set(seen) == set(range(6))

    def test_system_source_is_uniform(self, secure_random):
        draws = 100_000
        observed = frequency_counts(
            [secure_random.random_int(0, 7) for _ in range(draws)], 7
        )
        _, p_value = chi_squared_test(observed, np.full(7, draws / 7))
        # fails spuriously once in ten thousand runs
        assert p_value >= 1e-4


class TestRandomBytes:

    def test_length(self, secure_random):
        assert len(secure_random.random_bytes(33)) == 33

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_count_rejected(self, secure_random, count):
        with pytest.raises(InvalidArgument):
            secure_random.random_bytes(count)


class TestSequences:

    def test_shuffle_is_a_permutation(self, secure_random):
        items = list(range(50))
        secure_random.shuffle(items)
        assert sorted(items) == list(range(50))

    def test_shuffle_handles_trivial_inputs(self, secure_random):
        empty: list[int] = []
        single = ["x"]
        secure_random.shuffle(empty)
        secure_random.shuffle(single)
        assert empty == [] and single == ["x"]

    def test_choice_uses_index_draw(self):
        source = SecureRandomSource(ScriptedEntropy([2]))
        assert source.choice("abcd") == "c"

    def test_choice_on_empty_sequence(self, secure_random):
        with pytest.raises(InvalidArgument):
            secure_random.choice([])
