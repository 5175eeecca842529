"""Tests for keyforge.analyzers.rng_audit and shared.math_utils."""

from __future__ import annotations

import numpy as np
import pytest

from shared.math_utils import chi_squared_test, frequency_counts, shannon_entropy

from keyforge.analyzers.rng_audit import RandomnessAuditor
from keyforge.core.errors import InvalidArgument
from keyforge.generators.secure_random import SecureRandomSource

from tests.conftest import ScriptedEntropy


class TestMathUtils:

    def test_frequency_counts(self):
        counts = frequency_counts([0, 2, 2, 3], 5)
        assert counts.tolist() == [1.0, 0.0, 2.0, 1.0, 0.0]

    @pytest.mark.parametrize("samples,bins", [([1], 0), ([5], 5), ([-1], 3)])
    def test_frequency_counts_rejects_bad_input(self, samples, bins):
        with pytest.raises(ValueError):
            frequency_counts(samples, bins)

    def test_shannon_entropy_bounds(self):
        assert shannon_entropy(b"") == 0.0
        assert shannon_entropy(b"\x00" * 64) == 0.0
        assert shannon_entropy(bytes(range(256))) == pytest.approx(8.0)

    def test_chi_squared_perfect_fit(self):
        chi2, p = chi_squared_test(np.full(4, 25.0), np.full(4, 25.0))
        assert chi2 == 0.0
        assert p == 1.0

    def test_chi_squared_known_value(self):
        # one degree of freedom: p = erfc(sqrt(5))
        chi2, p = chi_squared_test(np.array([30.0, 10.0]), np.array([20.0, 20.0]))
        assert chi2 == pytest.approx(10.0)
        assert p == pytest.approx(0.001565, abs=1e-5)

    def test_chi_squared_shape_mismatch(self):
        with pytest.raises(ValueError):
            chi_squared_test(np.ones(3), np.ones(4))


class TestRandomnessAuditor:

    def test_balanced_source_passes(self, balanced_random):
        audit = RandomnessAuditor(balanced_random).run(
            buckets=8, int_samples=800, byte_samples=1_024
        )
        assert audit.passed
        assert all(check.p_value == 1.0 for check in audit.checks)
        assert audit.byte_entropy == 8.0
        assert audit.checks[0].bins == 8
        assert audit.checks[1].bins == 256

    def test_constant_source_fails(self):
        audit = RandomnessAuditor(SecureRandomSource(ScriptedEntropy([0]))).run(
            buckets=4, int_samples=400, byte_samples=512
        )
        assert not audit.passed
        assert audit.byte_entropy == 0.0
        assert not any(check.passed for check in audit.checks)

    def test_system_source_produces_sane_report(self, secure_random):
        audit = RandomnessAuditor(secure_random).run(
            buckets=6, int_samples=600, byte_samples=2_560
        )
        assert len(audit.checks) == 2
        assert all(check.p_value >= 1e-4 for check in audit.checks)
        assert 7.0 < audit.byte_entropy <= 8.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"buckets": 1},
            {"buckets": 10, "int_samples": 5},
            {"byte_samples": 100},
        ],
    )
    def test_invalid_parameters(self, balanced_random, kwargs):
        with pytest.raises(InvalidArgument):
            RandomnessAuditor(balanced_random).run(**kwargs)
