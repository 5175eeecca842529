"""
Randomness Self-Test
=====================

Chi-squared uniformity checks of :class:`SecureRandomSource`:

1. ``random_int`` -- *n* draws over ``[0, k)`` against the uniform
   expectation ``n / k`` per bucket (``k - 1`` degrees of freedom).
2. ``random_bytes`` -- *m* bytes against ``m / 256`` per byte value
   (255 degrees of freedom).

A check passes when its p-value is at least ``alpha`` (0.01). The audit
also reports the Shannon entropy of the byte sample, which approaches
8 bits per byte for a healthy source.

The test is a smoke check that the rejection sampler and the entropy
source are wired correctly, not a certification of the OS CSPRNG. At
``alpha = 0.01`` a correct source fails a single check about once in a
hundred runs.

References:
    - Pearson, K. (1900). On the Criterion that a Given System of
      Deviations ... Philosophical Magazine, 50(302), 157-175.
    - Knuth, D. E. (1997). The Art of Computer Programming, Vol. 2,
      Section 3.3.1: General Test Procedures (chi-square test).
    - NIST SP 800-22 Rev. 1a (2010).
"""

from __future__ import annotations

import numpy as np

from shared.logger import ForgeLogger
from shared.math_utils import chi_squared_test, frequency_counts, shannon_entropy

from keyforge.core.errors import InvalidArgument
from keyforge.core.models import AuditCheck, RandomnessAudit
from keyforge.generators.secure_random import SecureRandomSource

logger = ForgeLogger("analyzers.rng_audit")

DEFAULT_ALPHA = 0.01
DEFAULT_BUCKETS = 10
DEFAULT_INT_SAMPLES = 10_000
DEFAULT_BYTE_SAMPLES = 25_600


class RandomnessAuditor:
    """Runs uniformity checks against a :class:`SecureRandomSource`."""

    def __init__(
        self,
        random_source: SecureRandomSource | None = None,
        *,
        alpha: float = DEFAULT_ALPHA,
    ) -> None:
        self._random = random_source or SecureRandomSource()
        self._alpha = alpha

    def run(
        self,
        *,
        buckets: int = DEFAULT_BUCKETS,
        int_samples: int = DEFAULT_INT_SAMPLES,
        byte_samples: int = DEFAULT_BYTE_SAMPLES,
    ) -> RandomnessAudit:
        """Run both checks and return the report.

        Raises:
            InvalidArgument: If a sample size is smaller than the bin count
                or fewer than two buckets are requested.
        """
        if buckets < 2:
            raise InvalidArgument("At least two buckets are required")
        if int_samples < buckets or byte_samples < 256:
            raise InvalidArgument(
                "Sample sizes must be at least the number of bins"
            )

        draws = [self._random.random_int(0, buckets) for _ in range(int_samples)]
        int_check = self._check("random_int", frequency_counts(draws, buckets), int_samples)

        data = self._random.random_bytes(byte_samples)
        byte_counts = frequency_counts(np.frombuffer(data, dtype=np.uint8), 256)
        byte_check = self._check("random_bytes", byte_counts, byte_samples)

        audit = RandomnessAudit(
            alpha=self._alpha,
            checks=[int_check, byte_check],
            byte_entropy=round(shannon_entropy(data), 4),
        )
        logger.info(
            "Randomness audit %s (p=%.4f, p=%.4f)",
            "passed" if audit.passed else "FAILED",
            int_check.p_value,
            byte_check.p_value,
        )
        return audit

    def _check(self, name: str, observed: np.ndarray, samples: int) -> AuditCheck:
        bins = len(observed)
        expected = np.full(bins, samples / bins)
        chi2, p_value = chi_squared_test(observed, expected)
        return AuditCheck(
            name=name,
            bins=bins,
            sample_size=samples,
            chi_squared=round(chi2, 4),
            p_value=round(p_value, 6),
            passed=p_value >= self._alpha,
        )
