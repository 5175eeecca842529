"""
KeyForge Statistics Helpers
===========================

The few numerical routines the randomness self-test needs: bucket
counts, byte-level Shannon entropy and a chi-squared goodness-of-fit
test. The chi-squared tail probability is computed here from the
regularised incomplete gamma function so SciPy is not required.

References:
    [1] Shannon, C. E. (1948). A Mathematical Theory of Communication.
        Bell System Technical Journal, 27(3), 379-423.
    [2] Pearson, K. (1900). On the criterion that a given system of
        deviations from the probable ... Philosophical Magazine, 50, 157-175.
    [3] Press, W. H. et al. (2007). Numerical Recipes (3rd ed.), sec. 6.2.
    [4] NIST SP 800-22 Rev. 1a (2010), sec. 2.2 and 3.2.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

_EPS = 1e-15
_MAX_TERMS = 500
_TINY = 1e-300


def frequency_counts(samples: Sequence[int], bins: int) -> NDArray[np.float64]:
    """Count how often each value in ``range(bins)`` occurs in *samples*.

    Raises:
        ValueError: *bins* is not positive, or a sample lies outside
            ``[0, bins)``.
    """
    if bins < 1:
        raise ValueError("bins must be > 0")
    values = np.asarray(samples, dtype=np.int64)
    if values.size and not (0 <= values.min() and values.max() < bins):
        raise ValueError(f"samples must lie in [0, {bins})")
    return np.bincount(values, minlength=bins).astype(np.float64)


def shannon_entropy(data: bytes) -> float:
    """Bits of entropy per byte of *data*, from 0.0 to 8.0 (0.0 when empty)."""
    if not data:
        return 0.0
    counts = np.bincount(np.frombuffer(data, dtype=np.uint8))
    p = counts[counts > 0] / len(data)
    return float(-(p * np.log2(p)).sum())


def chi_squared_test(observed: ArrayLike, expected: ArrayLike) -> tuple[float, float]:
    """Pearson's goodness-of-fit statistic and its p-value.

    With ``k`` categories the statistic is compared against a chi-squared
    distribution with ``k - 1`` degrees of freedom; the p-value is
    ``Q((k - 1) / 2, chi2 / 2)``, the same number ``scipy.stats.chi2.sf``
    returns. A single category has no freedom and gets p = 1.

    Raises:
        ValueError: Shapes differ or an expected count is not positive.
    """
    obs = np.asarray(observed, dtype=np.float64)
    exp = np.asarray(expected, dtype=np.float64)
    if obs.shape != exp.shape:
        raise ValueError("observed and expected must have the same shape")
    if (exp <= 0).any():
        raise ValueError("expected counts must be > 0")

    statistic = float((((obs - exp) ** 2) / exp).sum())
    dof = obs.size - 1
    if dof < 1:
        return statistic, 1.0
    return statistic, gamma_q(dof / 2.0, statistic / 2.0)


# ------------------------- incomplete gamma ------------------------------- #


def gamma_q(a: float, x: float) -> float:
    """Regularised upper incomplete gamma ``Q(a, x)``."""
    if a <= 0.0 or x <= 0.0:
        return 1.0
    prefix = math.exp(a * math.log(x) - x - math.lgamma(a))
    if x < a + 1.0:
        # series for P(a, x), converges fast below a + 1
        term = total = 1.0 / a
        n = a
        for _ in range(_MAX_TERMS):
            n += 1.0
            term *= x / n
            total += term
            if abs(term) < abs(total) * _EPS:
                break
        return max(0.0, 1.0 - total * prefix)

    # modified Lentz continued fraction for Q(a, x)
    b = x + 1.0 - a
    c = 1.0 / _TINY
    d = 1.0 / b
    h = d
    for i in range(1, _MAX_TERMS):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        d = 1.0 / (d if abs(d) >= _TINY else _TINY)
        c = b + an / c
        if abs(c) < _TINY:
            c = _TINY
        step = d * c
        h *= step
        if abs(step - 1.0) < _EPS:
            break
    return h * prefix
