"""
Crack-Time Estimation
======================

Converts entropy bits into a human-readable average brute-force time.

The attacker is assumed to search half the keyspace on average:

.. math::

    t = \\frac{2^{H} / 2}{r}

with *r* guesses per second (default ``1e11``, an offline attack on a GPU
cluster). The computation runs in log space so entropies far beyond the
float range never overflow.

The duration is formatted with an ordered lookup table of
``(upper_bound_seconds, unit_seconds, unit)`` rows; the first row whose
bound exceeds the duration wins and the count is rounded up.

References:
    - NIST SP 800-63B (2017), Appendix A: Strength of Memorized Secrets.
    - Bonneau, J. (2012). The Science of Guessing. IEEE S&P.
"""

from __future__ import annotations

import math
from typing import NamedTuple

DEFAULT_ATTEMPTS_PER_SECOND: float = 1e11

INSTANT = "instant"
BEYOND_UNIVERSE = "longer than the age of the universe"

_MINUTE = 60.0
_HOUR = 3_600.0
_DAY = 86_400.0
_MONTH = 30 * _DAY
_YEAR = 365 * _DAY


class CrackTimeUnit(NamedTuple):
    """One row of the crack-time table."""

    upper_bound: float
    unit_seconds: float
    singular: str
    plural: str


CRACK_TIME_TABLE: tuple[CrackTimeUnit, ...] = (
    CrackTimeUnit(_MINUTE, 1.0, "second", "seconds"),
    CrackTimeUnit(_HOUR, _MINUTE, "minute", "minutes"),
    CrackTimeUnit(_DAY, _HOUR, "hour", "hours"),
    CrackTimeUnit(30 * _DAY, _DAY, "day", "days"),
    CrackTimeUnit(_YEAR, _MONTH, "month", "months"),
    CrackTimeUnit(1e3 * _YEAR, _YEAR, "year", "years"),
    CrackTimeUnit(1e6 * _YEAR, 1e3 * _YEAR, "thousand years", "thousand years"),
    CrackTimeUnit(1e9 * _YEAR, 1e6 * _YEAR, "million years", "million years"),
)

_LOG10_LAST_BOUND = math.log10(CRACK_TIME_TABLE[-1].upper_bound)


def log10_seconds_to_crack(
    entropy: float, attempts_per_second: float = DEFAULT_ATTEMPTS_PER_SECOND
) -> float:
    """``log10`` of the average crack time in seconds for *entropy* bits."""
    return (entropy - 1.0) * math.log10(2.0) - math.log10(attempts_per_second)


def format_duration(seconds: float) -> str:
    """Format *seconds* using :data:`CRACK_TIME_TABLE`."""
    if seconds < 1.0:
        return INSTANT
    for row in CRACK_TIME_TABLE:
        if seconds < row.upper_bound:
            count = math.ceil(seconds / row.unit_seconds)
            unit = row.singular if count == 1 else row.plural
            return f"{count} {unit}"
    return BEYOND_UNIVERSE


def estimate_time_to_crack(
    entropy: float, attempts_per_second: float = DEFAULT_ATTEMPTS_PER_SECOND
) -> str:
    """Human-readable average time to brute-force *entropy* bits.

    Returns ``"instant"`` for non-positive entropy.
    """
    if entropy <= 0:
        return INSTANT
    log_seconds = log10_seconds_to_crack(entropy, attempts_per_second)
    if log_seconds >= _LOG10_LAST_BOUND:
        return BEYOND_UNIVERSE
    return format_duration(10.0 ** log_seconds)
