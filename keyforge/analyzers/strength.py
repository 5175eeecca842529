"""
Strength Analyzer
==================

Scores a password or passphrase by combinatorial entropy, maps it to a
discrete level, computes a bounded composite score, estimates crack time
and produces deterministic feedback.

Entropy model:

.. math::

    H = L \\cdot \\log_2(N)

where *L* is the length and *N* the sum of fixed class sizes (upper 26,
lower 26, digits 10, symbols 32) over the classes actually present in the
string, not the classes that were requested at generation time.

Composite score (capped at 100):

- length bonus ``min(2L, 30)``
- 10 points per character class present
- diversity bonus ``round(unique / L * 20)`` (half rounds up)
- entropy bonus 10 / 7 / 4 / 0 for ``H >= 128 / >= 60 / >= 36 / else``

References:
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
    - NIST SP 800-63B (2017). Digital Identity Guidelines, Appendix A.
    - Florencio, D. & Herley, C. (2007). A Large-Scale Study of Web
      Password Habits. WWW '07.
"""

from __future__ import annotations

import math
from typing import Optional

from shared.logger import ForgeLogger

from keyforge.analyzers.crack_time import (
    DEFAULT_ATTEMPTS_PER_SECOND,
    INSTANT,
    estimate_time_to_crack,
)
from keyforge.core.models import StrengthLevel, StrengthResult

logger = ForgeLogger("analyzers.strength")

UPPER_POOL = 26
LOWER_POOL = 26
DIGIT_POOL = 10
SYMBOL_POOL = 32

MIN_RECOMMENDED_LENGTH = 8
EXCELLENT_LENGTH = 16
MIN_UNIQUE_RATIO = 0.5

EMPTY_WARNING = "Password is empty."


def _class_presence(password: str) -> tuple[bool, bool, bool, bool]:
    return (
        any(c.isupper() for c in password),
        any(c.islower() for c in password),
        any(c.isdigit() for c in password),
        any(not c.isalnum() for c in password),
    )


def _has_repeated_run(password: str) -> bool:
    return any(
        password[i] == password[i + 1] == password[i + 2]
        for i in range(len(password) - 2)
    )


def _has_sequential_run(password: str) -> bool:
    for i in range(len(password) - 2):
        a, b, c = (ord(ch) for ch in password[i:i + 3])
        step = b - a
        if abs(step) == 1 and c - b == step:
            return True
    return False


class StrengthAnalyzer:
    """Analyses secrets and estimates how long they resist brute force.

    Usage::

        analyzer = StrengthAnalyzer()
        result = analyzer.analyze("Tr0ub4dor&3")
        print(result.level.label, result.entropy, result.time_to_crack)

    Args:
        attempts_per_second: Assumed adversary guess rate.
    """

    def __init__(
        self, attempts_per_second: float = DEFAULT_ATTEMPTS_PER_SECOND
    ) -> None:
        self._attempts_per_second = attempts_per_second

    @property
    def attempts_per_second(self) -> float:
        return self._attempts_per_second

    # ------------------------------------------------------------------ #
    #  Public API
    # ------------------------------------------------------------------ #

    def analyze(self, password: str) -> StrengthResult:
        """Analyse *password*. Never raises; empty input is VERY_WEAK."""
        if not password:
            return self._empty_result()
        return self._build_result(password, self.calculate_entropy(password))

    def from_entropy(self, value: str, entropy: float) -> StrengthResult:
        """Analyse *value* using an analytically computed *entropy*.

        Level, score bonus and crack time follow *entropy*; class flags,
        uniqueness and feedback come from the realised string.
        """
        if not value:
            return self._empty_result()
        return self._build_result(value, round(max(entropy, 0.0), 2))

    def calculate_entropy(self, password: str) -> float:
        """Combinatorial entropy in bits, rounded to 2 decimals."""
        if not password:
            return 0.0
        upper, lower, digit, symbol = _class_presence(password)
        pool = (
            (UPPER_POOL if upper else 0)
            + (LOWER_POOL if lower else 0)
            + (DIGIT_POOL if digit else 0)
            + (SYMBOL_POOL if symbol else 0)
        )
        return round(len(password) * math.log2(pool or 1), 2)

    def estimate_time_to_crack(self, entropy: float) -> str:
        return estimate_time_to_crack(entropy, self._attempts_per_second)

    def generate_feedback(
        self, password: str, level: Optional[StrengthLevel] = None
    ) -> tuple[list[str], list[str]]:
        """Return ``(feedback, warnings)`` for *password*.

        Rules are evaluated in a fixed order, so the lists are stable for
        a given input. *level* defaults to the level of the password's
        own combinatorial entropy.
        """
        if not password:
            return [], [EMPTY_WARNING]
        if level is None:
            level = StrengthLevel.from_entropy(self.calculate_entropy(password))

        feedback: list[str] = []
        warnings: list[str] = []
        length = len(password)

        if length < MIN_RECOMMENDED_LENGTH:
            warnings.append(
                f"Password is too short. Use at least {MIN_RECOMMENDED_LENGTH} characters."
            )
        if length >= EXCELLENT_LENGTH:
            feedback.append("Excellent length!")

        upper, lower, digit, symbol = _class_presence(password)
        if not upper:
            warnings.append("Consider adding uppercase letters.")
        if not lower:
            warnings.append("Consider adding lowercase letters.")
        if not digit:
            warnings.append("Consider adding numbers.")
        if not symbol:
            warnings.append("Consider adding special characters.")

        if _has_repeated_run(password):
            warnings.append("Contains repeated characters (e.g. 'aaa', '111').")
        if _has_sequential_run(password):
            warnings.append("Contains sequential characters (e.g. 'abc', '321').")

        if level >= StrengthLevel.STRONG:
            feedback.append("Great! This is a very strong password.")
        elif level == StrengthLevel.MODERATE:
            feedback.append("Good password, but it could be stronger.")

        if len(set(password)) / length < MIN_UNIQUE_RATIO:
            warnings.append("Too many repeated characters overall.")

        return feedback, warnings

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    def _empty_result(self) -> StrengthResult:
        return StrengthResult(
            level=StrengthLevel.VERY_WEAK,
            entropy=0.0,
            score=0,
            time_to_crack=INSTANT,
            warnings=[EMPTY_WARNING],
        )

    def _build_result(self, password: str, entropy: float) -> StrengthResult:
        upper, lower, digit, symbol = _class_presence(password)
        unique = len(set(password))
        level = StrengthLevel.from_entropy(entropy)
        feedback, warnings = self.generate_feedback(password, level)

        result = StrengthResult(
            level=level,
            entropy=entropy,
            score=self._score(len(password), unique, (upper, lower, digit, symbol), entropy),
            time_to_crack=self.estimate_time_to_crack(entropy),
            has_uppercase=upper,
            has_lowercase=lower,
            has_numbers=digit,
            has_symbols=symbol,
            unique_characters=unique,
            feedback=feedback,
            warnings=warnings,
        )
        logger.debug(
            "Analysed secret: length=%d entropy=%.2f level=%s score=%d",
            len(password),
            entropy,
            level.label,
            result.score,
        )
        return result

    @staticmethod
    def _score(
        length: int,
        unique: int,
        classes: tuple[bool, bool, bool, bool],
        entropy: float,
    ) -> int:
        score = min(length * 2, 30)
        score += 10 * sum(classes)
        score += math.floor(unique / length * 20 + 0.5)
        if entropy >= 128:
            score += 10
        elif entropy >= 60:
            score += 7
        elif entropy >= 36:
            score += 4
        return min(score, 100)
