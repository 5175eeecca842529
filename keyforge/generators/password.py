"""
Password Generator
===================

Random passwords, pattern passwords and PINs.

Per-class minimum counts are satisfied constructively: every position is
shuffled once, and the permutation is consumed without replacement, first
for the required uppercase positions, then lowercase, digit and symbol.
Each reserved position receives a uniform character of its class; every
remaining position receives a uniform character of the full alphabet. A
reserved position is never touched again, so a later class can never
undo an earlier class's minimum.

Pattern templates map ``X`` to an uppercase letter, ``x`` to a lowercase
letter, ``9`` to a digit, ``@`` to a symbol and ``A`` to any letter; every
other character is copied through unchanged (``"XXX-999-xxx"`` gives
e.g. ``"KQM-418-vhz"``).
"""

from __future__ import annotations

from shared.logger import ForgeLogger

from keyforge.analyzers.strength import StrengthAnalyzer
from keyforge.core.errors import InvalidArgument, InvalidOptions
from keyforge.core.models import GeneratedPassword, GenerationKind, PasswordOptions
from keyforge.generators.charset import (
    DIGITS,
    LOWERCASE,
    SYMBOLS,
    UPPERCASE,
    CharClass,
    CharsetBuilder,
)
from keyforge.generators.secure_random import SecureRandomSource

logger = ForgeLogger("generators.password")

MIN_LENGTH = 4
MAX_LENGTH = 128
MAX_BULK_COUNT = 100

PATTERN_MAP: dict[str, str] = {
    "X": UPPERCASE,
    "x": LOWERCASE,
    "9": DIGITS,
    "@": SYMBOLS,
    "A": UPPERCASE + LOWERCASE,
}


class PasswordGenerator:
    """Generates random passwords from :class:`PasswordOptions`.

    Args:
        random_source: Secure random source (a fresh one by default).
        analyzer: Strength analyzer applied to every result.
        charset_builder: Alphabet builder.
    """

    def __init__(
        self,
        random_source: SecureRandomSource | None = None,
        analyzer: StrengthAnalyzer | None = None,
        charset_builder: CharsetBuilder | None = None,
    ) -> None:
        self._random = random_source or SecureRandomSource()
        self._analyzer = analyzer or StrengthAnalyzer()
        self._charsets = charset_builder or CharsetBuilder()

    # ------------------------------------------------------------------ #
    #  Standard passwords
    # ------------------------------------------------------------------ #

    def generate(self, options: PasswordOptions) -> GeneratedPassword:
        """Generate one password.

        Raises:
            InvalidOptions: If the options are out of range or inconsistent.
            EmptyAlphabet: If exclusions leave nothing to draw from.
        """
        self.validate(options)
        value = self._draw(options)
        return self._finish(value, GenerationKind.STANDARD, options=options)

    def generate_bulk(
        self, options: PasswordOptions, count: int
    ) -> list[GeneratedPassword]:
        """Generate *count* independent passwords (1 to 100).

        Raises:
            InvalidArgument: If *count* is out of range.
        """
        if not 1 <= count <= MAX_BULK_COUNT:
            raise InvalidArgument(
                f"Count must be between 1 and {MAX_BULK_COUNT}, got {count}"
            )
        self.validate(options)
        return [self.generate(options) for _ in range(count)]

    @staticmethod
    def validate(options: PasswordOptions) -> None:
        """Check *options* without consuming randomness.

        Raises:
            InvalidOptions: On the first violated constraint.
        """
        if not MIN_LENGTH <= options.length <= MAX_LENGTH:
            raise InvalidOptions(
                f"Password length must be between {MIN_LENGTH} and "
                f"{MAX_LENGTH}, got {options.length}"
            )
        if not options.has_character_source:
            raise InvalidOptions(
                "At least one character type must be selected"
            )
        minimums = (
            options.min_uppercase,
            options.min_lowercase,
            options.min_numbers,
            options.min_symbols,
        )
        if any(m < 0 for m in minimums):
            raise InvalidOptions("Minimum character counts cannot be negative")
        if options.minimum_total > options.length:
            raise InvalidOptions(
                f"Sum of minimum requirements ({options.minimum_total}) "
                f"exceeds password length ({options.length})"
            )

    def _draw(self, options: PasswordOptions) -> str:
        alphabet = self._charsets.build_alphabet(options)
        quotas = (
            (CharClass.UPPER, options.min_uppercase),
            (CharClass.LOWER, options.min_lowercase),
            (CharClass.DIGIT, options.min_numbers),
            (CharClass.SYMBOL, options.min_symbols),
        )
        # Resolve every pool up front so EmptyAlphabet precedes any draw.
        pools = {
            char_class: self._charsets.class_pool(char_class, options)
            for char_class, minimum in quotas
            if minimum > 0
        }

        positions = list(range(options.length))
        self._random.shuffle(positions)
        order = iter(positions)

        chars: list[str | None] = [None] * options.length
        for char_class, minimum in quotas:
            for _ in range(minimum):
                chars[next(order)] = self._random.choice(pools[char_class])
        for position in order:
            chars[position] = self._random.choice(alphabet)

        return "".join(c for c in chars if c is not None)

    # ------------------------------------------------------------------ #
    #  Patterns and PINs
    # ------------------------------------------------------------------ #

    def generate_from_pattern(self, pattern: str) -> GeneratedPassword:
        """Generate a password from a template such as ``"XXX-999-xxx"``.

        Raises:
            InvalidArgument: If *pattern* is empty or whitespace only.
        """
        if not pattern or not pattern.strip():
            raise InvalidArgument("Pattern cannot be empty")

        value = "".join(
            self._random.choice(PATTERN_MAP[ch]) if ch in PATTERN_MAP else ch
            for ch in pattern
        )
        return self._finish(value, GenerationKind.PATTERN, pattern=pattern)

    def generate_pin(self, length: int = 6) -> GeneratedPassword:
        """Generate a digits-only PIN of *length* (4 to 128).

        Raises:
            InvalidOptions: If *length* is out of range.
        """
        options = PasswordOptions(
            length=length,
            include_uppercase=False,
            include_lowercase=False,
            include_numbers=True,
            include_symbols=False,
        )
        self.validate(options)
        value = "".join(self._random.choice(DIGITS) for _ in range(length))
        return self._finish(value, GenerationKind.PIN, options=options)

    def _finish(
        self,
        value: str,
        kind: GenerationKind,
        *,
        options: PasswordOptions | None = None,
        pattern: str | None = None,
    ) -> GeneratedPassword:
        strength = self._analyzer.analyze(value)
        logger.debug(
            "Generated %s secret: length=%d entropy=%.2f level=%s",
            kind.value,
            len(value),
            strength.entropy,
            strength.level.label,
        )
        return GeneratedPassword(
            kind=kind.value,
            value=value,
            strength=strength,
            options=options,
            pattern=pattern,
        )
