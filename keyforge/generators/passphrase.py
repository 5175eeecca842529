"""
Passphrase Generator
=====================

Diceware-style passphrases: words drawn uniformly, with replacement,
from a per-language dictionary, optionally capitalised, joined with a
separator and followed by an optional digit and symbol.

Entropy is analytic rather than measured on the realised string:

.. math::

    H = W \\cdot \\log_2(n) + [\\text{digit}] \\log_2 10 + [\\text{symbol}] \\log_2 7

with *W* words drawn from *n* candidates.

References:
    - Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
    - Munroe, R. (2011). xkcd 936: Password Strength.
"""

from __future__ import annotations

import math

from shared.logger import ForgeLogger

from keyforge.analyzers.strength import StrengthAnalyzer
from keyforge.collectors.wordlist import BundledWordListProvider, WordListCache
from keyforge.core.errors import InvalidOptions
from keyforge.core.models import GeneratedPassphrase, PassphraseOptions
from keyforge.generators.charset import DIGITS, PASSPHRASE_SYMBOLS
from keyforge.generators.secure_random import SecureRandomSource

logger = ForgeLogger("generators.passphrase")


def passphrase_entropy(
    candidates: int, word_count: int, *, with_number: bool, with_symbol: bool
) -> float:
    """Analytic entropy in bits, rounded to 2 decimals."""
    bits = math.log2(candidates) * word_count if candidates > 0 else 0.0
    if with_number:
        bits += math.log2(len(DIGITS))
    if with_symbol:
        bits += math.log2(len(PASSPHRASE_SYMBOLS))
    return round(bits, 2)


class PassphraseGenerator:
    """Generates passphrases from cached word lists.

    Args:
        word_lists: Cache in front of the word-list provider.
        random_source: Secure random source.
        analyzer: Strength analyzer used for level, score and feedback.
    """

    def __init__(
        self,
        word_lists: WordListCache | None = None,
        random_source: SecureRandomSource | None = None,
        analyzer: StrengthAnalyzer | None = None,
    ) -> None:
        self._word_lists = word_lists or WordListCache(BundledWordListProvider())
        self._random = random_source or SecureRandomSource()
        self._analyzer = analyzer or StrengthAnalyzer()

    @staticmethod
    def validate(options: PassphraseOptions) -> None:
        """Raise :class:`InvalidOptions` unless *options* are in range."""
        if not 3 <= options.word_count <= 10:
            raise InvalidOptions(
                f"Word count must be between 3 and 10, got {options.word_count}"
            )
        if not 3 <= options.min_word_length <= options.max_word_length <= 12:
            raise InvalidOptions(
                "Word lengths must satisfy 3 <= min <= max <= 12, got "
                f"min={options.min_word_length} max={options.max_word_length}"
            )

    async def generate(self, options: PassphraseOptions) -> GeneratedPassphrase:
        """Generate one passphrase.

        Word-list load failures fall back to the seed list inside the
        cache; only invalid options raise.

        Raises:
            InvalidOptions: If the options are out of range.
        """
        self.validate(options)

        words = await self._word_lists.get_or_load(options.language)
        candidates = [
            w
            for w in words
            if options.min_word_length <= len(w) <= options.max_word_length
        ]
        if not candidates:
            logger.info(
                "No words of length %d-%d for '%s'; using unfiltered list",
                options.min_word_length,
                options.max_word_length,
                options.language.value,
            )
            candidates = list(words)

        chosen = [
            self._format_word(self._random.choice(candidates), options.capitalize)
            for _ in range(options.word_count)
        ]

        value = options.separator.join(chosen)
        if options.include_number:
            value += self._random.choice(DIGITS)
        if options.include_symbol:
            value += self._random.choice(PASSPHRASE_SYMBOLS)

        entropy = passphrase_entropy(
            len(candidates),
            options.word_count,
            with_number=options.include_number,
            with_symbol=options.include_symbol,
        )
        strength = self._analyzer.from_entropy(value, entropy)
        logger.debug(
            "Generated passphrase: words=%d candidates=%d entropy=%.2f",
            options.word_count,
            len(candidates),
            entropy,
        )
        return GeneratedPassphrase(
            value=value,
            words=chosen,
            strength=strength,
            options=options,
        )

    @staticmethod
    def _format_word(word: str, capitalize: bool) -> str:
        if capitalize:
            return word[:1].upper() + word[1:]
        return word.lower()
