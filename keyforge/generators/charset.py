"""
Character Sets
===============

Reference character classes and the alphabet builder used by the
password generator.

The effective alphabet is either a caller-supplied custom charset
(returned verbatim, duplicates included) or the concatenation of the
enabled classes in the fixed order upper, lower, digit, symbol, with the
"similar" and then the "ambiguous" exclusion filters applied.
"""

from __future__ import annotations

import enum

from keyforge.core.errors import EmptyAlphabet
from keyforge.core.models import PasswordOptions

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
EXTENDED_SYMBOLS = SYMBOLS + "/\\~`'\""

# Visually confusable glyphs
SIMILAR = "il1Lo0O"
# Characters that are awkward in shells, URLs and source code
AMBIGUOUS = "{}[]()/\\'\"`~,;:.<>"

PASSPHRASE_SYMBOLS = "!@#$%&*"


class CharClass(str, enum.Enum):
    """Character classes in quota-allocation order."""

    UPPER = "upper"
    LOWER = "lower"
    DIGIT = "digit"
    SYMBOL = "symbol"


CLASS_SETS: dict[CharClass, str] = {
    CharClass.UPPER: UPPERCASE,
    CharClass.LOWER: LOWERCASE,
    CharClass.DIGIT: DIGITS,
    CharClass.SYMBOL: SYMBOLS,
}


def _apply_exclusions(chars: str, options: PasswordOptions) -> str:
    if options.exclude_similar:
        chars = "".join(c for c in chars if c not in SIMILAR)
    if options.exclude_ambiguous:
        chars = "".join(c for c in chars if c not in AMBIGUOUS)
    return chars


def _enabled_classes(options: PasswordOptions) -> list[CharClass]:
    flags = (
        (CharClass.UPPER, options.include_uppercase),
        (CharClass.LOWER, options.include_lowercase),
        (CharClass.DIGIT, options.include_numbers),
        (CharClass.SYMBOL, options.include_symbols),
    )
    return [cls for cls, enabled in flags if enabled]


class CharsetBuilder:
    """Derives alphabets from :class:`PasswordOptions`."""

    def build_alphabet(self, options: PasswordOptions) -> str:
        """Return the effective alphabet for *options*.

        Raises:
            EmptyAlphabet: If no class is enabled or exclusions remove
                every character.
        """
        if options.custom_charset:
            return options.custom_charset

        chars = "".join(CLASS_SETS[cls] for cls in _enabled_classes(options))
        chars = _apply_exclusions(chars, options)
        if not chars:
            raise EmptyAlphabet(
                "No characters left after applying class flags and exclusions"
            )
        return chars

    def class_pool(self, char_class: CharClass, options: PasswordOptions) -> str:
        """Return the reference set of *char_class* with exclusions applied.

        Raises:
            EmptyAlphabet: If the exclusions leave the class empty.
        """
        chars = _apply_exclusions(CLASS_SETS[char_class], options)
        if not chars:
            raise EmptyAlphabet(
                f"Character class '{char_class.value}' is empty after exclusions"
            )
        return chars
