"""Tests for keyforge.generators.password."""

from __future__ import annotations

import re

import pytest

from keyforge.analyzers.strength import StrengthAnalyzer
from keyforge.core.errors import EmptyAlphabet, InvalidArgument, InvalidOptions
from keyforge.core.models import PasswordOptions
from keyforge.generators import charset
from keyforge.generators.charset import (
    AMBIGUOUS,
    DIGITS,
    LOWERCASE,
    SIMILAR,
    SYMBOLS,
    UPPERCASE,
)
from keyforge.generators.password import PasswordGenerator
from keyforge.generators.secure_random import SecureRandomSource

from tests.conftest import CountingEntropy


@pytest.fixture
def generator() -> PasswordGenerator:
    return PasswordGenerator()


def _count(value: str, pool: str) -> int:
    return sum(1 for c in value if c in pool)


class TestGenerate:

    def test_default_options(self, generator):
        result = generator.generate(PasswordOptions())
        assert len(result.value) == 16
        assert result.kind == "standard"
        assert result.options == PasswordOptions()

    @pytest.mark.parametrize("length", [4, 17, 128])
    def test_length_boundaries(self, generator, length):
        assert len(generator.generate(PasswordOptions(length=length)).value) == length

    @pytest.mark.parametrize("length", [3, 129, 0])
    def test_length_out_of_range(self, generator, length):
        with pytest.raises(InvalidOptions):
            generator.generate(PasswordOptions(length=length))

    def test_minimums_are_always_met(self, generator):
        options = PasswordOptions(
            length=8, min_uppercase=2, min_lowercase=2, min_numbers=2, min_symbols=2
        )
        for _ in range(200):
            value = generator.generate(options).value
            assert _count(value, UPPERCASE) == 2
            assert _count(value, LOWERCASE) == 2
            assert _count(value, DIGITS) == 2
            assert _count(value, SYMBOLS) == 2

    def test_minimums_exceeding_length(self, generator):
        options = PasswordOptions(length=6, min_uppercase=4, min_numbers=3)
        with pytest.raises(InvalidOptions):
            generator.generate(options)

    def test_negative_minimum(self, generator):
        with pytest.raises(InvalidOptions):
            generator.generate(PasswordOptions(min_symbols=-1))

    def test_no_character_source(self, generator):
        options = PasswordOptions(
            include_uppercase=False,
            include_lowercase=False,
            include_numbers=False,
            include_symbols=False,
        )
        with pytest.raises(InvalidOptions):
            generator.generate(options)

    def test_values_stay_in_alphabet(self, generator):
        options = PasswordOptions(length=64, exclude_similar=True)
        for _ in range(20):
            assert not set(generator.generate(options).value) & set(SIMILAR)

    def test_custom_charset(self, generator):
        value = generator.generate(PasswordOptions(length=32, custom_charset="xy")).value
        assert set(value) <= {"x", "y"}

    def test_minimum_applies_with_custom_charset(self, generator):
        options = PasswordOptions(custom_charset="abc", min_numbers=1)
        value = generator.generate(options).value
        assert _count(value, DIGITS) >= 1

    def test_symbols_only_without_ambiguous(self, generator):
        options = PasswordOptions(
            length=40,
            include_uppercase=False,
            include_lowercase=False,
            include_numbers=False,
            exclude_ambiguous=True,
        )
        value = generator.generate(options).value
        assert set(value) <= set(SYMBOLS) - set(AMBIGUOUS)

    def test_class_pool_empty_after_exclusions(self, generator, monkeypatch):
        monkeypatch.setitem(charset.CLASS_SETS, charset.CharClass.DIGIT, "01")
        options = PasswordOptions(exclude_similar=True, min_numbers=1)
        with pytest.raises(EmptyAlphabet):
            generator.generate(options)

    def test_strength_is_attached(self, generator):
        result = generator.generate(PasswordOptions(length=20))
        assert result.strength == StrengthAnalyzer().analyze(result.value)


class TestBulk:

    def test_count(self, generator):
        results = generator.generate_bulk(PasswordOptions(length=12), 5)
        assert len(results) == 5
        assert len({r.id for r in results}) == 5

    def test_maximum_count(self, generator):
        results = generator.generate_bulk(PasswordOptions(), 100)
        assert len({r.value for r in results}) == 100

    @pytest.mark.parametrize("count", [0, 101])
    def test_count_out_of_range(self, generator, count):
        with pytest.raises(InvalidArgument):
            generator.generate_bulk(PasswordOptions(), count)

    def test_invalid_options_fail_before_generation(self, generator):
        with pytest.raises(InvalidOptions):
            generator.generate_bulk(PasswordOptions(length=2), 3)


class TestPatternAndPin:

    def test_pattern_placeholders(self, generator):
        result = generator.generate_from_pattern("XXX-999-xxx")
        assert re.fullmatch(r"[A-Z]{3}-[0-9]{3}-[a-z]{3}", result.value)
        assert result.kind == "pattern"
        assert result.pattern == "XXX-999-xxx"

    def test_pattern_symbols_and_letters(self, generator):
        value = generator.generate_from_pattern("@A#").value
        assert value[0] in SYMBOLS
        assert value[1].isalpha() and value[1].isascii()
        assert value[2] == "#"

    @pytest.mark.parametrize("pattern", ["", "   "])
    def test_blank_pattern(self, generator, pattern):
        with pytest.raises(InvalidArgument):
            generator.generate_from_pattern(pattern)

    def test_pin(self, generator):
        result = generator.generate_pin(8)
        assert re.fullmatch(r"[0-9]{8}", result.value)
        assert result.kind == "pin"

    @pytest.mark.parametrize("length", [3, 129])
    def test_pin_length_out_of_range(self, generator, length):
        with pytest.raises(InvalidOptions):
            generator.generate_pin(length)


class TestValidationPrecedesRandomness:

    @pytest.fixture
    def entropy(self) -> CountingEntropy:
        return CountingEntropy()

    @pytest.fixture
    def counted(self, entropy) -> PasswordGenerator:
        return PasswordGenerator(SecureRandomSource(entropy))

    @pytest.mark.parametrize(
        "options",
        [
            PasswordOptions(length=3),
            PasswordOptions(length=129),
            PasswordOptions(min_numbers=-1),
            PasswordOptions(length=6, min_uppercase=4, min_numbers=3),
            PasswordOptions(
                include_uppercase=False,
                include_lowercase=False,
                include_numbers=False,
                include_symbols=False,
            ),
        ],
    )
    def test_invalid_options(self, counted, entropy, options):
        with pytest.raises(InvalidOptions):
            counted.generate(options)
        assert entropy.calls == 0

    def test_bulk_with_invalid_options(self, counted, entropy):
        with pytest.raises(InvalidOptions):
            counted.generate_bulk(PasswordOptions(length=2), 3)
        assert entropy.calls == 0

    @pytest.mark.parametrize("count", [0, 101])
    def test_bulk_with_invalid_count(self, counted, entropy, count):
        with pytest.raises(InvalidArgument):
            counted.generate_bulk(PasswordOptions(), count)
        assert entropy.calls == 0

    def test_empty_class_pool(self, counted, entropy, monkeypatch):
        monkeypatch.setitem(charset.CLASS_SETS, charset.CharClass.DIGIT, "01")
        options = PasswordOptions(exclude_similar=True, min_numbers=1)
        with pytest.raises(EmptyAlphabet):
            counted.generate(options)
        assert entropy.calls == 0

    def test_empty_alphabet(self, counted, entropy, monkeypatch):
        monkeypatch.setitem(charset.CLASS_SETS, charset.CharClass.DIGIT, "01")
        options = PasswordOptions(
            include_uppercase=False,
            include_lowercase=False,
            include_symbols=False,
            exclude_similar=True,
        )
        with pytest.raises(EmptyAlphabet):
            counted.generate(options)
        assert entropy.calls == 0

    def test_invalid_pin_length(self, counted, entropy):
        with pytest.raises(InvalidOptions):
            counted.generate_pin(3)
        assert entropy.calls == 0

    def test_valid_options_do_draw(self, counted, entropy):
        counted.generate(PasswordOptions(length=8))
        assert entropy.calls > 0
