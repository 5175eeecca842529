"""Shared fixtures for the KeyForge test suite."""

from __future__ import annotations

import itertools
import secrets
from pathlib import Path
from typing import Iterable, Iterator

import pytest

from shared.logger import configure_logging

from keyforge.collectors.wordlist import StaticWordListProvider
from keyforge.core.engine import KeyForgeEngine
from keyforge.core.models import Language
from keyforge.generators.secure_random import SecureRandomSource


class ScriptedEntropy:
    """Entropy callable that replays fixed 32-bit words (little-endian)."""

    def __init__(self, words: Iterable[int]) -> None:
        self._words = itertools.cycle(list(words))

    def __call__(self, count: int) -> bytes:
        out = bytearray()
        while len(out) < count:
            out += next(self._words).to_bytes(4, "little")
        return bytes(out[:count])


class CounterEntropy:
    """Perfectly balanced source: 32-bit words count up from zero and byte
    buffers cycle through every byte value."""

    def __init__(self) -> None:
        self._counter = 0

    def __call__(self, count: int) -> bytes:
        if count == 4:
            value = self._counter
            self._counter += 1
            return value.to_bytes(4, "little")
        return bytes(i % 256 for i in range(count))


class CountingEntropy:
    """Delegates to the OS CSPRNG and counts how often it was asked."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, count: int) -> bytes:
        self.calls += 1
        return secrets.token_bytes(count)


EN_WORDS = [
    "amber", "basil", "cedar", "delta", "ember", "flint", "grove", "haven",
]
TR_WORDS = ["elma", "armut", "kiraz", "incir", "kavun", "deniz"]


@pytest.fixture
def secure_random() -> SecureRandomSource:
    return SecureRandomSource()


@pytest.fixture
def balanced_random() -> SecureRandomSource:
    return SecureRandomSource(CounterEntropy())


@pytest.fixture
def word_provider() -> StaticWordListProvider:
    return StaticWordListProvider({Language.EN: EN_WORDS, Language.TR: TR_WORDS})


@pytest.fixture
def engine(word_provider: StaticWordListProvider) -> KeyForgeEngine:
    return KeyForgeEngine(word_list_provider=word_provider, console_logging=False)


@pytest.fixture
def log_file(tmp_path: Path) -> Iterator[Path]:
    """Route every ``keyforge.*`` logger to a plain-text file at DEBUG."""
    path = tmp_path / "keyforge.log"
    configure_logging("DEBUG", log_file=path, console_output=False)
    yield path
    configure_logging(console_output=False)
