"""
KeyForge Engine
================

Central orchestrator for KeyForge. :class:`KeyForgeEngine` wires the
random source, charset builder, generators, strength analyzer, word-list
cache and randomness auditor together from a :class:`ForgeConfig`.

Architecture follows the Facade pattern (Gamma et al., 1994): the CLI and
library callers talk to the engine only.

CPU-bound operations are synchronous. Passphrase generation is ``async``
because the first use of a language may fetch its word list.

References:
    - Gamma, E., Helm, R., Johnson, R., & Vlissides, J. (1994).
      Design Patterns: Elements of Reusable Object-Oriented Software.
      Addison-Wesley.
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
"""

from __future__ import annotations

from typing import Iterable, Optional

from shared.config import ForgeConfig
from shared.logger import ForgeLogger, configure_logging

from keyforge.analyzers.rng_audit import RandomnessAuditor
from keyforge.analyzers.strength import StrengthAnalyzer
from keyforge.collectors.wordlist import (
    BundledWordListProvider,
    HttpWordListProvider,
    WordListCache,
    WordListProvider,
)
from keyforge.core.errors import InvalidArgument
from keyforge.core.models import (
    GeneratedPassphrase,
    GeneratedPassword,
    HistoryRecord,
    Language,
    PassphraseOptions,
    PasswordOptions,
    RandomnessAudit,
    StrengthResult,
)
from keyforge.generators.charset import CharsetBuilder
from keyforge.generators.passphrase import PassphraseGenerator
from keyforge.generators.password import PasswordGenerator
from keyforge.generators.secure_random import SecureRandomSource


def build_word_list_provider(config: ForgeConfig) -> WordListProvider:
    """Select the word-list provider named by ``[passphrase].word_list_source``."""
    settings = config.passphrase
    if settings.word_list_source == "http" and settings.word_list_url:
        return HttpWordListProvider(
            settings.word_list_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )
    return BundledWordListProvider()


class KeyForgeEngine:
    """Facade over every KeyForge generation and analysis operation.

    Usage::

        engine = KeyForgeEngine()
        password = engine.generate_password(PasswordOptions(length=20))
        phrase = asyncio.run(engine.generate_passphrase())
        print(password.strength.level.label, phrase.value)

    Args:
        config: Configuration; defaults to built-in values.
        random_source: Shared secure random source.
        word_list_provider: Overrides the configured provider.
        console_logging: Attach the Rich console log handler to the
            package-wide sinks.
    """

    def __init__(
        self,
        config: Optional[ForgeConfig] = None,
        *,
        random_source: Optional[SecureRandomSource] = None,
        word_list_provider: Optional[WordListProvider] = None,
        console_logging: bool = True,
    ) -> None:
        self.config = config or ForgeConfig()
        settings = self.config.global_settings
        configure_logging(
            "DEBUG" if settings.debug else settings.log_level,
            log_file=settings.log_file or None,
            json_logs=settings.log_json,
            console_output=console_logging,
        )
        self.logger = ForgeLogger("engine")

        self._random = random_source or SecureRandomSource()
        self._analyzer = StrengthAnalyzer(
            attempts_per_second=self.config.analyzer.attempts_per_second
        )
        provider = word_list_provider or build_word_list_provider(self.config)
        if (
            word_list_provider is None
            and self.config.passphrase.word_list_source == "http"
            and not self.config.passphrase.word_list_url
        ):
            self.logger.warning(
                "word_list_source is 'http' but word_list_url is empty; "
                "using bundled word lists"
            )
        self._word_lists = WordListCache(provider)

        self._passwords = PasswordGenerator(
            self._random, self._analyzer, CharsetBuilder()
        )
        self._passphrases = PassphraseGenerator(
            self._word_lists, self._random, self._analyzer
        )

    # ------------------------------------------------------------------ #
    #  Accessors
    # ------------------------------------------------------------------ #

    @property
    def analyzer(self) -> StrengthAnalyzer:
        return self._analyzer

    @property
    def word_lists(self) -> WordListCache:
        return self._word_lists

    # ------------------------------------------------------------------ #
    #  Passwords
    # ------------------------------------------------------------------ #

    def default_password_options(self) -> PasswordOptions:
        return PasswordOptions(length=self.config.generator.default_length)

    def generate_password(
        self, options: Optional[PasswordOptions] = None
    ) -> GeneratedPassword:
        """Generate one random password."""
        options = options or self.default_password_options()
        with self.logger.operation("generate_password"):
            result = self._passwords.generate(options)
            self.logger.info(
                "Password generated",
                length=len(result.value),
                level=result.strength.level.label,
            )
        return result

    def generate_bulk(
        self, options: Optional[PasswordOptions] = None, count: int = 10
    ) -> list[GeneratedPassword]:
        """Generate *count* passwords.

        Raises:
            InvalidArgument: If *count* exceeds ``[generator].bulk_max_count``
                or the hard 1-100 range.
        """
        options = options or self.default_password_options()
        limit = self.config.generator.bulk_max_count
        if count > limit:
            raise InvalidArgument(
                f"Count {count} exceeds the configured maximum of {limit}"
            )
        with self.logger.operation("generate_bulk"), self.logger.timed(
            f"bulk generation of {count}"
        ):
            results = self._passwords.generate_bulk(options, count)
        self.logger.info("Bulk generation complete", count=len(results))
        return results

    def generate_from_pattern(self, pattern: Optional[str] = None) -> GeneratedPassword:
        pattern = self.config.generator.default_pattern if pattern is None else pattern
        with self.logger.operation("generate_from_pattern"):
            result = self._passwords.generate_from_pattern(pattern)
            self.logger.info("Pattern password generated", length=len(result.value))
        return result

    def generate_pin(self, length: Optional[int] = None) -> GeneratedPassword:
        length = self.config.generator.pin_length if length is None else length
        with self.logger.operation("generate_pin"):
            result = self._passwords.generate_pin(length)
            self.logger.info("PIN generated", length=length)
        return result

    # ------------------------------------------------------------------ #
    #  Passphrases
    # ------------------------------------------------------------------ #

    def default_passphrase_options(self) -> PassphraseOptions:
        return PassphraseOptions(language=Language(self.config.passphrase.language))

    async def generate_passphrase(
        self, options: Optional[PassphraseOptions] = None
    ) -> GeneratedPassphrase:
        """Generate one passphrase, loading the word list on first use."""
        options = options or self.default_passphrase_options()
        with self.logger.operation("generate_passphrase"):
            result = await self._passphrases.generate(options)
            self.logger.info(
                "Passphrase generated",
                word_count=len(result.words),
                entropy=result.strength.entropy,
            )
        return result

    # ------------------------------------------------------------------ #
    #  Analysis
    # ------------------------------------------------------------------ #

    def analyze(self, password: str) -> StrengthResult:
        """Analyse a caller-supplied secret. Never raises."""
        with self.logger.operation("analyze"):
            result = self._analyzer.analyze(password)
            self.logger.debug(
                "Secret analysed", length=len(password), level=result.level.label
            )
        return result

    def estimate_time_to_crack(self, entropy: float) -> str:
        return self._analyzer.estimate_time_to_crack(entropy)

    def audit_randomness(
        self,
        *,
        buckets: int = 10,
        int_samples: int = 10_000,
        byte_samples: int = 25_600,
    ) -> RandomnessAudit:
        """Run the chi-squared self-test against the engine's random source."""
        with self.logger.operation("audit_randomness"), self.logger.timed(
            "randomness audit"
        ):
            audit = RandomnessAuditor(self._random).run(
                buckets=buckets, int_samples=int_samples, byte_samples=byte_samples
            )
        if not audit.passed:
            self.logger.warning("Randomness audit failed", alpha=audit.alpha)
        return audit

    # ------------------------------------------------------------------ #
    #  History
    # ------------------------------------------------------------------ #

    @staticmethod
    def to_history_record(
        result: GeneratedPassword | GeneratedPassphrase,
        *,
        label: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> HistoryRecord:
        return HistoryRecord.from_result(
            result, label=label, tags=list(tags) if tags is not None else None
        )
