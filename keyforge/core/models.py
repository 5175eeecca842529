"""
KeyForge Core Data Models
==========================

Pydantic models for the KeyForge generation engine: generation options,
strength results, generation results (a tagged union discriminated on
``kind``), history records and the randomness-audit report.

Every model is an immutable value object. Options models accept any
values at construction; range checks live in the generators so that the
error type (:class:`~keyforge.core.errors.InvalidOptions`) is uniform.

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines --
      Authentication and Lifecycle Management.
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
      Bell System Technical Journal, 27(3), 379-423.
    - Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# stands in for a secret in safe clones and log fields
REDACTED = "***REDACTED***"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ===================================================================== #
#  Enumerations
# ===================================================================== #


class StrengthLevel(enum.IntEnum):
    """Ordered five-value strength rating, derived from entropy bits.

    ``VERY_WEAK < WEAK < MODERATE < STRONG < VERY_STRONG`` so callers can
    compare levels directly.
    """

    VERY_WEAK = 0     # H < 28
    WEAK = 1          # H in [28, 36)
    MODERATE = 2      # H in [36, 60)
    STRONG = 3        # H in [60, 128)
    VERY_STRONG = 4   # H >= 128

    @classmethod
    def from_entropy(cls, entropy: float) -> StrengthLevel:
        """Map entropy bits onto a level using the fixed thresholds."""
        if entropy < 28:
            return cls.VERY_WEAK
        if entropy < 36:
            return cls.WEAK
        if entropy < 60:
            return cls.MODERATE
        if entropy < 128:
            return cls.STRONG
        return cls.VERY_STRONG

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]

    @property
    def color_code(self) -> str:
        """Hex colour used by the strength meter."""
        return _LEVEL_COLORS[self]


_LEVEL_LABELS: dict[StrengthLevel, str] = {
    StrengthLevel.VERY_WEAK: "Very Weak",
    StrengthLevel.WEAK: "Weak",
    StrengthLevel.MODERATE: "Moderate",
    StrengthLevel.STRONG: "Strong",
    StrengthLevel.VERY_STRONG: "Very Strong",
}

_LEVEL_COLORS: dict[StrengthLevel, str] = {
    StrengthLevel.VERY_WEAK: "#ef4444",
    StrengthLevel.WEAK: "#f59e0b",
    StrengthLevel.MODERATE: "#eab308",
    StrengthLevel.STRONG: "#22c55e",
    StrengthLevel.VERY_STRONG: "#10b981",
}


class GenerationKind(str, enum.Enum):
    """Tag describing how a secret was produced."""

    STANDARD = "standard"
    PASSPHRASE = "passphrase"
    PATTERN = "pattern"
    PIN = "pin"


class Language(str, enum.Enum):
    """Dictionary language for passphrase word lists."""

    EN = "en"
    TR = "tr"

    @property
    def resource_name(self) -> str:
        """Base file name of the word list (``english`` / ``turkish``)."""
        return "english" if self is Language.EN else "turkish"


# ===================================================================== #
#  Options
# ===================================================================== #


class PasswordOptions(BaseModel):
    """Options for random password generation.

    A non-empty ``custom_charset`` overrides every class flag and both
    exclusion filters. Valid ranges (length 4-128, minimums non-negative
    and summing to at most ``length``) are enforced by
    :class:`~keyforge.generators.password.PasswordGenerator`.
    """

    model_config = ConfigDict(frozen=True)

    length: int = 16
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_symbols: bool = True
    exclude_similar: bool = False
    exclude_ambiguous: bool = False
    custom_charset: Optional[str] = None
    min_uppercase: int = 0
    min_lowercase: int = 0
    min_numbers: int = 0
    min_symbols: int = 0

    @property
    def has_character_source(self) -> bool:
        return bool(self.custom_charset) or any(
            (
                self.include_uppercase,
                self.include_lowercase,
                self.include_numbers,
                self.include_symbols,
            )
        )

    @property
    def minimum_total(self) -> int:
        return (
            self.min_uppercase
            + self.min_lowercase
            + self.min_numbers
            + self.min_symbols
        )


class PassphraseOptions(BaseModel):
    """Options for passphrase generation.

    Word count must lie in [3, 10] and ``3 <= min_word_length <=
    max_word_length <= 12``; :meth:`is_valid` reports this and the
    generator enforces it.
    """

    model_config = ConfigDict(frozen=True)

    word_count: int = 4
    separator: str = "-"
    capitalize: bool = True
    include_number: bool = True
    include_symbol: bool = False
    min_word_length: int = 4
    max_word_length: int = 8
    language: Language = Language.EN

    def is_valid(self) -> bool:
        return (
            3 <= self.word_count <= 10
            and 3 <= self.min_word_length <= self.max_word_length <= 12
        )


# ===================================================================== #
#  Strength
# ===================================================================== #


class StrengthResult(BaseModel):
    """Strength assessment of a single secret.

    The analysed string itself is never stored.

    Attributes:
        level: Discrete strength level.
        entropy: Estimated entropy in bits, rounded to 2 decimals.
        score: Composite score in [0, 100].
        time_to_crack: Human-readable average crack time.
        unique_characters: Number of distinct characters.
        feedback: Positive or neutral observations, in rule order.
        warnings: Weaknesses, in rule order.
    """

    model_config = ConfigDict(frozen=True)

    level: StrengthLevel
    entropy: float = Field(..., ge=0.0)
    score: int = Field(..., ge=0, le=100)
    time_to_crack: str
    has_uppercase: bool = False
    has_lowercase: bool = False
    has_numbers: bool = False
    has_symbols: bool = False
    unique_characters: int = Field(default=0, ge=0)
    feedback: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


# ===================================================================== #
#  Generation results
# ===================================================================== #


class GeneratedPassword(BaseModel):
    """A generated password, pattern password or PIN."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["standard", "pattern", "pin"] = "standard"
    id: str = Field(default_factory=_new_id)
    value: str
    strength: StrengthResult
    options: Optional[PasswordOptions] = None
    pattern: Optional[str] = None
    generated_at: datetime = Field(default_factory=_utcnow)

    def redacted(self) -> GeneratedPassword:
        """Copy with the secret replaced, safe for logs and exports."""
        return self.model_copy(update={"value": REDACTED})


class GeneratedPassphrase(BaseModel):
    """A generated passphrase together with its component words."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["passphrase"] = "passphrase"
    id: str = Field(default_factory=_new_id)
    value: str
    words: list[str]
    strength: StrengthResult
    options: PassphraseOptions
    generated_at: datetime = Field(default_factory=_utcnow)

    def redacted(self) -> GeneratedPassphrase:
        """Copy with the phrase and every word replaced."""
        return self.model_copy(
            update={"value": REDACTED, "words": [REDACTED] * len(self.words)}
        )


GenerationResult = Annotated[
    Union[GeneratedPassword, GeneratedPassphrase],
    Field(discriminator="kind"),
]


# ===================================================================== #
#  History
# ===================================================================== #


class HistoryRecord(BaseModel):
    """A generation result promoted into a persistable history entry.

    Records are frozen; the helpers in :mod:`keyforge.history.queries`
    return updated copies.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    password: str
    created_at: datetime = Field(default_factory=_utcnow)
    label: Optional[str] = None
    length: int = Field(..., ge=0)
    strength_level: StrengthLevel
    entropy: float = Field(..., ge=0.0)
    type: GenerationKind
    is_favorite: bool = False
    copy_count: int = Field(default=0, ge=0)
    last_accessed_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(
        cls,
        result: GeneratedPassword | GeneratedPassphrase,
        *,
        label: str | None = None,
        tags: list[str] | None = None,
    ) -> HistoryRecord:
        """Promote a generation result into a history record."""
        return cls(
            id=result.id,
            password=result.value,
            created_at=result.generated_at,
            label=label,
            length=len(result.value),
            strength_level=result.strength.level,
            entropy=result.strength.entropy,
            type=GenerationKind(result.kind),
            tags=list(tags or []),
        )


class HistoryStatistics(BaseModel):
    """Aggregate view over a collection of history records.

    Distribution keys are level labels (``"Strong"``) and kind values
    (``"passphrase"``).
    """

    total_count: int = 0
    favorite_count: int = 0
    strength_distribution: dict[str, int] = Field(default_factory=dict)
    kind_distribution: dict[str, int] = Field(default_factory=dict)
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None
    total_copy_count: int = 0
    estimated_storage_bytes: int = 0


# ===================================================================== #
#  Randomness audit
# ===================================================================== #


class AuditCheck(BaseModel):
    """One chi-squared uniformity check of the random source.

    Attributes:
        name: Check identifier (``"random_int"`` / ``"random_bytes"``).
        bins: Number of equiprobable categories.
        sample_size: Number of draws.
        chi_squared: Pearson statistic.
        p_value: Upper-tail probability under the uniform hypothesis.
        passed: ``p_value >= alpha``.
    """

    name: str
    bins: int
    sample_size: int
    chi_squared: float
    p_value: float
    passed: bool


class RandomnessAudit(BaseModel):
    """Self-test report for :class:`~keyforge.generators.secure_random.SecureRandomSource`."""

    alpha: float = 0.01
    checks: list[AuditCheck] = Field(default_factory=list)
    byte_entropy: float = 0.0

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)
