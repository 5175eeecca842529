"""
KeyForge Configuration
======================

Settings for every KeyForge component, grouped into one dataclass per
TOML table and loaded from ``config.toml`` at the project root unless
another file is given.

Layout of the file::

    [global]       -> GlobalConfig
    [generator]    -> GeneratorConfig
    [passphrase]   -> PassphraseConfig
    [analyzer]     -> AnalyzerConfig

Absent tables and keys keep their defaults. Keys a section does not
declare are dropped, so a newer file still loads in an older release.

References:
    - Wiggins, A. (2011). The Twelve-Factor App, III. Config.
      https://12factor.net/config
    - TOML v1.0.0. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]

_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ============================== Sections ====================================


@dataclass(slots=True)
class GeneratorConfig:
    """Defaults for random passwords, patterns and PINs.

    The hard limits (length 4-128, bulk 1-100) belong to the generators
    and cannot be widened here.
    """

    default_length: int = 16
    bulk_max_count: int = 100
    default_pattern: str = "XXX-999-xxx"
    pin_length: int = 6


@dataclass(slots=True)
class PassphraseConfig:
    """Passphrase defaults and the word-list source.

    ``word_list_source`` is ``"bundled"`` for the JSON lists shipped in
    the package or ``"http"`` to fetch ``<word_list_url>/<file>.json``.

    Reference:
        Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
    """

    language: str = "en"
    word_list_source: str = "bundled"
    word_list_url: str = ""
    request_timeout: float = 10.0
    max_retries: int = 2


@dataclass(slots=True)
class AnalyzerConfig:
    # guesses per second of an offline GPU attack
    attempts_per_second: float = 1e11


@dataclass(slots=True)
class GlobalConfig:
    """Logging settings applied by the engine to every ``keyforge`` logger."""

    log_level: str = "WARNING"
    log_file: str = ""
    log_json: bool = False
    debug: bool = False


def _section(kind: type, table: Mapping[str, Any]) -> Any:
    known = {f.name for f in fields(kind)}
    return kind(**{key: value for key, value in table.items() if key in known})


# ============================== Root ========================================


@dataclass(slots=True)
class ForgeConfig:
    """All KeyForge settings.

    >>> ForgeConfig().generator.default_length
    16
    >>> ForgeConfig.load("custom.toml").passphrase.language  # doctest: +SKIP
    'tr'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    passphrase: PassphraseConfig = field(default_factory=PassphraseConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ForgeConfig:
        """Build a config from parsed TOML tables."""
        return cls(
            global_settings=_section(GlobalConfig, raw.get("global", {})),
            generator=_section(GeneratorConfig, raw.get("generator", {})),
            passphrase=_section(PassphraseConfig, raw.get("passphrase", {})),
            analyzer=_section(AnalyzerConfig, raw.get("analyzer", {})),
        )

    @classmethod
    def load(cls, path: str | Path | None = None) -> ForgeConfig:
        """Read *path*, or the project ``config.toml`` when *path* is ``None``.

        Raises:
            FileNotFoundError: *path* was given and does not exist. A
                missing default file just yields the defaults.
        """
        if path is None:
            if not _DEFAULT_CONFIG_PATH.is_file():
                return cls()
            target = _DEFAULT_CONFIG_PATH
        else:
            target = Path(path)
            if not target.is_file():
                raise FileNotFoundError(f"Configuration file not found: {target}")

        with target.open("rb") as fh:
            return cls.from_mapping(tomllib.load(fh))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

