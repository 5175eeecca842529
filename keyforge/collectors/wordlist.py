"""
Word-List Collector
====================

Providers that supply passphrase dictionaries, and the per-language
cache that sits in front of them.

Providers implement ``async fetch_word_list(language) -> list[str]`` and
raise :class:`~keyforge.core.errors.ResourceUnavailable` on failure:

- :class:`BundledWordListProvider` reads the JSON arrays shipped in
  ``keyforge/data``.
- :class:`HttpWordListProvider` GETs ``<base_url>/<name>.json`` through
  :class:`~shared.network.ForgeHTTP`.
- :class:`StaticWordListProvider` serves in-memory lists.

:class:`WordListCache` loads each language at most once per cache
lifetime. A provider failure, or an empty list, is logged at WARNING and
replaced by the embedded multilingual seed list; the error never reaches
the passphrase caller.

Two coroutines that request the same unloaded language concurrently may
both reach the provider. Both results are valid, the later write wins,
and no lock is taken.

References:
    - Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
    - EFF (2016). Deep Dive: EFF's New Wordlists for Random Passphrases.
"""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Iterable, Mapping, Optional, Protocol

from shared.logger import ForgeLogger
from shared.network import ForgeHTTP, ForgeHTTPError

from keyforge.core.errors import ResourceUnavailable
from keyforge.core.models import Language

logger = ForgeLogger("collectors.wordlist")

SEED_WORDS: tuple[str, ...] = (
    "apple", "banana", "cherry", "date", "elderberry", "fig", "grape",
    "honeydew", "elma", "armut", "kiraz", "hurma", "incir", "uzum",
    "kavun", "karpuz",
)

_DATA_PACKAGE = "keyforge.data"


def _validate_words(payload: Any, source: str) -> list[str]:
    """Return the non-blank, stripped words of a JSON array of strings."""
    if not isinstance(payload, list) or not all(
        isinstance(word, str) for word in payload
    ):
        raise ResourceUnavailable(
            f"Word list from {source} is not a JSON array of strings"
        )
    return [word.strip() for word in payload if word.strip()]


class WordListProvider(Protocol):
    """Source of passphrase dictionaries."""

    async def fetch_word_list(self, language: Language) -> list[str]:
        ...


# ===================================================================== #
#  Providers
# ===================================================================== #


class BundledWordListProvider:
    """Reads ``english.json`` / ``turkish.json`` from the installed package."""

    async def fetch_word_list(self, language: Language) -> list[str]:
        name = f"{Language(language).resource_name}.json"
        try:
            text = resources.files(_DATA_PACKAGE).joinpath(name).read_text(
                encoding="utf-8"
            )
            payload = json.loads(text)
        except (OSError, json.JSONDecodeError) as exc:
            raise ResourceUnavailable(
                f"Bundled word list {name} could not be read: {exc}"
            ) from exc
        return _validate_words(payload, name)


class HttpWordListProvider:
    """Fetches word lists from ``<base_url>/<english|turkish>.json``.

    Args:
        base_url: Server hosting the JSON arrays.
        timeout: Per-request timeout in seconds.
        max_retries: Retries on transient HTTP errors.
        http: Pre-built client to reuse; when omitted a client is opened
            and closed around every fetch.
        transport: Optional httpx transport for the self-managed client.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        http: Optional[ForgeHTTP] = None,
        transport: Any = None,
    ) -> None:
        if not base_url:
            raise ValueError("HttpWordListProvider requires a base_url")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._http = http
        self._transport = transport

    async def fetch_word_list(self, language: Language) -> list[str]:
        path = f"/{Language(language).resource_name}.json"
        try:
            if self._http is not None:
                payload = await self._http.fetch_json(path)
            else:
                async with ForgeHTTP(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    max_retries=self._max_retries,
                    transport=self._transport,
                ) as http:
                    payload = await http.fetch_json(path)
        except ForgeHTTPError as exc:
            raise ResourceUnavailable(
                f"Word list fetch failed for {self._base_url}{path}: {exc}"
            ) from exc
        return _validate_words(payload, f"{self._base_url}{path}")


class StaticWordListProvider:
    """Serves fixed in-memory word lists keyed by language."""

    def __init__(self, lists: Mapping[Language, Iterable[str]]) -> None:
        self._lists = {Language(k): list(v) for k, v in lists.items()}

    async def fetch_word_list(self, language: Language) -> list[str]:
        try:
            return list(self._lists[Language(language)])
        except KeyError:
            raise ResourceUnavailable(
                f"No word list registered for '{Language(language).value}'"
            ) from None


# ===================================================================== #
#  Cache
# ===================================================================== #


class WordListCache:
    """Lazy per-language word-list cache with seed-list fallback.

    Usage::

        cache = WordListCache(BundledWordListProvider())
        words = await cache.get_or_load(Language.EN)
    """

    def __init__(
        self,
        provider: WordListProvider,
        *,
        seed_words: Iterable[str] = SEED_WORDS,
    ) -> None:
        self._provider = provider
        self._seed_words = tuple(seed_words)
        self._lists: dict[Language, list[str]] = {}

    async def get_or_load(self, language: Language | str) -> list[str]:
        """Return the word list for *language*, loading it on first use."""
        language = Language(language)
        cached = self._lists.get(language)
        if cached is not None:
            return cached

        try:
            words = await self._provider.fetch_word_list(language)
            if not words:
                raise ResourceUnavailable(
                    f"Provider returned an empty word list for '{language.value}'"
                )
        except (ResourceUnavailable, OSError, ValueError) as exc:
            logger.warning(
                "Word list for '%s' unavailable, using %d-word seed list: %s",
                language.value,
                len(self._seed_words),
                exc,
            )
            words = list(self._seed_words)
        else:
            logger.info(
                "Loaded %d words for language '%s'", len(words), language.value
            )

        self._lists[language] = words
        return words

    def is_loaded(self, language: Language | str) -> bool:
        return Language(language) in self._lists

    def clear(self) -> None:
        """Forget every cached list."""
        self._lists.clear()
