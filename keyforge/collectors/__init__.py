"""
KeyForge Collectors
====================

Word-list providers and the per-language word-list cache.
"""

from keyforge.collectors.wordlist import (
    SEED_WORDS,
    BundledWordListProvider,
    HttpWordListProvider,
    StaticWordListProvider,
    WordListCache,
    WordListProvider,
)

__all__ = [
    "SEED_WORDS",
    "BundledWordListProvider",
    "HttpWordListProvider",
    "StaticWordListProvider",
    "WordListCache",
    "WordListProvider",
]
