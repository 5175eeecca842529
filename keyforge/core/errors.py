"""
KeyForge Error Hierarchy
=========================

All KeyForge failures derive from :class:`KeyForgeError`, itself a
:class:`ValueError`, so callers that only care about bad input can catch
the standard exception.

Validation errors are raised before any randomness is consumed, which
makes every generation call all-or-nothing.
"""

from __future__ import annotations


class KeyForgeError(ValueError):
    """Base class for every KeyForge error."""


class InvalidArgument(KeyForgeError):
    """Out-of-range numeric or blank input (count, pattern, range, byte count)."""


class InvalidOptions(InvalidArgument):
    """Semantically inconsistent generation options.

    Raised for a length or word count out of range, no character source,
    negative minimums or minimums exceeding the length.
    """


class EmptyAlphabet(KeyForgeError):
    """The derived character set is empty after exclusions."""


class ResourceUnavailable(KeyForgeError):
    """A word list could not be fetched or parsed.

    Recovered locally by the word-list cache (seed-list fallback); never
    surfaced to callers of passphrase generation.
    """
