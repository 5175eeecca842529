"""
Secure Random Source
=====================

Unbiased integers, byte buffers and shuffles drawn from the operating
system CSPRNG.

Integers are produced by rejection sampling over uniformly distributed
unsigned 32-bit words: for a range of size *r* every draw in
``[limit, 2**32 - 1]`` with ``limit = MAX - (MAX mod r)`` is discarded
before reducing modulo *r*, which removes modulo bias entirely. The
expected number of draws per integer is below 2 for every *r*.

Shuffles use the Durstenfeld form of Fisher-Yates, walking from the last
index down and swapping ``i`` with a uniform index in ``[0, i]``.

References:
    - Knuth, D. E. (1997). The Art of Computer Programming, Vol. 2:
      Seminumerical Algorithms, 3rd ed. Section 3.4.2, Algorithm P.
    - Durstenfeld, R. (1964). Algorithm 235: Random Permutation.
      Communications of the ACM, 7(7), 420.
    - NIST SP 800-90A Rev. 1 (2015). Recommendation for Random Number
      Generation Using Deterministic Random Bit Generators.
"""

from __future__ import annotations

import secrets
from typing import Callable, MutableSequence, Sequence, TypeVar

from keyforge.core.errors import InvalidArgument

T = TypeVar("T")

UINT32_MAX: int = 0xFFFFFFFF

EntropySource = Callable[[int], bytes]


class SecureRandomSource:
    """Cryptographically secure random source.

    Args:
        entropy: Callable returning *n* random bytes. Defaults to
            :func:`secrets.token_bytes`; tests may inject a
            deterministic source. Never pass a non-cryptographic PRNG
            in production code.

    Instances hold no mutable state of their own and are safe to share
    between callers as long as the entropy callable is.
    """

    def __init__(self, entropy: EntropySource | None = None) -> None:
        self._entropy: EntropySource = entropy or secrets.token_bytes

    # ------------------------------------------------------------------ #
    #  Integers
    # ------------------------------------------------------------------ #

    def _next_uint32(self) -> int:
        return int.from_bytes(self._entropy(4), "little")

    def random_int(self, min_value: int, max_value: int) -> int:
        """Return a uniform integer in ``[min_value, max_value)``.

        Raises:
            InvalidArgument: If ``min_value >= max_value`` or the range is
                wider than the 32-bit source.
        """
        if min_value >= max_value:
            raise InvalidArgument(
                f"min_value ({min_value}) must be less than max_value ({max_value})"
            )
        span = max_value - min_value
        if span > UINT32_MAX:
            raise InvalidArgument(
                f"Range {span} exceeds the 32-bit random source"
            )

        limit = UINT32_MAX - (UINT32_MAX % span)
        while True:
            draw = self._next_uint32()
            if draw < limit:
                return min_value + draw % span

    # ------------------------------------------------------------------ #
    #  Bytes
    # ------------------------------------------------------------------ #

    def random_bytes(self, count: int) -> bytes:
        """Return *count* random bytes.

        Raises:
            InvalidArgument: If ``count <= 0``.
        """
        if count <= 0:
            raise InvalidArgument(f"Byte count must be positive, got {count}")
        return self._entropy(count)

    # ------------------------------------------------------------------ #
    #  Sequences
    # ------------------------------------------------------------------ #

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Shuffle *items* in place (Fisher-Yates, last index to first)."""
        for i in range(len(items) - 1, 0, -1):
            j = self.random_int(0, i + 1)
            items[i], items[j] = items[j], items[i]

    def choice(self, items: Sequence[T]) -> T:
        """Return a uniformly chosen element of *items*.

        Raises:
            InvalidArgument: If *items* is empty.
        """
        if not items:
            raise InvalidArgument("Cannot choose from an empty sequence")
        return items[self.random_int(0, len(items))]
