"""
History Queries
================

Pure functions over sequences of :class:`HistoryRecord`. Nothing here
touches storage; callers load records (e.g. from a JSON export), query or
update them, and persist the result themselves.

Records are frozen, so every update returns a new record.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from keyforge.core.models import (
    GenerationKind,
    HistoryRecord,
    HistoryStatistics,
    StrengthLevel,
)

# Per-record overhead of the storage estimate, in bytes
RECORD_OVERHEAD_BYTES = 100


def _newest_first(records: Iterable[HistoryRecord]) -> list[HistoryRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


# ===================================================================== #
#  Search / filter
# ===================================================================== #


def search(records: Sequence[HistoryRecord], query: str) -> list[HistoryRecord]:
    """Records whose label or a tag contains *query* (case-insensitive) or
    whose password contains it exactly. A blank query returns every record.
    """
    if not query or not query.strip():
        return list(records)
    needle = query.lower()
    return [
        r
        for r in records
        if (r.label is not None and needle in r.label.lower())
        or any(needle in tag.lower() for tag in r.tags)
        or query in r.password
    ]


def filter_by_date(
    records: Sequence[HistoryRecord], start: datetime, end: datetime
) -> list[HistoryRecord]:
    """Records created within ``[start, end]``, newest first."""
    return _newest_first(r for r in records if start <= r.created_at <= end)


def filter_by_strength(
    records: Sequence[HistoryRecord], level: StrengthLevel
) -> list[HistoryRecord]:
    """Records of exactly *level*, newest first."""
    return _newest_first(r for r in records if r.strength_level == level)


def filter_by_kind(
    records: Sequence[HistoryRecord], kind: GenerationKind | str
) -> list[HistoryRecord]:
    kind = GenerationKind(kind)
    return _newest_first(r for r in records if r.type == kind)


def favorites(records: Sequence[HistoryRecord]) -> list[HistoryRecord]:
    return _newest_first(r for r in records if r.is_favorite)


def find(records: Sequence[HistoryRecord], record_id: str) -> Optional[HistoryRecord]:
    return next((r for r in records if r.id == record_id), None)


# ===================================================================== #
#  Updates
# ===================================================================== #


def toggle_favorite(record: HistoryRecord) -> HistoryRecord:
    return record.model_copy(update={"is_favorite": not record.is_favorite})


def record_access(
    record: HistoryRecord, at: Optional[datetime] = None
) -> HistoryRecord:
    """Bump the copy counter and stamp the access time (UTC now by default)."""
    return record.model_copy(
        update={
            "copy_count": record.copy_count + 1,
            "last_accessed_at": at or datetime.now(timezone.utc),
        }
    )


def with_label(record: HistoryRecord, label: Optional[str]) -> HistoryRecord:
    return record.model_copy(update={"label": label})


def with_tags(record: HistoryRecord, tags: Iterable[str]) -> HistoryRecord:
    return record.model_copy(update={"tags": list(tags)})


def replace(
    records: Sequence[HistoryRecord], updated: HistoryRecord
) -> list[HistoryRecord]:
    """Return *records* with the entry sharing ``updated.id`` swapped in."""
    return [updated if r.id == updated.id else r for r in records]


def remove(records: Sequence[HistoryRecord], record_id: str) -> list[HistoryRecord]:
    return [r for r in records if r.id != record_id]


# ===================================================================== #
#  Statistics
# ===================================================================== #


def estimated_size(record: HistoryRecord) -> int:
    """Rough storage footprint: two bytes per character plus overhead."""
    chars = (
        len(record.password)
        + len(record.label or "")
        + sum(len(tag) for tag in record.tags)
    )
    return chars * 2 + RECORD_OVERHEAD_BYTES


def statistics(records: Sequence[HistoryRecord]) -> HistoryStatistics:
    """Aggregate counts, distributions, date range and storage estimate."""
    if not records:
        return HistoryStatistics()

    created = [r.created_at for r in records]
    return HistoryStatistics(
        total_count=len(records),
        favorite_count=sum(1 for r in records if r.is_favorite),
        strength_distribution=dict(
            Counter(r.strength_level.label for r in records)
        ),
        kind_distribution=dict(Counter(r.type.value for r in records)),
        oldest=min(created),
        newest=max(created),
        total_copy_count=sum(r.copy_count for r in records),
        estimated_storage_bytes=sum(estimated_size(r) for r in records),
    )
