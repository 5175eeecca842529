"""Tests for keyforge.history.queries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from keyforge.core.models import GenerationKind, HistoryRecord, StrengthLevel
from keyforge.history import queries

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(password: str, *, days: int = 0, **kwargs) -> HistoryRecord:
    defaults = dict(
        password=password,
        created_at=T0 + timedelta(days=days),
        length=len(password),
        strength_level=StrengthLevel.STRONG,
        entropy=64.0,
        type=GenerationKind.STANDARD,
    )
    defaults.update(kwargs)
    return HistoryRecord(**defaults)


@pytest.fixture
def records() -> list[HistoryRecord]:
    return [
        _record("Kx9!pQ2@", days=0, label="Work Email", tags=["email"]),
        _record("1234", days=1, type=GenerationKind.PIN,
                strength_level=StrengthLevel.VERY_WEAK, is_favorite=True),
        _record("Amber-Basil-Cedar7", days=2, type=GenerationKind.PASSPHRASE,
                label="wifi", tags=["Home", "router"], copy_count=3),
    ]


class TestSearch:

    def test_label_is_case_insensitive(self, records):
        assert [r.password for r in queries.search(records, "EMAIL")] == ["Kx9!pQ2@"]

    def test_tag_match(self, records):
        assert [r.label for r in queries.search(records, "home")] == ["wifi"]

    def test_password_match_is_case_sensitive(self, records):
        assert len(queries.search(records, "Basil")) == 1
        assert queries.search(records, "basil") == []

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query_returns_all(self, records, query):
        assert queries.search(records, query) == records


class TestFilters:

    def test_by_date_is_inclusive_and_newest_first(self, records):
        found = queries.filter_by_date(records, T0, T0 + timedelta(days=1))
        assert [r.password for r in found] == ["1234", "Kx9!pQ2@"]

    def test_by_strength(self, records):
        found = queries.filter_by_strength(records, StrengthLevel.STRONG)
        assert [r.password for r in found] == ["Amber-Basil-Cedar7", "Kx9!pQ2@"]

    def test_by_kind_accepts_strings(self, records):
        assert [r.password for r in queries.filter_by_kind(records, "pin")] == ["1234"]

    def test_favorites(self, records):
        assert [r.password for r in queries.favorites(records)] == ["1234"]

    def test_find(self, records):
        assert queries.find(records, records[2].id) is records[2]
        assert queries.find(records, "missing") is None


class TestUpdates:

    def test_toggle_favorite_returns_copy(self, records):
        flipped = queries.toggle_favorite(records[0])
        assert flipped.is_favorite and not records[0].is_favorite
        assert flipped.id == records[0].id

    def test_record_access(self, records):
        stamp = T0 + timedelta(days=9)
        touched = queries.record_access(records[2], at=stamp)
        assert touched.copy_count == 4
        assert touched.last_accessed_at == stamp

    def test_record_access_defaults_to_now(self, records):
        touched = queries.record_access(records[0])
        assert touched.last_accessed_at is not None
        assert touched.last_accessed_at.tzinfo is not None

    def test_label_and_tags(self, records):
        updated = queries.with_tags(queries.with_label(records[1], "bank"), ["card"])
        assert (updated.label, updated.tags) == ("bank", ["card"])

    def test_replace_and_remove(self, records):
        updated = queries.with_label(records[1], "bank")
        replaced = queries.replace(records, updated)
        assert replaced[1].label == "bank"
        assert [r.id for r in queries.remove(replaced, updated.id)] == [
            records[0].id,
            records[2].id,
        ]


class TestStatistics:

    def test_estimated_size(self):
        record = _record("abc", label="work", tags=["x"])
        assert queries.estimated_size(record) == (3 + 4 + 1) * 2 + 100

    def test_aggregates(self, records):
        stats = queries.statistics(records)
        assert stats.total_count == 3
        assert stats.favorite_count == 1
        assert stats.total_copy_count == 3
        assert stats.strength_distribution == {"Strong": 2, "Very Weak": 1}
        assert stats.kind_distribution == {"standard": 1, "pin": 1, "passphrase": 1}
        assert stats.oldest == T0
        assert stats.newest == T0 + timedelta(days=2)
        assert stats.estimated_storage_bytes == sum(
            queries.estimated_size(r) for r in records
        )

    def test_empty(self):
        stats = queries.statistics([])
        assert stats.total_count == 0
        assert stats.oldest is None and stats.newest is None
