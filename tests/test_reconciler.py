from __future__ import annotations

import logging
from datetime import datetime

import pytest

from photo_catalog.core.errors import MissingHeight, MissingWidth
from photo_catalog.core.models import Modification, PositionOutcome, ResolvedMetadata
from photo_catalog.index import to_micro_degrees


def _meta(**kwargs) -> ResolvedMetadata:
    values = {
        "date": datetime(2020, 6, 1, 12, 0, 0),
        "rotation_degrees": 0,
        "width": 4000,
        "height": 3000,
        "camera": ("Canon", "EOS 5D"),
    }
    values.update(kwargs)
    return ResolvedMetadata(**values)


def test_created_then_unchanged(reconciler, catalog) -> None:
    first = reconciler.reconcile("2020/a.jpg", _meta(rotation_degrees=90))
    assert first.modification is Modification.CREATED
    snapshot = dict(catalog.entries)
    writes = len(catalog.writes)

    for _ in range(3):
        again = reconciler.reconcile("2020/a.jpg", _meta(rotation_degrees=90))
        assert again.modification is Modification.UNCHANGED
    assert catalog.entries == snapshot
    assert len(catalog.writes) == writes
    assert first.entry.rotation == 90


def test_rotation_is_not_revisited_on_update(reconciler, catalog) -> None:
    reconciler.reconcile("a.jpg", _meta(rotation_degrees=90))
    result = reconciler.reconcile("a.jpg", _meta(rotation_degrees=180))
    assert result.modification is Modification.UNCHANGED
    assert result.entry.rotation == 90


def test_missing_dimensions_are_rejected_without_writes(reconciler, catalog, camera_store) -> None:
    with pytest.raises(MissingWidth):
        reconciler.reconcile("a.jpg", _meta(width=None))
    with pytest.raises(MissingHeight):
        reconciler.reconcile("a.jpg", _meta(height=None))
    assert catalog.writes == []
    assert camera_store.cameras == []


def test_changed_size_date_and_camera_update_together(reconciler, catalog) -> None:
    created = reconciler.reconcile("a.jpg", _meta(camera=None)).entry

    result = reconciler.reconcile(
        "a.jpg",
        _meta(width=3000, height=4000, date=datetime(2020, 6, 2, 8, 0, 0)),
    )
    assert result.modification is Modification.UPDATED
    assert catalog.writes[-1] == ("update", created.id, ("camera_id", "date", "height", "width"))
    assert (result.entry.width, result.entry.height) == (3000, 4000)
    assert result.entry.date == datetime(2020, 6, 2, 8, 0, 0)
    assert result.entry.camera_id is not None


def test_absent_date_never_clears_stored_date(reconciler) -> None:
    reconciler.reconcile("a.jpg", _meta())
    result = reconciler.reconcile("a.jpg", _meta(date=None))
    assert result.modification is Modification.UNCHANGED
    assert result.entry.date == datetime(2020, 6, 1, 12, 0, 0)


def test_absent_date_is_filled_in_later(reconciler) -> None:
    reconciler.reconcile("a.jpg", _meta(date=None))
    result = reconciler.reconcile("a.jpg", _meta())
    assert result.modification is Modification.UPDATED
    assert result.entry.date == datetime(2020, 6, 1, 12, 0, 0)


def test_camera_dedup(reconciler, camera_store) -> None:
    first = reconciler.reconcile("a.jpg", _meta()).entry
    second = reconciler.reconcile("b.jpg", _meta()).entry
    third = reconciler.reconcile("c.jpg", _meta(camera=("Canon", "EOS 6D"))).entry

    assert first.camera_id == second.camera_id
    assert third.camera_id != first.camera_id
    assert [(c.manufacturer, c.model) for c in camera_store.cameras] == [
        ("Canon", "EOS 5D"),
        ("Canon", "EOS 6D"),
    ]


def test_position_inserted_in_micro_degrees(reconciler, catalog) -> None:
    result = reconciler.reconcile("a.jpg", _meta(position=(59.334, -18.063)))
    assert result.position is PositionOutcome.INSERTED
    assert catalog.positions[result.entry.id] == (59_334_000, -18_063_000)


def test_position_within_tolerance_is_ignored(reconciler, catalog, caplog) -> None:
    entry = reconciler.reconcile("a.jpg", _meta(position=(59.334, 18.063))).entry

    with caplog.at_level(logging.WARNING):
        result = reconciler.reconcile("a.jpg", _meta(position=(59.3349, 18.0621)))
    assert result.modification is Modification.UNCHANGED
    assert result.position is PositionOutcome.MATCHED
    assert catalog.positions[entry.id] == (59_334_000, 18_063_000)
    assert "Position conflict" not in caplog.text


def test_position_beyond_tolerance_is_a_conflict(reconciler, catalog, caplog) -> None:
    entry = reconciler.reconcile("a.jpg", _meta(position=(59.334, 18.063))).entry

    with caplog.at_level(logging.WARNING):
        result = reconciler.reconcile("a.jpg", _meta(position=(59.3360, 18.063)))
    assert result.position is PositionOutcome.CONFLICT
    assert catalog.positions[entry.id] == (59_334_000, 18_063_000)
    assert "Position conflict" in caplog.text


def test_position_added_to_existing_entry(reconciler, catalog) -> None:
    entry = reconciler.reconcile("a.jpg", _meta()).entry
    assert catalog.positions == {}

    result = reconciler.reconcile("a.jpg", _meta(position=(1.5, 2.5)))
    assert result.modification is Modification.UNCHANGED
    assert result.position is PositionOutcome.INSERTED
    assert catalog.positions[entry.id] == (1_500_000, 2_500_000)


def test_to_micro_degrees_rounds() -> None:
    assert to_micro_degrees(10.5) == 10_500_000
    assert to_micro_degrees(-0.0000005001) == -1
    assert to_micro_degrees(59.334) == 59_334_000
