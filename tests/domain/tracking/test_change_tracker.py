from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from miniorm.domain.tracking import ChangeTracker
from tests.helpers.entities import Employee, make_employee

if TYPE_CHECKING:
    import pytest

    from miniorm.domain.model import Model


def _tracker(model: Model, *employees: Employee) -> ChangeTracker[Employee]:
    return ChangeTracker(model.shape_for(Employee), employees)


def test_fresh_tracker_has_no_changes(model: Model) -> None:
    loaded = [make_employee(1), make_employee(2, first_name="Kevin")]
    tracker = _tracker(model, *loaded)

    assert tracker.added == ()
    assert tracker.removed == ()
    assert tracker.get_modified(loaded) == []
    assert not tracker.has_changes(loaded)


def test_added_and_removed_preserve_staging_order(model: Model) -> None:
    tracker = _tracker(model)
    first, second = make_employee(None), make_employee(None, first_name="Ana")

    tracker.add(first)
    tracker.add(second)
    tracker.remove(first)

    assert tracker.added == (first, second)
    assert tracker.removed == (first,)


def test_modified_reports_live_records_that_differ(model: Model) -> None:
    guy, kevin = make_employee(1), make_employee(2, first_name="Kevin")
    tracker = _tracker(model, guy, kevin)

    kevin.last_name = "Brown"

    assert tracker.get_modified([guy, kevin]) == [kevin]
    assert tracker.changed_fields(kevin) == ("last_name",)
    assert tracker.changed_fields(guy) == ()


def test_reverting_a_change_clears_modification(model: Model) -> None:
    guy = make_employee(1)
    tracker = _tracker(model, guy)

    guy.first_name = "Gal"
    guy.first_name = "Guy"

    assert tracker.get_modified([guy]) == []


def test_navigation_and_not_mapped_fields_are_ignored(model: Model) -> None:
    guy = make_employee(1)
    tracker = _tracker(model, guy)

    guy.nickname = "G"
    guy.department = None
    guy.projects = []

    assert tracker.get_modified([guy]) == []


def test_records_without_snapshot_entry_are_not_modified(model: Model) -> None:
    tracker = _tracker(model, make_employee(1))
    newcomer = make_employee(99, first_name="Ana")

    assert tracker.get_modified([newcomer]) == []
    assert tracker.changed_fields(newcomer) == ()


def test_changing_a_key_moves_the_record_off_its_snapshot(model: Model) -> None:
    guy = make_employee(1)
    tracker = _tracker(model, guy)

    guy.id = 42

    assert tracker.get_modified([guy]) == []


def test_modified_records_are_logged(model: Model, caplog: pytest.LogCaptureFixture) -> None:
    guy = make_employee(1)
    tracker = _tracker(model, guy)
    guy.is_employed = False

    with caplog.at_level(logging.DEBUG, logger="miniorm.domain.tracking"):
        tracker.get_modified([guy])

    assert "is_employed" in caplog.text
