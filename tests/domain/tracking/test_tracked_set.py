from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from miniorm.domain.errors import DuplicateKeyError
from miniorm.domain.tracking import TrackedSet
from tests.helpers.entities import Department, Employee, make_department, make_employee

if TYPE_CHECKING:
    from miniorm.domain.model import Model


@pytest.fixture
def employees(model: Model) -> TrackedSet[Employee]:
    return TrackedSet(
        model.shape_for(Employee),
        [make_employee(1), make_employee(2, first_name="Kevin")],
    )


def test_live_records_are_clones_of_the_input(model: Model) -> None:
    loaded = make_employee(1)
    tracked = TrackedSet(model.shape_for(Employee), [loaded])

    (live,) = tracked
    assert live is not loaded
    assert loaded not in tracked
    assert live in tracked

    loaded.first_name = "Changed"
    assert not tracked.has_changes()


def test_live_and_snapshot_do_not_share_records(employees: TrackedSet[Employee]) -> None:
    live = next(iter(employees))

    assert employees.change_tracker.snapshot.match(live) is not live


def test_add_stages_and_exposes_record(employees: TrackedSet[Employee]) -> None:
    newcomer = make_employee(None, first_name="Ana")

    employees.add(newcomer)

    assert newcomer in employees
    assert len(employees) == 3
    assert employees.change_tracker.added == (newcomer,)
    assert employees.has_changes()


def test_add_rejects_other_entity_types(employees: TrackedSet[Employee]) -> None:
    with pytest.raises(TypeError, match="Expected Employee"):
        employees.add(make_department())  # type: ignore[arg-type]


def test_remove_stages_live_records_only(employees: TrackedSet[Employee]) -> None:
    guy = next(iter(employees))

    assert employees.remove(guy) is True
    assert employees.remove(guy) is False
    assert employees.remove(make_employee(1)) is False

    assert guy not in employees
    assert employees.change_tracker.removed == (guy,)


def test_removing_an_added_record_stages_both(employees: TrackedSet[Employee]) -> None:
    newcomer = make_employee(None, first_name="Ana")
    employees.add(newcomer)

    employees.remove(newcomer)

    assert employees.change_tracker.added == (newcomer,)
    assert employees.change_tracker.removed == (newcomer,)


def test_bulk_helpers(employees: TrackedSet[Employee]) -> None:
    employees.add_all([make_employee(None, first_name="Ana"), make_employee(None)])
    assert len(employees) == 4

    employees.clear()

    assert len(employees) == 0
    assert len(employees.change_tracker.removed) == 4


def test_get_modified_diffs_live_records(employees: TrackedSet[Employee]) -> None:
    guy, kevin = list(employees)
    kevin.middle_name = "J"

    assert employees.get_modified() == [kevin]
    assert guy not in employees.get_modified()


def test_duplicate_keys_in_loaded_records_raise(model: Model) -> None:
    with pytest.raises(DuplicateKeyError):
        TrackedSet(model.shape_for(Department), [make_department(1), make_department(1)])


def test_repr_names_the_entity(employees: TrackedSet[Employee]) -> None:
    assert repr(employees) == "TrackedSet(Employee, 2 records)"
    assert employees.entity_cls is Employee
