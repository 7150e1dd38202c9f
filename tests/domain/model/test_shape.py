from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import pytest

from miniorm.domain.errors import MappingConfigurationError
from miniorm.domain.model import (
    ALLOWED_SCALAR_TYPES,
    ScalarKind,
    build_shape,
    key,
    reference,
    scalar,
)
from tests.helpers.entities import Employee, EmployeeProject, Project, make_employee


def test_shape_lists_persistable_fields_only() -> None:
    shape = build_shape(Employee, allowed_types=ALLOWED_SCALAR_TYPES)

    assert [field.name for field in shape.scalars] == [
        "id",
        "first_name",
        "last_name",
        "middle_name",
        "is_employed",
        "department_id",
    ]
    assert [nav.name for nav in shape.navigations] == ["department", "projects"]
    assert shape.table_name == "Employee"


def test_shape_reads_keys_foreign_keys_and_kinds() -> None:
    shape = build_shape(Employee, allowed_types=ALLOWED_SCALAR_TYPES)

    assert [field.name for field in shape.key_fields] == ["id"]
    assert shape.scalar("id").kind is ScalarKind.INT32
    assert shape.scalar("id").nullable is True
    assert shape.scalar("is_employed").kind is ScalarKind.BOOLEAN
    (department_fk,) = shape.foreign_keys
    assert department_fk.name == "department_id"
    assert department_fk.navigation == "department"
    assert department_fk.target.__name__ == "Department"


def test_join_record_shape_has_composite_key_doubling_as_foreign_keys() -> None:
    shape = build_shape(EmployeeProject, allowed_types=ALLOWED_SCALAR_TYPES)

    assert shape.has_composite_key
    assert {fk.name for fk in shape.foreign_keys} == {"employee_id", "project_id"}
    assert shape.foreign_keys_to(Project)[0].name == "project_id"


def test_clone_copies_scalars_and_leaves_navigation_defaults() -> None:
    shape = build_shape(Employee, allowed_types=ALLOWED_SCALAR_TYPES)
    original = make_employee(7, first_name="Ana")
    original.nickname = "A"
    original.projects.append(EmployeeProject(employee_id=7, project_id=1))

    clone = shape.clone(original)

    assert clone is not original
    assert shape.project(clone) == shape.project(original)
    assert clone.projects == []
    assert clone.department is None
    assert clone.nickname is None


def test_changed_fields_compares_scalars_by_value() -> None:
    shape = build_shape(Project, allowed_types=ALLOWED_SCALAR_TYPES)
    baseline = Project(id=1, name="Vest", started_at=datetime(2024, 1, 1))  # noqa: DTZ001
    current = shape.clone(baseline)
    current.budget = Decimal("10.00")

    assert shape.changed_fields(current, baseline) == ("budget",)
    assert shape.differs(current, baseline)


def test_column_override_is_used_for_rows() -> None:
    @dataclass(eq=False, kw_only=True)
    class Town:
        id: int = key(column="TownID")
        name: str = scalar(column="Name")

    shape = build_shape(Town, allowed_types=ALLOWED_SCALAR_TYPES, table_name="Towns")
    town = shape.from_columns({"TownID": 3, "Name": "Sofia"})

    assert (town.id, town.name) == (3, "Sofia")
    assert shape.to_columns(town) == {"TownID": 3, "Name": "Sofia"}


def test_unsupported_scalar_type_is_rejected() -> None:
    @dataclass(eq=False, kw_only=True)
    class Document:
        id: int = key()
        payload: bytes = b""

    with pytest.raises(MappingConfigurationError, match="unsupported type"):
        build_shape(Document, allowed_types=ALLOWED_SCALAR_TYPES)


def test_kind_must_match_python_type() -> None:
    @dataclass(eq=False, kw_only=True)
    class Reading:
        id: int = key()
        value: str = scalar(kind=ScalarKind.DECIMAL)

    with pytest.raises(MappingConfigurationError, match="declares kind"):
        build_shape(Reading, allowed_types=ALLOWED_SCALAR_TYPES)


def test_frozen_dataclass_is_rejected() -> None:
    @dataclass(frozen=True, kw_only=True)
    class Constant:
        id: int = key()

    with pytest.raises(MappingConfigurationError, match="frozen"):
        build_shape(Constant, allowed_types=ALLOWED_SCALAR_TYPES)


def test_foreign_key_must_name_a_reference_field() -> None:
    @dataclass(eq=False, kw_only=True)
    class Orphan:
        id: int = key()
        parent_id: int = key(references="parent")
        owner: Project | None = reference()

    with pytest.raises(MappingConfigurationError, match="unknown reference field"):
        build_shape(Orphan, allowed_types=ALLOWED_SCALAR_TYPES)
