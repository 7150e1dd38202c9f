from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from miniorm.adapters.validation import AcceptAllValidator, PydanticValidator
from miniorm.domain.errors import MappingConfigurationError
from tests.helpers.entities import (
    Department,
    EmployeeProject,
    make_department,
    make_employee,
    make_project,
)

if TYPE_CHECKING:
    from miniorm.domain.model import Model


@pytest.fixture
def validator(model: Model) -> PydanticValidator:
    return PydanticValidator(model)


def test_accept_all_validator_accepts_anything() -> None:
    assert AcceptAllValidator().is_valid(object())


def test_well_formed_records_are_valid(validator: PydanticValidator) -> None:
    assert validator.is_valid(make_department())
    assert validator.is_valid(make_employee(None))
    assert validator.is_valid(make_project())
    assert validator.is_valid(EmployeeProject(employee_id=1, project_id=2))


def test_length_constraints_apply(validator: PydanticValidator) -> None:
    assert not validator.is_valid(make_department(1, ""))
    assert not validator.is_valid(make_department(1, "x" * 51))


def test_values_must_match_declared_types(validator: PydanticValidator) -> None:
    employee = make_employee(1)
    employee.first_name = 42  # type: ignore[assignment]

    assert not validator.is_valid(employee)


def test_booleans_are_not_integers(validator: PydanticValidator) -> None:
    employee = make_employee(1)
    employee.department_id = True

    assert not validator.is_valid(employee)


def test_integer_width_is_enforced(validator: PydanticValidator) -> None:
    assert validator.is_valid(make_department(2**31 - 1))
    assert not validator.is_valid(make_department(2**31))


def test_decimal_constraints_apply(validator: PydanticValidator) -> None:
    project = make_project()

    project.budget = Decimal("10.125")
    assert not validator.is_valid(project)

    project.budget = Decimal("-1.00")
    assert not validator.is_valid(project)

    project.budget = Decimal("9999999999.99")
    assert validator.is_valid(project)


def test_navigation_and_not_mapped_fields_are_not_validated(
    validator: PydanticValidator,
) -> None:
    employee = make_employee(1)
    employee.nickname = "anything"
    employee.department = make_department(1, "")

    assert validator.is_valid(employee)


def test_schema_is_built_once_per_type(validator: PydanticValidator, model: Model) -> None:
    shape = model.shape_for(Department)

    schema = validator.schema_for(shape)

    assert validator.schema_for(shape) is schema
    assert schema.__name__ == "DepartmentSchema"
    assert set(schema.model_fields) == {"id", "name"}


def test_unregistered_types_are_rejected(validator: PydanticValidator) -> None:
    with pytest.raises(MappingConfigurationError):
        validator.is_valid(object())


def test_failures_are_logged(validator: PydanticValidator, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="miniorm.adapters.validation"):
        validator.is_valid(make_department(1, ""))

    assert "Department (1,) failed validation" in caplog.text
