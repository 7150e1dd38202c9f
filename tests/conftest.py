from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from miniorm.adapters.sqlalchemy import create_all_tables
from tests.helpers.entities import (
    Department,
    Employee,
    EmployeeProject,
    Project,
    build_model,
    make_department,
    make_employee,
    make_project,
)
from tests.helpers.storage import FakeStorageGateway

os.environ.setdefault("MINIORM_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from miniorm.domain.model import Model


@pytest.fixture
def model() -> Model:
    return build_model()


@pytest.fixture
def seeded_gateway() -> FakeStorageGateway:
    """Two departments, three employees, two projects and their assignments."""

    return FakeStorageGateway(
        {
            Department: [make_department(1, "Engineering"), make_department(2, "Sales")],
            Employee: [
                make_employee(1, first_name="Guy", department_id=1),
                make_employee(2, first_name="Kevin", department_id=1),
                make_employee(3, first_name="Roberto", department_id=2),
            ],
            Project: [make_project(1, "Classic Vest"), make_project(2, "Cycling Cap")],
            EmployeeProject: [
                EmployeeProject(employee_id=1, project_id=1),
                EmployeeProject(employee_id=1, project_id=2),
                EmployeeProject(employee_id=3, project_id=2),
            ],
        }
    )


@pytest.fixture
def sqlite_engine(tmp_path: Path, model: Model) -> Iterator[Engine]:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'miniorm.db'}", future=True)
    create_all_tables(model, engine)
    try:
        yield engine
    finally:
        engine.dispose()
