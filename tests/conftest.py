from datetime import datetime

import pytest
import pytest_asyncio

from medtrack.db.database import Database
from medtrack.domain.medicine import Medicine
from medtrack.domain.schedule import Schedule
from medtrack.repositories import (
    REMINDER_REPOSITORIES,
    OrmMedicineRepository,
    OrmScheduleRepository,
)


@pytest_asyncio.fixture
async def database(tmp_path):
    """A fresh SQLite database file per test."""
    db = Database(f"sqlite:///{tmp_path / 'medtrack.db'}")
    await db.init()
    yield db
    await db.drop_all()
    await db.close()


@pytest.fixture(params=sorted(REMINDER_REPOSITORIES))
def backend(request) -> str:
    """Run the test once per reminder repository implementation."""
    return request.param


@pytest.fixture
def now() -> datetime:
    return datetime.now().replace(microsecond=0)


@pytest_asyncio.fixture
async def medicine(database) -> Medicine:
    async with database.session() as session:
        return await OrmMedicineRepository(session).create(Medicine.create(name="Amoxicillin", dosage="500mg"))


@pytest_asyncio.fixture
async def schedule(database, medicine) -> Schedule:
    async with database.session() as session:
        return await OrmScheduleRepository(session).create(
            Schedule.create(medicine_id=medicine.id, interval_hours=8, duration_days=7, start_time="08:00")
        )
