import logging
from typing import List, Optional

from medtrack.domain.errors import InvalidMedicineError, MedicineNotFoundError
from medtrack.domain.medicine import Medicine
from medtrack.services.base import Service

logger = logging.getLogger(__name__)


class MedicineService(Service):
    """Create, look up and remove medicines."""

    async def create_medicine(
        self,
        name: str,
        dosage: str,
        description: Optional[str] = None,
        quantity: Optional[str] = None,
        unit: Optional[str] = None,
        form: Optional[str] = None,
        image_uri: Optional[str] = None,
    ) -> Medicine:
        if not name or not name.strip():
            raise InvalidMedicineError("Medicine name is required")
        if not dosage or not dosage.strip():
            raise InvalidMedicineError("Medicine dosage is required")

        medicine = Medicine.create(
            name=name.strip(),
            dosage=dosage.strip(),
            description=description,
            quantity=quantity,
            unit=unit,
            form=form,
            image_uri=image_uri,
        )
        async with self.database.session() as session:
            created = await self.medicines(session).create(medicine)

        logger.info(f"Created medicine {created.id}: {created.name}")
        return created

    async def get_medicine(self, medicine_id: int) -> Medicine:
        async with self.database.session() as session:
            medicine = await self.medicines(session).find_by_id(medicine_id)
        if medicine is None:
            raise MedicineNotFoundError(medicine_id)
        return medicine

    async def list_medicines(self) -> List[Medicine]:
        async with self.database.session() as session:
            return await self.medicines(session).find_all()

    async def delete_medicine(self, medicine_id: int) -> None:
        """Delete a medicine together with its schedules and their reminders."""
        async with self.database.session() as session:
            schedules = self.schedules(session)
            reminders = self.reminders(session)

            for schedule in await schedules.find_by_medicine_id(medicine_id):
                await reminders.delete_by_schedule_id(schedule.id)
                await schedules.delete(schedule.id)

            await self.medicines(session).delete(medicine_id)

        logger.info(f"Deleted medicine {medicine_id}")
