"""
Request and response bodies for the HTTP API.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from medtrack.domain.dose_reminder import DoseReminder, ReminderStatus
from medtrack.domain.medicine import Medicine
from medtrack.domain.schedule import Schedule
from medtrack.services.reminder_service import ReminderDetails


class MedicineCreate(BaseModel):
    name: str = Field(..., description="Medicine name")
    dosage: str = Field(..., description="Dosage per intake, e.g. '500mg'")
    description: Optional[str] = Field(None, description="Free text description")
    quantity: Optional[str] = Field(None, description="Amount per package")
    unit: Optional[str] = Field(None, description="Unit of the quantity")
    form: Optional[str] = Field(None, description="Tablet, capsule, syrup, ...")
    image_uri: Optional[str] = Field(None, description="Picture of the package")


class MedicineOut(BaseModel):
    id: int
    name: str
    dosage: str
    description: Optional[str] = None
    quantity: Optional[str] = None
    unit: Optional[str] = None
    form: Optional[str] = None
    image_uri: Optional[str] = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, medicine: Medicine) -> "MedicineOut":
        return cls(
            id=medicine.id,
            name=medicine.name,
            dosage=medicine.dosage,
            description=medicine.description,
            quantity=medicine.quantity,
            unit=medicine.unit,
            form=medicine.form,
            image_uri=medicine.image_uri,
            is_active=medicine.is_active,
            created_at=medicine.created_at,
        )


class ScheduleCreate(BaseModel):
    """Range checks live in the domain so every entry point enforces them."""
    medicine_id: int = Field(..., description="Medicine to schedule")
    interval_hours: int = Field(..., description="Hours between doses within a day (1-24)")
    duration_days: int = Field(..., description="Number of treatment days")
    start_time: str = Field(..., description="First dose of each day, 'HH:MM' or ISO timestamp")
    notes: Optional[str] = Field(None, description="Additional notes")
    start_date: Optional[date] = Field(None, description="First treatment day for 'HH:MM' start times")


class ScheduleOut(BaseModel):
    id: int
    medicine_id: int
    interval_hours: int
    duration_days: int
    start_time: str
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, schedule: Schedule) -> "ScheduleOut":
        return cls(
            id=schedule.id,
            medicine_id=schedule.medicine_id,
            interval_hours=schedule.interval_hours,
            duration_days=schedule.duration_days,
            start_time=schedule.start_time,
            notes=schedule.notes,
            is_active=schedule.is_active,
            created_at=schedule.created_at,
        )


class ReminderOut(BaseModel):
    id: int
    schedule_id: int
    medicine_id: int
    scheduled_time: datetime
    taken_at: Optional[datetime] = None
    is_taken: bool
    is_skipped: bool
    status: ReminderStatus
    created_at: datetime
    medicine_name: Optional[str] = None
    dosage: Optional[str] = None

    @classmethod
    def from_entity(cls, reminder: DoseReminder, medicine_name: Optional[str] = None, dosage: Optional[str] = None) -> "ReminderOut":
        return cls(
            id=reminder.id,
            schedule_id=reminder.schedule_id,
            medicine_id=reminder.medicine_id,
            scheduled_time=reminder.scheduled_time,
            taken_at=reminder.taken_at,
            is_taken=reminder.is_taken,
            is_skipped=reminder.is_skipped,
            status=reminder.get_status(),
            created_at=reminder.created_at,
            medicine_name=medicine_name,
            dosage=dosage,
        )

    @classmethod
    def from_details(cls, details: ReminderDetails) -> "ReminderOut":
        return cls.from_entity(details.reminder, details.medicine_name, details.dosage)


class ScheduleCreated(BaseModel):
    schedule: ScheduleOut
    reminders: List[ReminderOut]


class StatsOut(BaseModel):
    medicines: int
    schedules: int
    dose_reminders: int
    today_reminders: int
    taken: int
    skipped: int
    overdue: int
