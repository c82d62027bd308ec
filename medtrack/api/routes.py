from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, Request, Response, status

from medtrack.api.schemas import (
    MedicineCreate,
    MedicineOut,
    ReminderOut,
    ScheduleCreate,
    ScheduleCreated,
    ScheduleOut,
    StatsOut,
)
from medtrack.domain.errors import ScheduleNotFoundError
from medtrack.domain.notification import NotificationRequest

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.post("/medicines", response_model=MedicineOut, status_code=status.HTTP_201_CREATED)
async def create_medicine(body: MedicineCreate, request: Request):
    medicine = await request.app.state.medicine_service.create_medicine(**body.model_dump())
    return MedicineOut.from_entity(medicine)


@router.get("/medicines", response_model=List[MedicineOut])
async def list_medicines(request: Request):
    medicines = await request.app.state.medicine_service.list_medicines()
    return [MedicineOut.from_entity(medicine) for medicine in medicines]


@router.get("/medicines/{medicine_id}", response_model=MedicineOut)
async def get_medicine(medicine_id: int, request: Request):
    medicine = await request.app.state.medicine_service.get_medicine(medicine_id)
    return MedicineOut.from_entity(medicine)


@router.delete("/medicines/{medicine_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medicine(medicine_id: int, request: Request):
    state = request.app.state
    for reminder in await state.reminder_service.get_reminders(medicine_id=medicine_id):
        state.reminder_scheduler.cancel_reminder(reminder.reminder.id)
    await state.medicine_service.delete_medicine(medicine_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/schedules", response_model=ScheduleCreated, status_code=status.HTTP_201_CREATED)
async def create_schedule(body: ScheduleCreate, request: Request):
    """Create a schedule, generate its dose reminders and schedule their notifications."""
    state = request.app.state
    schedule, reminders = await state.schedule_service.create_schedule(**body.model_dump())

    medicine = await state.medicine_service.get_medicine(schedule.medicine_id)
    for reminder in reminders:
        state.reminder_scheduler.schedule_notification(
            NotificationRequest(
                reminder_id=reminder.id,
                medicine_name=medicine.name,
                dosage=medicine.dosage,
                scheduled_time=reminder.scheduled_time,
            )
        )

    return ScheduleCreated(
        schedule=ScheduleOut.from_entity(schedule),
        reminders=[ReminderOut.from_entity(reminder, medicine.name, medicine.dosage) for reminder in reminders],
    )


@router.get("/schedules", response_model=List[ScheduleOut])
async def list_schedules(request: Request, medicine_id: Optional[int] = None, active_only: bool = False):
    schedules = await request.app.state.schedule_service.list_schedules(medicine_id, active_only)
    return [ScheduleOut.from_entity(schedule) for schedule in schedules]


@router.get("/schedules/{schedule_id}", response_model=ScheduleOut)
async def get_schedule(schedule_id: int, request: Request):
    schedule = await request.app.state.schedule_service.get_schedule(schedule_id)
    return ScheduleOut.from_entity(schedule)


@router.get("/schedules/{schedule_id}/reminders", response_model=List[ReminderOut])
async def get_schedule_reminders(schedule_id: int, request: Request):
    reminders = await request.app.state.schedule_service.get_schedule_reminders(schedule_id)
    return [ReminderOut.from_entity(reminder) for reminder in reminders]


@router.post("/schedules/{schedule_id}/deactivate", response_model=ScheduleOut)
async def deactivate_schedule(schedule_id: int, request: Request):
    """Deactivate a schedule and cancel the notifications of its reminders."""
    state = request.app.state
    schedule = await state.schedule_service.set_active(schedule_id, False)
    for reminder in await state.schedule_service.get_schedule_reminders(schedule_id):
        state.reminder_scheduler.cancel_reminder(reminder.id)
    return ScheduleOut.from_entity(schedule)


@router.post("/schedules/{schedule_id}/activate", response_model=ScheduleOut)
async def activate_schedule(schedule_id: int, request: Request):
    """Activate a schedule and schedule notifications for its future pending reminders."""
    state = request.app.state
    schedule = await state.schedule_service.set_active(schedule_id, True)
    await state.reminder_scheduler.schedule_reminders_from_db(schedule_id=schedule_id)
    return ScheduleOut.from_entity(schedule)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(schedule_id: int, request: Request):
    state = request.app.state
    try:
        reminders = await state.schedule_service.get_schedule_reminders(schedule_id)
    except ScheduleNotFoundError:
        # Deleting an unknown schedule is a no-op
        reminders = []
    for reminder in reminders:
        state.reminder_scheduler.cancel_reminder(reminder.id)
    await state.schedule_service.delete_schedule(schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/reminders", response_model=List[ReminderOut])
async def list_reminders(
    request: Request,
    medicine_id: Optional[int] = None,
    taken: Optional[bool] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
):
    reminders = await request.app.state.reminder_service.get_reminders(medicine_id, taken, start, end)
    return [ReminderOut.from_details(details) for details in reminders]


@router.get("/reminders/today", response_model=List[ReminderOut])
async def today_reminders(request: Request):
    reminders = await request.app.state.reminder_service.get_today_reminders()
    return [ReminderOut.from_details(details) for details in reminders]


@router.get("/reminders/pending", response_model=List[ReminderOut])
async def pending_reminders(request: Request):
    reminders = await request.app.state.reminder_service.get_pending()
    return [ReminderOut.from_details(details) for details in reminders]


@router.get("/reminders/overdue", response_model=List[ReminderOut])
async def overdue_reminders(request: Request):
    reminders = await request.app.state.reminder_service.get_overdue()
    return [ReminderOut.from_details(details) for details in reminders]


@router.get("/reminders/history", response_model=List[ReminderOut])
async def reminder_history(request: Request, kind: str = Query("all", alias="filter", pattern="^(all|taken|skipped)$")):
    reminders = await request.app.state.reminder_service.get_history(kind)
    return [ReminderOut.from_details(details) for details in reminders]


@router.get("/reminders/{reminder_id}", response_model=ReminderOut)
async def get_reminder(reminder_id: int, request: Request):
    reminder = await request.app.state.reminder_service.get_reminder(reminder_id)
    return ReminderOut.from_entity(reminder)


@router.post("/reminders/{reminder_id}/take", response_model=ReminderOut)
async def take_reminder(reminder_id: int, request: Request):
    state = request.app.state
    reminder = await state.reminder_service.mark_as_taken(reminder_id)
    state.reminder_scheduler.cancel_reminder(reminder_id)
    return ReminderOut.from_entity(reminder)


@router.post("/reminders/{reminder_id}/skip", response_model=ReminderOut)
async def skip_reminder(reminder_id: int, request: Request):
    state = request.app.state
    reminder = await state.reminder_service.mark_as_skipped(reminder_id)
    state.reminder_scheduler.cancel_reminder(reminder_id)
    return ReminderOut.from_entity(reminder)


@router.get("/stats", response_model=StatsOut)
async def stats(request: Request):
    return await request.app.state.reminder_service.get_stats()
