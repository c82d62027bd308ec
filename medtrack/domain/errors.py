class MedTrackError(Exception):
    """Base class for errors raised by medtrack."""


class InvalidScheduleError(MedTrackError):
    """A schedule cannot be expanded: bad start time, interval or duration."""


class MissingIdentityError(MedTrackError):
    """An operation needs a persisted entity but got one without an id."""


class ReminderNotFoundError(MedTrackError):
    """No dose reminder exists with the requested id."""

    def __init__(self, reminder_id: int):
        super().__init__(f"Dose reminder {reminder_id} not found")
        self.reminder_id = reminder_id


class ScheduleNotFoundError(MedTrackError):
    """No schedule exists with the requested id."""

    def __init__(self, schedule_id: int):
        super().__init__(f"Schedule {schedule_id} not found")
        self.schedule_id = schedule_id


class MedicineNotFoundError(MedTrackError):
    """No medicine exists with the requested id."""

    def __init__(self, medicine_id: int):
        super().__init__(f"Medicine {medicine_id} not found")
        self.medicine_id = medicine_id


class InvalidMedicineError(MedTrackError):
    """A medicine is missing its name or dosage."""
