from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer

from medtrack.db.database import Base


class DoseReminderRecord(Base):
    """Dose reminder row. Overdue is never stored, it is derived on read."""
    __tablename__ = "dose_reminders"

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_time = Column(DateTime, nullable=False, index=True)  # Local wall-clock time
    taken_at = Column(DateTime, nullable=True)
    is_taken = Column(Boolean, nullable=False, default=False)
    is_skipped = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<DoseReminder {self.id}: schedule {self.schedule_id} at {self.scheduled_time}>"
