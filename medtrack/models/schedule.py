from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from medtrack.db.database import Base


class ScheduleRecord(Base):
    """Schedule row: how often and for how long a medicine is taken."""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="CASCADE"), nullable=False, index=True)
    interval_hours = Column(Integer, nullable=False)
    duration_days = Column(Integer, nullable=False)
    start_time = Column(String, nullable=False)  # "HH:MM" or ISO timestamp
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Schedule {self.id}: medicine {self.medicine_id} every {self.interval_hours}h for {self.duration_days}d>"
