from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from medtrack.db.database import Base


class MedicineRecord(Base):
    """Medicine row."""
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    dosage = Column(String, nullable=False)  # e.g. "500mg"
    quantity = Column(String, nullable=True)
    unit = Column(String, nullable=True)
    form = Column(String, nullable=True)  # tablet, syrup, ...
    image_uri = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Medicine {self.id}: {self.name} {self.dosage}>"
