from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Medicine:
    """A medicine that schedules are created for."""

    name: str
    dosage: str
    created_at: datetime
    id: Optional[int] = None
    description: Optional[str] = None
    quantity: Optional[str] = None
    unit: Optional[str] = None
    form: Optional[str] = None
    image_uri: Optional[str] = None
    is_active: bool = True

    @classmethod
    def create(cls, name: str, dosage: str, **details) -> "Medicine":
        return cls(name=name, dosage=dosage, created_at=datetime.now(), **details)

    def has_image(self) -> bool:
        return bool(self.image_uri)
