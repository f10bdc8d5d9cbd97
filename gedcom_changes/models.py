from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional, Any

class Tree(BaseModel):
    """A genealogical database managed by the installation."""
    id: int
    name: str
    title: Optional[str] = None

    def display_title(self) -> str:
        return self.title or self.name


class PendingChange(BaseModel):
    """One proposed edit to a record, as read from the change table."""
    change_id: int
    gedcom_id: int
    gedcom_name: str
    xref: str
    old_gedcom: Optional[str] = None
    new_gedcom: Optional[str] = None
    user_id: int
    user_name: str
    real_name: Optional[str] = None
    change_time: datetime
    status: str = "pending"
    record: Optional[Any] = None

    @field_validator("change_time", mode="before")
    @classmethod
    def parse_change_time(cls, value):
        # sqlite CURRENT_TIMESTAMP is "YYYY-MM-DD HH:MM:SS"
        if isinstance(value, str):
            return datetime.fromisoformat(value.strip())
        return value
