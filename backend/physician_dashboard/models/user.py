from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserRole:
    PHYSICIAN = "physician"
    NURSE = "nurse"
    ADMIN = "admin"


class User(BaseModel):
    """A dashboard account. Only the bcrypt hash of the password is ever kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    first_name: str
    last_name: str
    hashed_password: str
    license_number: str = ""
    specialization: str = ""
    role: str = UserRole.PHYSICIAN
    is_active: bool = True
    registered_at: datetime
    last_login: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        if self.role == UserRole.PHYSICIAN:
            return f"Dr. {self.first_name} {self.last_name}"
        return f"{self.first_name} {self.last_name}"
