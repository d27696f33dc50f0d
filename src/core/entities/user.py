"""User entity (requesters, assignees, movement performers)."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    OPERATOR = "operator"
    MANAGER = "manager"
    ADMIN = "admin"


class User(BaseModel):
    id: int | None = None
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.OPERATOR
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
