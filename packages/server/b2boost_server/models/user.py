"""User document model."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import Document, TimestampMixin, as_utc


def split_name(name: str) -> tuple[str, str]:
    """Split a display name into (first, last) on the first space."""
    first, _, last = name.strip().partition(" ")
    return first, last.strip()


class User(Document, TimestampMixin):
    kinde_id: Optional[str] = Field(default=None, alias="kindeId")  # identity-provider subject
    email: Optional[str] = None
    role: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")
    is_active: Optional[bool] = Field(default=False, alias="isActive")
    status: Optional[str] = None  # active | pending | inactive
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    last_login: Optional[datetime] = Field(default=None, alias="lastLogin")

    @field_validator("last_login", mode="after")
    @classmethod
    def _last_login_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part).strip()
