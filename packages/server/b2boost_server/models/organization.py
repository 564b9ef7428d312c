"""Organization document model."""

from typing import Optional

from pydantic import Field

from .base import Document, TimestampMixin


class Organization(Document, TimestampMixin):
    name: Optional[str] = None
    kinde_org_id: Optional[str] = Field(default=None, alias="kindeOrgId")
    industry: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
