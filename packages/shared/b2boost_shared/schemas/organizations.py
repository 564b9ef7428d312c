"""
Organization schemas shared between the API server and the maintenance commands.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OrganizationSummary(BaseModel):
    """Per-organization membership report."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    kinde_org_id: Optional[str] = Field(default=None, alias="kindeOrgId")
    user_count: int = 0
    roles: dict[str, int] = Field(default_factory=dict)
    emails: list[str] = Field(default_factory=list)
