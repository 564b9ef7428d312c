from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    CUSTOMER = "customer"
    USER = "user"


# Roles allowed to manage other users within their organization
MANAGER_ROLES: tuple[str, ...] = (Role.OWNER.value, Role.ADMIN.value, Role.MANAGER.value)

# Tags still present in older documents but no longer issued
LEGACY_ROLES: tuple[str, ...] = ("sales_rep",)


class UserStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


class ErrorDetail(BaseModel):
    code: str
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorDetail
    details: Optional[list] = None
