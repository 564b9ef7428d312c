"""Base mixins for document models."""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # The driver may hand back naive datetimes; they are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Document(BaseModel):
    """A loosely-typed stored document. Unknown fields are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Optional[str]:
        return str(value) if value is not None else None

    @classmethod
    def from_document(cls, document: dict):
        """Load a stored document. Known fields holding the wrong type are read as None."""
        try:
            return cls.model_validate(document)
        except ValidationError as exc:
            invalid = {err["loc"][0] for err in exc.errors() if err["loc"]}
            log.warning(
                "document.invalid_fields",
                model=cls.__name__,
                document_id=str(document.get("_id")),
                fields=sorted(str(name) for name in invalid),
            )
            cleaned = {
                key: (None if key in invalid else value) for key, value in document.items()
            }
            return cls.model_validate(cleaned)

    def to_document(self) -> dict:
        """Stored representation, without the identifier or unset values."""
        return self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)


class TimestampMixin(BaseModel):
    created_at: Optional[datetime] = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: Optional[datetime] = Field(default_factory=_utcnow, alias="updatedAt")

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _attach_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)
