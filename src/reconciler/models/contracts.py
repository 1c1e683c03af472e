from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LinkPrecedence(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class Contact(BaseModel):
    """A stored contact row. Secondaries point at their cluster primary via ``linked_id``."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    linked_id: Optional[int] = Field(default=None, alias="linkedId")
    link_precedence: LinkPrecedence = Field(alias="linkPrecedence")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    deleted_at: Optional[datetime] = Field(default=None, alias="deletedAt")

    @property
    def is_primary(self) -> bool:
        return self.link_precedence is LinkPrecedence.PRIMARY

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)


class IdentifyRequest(BaseModel):
    """Payload accepted by ``POST /identify``."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    @field_validator("phone_number", mode="before")
    @classmethod
    def coerce_phone_number(cls, value: Any) -> Any:
        # Clients routinely send phone numbers as JSON numbers.
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("email", "phone_number")
    @classmethod
    def blank_as_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        return value

    def is_empty(self) -> bool:
        return not (self.email or self.phone_number)


class ContactSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    primary_contact_id: int = Field(alias="primaryContactId")
    emails: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list, alias="phoneNumbers")
    secondary_contact_ids: List[int] = Field(default_factory=list, alias="secondaryContactIds")


class IdentifyResponse(BaseModel):
    contact: ContactSummary


__all__ = [
    "Contact",
    "ContactSummary",
    "IdentifyRequest",
    "IdentifyResponse",
    "LinkPrecedence",
]
