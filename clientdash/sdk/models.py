"""
Typed payloads exchanged with the dashboard API.

Input models (``LoginData``, ``RegisterData``, ``ClientData``, ``ClientPatch``)
carry the form rules applied before anything is sent. Output models
(``User``, ``ClientRecord``, ``Message``) accept whatever extra fields the
server adds.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from clientdash.core.validation import EMAIL_PATTERN, validate_email_address  # noqa: F401


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ==================== Responses ====================

class User(_WireModel):
    """Authenticated identity; ``token`` is set by login and registration."""
    id: str = Field(..., alias="_id")
    name: str
    email: str
    token: Optional[str] = None


class Message(_WireModel):
    message: str


class ClientRecord(_WireModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    phone: str
    company: str
    subscription_renewal_date: date
    subscription_amount: float
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def to_data(self) -> "ClientData":
        """Editable fields of this record, e.g. to prefill an update."""
        return ClientData.model_validate(self.model_dump(exclude={"id", "created_at", "updated_at"}))


# ==================== Inputs ====================

class LoginData(_WireModel):
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email_address(value)


class RegisterData(_WireModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email_address(value)


class ForgotPasswordData(_WireModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email_address(value)


class PasswordResetData(_WireModel):
    password: str = Field(..., min_length=6)


class ClientData(_WireModel):
    """Client fields minus id and timestamps, as sent by create and replace."""
    name: str = Field(..., min_length=2, max_length=50)
    email: str
    phone: str = Field(..., min_length=10, max_length=15)
    company: str = Field(..., min_length=2, max_length=100)
    subscription_renewal_date: date
    subscription_amount: float = Field(..., ge=0)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email_address(value)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ClientPatch(_WireModel):
    """Partial client update; only explicitly set fields are sent."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, min_length=10, max_length=15)
    company: Optional[str] = Field(None, min_length=2, max_length=100)
    subscription_renewal_date: Optional[date] = None
    subscription_amount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else validate_email_address(value)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
