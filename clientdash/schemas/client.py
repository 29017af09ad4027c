"""
Pydantic schemas for client records.

Field names go over the wire in camelCase (``subscriptionRenewalDate``) and
identifiers as ``_id``.
"""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from clientdash.core.validation import validate_email_address


class ClientBase(BaseModel):
    """Fields a dashboard user can set on a client"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

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


class ClientCreate(ClientBase):
    """Schema for POST /clients"""
    pass


class ClientReplace(ClientBase):
    """Schema for PUT /clients/{id}; every field is replaced"""
    pass


class ClientPatch(BaseModel):
    """Schema for PATCH /clients/{id}; only fields present in the body change"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

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

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for field in self.model_fields_set:
            if field != "notes" and getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self


class ClientOut(BaseModel):
    """Schema for client output"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str
    email: str
    phone: str
    company: str
    subscription_renewal_date: date
    subscription_amount: float
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops tzinfo; stored values are UTC
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
