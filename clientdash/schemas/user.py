from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str
    email: str


class SessionOut(UserOut):
    """Profile plus the bearer token issued by login and registration."""
    token: Optional[str] = None
