"""Request bodies, parsed and validated before they reach the stores."""

from datetime import date, datetime
from typing import Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from .errors import ValidationError

Status = Literal["remaining", "applied"]

M = TypeVar("M", bound=BaseModel)


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SignupRequest(RequestModel):
    email: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    phone_e164: str = Field(alias="phoneE164", min_length=1)


class AdminSignupRequest(SignupRequest):
    admin_key: Optional[str] = Field(default=None, alias="adminKey")


class LoginRequest(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


def _parse_applied_at(value):
    # clients send either "2024-01-01" or a full ISO timestamp
    if isinstance(value, str) and len(value) > 10:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class ApplicationCreate(RequestModel):
    company_name: str = Field(alias="companyName", min_length=1)
    website_url: str = Field(alias="websiteUrl", min_length=1)
    applied_at: date = Field(alias="appliedAt")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    status: Optional[Status] = None
    notes: Optional[str] = None

    @field_validator("applied_at", mode="before")
    @classmethod
    def parse_applied_at(cls, value):
        return _parse_applied_at(value)


class ApplicationUpdate(RequestModel):
    company_name: Optional[str] = Field(default=None, alias="companyName", min_length=1)
    website_url: Optional[str] = Field(default=None, alias="websiteUrl", min_length=1)
    applied_at: Optional[date] = Field(default=None, alias="appliedAt")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    status: Optional[Status] = None
    notes: Optional[str] = None

    @field_validator("applied_at", mode="before")
    @classmethod
    def parse_applied_at(cls, value):
        return _parse_applied_at(value)

    @field_validator("company_name", "website_url", "applied_at", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class AdminApplicationsQuery(RequestModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    status: Optional[str] = None

    @field_validator("user_id", "status", mode="before")
    @classmethod
    def blank_is_absent(cls, value):
        # ?userId=&status= means no filter
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _describe(err: SchemaError) -> str:
    first = err.errors()[0]
    if first["type"] in ("missing", "string_too_short"):
        return "Missing fields"
    field = ".".join(str(part) for part in first["loc"]) or "body"
    return f"Invalid {field}"


def parse(model: Type[M], data) -> M:
    """Validate ``data`` against ``model``; raise ValidationError on bad input."""
    if not isinstance(data, dict):
        raise ValidationError("Missing fields")
    try:
        return model.model_validate(data)
    except SchemaError as e:
        raise ValidationError(_describe(e)) from e
