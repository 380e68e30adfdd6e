"""
Pydantic schemas for authentication and user profiles.
"""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from bidproxy.auth.models import UserRole


class TokenPayload(BaseModel):
    """JWT token payload schema."""

    sub: str = Field(..., description="Subject (user ID issued by the identity provider)")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(..., description="Issued at time")
    type: Literal["access", "refresh"] = Field(..., description="Token type")
    email: EmailStr | None = Field(None, description="User email")
    first_name: str | None = Field(None, description="Given name")
    last_name: str | None = Field(None, description="Family name")
    profile_image_url: str | None = Field(None, description="Avatar URL")


class CurrentUser(BaseModel):
    """Authorized context resolved once at the request boundary."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="User ID")
    email: str | None = Field(None, description="User email")
    role: UserRole = Field(..., description="User role")
    is_active: bool = Field(True, description="Active flag")


class UserProfile(BaseModel):
    """User profile response schema."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    user_type: UserRole = Field(
        ...,
        validation_alias=AliasChoices("role", "userType"),
        serialization_alias="userType",
    )
    is_active: bool
    is_verified: bool
    company_code: str | None = None
    id_document_url: str | None = None
    address_document_url: str | None = None
    created_at: datetime
    updated_at: datetime
