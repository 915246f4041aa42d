"""Schemas for accounts and authentication."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


class PublicUser(BaseModel):
    """User fields safe to show next to stores and reviews."""

    id: int
    name: str
    gravatar: str


class UserResponse(PublicUser):
    """The authenticated user's own account."""

    email: EmailStr
    hearts: list[int] = Field(default_factory=list)


def _require_name(v: object) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValueError("You must supply a name!")
    return v


class RegisterRequest(BaseModel):
    """Request body for POST /v1/auth/register."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(max_length=200)
    email: EmailStr
    password: str = Field(min_length=1)
    password_confirm: str = Field(alias="password-confirm")

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: object) -> str:
        return _require_name(v)

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.password_confirm:
            raise ValueError("Passwords do not match!")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AccountUpdate(BaseModel):
    """Request body for PATCH /v1/account."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: object) -> str:
        return _require_name(v)


class ForgotRequest(BaseModel):
    email: EmailStr


class ForgotResponse(BaseModel):
    message: str
    reset_url: str | None = None


class ResetRequest(BaseModel):
    """Request body for POST /v1/auth/reset/{token}."""

    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(min_length=1)
    password_confirm: str = Field(alias="password-confirm")

    @model_validator(mode="after")
    def _passwords_match(self) -> "ResetRequest":
        if self.password != self.password_confirm:
            raise ValueError("Passwords do not match!")
        return self
