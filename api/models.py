"""
API request and response models for the user management REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in users/models.py, which own the
internal domain representation. Route handlers map between the two.

Wire names are camelCase (fullName, roleId, ...). Python attribute names stay
snake_case; the alias generator does the translation in both directions and
populate_by_name lets tests and handlers build models with either.
"""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from users.models import User, UserPage

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """The single error envelope returned on every failure path.

    {"timestamp": "...", "status": 404, "error": "Not Found", "message": "..."}
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    status: int
    error: str
    message: str

    @classmethod
    def build(cls, status_code: int, message: str) -> "ErrorResponse":
        """Stamp the current UTC time and the standard reason phrase for status_code."""
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            phrase = "Error"
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            status=status_code,
            error=phrase,
            message=message,
        )


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class _UserFields(BaseModel):
    """Profile fields shared by the register and update bodies."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    full_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    gender: Optional[str] = Field(default=None, max_length=30)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    specialization: Optional[str] = Field(default=None, max_length=255)
    qualification: Optional[str] = Field(default=None, max_length=255)
    experience_years: int = Field(default=0, ge=0)
    address: Optional[str] = Field(default=None, max_length=500)
    role_id: int = 1
    national_id_number: Optional[str] = Field(default=None, max_length=30)

    def to_domain(self, password_hash: str, enabled: bool = False) -> User:
        return User(
            full_name=self.full_name,
            email=self.email,
            gender=self.gender,
            phone_number=self.phone_number,
            specialization=self.specialization,
            qualification=self.qualification,
            experience_years=self.experience_years,
            address=self.address,
            password_hash=password_hash,
            enabled=enabled,
            role_id=self.role_id,
            national_id_number=self.national_id_number,
        )


class UserUpdate(_UserFields):
    """Request body for PUT /users/{id}.

    A full replacement of the updatable fields: anything omitted is written
    as its default. gender and phoneNumber are accepted but the update does
    not apply them. password is plaintext and hashed before the service sees
    it.
    """

    password: str = Field(min_length=1, max_length=72)
    enabled: bool = False


class UserRegister(_UserFields):
    """Request body for POST /user/new."""

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=72)


class LoginRequest(BaseModel):
    """Request body for POST /user/authenticate."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """A user as returned by the API. The password hash never leaves the server."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    phone_number: Optional[str] = None
    specialization: Optional[str] = None
    qualification: Optional[str] = None
    experience_years: int = 0
    address: Optional[str] = None
    enabled: bool = False
    role_id: int = 1
    national_id_number: Optional[str] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            gender=user.gender,
            phone_number=user.phone_number,
            specialization=user.specialization,
            qualification=user.qualification,
            experience_years=user.experience_years,
            address=user.address,
            enabled=user.enabled,
            role_id=user.role_id,
            national_id_number=user.national_id_number,
        )


class UserPageResponse(BaseModel):
    """Response body for GET /users/pagination."""

    model_config = _CAMEL

    users: list[UserResponse]
    total_pages: int
    current_page: int

    @classmethod
    def from_domain(cls, page: UserPage) -> "UserPageResponse":
        return cls(
            users=[UserResponse.from_domain(u) for u in page.users],
            total_pages=page.total_pages,
            current_page=page.current_page,
        )


class LoginResponse(BaseModel):
    model_config = _CAMEL

    access_token: str
    token_type: str = "bearer"
    expires_in: int
