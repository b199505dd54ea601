from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., min_length=1)
    # Admin accounts cannot be self-registered
    role: Literal["landlord", "tenant"] = "tenant"


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateDetailsRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    profile_image: Optional[str] = None
    preferred_locations: Optional[List[str]] = None
    max_budget: Optional[float] = Field(None, ge=0)


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)
