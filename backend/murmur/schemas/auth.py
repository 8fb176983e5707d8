"""
Murmur Backend — Auth Request Schemas
=======================================

What:  Request bodies for POST /api/auth/register and /api/auth/login.
How:   Required strings must be non-blank; email must be syntactically valid
       (email-validator via EmailStr); passwords are taken verbatim.
"""

from pydantic import EmailStr, Field, field_validator

from murmur.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    full_name: str = Field(min_length=1, max_length=100, description="Display name")
    username: str = Field(min_length=1, max_length=50, description="Unique handle")
    email: EmailStr = Field(description="Unique login email")
    password: str = Field(min_length=6, max_length=128, description="Plaintext password (min 6)")

    @field_validator("full_name", "username")
    @classmethod
    def not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
