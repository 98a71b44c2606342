from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON bodies use camelCase; Python attributes stay snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

    @field_validator("email", "first_name", "last_name", mode="before")
    @classmethod
    def strip_whitespace(cls, value):
        return value.strip() if isinstance(value, str) else value


class LoginRequest(CamelModel):
    # Not EmailStr: malformed addresses fail in authenticate_user with 401
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value


class Token(BaseModel):
    token: str


class MatchStats(CamelModel):
    total_matches: int = 0
    average_score: float = 0
    last_match_score: float = 0


class UserResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    created_at: Optional[datetime] = None
    stats: MatchStats = MatchStats()
