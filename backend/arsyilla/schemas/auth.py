"""Registration and login schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [{"username": "alice", "password": "pw1"}]
        }
    }

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be empty")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class AuthResponse(BaseModel):
    """Returned by both register and login."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    access_key: str = Field(..., alias="accessKey")
