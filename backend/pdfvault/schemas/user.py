"""Account and authentication schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str = Field(..., description="Email address")
    username: str = Field(..., min_length=4, max_length=16)
    password: str = Field(..., min_length=8, max_length=32)

    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "alice@example.com", "username": "alice", "password": "securepass"}]
        }
    }


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=8, max_length=32)


class UserUpdate(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = Field(None, min_length=4, max_length=16)


class UserResponse(BaseModel):
    user_id: str
    email: str
    username: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str
