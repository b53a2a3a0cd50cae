"""
Authentication Data Transfer Objects.

Request bodies for registration and login, and the response shapes returned
by the ``/auth`` endpoints.
"""

from pydantic import Field

from .base import CamelModel


class RegisterRequest(CamelModel):
    # Field rules are enforced by UserService so every violation is reported
    username: str = ""
    email: str = ""
    password: str = ""

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "username": "jdoe",
                "email": "jdoe@example.com",
                "password": "Str0ng!Pass",
            }
        }
    }


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserDto(CamelModel):
    id: str
    username: str
    email: str


class AuthResponse(CamelModel):
    user: UserDto
    token: str


class RegisterResponse(AuthResponse):
    message: str = "User registered successfully"


class ProfileResponse(CamelModel):
    user: UserDto


class Message(CamelModel):
    message: str
