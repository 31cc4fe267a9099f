from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class Role(str, Enum):
    FAN = "fan"
    CELEBRITY = "celebrity"


class Identity(BaseModel):
    """The signed-in user. Replaced wholesale on login, dropped on logout."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: StrictStr = Field(min_length=1)
    display_name: StrictStr = Field(alias="username", min_length=1)
    role: Role

    @property
    def is_fan(self) -> bool:
        return self.role is Role.FAN


class SigninRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignupRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=100)


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken", min_length=1)
