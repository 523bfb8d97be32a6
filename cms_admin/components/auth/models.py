from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from cms_admin.core.entities import Profile


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class AuthOutput:
    profile: Profile | None = None
    success: bool = False
    message: str | None = None
    error: str | None = None


class LoginPayload(BaseModel):
    """
    Data part of a login response; token field names vary between backends.

    The embedded user object is ignored: the profile always comes from the
    profile endpoint.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = Field(
        default=None, validation_alias=AliasChoices("accessToken", "token")
    )
    refresh_token: str | None = Field(default=None, validation_alias="refreshToken")
