from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateScreenShareRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    game_id: Optional[int] = None
    is_public: bool = True
    max_viewers: Optional[int] = Field(default=None, ge=1, le=100)


class UpdateScreenShareRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[Literal['ACTIVE', 'PAUSED', 'ENDED']] = None
    is_public: Optional[bool] = None
    max_viewers: Optional[int] = Field(default=None, ge=1, le=100)


class LeaveScreenShareRequest(BaseModel):
    viewer_id: Optional[int] = None


class CredentialsRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, max_length=128)


def validation_details(exc):
    return exc.errors(include_url=False, include_context=False, include_input=False)
