"""Pydantic schemas for inbound frames and outbound events."""
from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field, StrictBool, StrictStr


class MessageFrame(BaseModel):
    message: StrictStr


class TypingFrame(BaseModel):
    typing: StrictBool


class SetNameFrame(BaseModel):
    name: StrictStr


class UserOut(BaseModel):
    id: str
    name: str


class RenamedUserOut(BaseModel):
    id: str
    old_name: str = Field(..., serialization_alias="oldName")
    new_name: str = Field(..., serialization_alias="newName")


class UsersEvent(BaseModel):
    type: Literal["users"] = "users"
    users: List[UserOut]


class InfoEvent(BaseModel):
    type: Literal["info"] = "info"
    user: UserOut


class UserJoinedEvent(BaseModel):
    type: Literal["user:joined"] = "user:joined"
    user: UserOut


class UserLeftEvent(BaseModel):
    type: Literal["user:left"] = "user:left"
    user: UserOut


class TypingEvent(BaseModel):
    type: Literal["typing"] = "typing"
    user: UserOut
    typing: bool


class MessageEvent(BaseModel):
    type: Literal["message"] = "message"
    user: UserOut
    message: str
    date: datetime


class UserRenameEvent(BaseModel):
    type: Literal["user:rename"] = "user:rename"
    user: RenamedUserOut
