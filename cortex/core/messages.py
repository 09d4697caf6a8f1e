"""
Conversation message schema.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """A single chat message. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    name: Optional[str] = None

    @field_validator('name')
    @classmethod
    def name_must_not_be_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('name cannot be blank')
        return v

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    @classmethod
    def tool(cls, content: str, name: str) -> "Message":
        return cls(role=Role.TOOL, content=content, name=name)
