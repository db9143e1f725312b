"""Pydantic models for the conversational advisor.

Model replies are untrusted: every model here decodes permissively. Unknown
fields are ignored and malformed fields fall back to their defaults instead
of failing the whole object.
"""

from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tech_catalog.schema import Category


def _string_or_default(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def coerce_string_list(value: Any) -> list[str]:
    """Keep only the string items of a list; anything else becomes []."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str)]


class Role(str, Enum):
    """Author of a conversation message."""
    USER = "user"
    ASSISTANT = "assistant"


class TechChoice(BaseModel):
    """The model's pick for one category."""
    name: str = ""
    reason: str = ""
    alternatives: list[str] = Field(default_factory=list)

    @field_validator("name", "reason", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _string_or_default(value)

    @field_validator("alternatives", mode="before")
    @classmethod
    def _coerce_alternatives(cls, value: Any) -> list[str]:
        return coerce_string_list(value)


class AIRecommendation(BaseModel):
    """Structured stack recommendation returned by the model.

    Every category is optional; ``summary`` and ``follow_up`` are free text.
    """
    model_config = ConfigDict(populate_by_name=True)

    frontend: Optional[TechChoice] = None
    backend: Optional[TechChoice] = None
    database: Optional[TechChoice] = None
    hosting: Optional[TechChoice] = None
    summary: Optional[str] = None
    follow_up: Optional[str] = Field(None, alias="followUp")

    @field_validator("frontend", "backend", "database", "hosting", mode="before")
    @classmethod
    def _drop_malformed_choice(cls, value: Any) -> Optional[dict]:
        return value if isinstance(value, (dict, TechChoice)) else None

    @field_validator("summary", "follow_up", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> Optional[str]:
        return _string_or_default(value) or None

    def choices(self) -> Iterator[tuple[Category, TechChoice]]:
        """Present (category, choice) pairs in display order."""
        for category in Category.ordered():
            choice = getattr(self, category.value)
            if choice is not None:
                yield category, choice

    def is_empty(self) -> bool:
        return not any(True for _ in self.choices()) and not self.summary and not self.follow_up


class ParsedResponse(BaseModel):
    """Structured view of one model reply."""
    text: str
    suggestions: list[str] = Field(default_factory=list)
    recommendations: Optional[AIRecommendation] = None


class Message(BaseModel):
    """One entry of the conversation history. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    recommendations: Optional[AIRecommendation] = None
    suggestions: tuple[str, ...] = ()

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, parsed: ParsedResponse) -> "Message":
        return cls(
            role=Role.ASSISTANT,
            content=parsed.text,
            recommendations=parsed.recommendations,
            suggestions=tuple(parsed.suggestions),
        )

    def to_api(self) -> dict[str, str]:
        """Role/content pair sent to the model provider."""
        return {"role": self.role.value, "content": self.content}


class Conversation(BaseModel):
    """Append-only message history.

    ``append`` returns a new Conversation; existing instances never change.
    """
    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()

    def append(self, message: Message) -> "Conversation":
        return Conversation(messages=self.messages + (message,))

    def api_messages(self) -> list[dict[str, str]]:
        return [m.to_api() for m in self.messages]

    @property
    def last(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None
