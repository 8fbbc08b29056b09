"""Request/response schemas for notes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notekeeper.models.note import DEFAULT_NOTE_COLOR

TITLE_MAX_LEN = 100


class NoteWrite(BaseModel):
    """Body for creating or replacing a note."""

    title: str = Field(..., description="Title (1-100 chars)")
    content: str = Field(..., description="Note body")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")
    color: str | None = Field(default=None, description="Background colour, e.g. #ffffff")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        title = v.strip()
        if not title:
            raise ValueError("Title is required")
        if len(title) > TITLE_MAX_LEN:
            raise ValueError(f"Title cannot be more than {TITLE_MAX_LEN} characters")
        return title

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        content = v.strip()
        if not content:
            raise ValueError("Content is required")
        return content

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t.strip()]


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    tags: list[str] = Field(default_factory=list)
    color: str = DEFAULT_NOTE_COLOR
    created_at: datetime
    updated_at: datetime
