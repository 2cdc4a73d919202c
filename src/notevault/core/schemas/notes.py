"""
Note management schemas.

These schemas define the API contracts for note CRUD, version history,
listing/search and tag suggestions.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.note import Note, Visibility
from ..models.note_version import NoteVersion
from .auth import UserSummary

MAX_TAGS = 10
MAX_TAG_LENGTH = 50


def normalize_tags(tags: List[str]) -> List[str]:
    """Trim, lower-case and de-duplicate, keeping first-seen order."""
    seen = []
    for tag in tags:
        clean = tag.strip().lower()
        if not clean:
            continue
        if len(clean) > MAX_TAG_LENGTH:
            raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
        if clean not in seen:
            seen.append(clean)
    if len(seen) > MAX_TAGS:
        raise ValueError(f"A note can have at most {MAX_TAGS} tags")
    return seen


class NoteCreate(BaseModel):
    """Note creation request schema."""

    title: str = Field(min_length=1, max_length=200, description="Note title")
    body: str = Field(min_length=1, max_length=10000, description="Note body")
    tags: List[str] = Field(default_factory=list, description="Note tags")
    visibility: Visibility = Field(default=Visibility.PRIVATE, description="Who can read the note")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return normalize_tags(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Meeting Notes - Q4 Planning",
                "body": "1. Review Q3 performance\n2. Set Q4 objectives",
                "tags": ["meeting", "planning"],
                "visibility": "PRIVATE",
            }
        }
    )


class NoteUpdate(BaseModel):
    """Partial update; omitted or null fields keep their stored value."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200, description="Note title")
    body: Optional[str] = Field(default=None, min_length=1, max_length=10000, description="Note body")
    tags: Optional[List[str]] = Field(default=None, description="Replaces the tag list")
    visibility: Optional[Visibility] = Field(default=None, description="PRIVATE, SHARED or PUBLIC")
    is_archived: Optional[bool] = Field(default=None, description="Archive flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return None if v is None else normalize_tags(v)

    def provided(self) -> dict:
        """Fields that were actually sent with a value."""
        return {key: value for key, value in self.model_dump(exclude_unset=True).items() if value is not None}


class VersionResponse(BaseModel):
    """One entry of a note's history."""

    id: uuid.UUID
    note_id: uuid.UUID
    version: int
    title: str
    body: str
    created_by_id: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_version(cls, version: NoteVersion) -> "VersionResponse":
        return cls.model_validate(version)


class NoteResponse(BaseModel):
    """Note response schema."""

    id: uuid.UUID = Field(description="Note unique identifier")
    title: str
    body: str
    tags: List[str]
    visibility: Visibility
    is_archived: bool

    author_id: uuid.UUID
    author: Optional[UserSummary] = None
    shared_with: List[UserSummary] = Field(default_factory=list, description="Current VIEW grantees")

    version: int = Field(description="Latest version number")
    versions_count: int = Field(default=0)
    can_edit: bool = Field(default=False, description="Whether the requester is the author")

    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_note(cls, note: Note, requester_id: Optional[uuid.UUID] = None) -> "NoteResponse":
        return cls(
            id=note.id,
            title=note.title,
            body=note.body,
            tags=note.tags,
            visibility=note.visibility,
            is_archived=note.is_archived,
            author_id=note.author_id,
            author=UserSummary.model_validate(note.author) if note.author else None,
            shared_with=[UserSummary.model_validate(share.user) for share in note.shares if share.user],
            version=note.latest_version,
            versions_count=len(note.versions),
            can_edit=requester_id is not None and note.author_id == requester_id,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )


class NoteQuery(BaseModel):
    """Listing and search filters, taken from the query string."""

    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=10, ge=1, le=100, description="Items per page")
    search: Optional[str] = Field(default=None, max_length=200, description="Case-insensitive text match")
    tags: List[str] = Field(default_factory=list, description="Match any of these tags")
    visibility: Optional[Visibility] = None
    author_id: Optional[uuid.UUID] = None
    is_archived: Optional[bool] = None
    sort_by: Literal["created_at", "updated_at", "title"] = "updated_at"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("search")
    @classmethod
    def strip_search(cls, v):
        if v is None:
            return None
        return v.strip() or None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        # accept ?tags=a&tags=b as well as ?tags=a,b
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        parts = []
        for item in v:
            parts.extend(piece.strip().lower() for piece in str(item).split(","))
        return [part for part in dict.fromkeys(parts) if part]
