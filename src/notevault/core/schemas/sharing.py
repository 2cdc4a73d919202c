"""
Note sharing schemas.

Sharing is a full replacement of a note's grant list: the request carries
the complete set of users that should be able to view the note.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.note import Visibility
from ..models.share import NoteShare, SharePermission
from .auth import UserSummary


class ShareNoteRequest(BaseModel):
    """Set the note's share list to exactly these users."""

    user_ids: List[uuid.UUID] = Field(max_length=100, description="Users that get VIEW access")

    @field_validator("user_ids")
    @classmethod
    def dedupe(cls, v):
        return list(dict.fromkeys(v))

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_ids": [
                    "123e4567-e89b-12d3-a456-426614174000",
                    "223e4567-e89b-12d3-a456-426614174000",
                ]
            }
        }
    )


class ShareGrantResponse(BaseModel):
    user: UserSummary
    permission: SharePermission
    created_at: datetime

    @classmethod
    def from_share(cls, share: NoteShare) -> "ShareGrantResponse":
        return cls(
            user=UserSummary.model_validate(share.user),
            permission=share.permission,
            created_at=share.created_at,
        )


class NoteSharesResponse(BaseModel):
    """Current grants on a note."""

    note_id: uuid.UUID
    visibility: Visibility
    grants: List[ShareGrantResponse]
