# Note model and its ordered tag rows
import uuid
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import attributes as orm_attributes
from sqlalchemy.orm import mapped_column, relationship

from .base import BaseModel, TimestampMixin
from .types import GUID

if TYPE_CHECKING:
    from .note_version import NoteVersion
    from .share import NoteShare
    from .user import User


class Visibility(str, Enum):
    """Who besides the author may read a note."""

    PRIVATE = "PRIVATE"
    SHARED = "SHARED"
    PUBLIC = "PUBLIC"


class Note(TimestampMixin, BaseModel):
    """Note owned by a single author."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(20), default=Visibility.PRIVATE.value, nullable=False
    )
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # set once at creation
    author_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    author: Mapped["User"] = relationship("User", lazy="selectin")

    note_tags: Mapped[List["NoteTag"]] = relationship(
        "NoteTag",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="NoteTag.position",
        lazy="selectin",
    )

    versions: Mapped[List["NoteVersion"]] = relationship(
        "NoteVersion",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="NoteVersion.version",
        lazy="selectin",
    )

    shares: Mapped[List["NoteShare"]] = relationship(
        "NoteShare",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
        CheckConstraint("length(body) <= 10000", name="ck_notes_body_len"),
        CheckConstraint(
            "visibility IN ('PRIVATE', 'SHARED', 'PUBLIC')", name="ck_notes_visibility"
        ),
        Index("idx_notes_author_id", "author_id"),
        Index("idx_notes_visibility", "visibility"),
        Index("idx_notes_created_at", "created_at"),
        Index("idx_notes_author_updated", "author_id", "updated_at"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', author_id={self.author_id})>"

    @property
    def tags(self) -> List[str]:
        """Tag names in their stored order."""
        return [note_tag.name for note_tag in self.note_tags]

    @property
    def latest_version(self) -> int:
        return max((v.version for v in self.versions), default=0)

    @property
    def grantee_ids(self) -> List[uuid.UUID]:
        return [share.user_id for share in self.shares]

    def set_tags(self, names: Iterable[str]) -> None:
        """
        Replace the tag list.

        Rows for names that survive are reused so the (note_id, name) unique
        key never sees a delete and insert of the same name in one flush.
        """
        existing = {note_tag.name: note_tag for note_tag in self.note_tags}
        rows = []
        for position, name in enumerate(names):
            row = existing.get(name)
            if row is None:
                row = NoteTag(name=name)
            row.position = position
            rows.append(row)
        self.note_tags = rows


class NoteTag(BaseModel):
    """One tag on one note."""

    __tablename__ = "note_tags"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    note: Mapped["Note"] = relationship("Note", back_populates="note_tags")

    __table_args__ = (
        UniqueConstraint("note_id", "name", name="uq_note_tags_note_name"),
        CheckConstraint("name = lower(name)", name="ck_note_tags_name_lowercase"),
        CheckConstraint("length(name) <= 50", name="ck_note_tags_name_len"),
        Index("idx_note_tags_note_id", "note_id"),
        Index("idx_note_tags_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<NoteTag(note_id={self.note_id}, name='{self.name}')>"


# Fresh notes start with loaded, empty collections so async code never lazy loads
@event.listens_for(Note, "init", propagate=True)
def _init_note_collections(target, args, kwargs):
    for key in ("note_tags", "versions", "shares"):
        if key not in kwargs:
            orm_attributes.set_committed_value(target, key, [])
