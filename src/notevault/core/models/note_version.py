# Immutable content snapshots of a note
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID

if TYPE_CHECKING:
    from .note import Note


class NoteVersion(BaseModel):
    """Title/body of a note at one point in its history. Rows are never updated."""

    __tablename__ = "note_versions"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    # kept when the editing account goes away
    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    note: Mapped["Note"] = relationship("Note", back_populates="versions")

    __table_args__ = (
        UniqueConstraint("note_id", "version", name="uq_note_versions_note_version"),
        CheckConstraint("version >= 1", name="ck_note_versions_positive"),
        Index("idx_note_versions_note_id", "note_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteVersion(note_id={self.note_id}, version={self.version})>"

    def same_content(self, title: str, body: str) -> bool:
        return self.title == title and self.body == body
