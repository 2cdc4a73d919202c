"""Read/write eligibility of a requester on a note.

The predicates fail closed: anything not explicitly allowed is denied.
``readable_by`` is the same rule as ``can_read`` expressed as a SQL clause,
so listings and searches exclude what a single-note read would refuse.
"""

from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.sql.elements import ColumnElement

from .exceptions import ForbiddenError, NotFoundError
from .models.note import Note, Visibility
from .models.share import NoteShare


def can_write(note: Note, requester_id: Optional[UUID]) -> bool:
    return requester_id is not None and note.author_id == requester_id


def can_read(note: Note, requester_id: Optional[UUID], grantee_ids: Optional[Iterable[UUID]] = None) -> bool:
    """
    Author, any reader of a PUBLIC note, or a grantee of a SHARED note.

    ``grantee_ids`` defaults to the note's loaded share rows.
    """
    if requester_id is None:
        return False
    if note.author_id == requester_id:
        return True
    if note.visibility == Visibility.PUBLIC.value:
        return True
    if note.visibility == Visibility.SHARED.value:
        grantees = note.grantee_ids if grantee_ids is None else grantee_ids
        return requester_id in set(grantees)
    return False


def readable_by(requester_id: UUID) -> ColumnElement[bool]:
    """WHERE clause selecting the notes ``requester_id`` may read."""
    has_grant = (
        select(NoteShare.id)
        .where(and_(NoteShare.note_id == Note.id, NoteShare.user_id == requester_id))
        .exists()
    )
    return or_(
        Note.author_id == requester_id,
        Note.visibility == Visibility.PUBLIC.value,
        and_(Note.visibility == Visibility.SHARED.value, has_grant),
    )


def ensure_readable(note: Optional[Note], requester_id: UUID) -> Note:
    if note is None:
        raise NotFoundError("Note not found")
    if not can_read(note, requester_id):
        raise ForbiddenError("You do not have access to this note")
    return note


def ensure_writable(note: Optional[Note], requester_id: UUID) -> Note:
    if note is None:
        raise NotFoundError("Note not found")
    if not can_write(note, requester_id):
        raise ForbiddenError("Only the author can modify this note")
    return note
