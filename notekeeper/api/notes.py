"""Notes endpoints: CRUD scoped to the authenticated user."""

import logging

from fastapi import APIRouter, status
from sqlalchemy.orm import Session

from notekeeper.api.deps import CurrentUserDep, DbDep
from notekeeper.core.errors import NotFoundError
from notekeeper.models import Note
from notekeeper.models.note import DEFAULT_NOTE_COLOR
from notekeeper.schemas.auth import MessageResponse
from notekeeper.schemas.notes import NoteResponse, NoteWrite

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_owned_note(db: Session, note_id: str, user_id: str) -> Note:
    # Another user's note is reported exactly like a missing one.
    note = db.query(Note).filter(Note.id == note_id, Note.user_id == user_id).first()
    if note is None:
        raise NotFoundError("Note not found")
    return note


@router.get("", response_model=list[NoteResponse])
def list_notes(current_user: CurrentUserDep, db: DbDep) -> list[Note]:
    """All of the caller's notes, newest first."""
    return (
        db.query(Note)
        .filter(Note.user_id == current_user.id)
        .order_by(Note.created_at.desc(), Note.id)
        .all()
    )


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(note_id: str, current_user: CurrentUserDep, db: DbDep) -> Note:
    return _get_owned_note(db, note_id, current_user.id)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(body: NoteWrite, current_user: CurrentUserDep, db: DbDep) -> Note:
    note = Note(
        user_id=current_user.id,
        title=body.title,
        content=body.content,
        tags=body.tags,
        color=body.color or DEFAULT_NOTE_COLOR,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info("Note created", extra={"user_id": current_user.id, "note_id": note.id})
    return note


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(note_id: str, body: NoteWrite, current_user: CurrentUserDep, db: DbDep) -> Note:
    """Replace title, content and tags; colour is kept when not sent."""
    note = _get_owned_note(db, note_id, current_user.id)
    note.title = body.title
    note.content = body.content
    note.tags = body.tags
    if body.color:
        note.color = body.color
    db.commit()
    db.refresh(note)
    return note


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(note_id: str, current_user: CurrentUserDep, db: DbDep) -> MessageResponse:
    note = _get_owned_note(db, note_id, current_user.id)
    db.delete(note)
    db.commit()
    logger.info("Note deleted", extra={"user_id": current_user.id, "note_id": note_id})
    return MessageResponse(message="Note deleted successfully")
