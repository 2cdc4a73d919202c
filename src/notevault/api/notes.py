"""Notes API endpoints: CRUD, versions, sharing and search."""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status

from ..core.schemas.common import ApiResponse, MessageResponse, Page
from ..core.schemas.notes import NoteCreate, NoteQuery, NoteResponse, NoteUpdate, VersionResponse
from ..core.schemas.sharing import NoteSharesResponse, ShareNoteRequest
from ..core.services import NoteService, SharingService
from ..middleware.auth import get_current_user_id
from .deps import get_note_service, get_sharing_service

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=ApiResponse[NoteResponse], status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Create a note and its first version."""
    note = await note_service.create_note(current_user_id, payload)
    return ApiResponse.wrap(note, request)


@router.get("", response_model=ApiResponse[Page[NoteResponse]])
async def list_notes(
    request: Request,
    query: Annotated[NoteQuery, Query()],
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Notes the caller can read, filtered and paginated."""
    page = await note_service.list_notes(current_user_id, query)
    return ApiResponse.wrap(page, request)


@router.get("/search", response_model=ApiResponse[Page[NoteResponse]])
async def search_notes(
    request: Request,
    query: Annotated[NoteQuery, Query()],
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Like listing, but the search term also matches tags."""
    page = await note_service.search_notes(current_user_id, query)
    return ApiResponse.wrap(page, request)


@router.get("/suggestions", response_model=ApiResponse[List[str]])
async def search_suggestions(
    request: Request,
    q: str = Query("", max_length=100, description="Partial search term"),
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    suggestions = await note_service.suggest(current_user_id, q)
    return ApiResponse.wrap(suggestions, request)


@router.get("/tags", response_model=ApiResponse[List[str]])
async def available_tags(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Distinct tags used on the caller's own notes."""
    tags = await note_service.get_available_tags(current_user_id)
    return ApiResponse.wrap(tags, request)


@router.get("/shared-with-me", response_model=ApiResponse[Page[NoteResponse]])
async def shared_with_me(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user_id: UUID = Depends(get_current_user_id),
    sharing_service: SharingService = Depends(get_sharing_service),
):
    result = await sharing_service.list_shared_with_me(current_user_id, page, limit)
    return ApiResponse.wrap(result, request)


@router.get("/{note_id}", response_model=ApiResponse[NoteResponse])
async def get_note(
    note_id: UUID,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Get a specific note; the read is recorded as a view."""
    note = await note_service.get_note(
        note_id,
        current_user_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return ApiResponse.wrap(note, request)


@router.api_route("/{note_id}", methods=["PUT", "PATCH"], response_model=ApiResponse[NoteResponse])
async def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Partial update; only the author may edit."""
    note = await note_service.update_note(note_id, current_user_id, payload)
    return ApiResponse.wrap(note, request)


@router.delete("/{note_id}", response_model=ApiResponse[MessageResponse])
async def delete_note(
    note_id: UUID,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Delete a note."""
    await note_service.delete_note(note_id, current_user_id)
    return ApiResponse.wrap(MessageResponse(message="Note deleted"), request)


@router.get("/{note_id}/versions", response_model=ApiResponse[List[VersionResponse]])
async def list_versions(
    note_id: UUID,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Version history, newest first."""
    versions = await note_service.list_versions(note_id, current_user_id)
    return ApiResponse.wrap(versions, request)


@router.post("/{note_id}/versions/{version}/restore", response_model=ApiResponse[NoteResponse])
async def restore_version(
    note_id: UUID,
    request: Request,
    version: int = Path(ge=1),
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Restore an old version's content as a new version."""
    note = await note_service.restore_version(note_id, version, current_user_id)
    return ApiResponse.wrap(note, request)


@router.put("/{note_id}/share", response_model=ApiResponse[NoteResponse])
async def share_note(
    note_id: UUID,
    payload: ShareNoteRequest,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    sharing_service: SharingService = Depends(get_sharing_service),
):
    """Replace the note's share list with the given users."""
    note = await sharing_service.share_note(note_id, current_user_id, payload)
    return ApiResponse.wrap(note, request)


@router.get("/{note_id}/shares", response_model=ApiResponse[NoteSharesResponse])
async def list_note_shares(
    note_id: UUID,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    sharing_service: SharingService = Depends(get_sharing_service),
):
    shares = await sharing_service.list_note_shares(note_id, current_user_id)
    return ApiResponse.wrap(shares, request)
