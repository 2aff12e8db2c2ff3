"""Media entry endpoints.

CRUD over the caller's media entries. Every handler resolves the caller
from the bearer token and passes that id explicitly to the service; no
entry belonging to another user is ever visible.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.api.deps import get_current_user_id, get_db, get_entry_service
from mediatracker.api.routers.responses import (
    CREATE_ERRORS,
    DELETE_ERRORS,
    GET_ITEM_ERRORS,
    LIST_ERRORS,
    UPDATE_ERRORS,
)
from mediatracker.api.schemas.responses import ApiResponse, PaginationMeta
from mediatracker.models.media_entry import (
    EntryListQuery,
    MediaEntryDraft,
    MediaEntryPatch,
    MediaEntryRead,
)
from mediatracker.services.entry_query import normalize_page, normalize_page_size
from mediatracker.services.media_entry_service import MediaEntryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entries", tags=["entries"])


class EntryResponse(ApiResponse[MediaEntryRead]):
    """Single entry response."""

    pass


class EntryListResponse(ApiResponse[List[MediaEntryRead]]):
    """Paged entry list response."""

    pass


@router.get("", response_model=EntryListResponse, responses=LIST_ERRORS)
async def list_entries(
    q: Optional[str] = Query(None, description="Case-insensitive title/notes substring"),
    type: Optional[str] = Query(None, description="Movie or Series"),
    sub_type: Optional[str] = Query(
        None,
        description="LiveAction, Anime, Manga, Animated, Documentary or Other",
    ),
    entry_status: Optional[str] = Query(
        None,
        alias="status",
        description="Planning, Watching, Completed, OnHold or Dropped",
    ),
    tag: Optional[str] = Query(None, description="Exact tag name, case-insensitive"),
    sort: Optional[str] = Query(None, description="title, created, updated or rating"),
    dir: Optional[str] = Query(None, description="asc or desc"),
    page: int = Query(1, description="1-based page; values below 1 mean 1"),
    page_size: int = Query(20, description="1-100; out-of-range values mean 20"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: MediaEntryService = Depends(get_entry_service),
) -> EntryListResponse:
    """List the caller's entries with filters, sorting and paging."""
    query = EntryListQuery(
        q=q,
        type=type,
        sub_type=sub_type,
        status=entry_status,
        tag=tag,
        sort=sort,
        dir=dir,
        page=page,
        page_size=page_size,
    )
    items, total = await service.list_entries(session, user_id, query)

    page = normalize_page(page)
    page_size = normalize_page_size(page_size)
    return EntryListResponse(
        data=items,
        pagination=PaginationMeta(
            total=total,
            page=page,
            page_size=page_size,
            has_more=page * page_size < total,
        ),
    )


@router.get("/{entry_id}", response_model=EntryResponse, responses=GET_ITEM_ERRORS)
async def get_entry(
    entry_id: uuid.UUID = Path(..., description="Media entry id"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: MediaEntryService = Depends(get_entry_service),
) -> EntryResponse:
    """Get one of the caller's entries."""
    return EntryResponse(data=await service.get_entry(session, user_id, entry_id))


@router.post(
    "",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_ERRORS,
)
async def create_entry(
    request: Request,
    response: Response,
    draft: MediaEntryDraft = Body(...),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: MediaEntryService = Depends(get_entry_service),
) -> EntryResponse:
    """Create an entry and attach its tags."""
    entry = await service.create_entry(session, user_id, draft)
    response.headers["Location"] = str(request.url_for("get_entry", entry_id=entry.id))
    return EntryResponse(data=entry)


@router.patch("/{entry_id}", response_model=EntryResponse, responses=UPDATE_ERRORS)
@router.put("/{entry_id}", response_model=EntryResponse, responses=UPDATE_ERRORS)
async def update_entry(
    entry_id: uuid.UUID = Path(..., description="Media entry id"),
    patch: MediaEntryPatch = Body(...),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: MediaEntryService = Depends(get_entry_service),
) -> EntryResponse:
    """
    Partially update an entry.

    Absent or null fields are left unchanged; use ``clear`` to empty
    ``sub_type``, ``rating`` or ``notes``. A ``tags`` list replaces the
    entry's tags. PUT is accepted with the same partial semantics.
    """
    return EntryResponse(
        data=await service.update_entry(session, user_id, entry_id, patch)
    )


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=DELETE_ERRORS,
)
async def delete_entry(
    entry_id: uuid.UUID = Path(..., description="Media entry id"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: MediaEntryService = Depends(get_entry_service),
) -> Response:
    """Soft-delete an entry."""
    await service.delete_entry(session, user_id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
