"""Tag list endpoint.

Lists the caller's live tags with the number of live entries carrying
each; deleted entries do not count toward a tag.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.api.deps import get_current_user_id, get_db, get_entry_service
from mediatracker.api.routers.responses import LIST_ERRORS
from mediatracker.api.schemas.responses import ApiResponse
from mediatracker.models.tag import TagSummary
from mediatracker.services.media_entry_service import MediaEntryService

router = APIRouter(prefix="/tags", tags=["tags"])


class TagListResponse(ApiResponse[List[TagSummary]]):
    """Response for the tag list endpoint."""

    pass


@router.get("", response_model=TagListResponse, responses=LIST_ERRORS)
async def list_tags(
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: MediaEntryService = Depends(get_entry_service),
) -> TagListResponse:
    """List the caller's tags alphabetically with entry counts."""
    return TagListResponse(data=await service.list_tags(session, user_id))
