"""Account endpoints: register, login and the current user."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.api.deps import get_credential_service, get_current_user_id, get_db
from mediatracker.api.routers.responses import (
    CREATE_ERRORS,
    UNAUTHORIZED_RESPONSE,
    VALIDATION_ERROR_RESPONSE,
)
from mediatracker.api.schemas.responses import ApiResponse
from mediatracker.auth.credentials import (
    AccessToken,
    Credentials,
    CredentialService,
    UserRead,
)

router = APIRouter(prefix="/auth", tags=["auth"])


class TokenResponse(ApiResponse[AccessToken]):
    """Response carrying a fresh access token."""

    pass


class UserResponse(ApiResponse[UserRead]):
    """Response carrying the current account."""

    pass


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_ERRORS,
)
async def register(
    credentials: Credentials = Body(...),
    session: AsyncSession = Depends(get_db),
    service: CredentialService = Depends(get_credential_service),
) -> TokenResponse:
    """Create an account; the response signs it in."""
    return TokenResponse(data=await service.register(session, credentials))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={**UNAUTHORIZED_RESPONSE, **VALIDATION_ERROR_RESPONSE},
)
async def login(
    credentials: Credentials = Body(...),
    session: AsyncSession = Depends(get_db),
    service: CredentialService = Depends(get_credential_service),
) -> TokenResponse:
    """Exchange email and password for an access token."""
    return TokenResponse(data=await service.login(session, credentials))


@router.get("/me", response_model=UserResponse, responses=UNAUTHORIZED_RESPONSE)
async def me(
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    service: CredentialService = Depends(get_credential_service),
) -> UserResponse:
    """Return the account behind the bearer token."""
    user = await service.get_user(session, user_id)
    return UserResponse(data=UserRead.model_validate(user))
