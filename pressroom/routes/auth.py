"""
Pressroom Backend: Signup & Login Routes
========================================

POST /signup  {username, password} → 201 {message, id, username} | 409 | 400
POST /login   {username, password} → 200 {token}                 | 404 | 401 | 400

The token returned by /login is sent back as `Authorization: Bearer <token>`
on every protected route and expires one hour after it was issued.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.database import get_db_session
from pressroom.dependencies import get_auth_service
from pressroom.schemas.auth import Credentials, SignupResponse, TokenResponse
from pressroom.schemas.common import ErrorResponse
from pressroom.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    status_code=201,
    response_model=SignupResponse,
    responses={
        400: {"description": "Missing or blank username/password", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def signup(
    body: Credentials,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> SignupResponse:
    user = await auth_service.signup(db, body.username, body.password)
    return SignupResponse(id=user.id, username=user.username)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        400: {"description": "Missing or blank username/password", "model": ErrorResponse},
        401: {"description": "Wrong password", "model": ErrorResponse},
        404: {"description": "Unknown username", "model": ErrorResponse},
    },
    summary="Exchange credentials for a bearer token",
)
async def login(
    body: Credentials,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    token = await auth_service.login(db, body.username, body.password)
    return TokenResponse(token=token)
