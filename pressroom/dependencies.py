"""
Pressroom Backend: Request Dependencies
=======================================

What:  FastAPI dependencies that hand route handlers the services built in
       `create_app()` and the verified caller identity.
Why:   Services live on `app.state`, not in module globals, so every app
       instance (one per test) carries its own engine, storage and mailer.

Auth dependency order:
    get_current_identity runs before the request body is validated, so a
    protected route answers 401/403 before it ever complains about the payload.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pressroom.schemas.auth import Identity
from pressroom.services.auth_service import AuthService
from pressroom.services.mail_service import ContactService
from pressroom.services.news_service import NewsService
from pressroom.services.post_service import PostService
from pressroom.services.screenshot_service import PageRenderer
from pressroom.services.token_service import TokenService

# auto_error=False: a missing header must surface as our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False, description="Token returned by POST /login")


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


def get_news_service(request: Request) -> NewsService:
    return request.app.state.news_service


def get_contact_service(request: Request) -> ContactService:
    return request.app.state.contact_service


def get_page_renderer(request: Request) -> PageRenderer:
    return request.app.state.renderer


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> Identity:
    """
    Verify the bearer token on a protected route.

    Raises:
        AuthenticationError (401): no Authorization header / not a bearer token
        ForbiddenError (403):      bad signature or expired token
    """
    token = credentials.credentials if credentials else None
    return token_service.verify(token)
