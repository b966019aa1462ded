"""
Pressroom Backend: Screenshot Route
===================================

GET /screenshot/{url} → full-page PNG of the given public page.

The target goes in the path, either percent-encoded
(/screenshot/https%3A%2F%2Fexample.com) or raw
(/screenshot/https://example.com/page?x=1). A raw query string belongs to the
target URL, not to this endpoint.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from pressroom.dependencies import get_page_renderer
from pressroom.schemas.common import ErrorResponse
from pressroom.services.screenshot_service import PageRenderer, normalize_target_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Screenshot"])


@router.get(
    "/screenshot/{url:path}",
    response_class=Response,
    responses={
        200: {"description": "Full-page PNG", "content": {"image/png": {}}},
        400: {"description": "Not an http(s) URL", "model": ErrorResponse},
        500: {"description": "Page could not be rendered", "model": ErrorResponse},
    },
    summary="Capture a full-page screenshot of a URL",
)
async def screenshot(
    url: str,
    request: Request,
    renderer: PageRenderer = Depends(get_page_renderer),
) -> Response:
    if request.url.query:
        url = f"{url}?{request.url.query}"
    target = normalize_target_url(url)

    image = await renderer.render(target)
    return Response(content=image, media_type="image/png")
