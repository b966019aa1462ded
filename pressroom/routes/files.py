"""
Pressroom Backend: Stored File Route
====================================

What:  GET /files/{path} serves images kept by LocalFileStorage.
Who:   <img> tags that load a news item's image_url when the local backend is on.

With the S3 backend image URLs point at the bucket instead, and this route
answers 404 for everything.
"""

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from pressroom.exceptions import NotFoundError
from pressroom.schemas.common import ErrorResponse
from pressroom.services.local_storage import LocalFileStorage

router = APIRouter(tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    responses={
        200: {"description": "Stored file"},
        400: {"description": "Path escapes the storage root", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded image from local storage",
)
async def serve_file(file_path: str, request: Request) -> FileResponse:
    storage = request.app.state.storage
    if not isinstance(storage, LocalFileStorage):
        raise NotFoundError(resource="file", resource_id=file_path)

    # Rejects ../ traversal with a ValidationError
    full_path = storage.resolve_path(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    # media_type left unset: FileResponse guesses it from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
