"""
Murmur Backend — Media Route
==============================

What:  Serves images written by LocalMediaStore.
How:   GET /api/media/{path} maps the path inside STORAGE_ROOT; anything
       escaping the root or missing is a 404. With the S3 backend images are
       served by the bucket and this route always answers 404.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from murmur.dependencies import get_media_store
from murmur.exceptions import NotFoundError
from murmur.schemas.common import ErrorResponse
from murmur.services.media_base import MediaStore
from murmur.services.media_service import LocalMediaStore

router = APIRouter(prefix="/api/media", tags=["Media"])


@router.get(
    "/{file_path:path}",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve a stored image",
)
async def serve_media(
    file_path: str,
    media: MediaStore = Depends(get_media_store),
) -> FileResponse:
    path = media.resolve(file_path) if isinstance(media, LocalMediaStore) else None
    if path is None:
        raise NotFoundError(resource="file", resource_id=file_path)

    # Stored names are random UUIDs and never rewritten
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
