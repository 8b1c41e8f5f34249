"""
Blogdesk Backend: Local Image File Route
==========================================

What:  Serves images stored by LocalImageHost at /api/files/<public_id>.
How:   The path is resolved inside the storage root (escape → 400); missing
       files, or a non-local image host, → 404.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from blogdesk.dependencies import get_image_host
from blogdesk.exceptions import NotFoundError
from blogdesk.schemas.common import ErrorResponse
from blogdesk.services.image_host_base import ImageHost
from blogdesk.services.local_image_host import LocalImageHost

router = APIRouter(prefix="/api/files", tags=["Files"])


@router.get(
    "/{file_path:path}",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve a locally stored image",
)
async def serve_file(file_path: str, image_host: ImageHost = Depends(get_image_host)) -> FileResponse:
    if not isinstance(image_host, LocalImageHost):
        raise NotFoundError(resource="file", resource_id=file_path)

    full_path = image_host.resolve(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
