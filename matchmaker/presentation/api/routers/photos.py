from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile

from ....application.services.profile_service import ProfileService
from ....core.dependencies import get_profile_service
from ..dependencies import get_viewer_id

router = APIRouter(prefix="/api", tags=["photos"])


@router.post("/upload")
def upload_photo(
    photo: UploadFile = File(...),
    viewer_id: Optional[str] = Depends(get_viewer_id),
    profile_service: ProfileService = Depends(get_profile_service),
) -> Dict[str, str]:
    """Seal an uploaded photo. Attach it with a profile update using the returned url."""
    # One byte past the limit is enough to reject an oversized upload.
    data = photo.file.read(profile_service.max_upload_size + 1)
    url = profile_service.upload_photo(
        data,
        original_name=photo.filename,
        content_type=photo.content_type,
        owner_id=viewer_id,
    )
    return {"url": url}


@router.get("/images/{filename}")
def get_image(
    filename: str,
    profile_service: ProfileService = Depends(get_profile_service),
) -> Response:
    data, media_type = profile_service.fetch_photo(filename)
    return Response(content=data, media_type=media_type)
