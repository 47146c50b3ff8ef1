"""Profile directory, profile updates and account deletion."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from ....application.services.profile_service import ProfileService
from ....core.dependencies import get_profile_service
from ..dependencies import get_viewer_id
from ..schemas.profile import ProfileUpdateRequest, directory_profile, public_profile

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users")
def list_users(
    profile_service: ProfileService = Depends(get_profile_service),
) -> List[Dict[str, Any]]:
    return [directory_profile(user) for user in profile_service.list_profiles()]


# A caller identity is required, but it is not compared with user_id.
@router.put("/users/{user_id}")
def update_user(
    user_id: str,
    request: ProfileUpdateRequest,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    profile_service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    user = profile_service.update_profile(viewer_id, user_id, request.submitted())
    if user is None:
        return {}
    return public_profile(user)


@router.delete("/me")
def delete_me(
    viewer_id: Optional[str] = Depends(get_viewer_id),
    profile_service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    profile_service.delete_account(viewer_id)
    return {"message": "Account deleted"}
