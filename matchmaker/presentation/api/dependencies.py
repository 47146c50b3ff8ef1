from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.config import Settings
from ...core.dependencies import get_session_service, get_settings
from ...services.session_service import SessionTokenService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_viewer_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    x_user_id: Optional[str] = Header(default=None),
    session_service: SessionTokenService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """
    Resolve who is calling. A signed bearer token wins; the bare ``x-user-id``
    header is only honoured while TRUST_USER_ID_HEADER is on.

    Returns None when no identity can be established. Services decide whether
    that is an error.
    """
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return session_service.resolve(credentials.credentials)
    if settings.trust_user_id_header and x_user_id:
        return x_user_id.strip() or None
    return None
