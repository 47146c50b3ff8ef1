"""Signed session tokens carrying the viewer identity."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..domain.models.user import User

logger = logging.getLogger(__name__)


class SessionTokenService:
    """Issues and checks HS256 tokens whose subject is the user id."""

    def __init__(self, secret: str, expiration_hours: int = 24 * 7, algorithm: str = "HS256") -> None:
        if not secret:
            raise RuntimeError("SESSION_SECRET not configured.")
        self._secret = secret
        self._expiration = timedelta(hours=expiration_hours)
        self._algorithm = algorithm

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "email": user.email,
            "iat": now,
            "exp": now + self._expiration,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def resolve(self, token: str) -> Optional[str]:
        """Return the user id carried by ``token`` or None when it is invalid or expired."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired session token")
            return None
        except jwt.InvalidTokenError:
            return None
        subject = payload.get("sub")
        return str(subject) if subject else None
