from __future__ import annotations

import logging
import mimetypes
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import BadRequestError, NotFoundError, ServerError, UnauthorizedError
from ...domain.models import User
from ...domain.ports.persistence import MessageRepository, UserRepository
from ...infrastructure.repositories.user_repository import PROFILE_COLUMNS
from ...infrastructure.storage.photo_store import PhotoStore, safe_filename
from ...services.cipher import ContentCipher, DecryptionError

logger = logging.getLogger(__name__)

IMAGE_ROUTE = "/api/images/"
DEFAULT_IMAGE_TYPE = "image/jpeg"
NON_NULL_COLUMNS = frozenset({"name", "show_age", "show_photo"})


class ProfileService:
    """Profile updates, sealed photo storage and account deletion."""

    def __init__(
        self,
        users: UserRepository,
        messages: MessageRepository,
        photos: PhotoStore,
        cipher: ContentCipher,
        *,
        max_upload_size: int = 10 * 1024 * 1024,
    ) -> None:
        self._users = users
        self._messages = messages
        self._photos = photos
        self._cipher = cipher
        self._max_upload_size = max_upload_size

    @property
    def max_upload_size(self) -> int:
        return self._max_upload_size

    # Profiles ---------------------------------------------------------
    def list_profiles(self) -> List[User]:
        return self._users.list_all()

    def update_profile(
        self, viewer_id: Optional[str], user_id: str, fields: Dict[str, Any]
    ) -> Optional[User]:
        """
        Apply the allow-listed subset of ``fields``.

        Null values for the required columns (name and the visibility flags)
        are dropped. Returns None when nothing recognised was submitted
        (no-op), otherwise the refreshed user.
        """
        if not viewer_id:
            raise UnauthorizedError("Unauthorized")
        updates = {
            key: value
            for key, value in fields.items()
            if key in PROFILE_COLUMNS and not (value is None and key in NON_NULL_COLUMNS)
        }
        if not updates:
            return None
        if self._users.update_profile(user_id, updates) == 0:
            raise NotFoundError("User not found")
        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    # Photos -----------------------------------------------------------
    def upload_photo(
        self,
        data: bytes,
        original_name: Optional[str] = None,
        content_type: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> str:
        """Seal ``data`` to disk and return its retrieval reference. Not attached to any user."""
        if not data:
            raise BadRequestError("No file uploaded")
        if content_type and not content_type.startswith("image/"):
            raise BadRequestError("Only image uploads are supported")
        if len(data) > self._max_upload_size:
            raise BadRequestError("File too large")

        filename = self._photos.new_filename(original_name)
        self._photos.write(filename, self._cipher.encrypt_bytes(data))
        logger.info("Stored sealed photo %s (owner=%s, %s bytes)", filename, owner_id or "-", len(data))
        return IMAGE_ROUTE + filename

    def fetch_photo(self, reference: str) -> Tuple[bytes, str]:
        filename = safe_filename(reference)
        if not filename:
            raise NotFoundError("Image not found")
        try:
            sealed = self._photos.read(filename)
        except FileNotFoundError as exc:
            raise NotFoundError("Image not found") from exc
        try:
            data = self._cipher.decrypt_bytes(sealed)
        except DecryptionError as exc:
            logger.error("Failed to open sealed photo %s: %s", filename, exc)
            raise ServerError("Failed to retrieve image") from exc
        return data, guess_image_type(filename)

    # Accounts ---------------------------------------------------------
    def delete_account(self, viewer_id: Optional[str]) -> None:
        """
        Remove the photo, then every message involving the user, then the user row.

        The steps are not transactional; a failure part way leaves the earlier
        deletions in place.
        """
        if not viewer_id:
            raise UnauthorizedError("Unauthorized")
        user = self._users.get_by_id(viewer_id)
        if user is None:
            raise NotFoundError("User not found")

        if user.photo:
            try:
                self._photos.delete(user.photo)
            except OSError as exc:
                logger.warning("Could not delete photo for account %s: %s", user.id, exc)

        removed = self._messages.delete_for_user(user.id)
        self._users.delete(user.id)
        logger.info("Deleted account %s and %s messages", user.id, removed)


def guess_image_type(filename: str) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    if guessed and guessed.startswith("image/"):
        return guessed
    return DEFAULT_IMAGE_TYPE
