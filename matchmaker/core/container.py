from dataclasses import dataclass

from ..application.services.account_service import AccountService
from ..application.services.messaging_service import MessagingService
from ..application.services.profile_service import ProfileService
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..services.cipher import ContentCipher
from ..services.email_service import EmailService
from ..services.session_service import SessionTokenService
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    database: SQLiteDatabase
    cipher: ContentCipher
    email_service: EmailService
    session_service: SessionTokenService
    account_service: AccountService
    messaging_service: MessagingService
    profile_service: ProfileService
