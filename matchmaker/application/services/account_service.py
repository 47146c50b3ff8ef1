from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional

import bcrypt

from ...domain.errors import (
    AlreadyVerifiedError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InvalidCodeError,
    InvalidCredentialsError,
    NotFoundError,
)
from ...domain.models import User
from ...domain.ports.persistence import UserRepository
from ...services.email_service import EmailService

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999


@dataclass(slots=True)
class CodeDispatch:
    """Result of issuing a verification code.

    ``debug_code`` is only populated when the email was not delivered and
    debug exposure is enabled.
    """

    user: User
    email_sent: bool
    debug_code: Optional[str] = None


def generate_verification_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


class AccountService:
    """Signup, OTP verification and login for matchmaking accounts."""

    def __init__(
        self,
        users: UserRepository,
        email_service: EmailService,
        *,
        bcrypt_rounds: int = 12,
        expose_debug_codes: bool = False,
    ) -> None:
        self._users = users
        self._email = email_service
        self._bcrypt_rounds = bcrypt_rounds
        self._expose_debug_codes = expose_debug_codes

    # ------------------------------------------------------------------
    def signup(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        profile: Optional[Dict[str, Any]] = None,
    ) -> CodeDispatch:
        clean_name = (name or "").strip()
        clean_email = normalize_email(email)
        if not clean_name or not clean_email or not password:
            raise BadRequestError("Missing fields")
        if self._users.get_by_email(clean_email):
            raise ConflictError("User already exists")

        code = generate_verification_code()
        user = self._users.create(
            name=clean_name,
            email=clean_email,
            password_hash=self.hash_password(password),
            verification_code=code,
            profile=profile,
        )
        logger.info("Created unverified account %s", user.id)
        return self._dispatch_code(user, code)

    def verify(self, email: Optional[str], code: Optional[str]) -> User:
        clean_email = normalize_email(email)
        if not clean_email or not code:
            raise BadRequestError("Email and code are required")
        user = self._users.get_by_email(clean_email)
        if not user:
            raise NotFoundError("User not found")
        # Exact string comparison, no trimming or case folding. A verified
        # account has no pending code, so any code is rejected.
        if user.verification_code is None or not secrets.compare_digest(
            user.verification_code.encode("utf-8"), code.encode("utf-8")
        ):
            raise InvalidCodeError("Invalid verification code")

        self._users.mark_verified(user.id)
        logger.info("Account %s verified", user.id)
        verified = self._users.get_by_id(user.id)
        if verified is None:
            raise NotFoundError("User not found")
        return verified

    def resend_code(self, email: Optional[str]) -> CodeDispatch:
        # No server-side throttle here; any cool-down is left to the client.
        clean_email = normalize_email(email)
        if not clean_email:
            raise BadRequestError("Email is required")
        user = self._users.get_by_email(clean_email)
        if not user:
            raise NotFoundError("User not found")
        if user.is_verified:
            raise AlreadyVerifiedError("Account already verified")

        code = generate_verification_code()
        self._users.update_verification_code(user.id, code)
        user.verification_code = code
        logger.info("Issued new verification code for account %s", user.id)
        return self._dispatch_code(user, code)

    def login(self, email: Optional[str], password: Optional[str]) -> User:
        """
        Authenticate a verified account.

        Order: unknown email -> InvalidCredentials, unverified -> Forbidden,
        then the password is compared.
        """
        clean_email = normalize_email(email)
        if not clean_email or not password:
            raise BadRequestError("Email and password are required")
        user = self._users.get_by_email(clean_email)
        if not user:
            raise InvalidCredentialsError("Invalid credentials")
        if not user.is_verified:
            raise ForbiddenError("Account not verified. Please verify your email first.")
        if not self.verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials")
        return user

    # Password hashing -------------------------------------------------
    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self._bcrypt_rounds)
        ).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    # ------------------------------------------------------------------
    def _dispatch_code(self, user: User, code: str) -> CodeDispatch:
        sent = self._email.send_verification_code(user.email, code, name=user.name)
        if not sent:
            logger.warning("Verification email for account %s was not delivered", user.id)
        debug_code = code if (not sent and self._expose_debug_codes) else None
        return CodeDispatch(user=user, email_sent=sent, debug_code=debug_code)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()
