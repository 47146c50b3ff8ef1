"""Signup, OTP verification and login endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ....application.services.account_service import AccountService, CodeDispatch
from ....core.dependencies import get_account_service, get_session_service
from ....services.session_service import SessionTokenService
from ..schemas.account import (
    CodeDispatchResponse,
    LoginRequest,
    ResendCodeRequest,
    SignupRequest,
    VerifyRequest,
)
from ..schemas.profile import public_profile

router = APIRouter(prefix="/api", tags=["accounts"])


def _dispatch_response(dispatch: CodeDispatch, delivered: str, undelivered: str) -> CodeDispatchResponse:
    return CodeDispatchResponse(
        id=dispatch.user.id,
        email=dispatch.user.email,
        message=delivered if dispatch.email_sent else undelivered,
        email_sent=dispatch.email_sent,
        debug_code=dispatch.debug_code,
    )


@router.post(
    "/signup",
    response_model=CodeDispatchResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    request: SignupRequest,
    account_service: AccountService = Depends(get_account_service),
) -> CodeDispatchResponse:
    """Create an unverified account and email its verification code."""
    dispatch = account_service.signup(
        name=request.name,
        email=request.email,
        password=request.password,
        profile=request.submitted("name", "email", "password"),
    )
    return _dispatch_response(
        dispatch,
        delivered="Signup successful. Check your email for the verification code.",
        undelivered="Signup successful, but the verification email could not be sent. Request a new code.",
    )


@router.post("/verify")
def verify(
    request: VerifyRequest,
    account_service: AccountService = Depends(get_account_service),
    session_service: SessionTokenService = Depends(get_session_service),
) -> Dict[str, Any]:
    user = account_service.verify(request.email, request.code)
    return {**public_profile(user), "token": session_service.issue(user)}


@router.post("/resend-code", response_model=CodeDispatchResponse, response_model_exclude_none=True)
def resend_code(
    request: ResendCodeRequest,
    account_service: AccountService = Depends(get_account_service),
) -> CodeDispatchResponse:
    dispatch = account_service.resend_code(request.email)
    return _dispatch_response(
        dispatch,
        delivered="A new verification code has been sent.",
        undelivered="A new code was issued, but the email could not be sent.",
    )


@router.post("/login")
def login(
    request: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
    session_service: SessionTokenService = Depends(get_session_service),
) -> Dict[str, Any]:
    user = account_service.login(request.email, request.password)
    return {**public_profile(user), "token": session_service.issue(user)}
