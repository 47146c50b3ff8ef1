"""Error taxonomy shared by the application services and the HTTP layer."""


class AppError(Exception):
    """Base class for failures that map onto an HTTP status and a user-facing message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = "") -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    default_message = "Missing fields"


class InvalidCodeError(AppError):
    status_code = 400
    default_message = "Invalid verification code"


class AlreadyVerifiedError(AppError):
    status_code = 400
    default_message = "Account already verified"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentialsError(AppError):
    status_code = 401
    default_message = "Invalid credentials"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Account not verified"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "User already exists"


class ServerError(AppError):
    status_code = 500
