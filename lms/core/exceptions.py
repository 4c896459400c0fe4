"""Domain errors raised by services and the auth gate.

Each error carries the HTTP status the API layer answers with; the handlers
installed in ``lms.main`` render them as ``{"message": ...}``.
"""

from fastapi import status


class LMSError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LMSError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidError(LMSError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(LMSError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(LMSError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(LMSError):
    status_code = status.HTTP_403_FORBIDDEN


class RegistrationDisabledError(ForbiddenError):
    def __init__(self, message: str = "Student registration is currently disabled"):
        super().__init__(message)
