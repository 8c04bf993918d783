"""
Exceptions shared by the service layer.
"""


class ServiceError(Exception):
    """An error that maps directly onto an HTTP response."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class BadRequestError(ServiceError):
    def __init__(self, message: str):
        super().__init__(400, message)


class NotFoundError(ServiceError):
    def __init__(self, message: str):
        super().__init__(404, message)


class AIServiceError(Exception):
    """Raised when the chat-completion API fails or returns unusable output."""


class StorageError(Exception):
    """Raised when the object store rejects an operation."""


class ResumeExtractionError(Exception):
    """Raised when no usable text can be read from a resume file."""
