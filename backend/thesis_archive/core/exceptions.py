"""Custom exception classes for the application."""


class ThesisArchiveError(Exception):
    """Base exception for all Thesis Archive errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationFailed(ThesisArchiveError, ValueError):
    """Raised when input is rejected before it reaches the database."""


class NotFoundError(ThesisArchiveError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")
