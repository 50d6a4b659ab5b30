"""Application layer exceptions."""


class ApplicationError(Exception):
    """Base exception for application errors."""


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""


class DirectoryServiceError(ApplicationError):
    """
    Raised when a directory operation fails.

    ``detail`` carries diagnostics from the remote service (status code,
    error code, request id) for the operator.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class DirectoryConflictError(DirectoryServiceError):
    """Raised when the object being created already exists."""


class AmbiguousRegistrationError(DirectoryServiceError):
    """Raised when more than one registration matches the display name."""


class CredentialExportError(ApplicationError):
    """Raised when the credentials file cannot be written."""
