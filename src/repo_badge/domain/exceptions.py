from typing import Optional


class BadgeException(Exception):
    """Base exception for all badge service errors."""
    pass

class ValidationException(BadgeException):
    """Raised when the query parameters of a badge request are missing or invalid."""
    pass

class UnsupportedTypeException(ValidationException):
    """Raised when a badge type selector is not one of the supported types."""
    def __init__(self, message: str = "Error: Unsupported badge type."):
        super().__init__(message)

class UpstreamException(BadgeException):
    """Raised when the GitHub REST API call fails or returns an unusable payload."""
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        suffix = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{message}{suffix}")

class RenderException(BadgeException):
    """Raised when a badge cannot be rendered from otherwise valid inputs."""
    pass

class ConfigException(BadgeException):
    """Raised when the service settings cannot be loaded from the environment."""
    pass
