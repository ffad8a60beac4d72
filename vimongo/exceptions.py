"""Custom exceptions for vimongo."""


class VimongoError(Exception):
    """Base class for all vimongo errors."""


class ConfigError(VimongoError):
    """Raised when the configuration file cannot be loaded at startup."""

    def __init__(self, path: object, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration at {path}: {reason}")


class BackendError(VimongoError):
    """Raised when a call to the MongoDB server fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class PingError(BackendError):
    """Raised when the server does not answer a ping."""

    def __init__(self, message: str):
        super().__init__("ping", message)

    @property
    def unauthorized(self) -> bool:
        return "unauthorized" in str(self).lower()


class QueryParseError(VimongoError):
    """Raised when query or sort text cannot be parsed into a document."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Could not parse {text!r}: {reason}")


class DocumentError(VimongoError):
    """Raised when an edited document is not a valid JSON object."""


class EditorError(VimongoError):
    """Raised when the external editor cannot be started or fails."""


class TempResourceError(VimongoError):
    """Raised when the temporary draft file cannot be created or written."""
