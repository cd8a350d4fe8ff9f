"""
Error types for nicotine.

Taxonomy:
- BackendUnavailableError: the desktop interface does not exist here (fatal)
- BackendError: one whole backend call failed (timeout, bad exit, bad output)
- WindowNotFoundError: the backend reports no active window
- ConfigError: the configuration file cannot be read or validated

Malformed single records are never errors; enumerators skip them.
"""

from typing import Any, Dict, Optional


class NicotineError(Exception):
    """Base exception for nicotine errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON output.

        Returns:
            Error dictionary with type, message, suggestion, and context
        """
        result = {
            "type": type(self).__name__,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class BackendUnavailableError(NicotineError):
    """The backend's transport cannot be reached on this system."""

    def __init__(self, backend: str, message: str, suggestion: Optional[str] = None):
        super().__init__(
            message=message,
            suggestion=suggestion,
            context={"backend": backend}
        )
        self.backend = backend


class BackendError(NicotineError):
    """A backend call failed as a whole."""
    pass


class WindowNotFoundError(NicotineError):
    """No active window is reported by the backend."""

    def __init__(self, message: str = "No active window found"):
        super().__init__(message=message)


class ConfigError(NicotineError):
    """Configuration loading or validation failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message=message,
            suggestion="Fix or delete the file; a default config is generated when none exists",
            context={"path": path} if path else None
        )
        self.path = path
