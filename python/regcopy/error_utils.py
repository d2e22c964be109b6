"""
Error types with actionable guidance for users.

Every error the copier raises on purpose derives from ActionableError, so
callers can log a message that already carries suggested fixes.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    PROTOCOL = "protocol"
    ENGINE = "engine"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [self.message]

        if self.suggestions:
            lines.append("Suggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("Additional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


class ConfigValidationError(ActionableError):
    """Raised when the configuration cannot be read or is invalid"""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCategory.CONFIGURATION, suggestions, details)


class RegistryError(ActionableError):
    """Raised when a registry API call fails or returns an unexpected body"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.CONNECTION,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, category, suggestions, details)


class EngineError(ActionableError):
    """Raised when a container engine command exits non-zero or cannot start"""

    def __init__(self, command: Sequence[str], returncode: Optional[int], stderr: str = "",
                 suggestions: Optional[List[str]] = None):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr or ""
        details: Dict[str, Any] = {"command": " ".join(self.command)}
        if returncode is not None:
            details["exit_code"] = returncode
        if self.stderr.strip():
            details["stderr"] = self.stderr.strip()
        action = self.command[1:3] if len(self.command) > 2 and self.command[1] == "image" else self.command[1:2]
        super().__init__(
            f"Container engine command '{' '.join(action)}' failed",
            ErrorCategory.ENGINE,
            suggestions,
            details,
        )


def create_registry_error(registry_url: str, operation: str, error: Exception) -> RegistryError:
    """Create actionable error for registry connection failures"""
    error_str = str(error).lower()

    suggestions = [
        f"Verify the registry URL is correct: {registry_url}",
        "Check network connectivity to the registry",
        "Check if the registry service is running",
    ]

    if "timeout" in error_str or "timed out" in error_str:
        suggestions.insert(1, "Check if the registry is experiencing high load")
        suggestions.insert(2, "Raise app.requestTimeout in the configuration file")

    if "name resolution" in error_str or "dns" in error_str or "resolve" in error_str:
        suggestions.insert(1, "Verify DNS resolution for the registry hostname")

    if "ssl" in error_str or "certificate" in error_str:
        suggestions.insert(1, "Use an explicit http:// URL for registries without TLS")

    return RegistryError(
        message=f"{operation} failed for registry {registry_url}",
        category=ErrorCategory.CONNECTION,
        suggestions=suggestions,
        details={
            "registry_url": registry_url,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def create_registry_status_error(registry_url: str, operation: str, status_code: int,
                                 reason: str = "") -> RegistryError:
    """Create actionable error for an unexpected HTTP status from a registry"""
    suggestions = []
    category = ErrorCategory.PROTOCOL

    if status_code in (401, 403):
        category = ErrorCategory.AUTHENTICATION
        suggestions.extend([
            "Verify the login and password configured for this registry",
            "Check that the account may list the catalog and tags",
        ])
    elif status_code == 404:
        suggestions.extend([
            "Verify the repository name exists in the registry",
            "Check that the registry implements the v2 API",
        ])
    elif status_code >= 500:
        suggestions.append("The registry reported a server error; check its logs")

    status = f"{status_code} {reason}".strip()
    return RegistryError(
        message=f"{operation} {registry_url} unexpected status: {status}",
        category=category,
        suggestions=suggestions,
        details={"registry_url": registry_url, "status_code": status_code},
        status_code=status_code,
    )


def create_engine_error(command: Sequence[str], returncode: Optional[int], stderr: str = "") -> EngineError:
    """Create actionable error for a failed container engine invocation"""
    stderr_lower = (stderr or "").lower()
    suggestions = []

    if returncode is None:
        suggestions.extend([
            f"Verify the engine executable '{command[0]}' is installed and on PATH",
            "Set app.executable in the configuration file or ENGINE_EXECUTABLE",
        ])
    elif "unauthorized" in stderr_lower or "denied" in stderr_lower or "authentication" in stderr_lower:
        suggestions.append("Verify the registry login and password")
    elif "not found" in stderr_lower or "manifest unknown" in stderr_lower:
        suggestions.append("Verify the image and tag exist in the source registry")
    elif "daemon" in stderr_lower:
        suggestions.append("Check that the container engine daemon is running")

    return EngineError(command, returncode, stderr, suggestions)


def create_config_error(field: str, value: Any, reason: str) -> ConfigValidationError:
    """Create actionable error for configuration validation failures"""
    suggestions = [
        f"Check the 'app.{field}' value in the configuration file",
        "Verify the value matches the expected format",
    ]

    if "url" in field.lower():
        suggestions.insert(1, "URL should be in format: hostname[:port] or http(s)://hostname[:port]")
    elif "include" in field.lower():
        suggestions.insert(1, "The include pattern must be a valid regular expression")

    return ConfigValidationError(
        message=f"Configuration error: Invalid value for '{field}'",
        suggestions=suggestions,
        details={
            "field": field,
            "value": value,
            "reason": reason,
        },
    )
