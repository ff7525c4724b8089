"""
Error handling for the VSCode search provider service.

Every failure the service knows about is a SearchProviderError with a
structured code, so log lines and D-Bus error replies carry the same context.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, Union


class ErrorCode(Enum):
    """
    Error codes for the VSCode search provider.

    Ranges:
    - 1000-1099: Workspace history errors
    - 1100-1199: Provider registry errors
    - 1200-1299: D-Bus startup errors
    - 1300-1399: Request dispatch errors
    """

    # Workspace history errors (1000-1099)
    FILE_READ_ERROR = 1000
    PARSE_ERROR = 1001
    ITEM_EXTRACTION_FAILED = 1002

    # Provider registry errors (1100-1199)
    MANIFEST_INVALID = 1100

    # D-Bus startup errors (1200-1299)
    BUS_CONNECTION_FAILED = 1200
    REGISTRATION_FAILED = 1201
    NAME_ACQUISITION_FAILED = 1202

    # Request dispatch errors (1300-1399)
    DISPATCH_FAILED = 1300


class SearchProviderError(Exception):
    """Base exception for all search provider errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize search provider error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a dictionary for structured logging.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class WorkspaceReadError(SearchProviderError):
    """The workspace history of an editor could not be read as a whole."""


class WorkspaceIOError(WorkspaceReadError):
    """The storage file could not be opened."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(
            code=ErrorCode.FILE_READ_ERROR,
            message=f"Failed to open {path} for reading: {reason}",
            suggestion="Check that the editor has been started at least once",
            context={"path": str(path), "reason": reason}
        )
        self.path = Path(path)


class WorkspaceParseError(WorkspaceReadError):
    """The storage document is not valid JSON or has an unexpected shape."""

    def __init__(self, reason: str, path: Optional[Union[str, Path]] = None):
        location = f" from {path}" if path is not None else ""
        context = {"reason": reason}
        if path is not None:
            context["path"] = str(path)

        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=f"Failed to parse storage{location}: {reason}",
            context=context
        )
        self.path = Path(path) if path is not None else None


class ItemExtractionError(SearchProviderError):
    """A single workspace URL has no usable name."""

    def __init__(self, url: str):
        super().__init__(
            code=ErrorCode.ITEM_EXTRACTION_FAILED,
            message=f"Failed to extract workspace name from URL {url!r}",
            context={"url": url}
        )
        self.url = url


class ManifestError(SearchProviderError):
    """A provider manifest file is missing a required key or is malformed."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(
            code=ErrorCode.MANIFEST_INVALID,
            message=f"Invalid provider manifest {path}: {reason}",
            context={"path": str(path), "reason": reason}
        )


class BusConnectionError(SearchProviderError):
    """Connecting to the session bus failed."""

    def __init__(self, reason: str):
        super().__init__(
            code=ErrorCode.BUS_CONNECTION_FAILED,
            message=f"Failed to connect to session bus: {reason}",
            suggestion="Ensure a D-Bus session bus is running (DBUS_SESSION_BUS_ADDRESS)",
            context={"reason": reason}
        )


class RegistrationError(SearchProviderError):
    """Publishing a provider object on the bus failed."""

    def __init__(self, object_path: str, desktop_id: str, reason: str):
        super().__init__(
            code=ErrorCode.REGISTRATION_FAILED,
            message=f"Failed to register provider for {desktop_id} at {object_path}: {reason}",
            suggestion="Check the provider table for duplicate object paths",
            context={"object_path": object_path, "desktop_id": desktop_id, "reason": reason}
        )


class NameAcquisitionError(SearchProviderError):
    """The well-known bus name could not be acquired."""

    def __init__(self, bus_name: str, reason: str):
        super().__init__(
            code=ErrorCode.NAME_ACQUISITION_FAILED,
            message=f"Failed to acquire bus name {bus_name}: {reason}",
            suggestion="Check whether another instance of the service is already running",
            context={"bus_name": bus_name, "reason": reason}
        )


class DispatchError(SearchProviderError):
    """A provider object failed to handle one D-Bus method call."""

    def __init__(self, method: str, desktop_id: str, reason: str):
        super().__init__(
            code=ErrorCode.DISPATCH_FAILED,
            message=f"{method} failed for {desktop_id}: {reason}",
            context={"method": method, "desktop_id": desktop_id, "reason": reason}
        )
