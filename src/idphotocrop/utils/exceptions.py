"""
IdPhotoCrop - Custom Exceptions Module

This module defines custom exception classes for specific error cases
in the photo extraction pipeline. Every error is recoverable at the
pipeline level: the session always keeps a usable image.
"""


class IdPhotoCropError(Exception):
    """Base exception for all IdPhotoCrop errors.

    All custom exceptions should inherit from this class to allow
    catching any IdPhotoCrop-specific error.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class InvalidInputError(IdPhotoCropError):
    """Raised when a document has an unsupported file type."""

    def __init__(self, file_path: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            file_path: Path to the rejected file
            reason: Optional reason why the file was rejected
        """
        self.file_path = file_path
        self.reason = reason
        msg = f"Invalid file type: {file_path}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"path={file_path}")


class RasterizationError(IdPhotoCropError):
    """Raised when a document page cannot be turned into pixels."""

    def __init__(self, source: str, reason: str | None = None) -> None:
        self.source = source
        self.reason = reason
        msg = f"Could not rasterize: {source}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


class RecognitionFailure(IdPhotoCropError):
    """Raised when the text recognizer fails during an orientation trial."""

    def __init__(self, angle: int, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            angle: Orientation trial that was running when the engine failed
            reason: Optional reason for the failure
        """
        self.angle = angle
        self.reason = reason
        msg = f"Text recognition failed at {angle}°"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"angle={angle}")


class DetectionFailure(IdPhotoCropError):
    """Raised when the region detector fails on one search region."""

    def __init__(self, region_index: int, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            region_index: Index of the search region that failed
            reason: Optional reason for the failure
        """
        self.region_index = region_index
        self.reason = reason
        msg = f"Region detection failed for region {region_index}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"region={region_index}")


class NoCandidatesError(IdPhotoCropError):
    """Raised by callers that treat an empty candidate list as an error.

    The core itself reports an empty list; manual selection is still possible.
    """

    def __init__(self, message: str = "No photo candidates found") -> None:
        super().__init__(message)


class SelectionTooSmall(IdPhotoCropError):
    """Raised when a manual selection is below the minimum size."""

    def __init__(self, width: float, height: float, minimum: int) -> None:
        """Initialize the exception.

        Args:
            width: Selected width in source pixels
            height: Selected height in source pixels
            minimum: Minimum accepted size on each axis
        """
        self.width = width
        self.height = height
        self.minimum = minimum
        msg = "Selection too small"
        super().__init__(msg, details=f"{width:.0f}x{height:.0f}, minimum={minimum}")


class InvalidTransition(IdPhotoCropError):
    """Raised when an action is not allowed in the current session mode."""

    def __init__(self, action: str, mode: str) -> None:
        self.action = action
        self.mode = mode
        super().__init__(f"Action '{action}' is not allowed", details=f"mode={mode}")


class ConfigurationError(IdPhotoCropError):
    """Raised when there's a configuration-related error."""

    def __init__(self, setting_name: str | None = None, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            setting_name: Optional name of the problematic setting
            reason: Optional reason for the error
        """
        self.setting_name = setting_name
        self.reason = reason

        if setting_name:
            msg = f"Configuration error for '{setting_name}'"
        else:
            msg = "Configuration error"

        if reason:
            msg += f": {reason}"

        super().__init__(msg)


# Exception hierarchy summary:
# IdPhotoCropError (base)
# ├── InvalidInputError
# ├── RasterizationError
# ├── RecognitionFailure
# ├── DetectionFailure
# ├── NoCandidatesError
# ├── SelectionTooSmall
# ├── InvalidTransition
# └── ConfigurationError
