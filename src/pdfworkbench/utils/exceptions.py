"""
PDF Workbench - Custom Exceptions Module

This module defines the error taxonomy used by the page-transformation
engine. Structural preconditions are rejected before the codec or the
renderer is touched, so catching one of these never implies a partially
written result.
"""


class PdfWorkbenchError(Exception):
    """Base exception for all PDF Workbench errors.

    All custom exceptions inherit from this class to allow catching any
    workbench-specific error.
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


class InvalidInput(PdfWorkbenchError):
    """Raised when caller-supplied input is malformed or resolves to nothing.

    Covers empty page ranges at the point of use, blank watermark text,
    malformed permutations and out-of-range style values.
    """

    def __init__(self, reason: str, field: str | None = None, value: object = None) -> None:
        """Initialize the exception.

        Args:
            reason: Why the input was rejected
            field: Optional name of the offending parameter
            value: Optional offending value
        """
        self.reason = reason
        self.field = field
        self.value = value

        msg = f"Invalid value for '{field}': {reason}" if field else reason
        details = f"value={value!r}" if value is not None else None
        super().__init__(msg, details=details)


class OperationPrecondition(PdfWorkbenchError):
    """Raised when an operation's structural precondition does not hold."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize the exception.

        Args:
            operation: Name of the operation that was refused
            reason: The precondition that failed
        """
        self.operation = operation
        self.reason = reason
        super().__init__(f"Cannot {operation}: {reason}")


class CorruptDocument(PdfWorkbenchError):
    """Raised when the codec cannot parse a document's byte content."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            name: Display name of the document
            reason: Optional reason reported by the codec
        """
        self.name = name
        self.reason = reason

        msg = f"Unreadable document: {name}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"name={name}")


class RenderFailure(PdfWorkbenchError):
    """Raised when the rendering surface is unavailable or fails mid-sequence."""

    def __init__(
        self,
        name: str,
        reason: str | None = None,
        page_ordinal: int | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            name: Display name of the document being rendered
            reason: Optional reason for the failure
            page_ordinal: Optional 1-based page that failed
        """
        self.name = name
        self.reason = reason
        self.page_ordinal = page_ordinal

        msg = f"Rendering failed for: {name}"
        if reason:
            msg += f" - {reason}"

        details = None
        if page_ordinal is not None:
            details = f"page={page_ordinal}"

        super().__init__(msg, details=details)


class PartialItemFailure(PdfWorkbenchError):
    """One item of a batch failed while the rest of the batch continued.

    Instances are recorded on the operation result rather than raised.
    """

    def __init__(self, index: int, name: str, reason: str) -> None:
        """Initialize the failure record.

        Args:
            index: 0-based position of the item in the batch
            name: Display name of the item
            reason: Why the item was skipped
        """
        self.index = index
        self.name = name
        self.reason = reason
        super().__init__(f"Skipped item {index + 1} ({name}): {reason}")


class InvalidSessionTransition(InvalidInput):
    """Raised when a session gesture is not allowed in the current state or mode."""

    def __init__(self, action: str, state: str, mode: str) -> None:
        """Initialize the exception.

        Args:
            action: The attempted transition
            state: Current session state
            mode: Current session mode
        """
        self.action = action
        self.state = state
        self.mode = mode
        super().__init__(f"'{action}' is not allowed in state {state} ({mode} mode)")


class ConfigurationError(PdfWorkbenchError):
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


class DeliveryError(PdfWorkbenchError):
    """Raised when a result cannot be handed over to its destination."""

    def __init__(self, output_path: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            output_path: The destination that could not be written
            reason: Optional reason for the error
        """
        self.output_path = output_path
        self.reason = reason

        msg = f"Output path error: {output_path}"
        if reason:
            msg += f" - {reason}"

        super().__init__(msg, details=f"path={output_path}")


# Exception hierarchy summary:
# PdfWorkbenchError (base)
# ├── InvalidInput
# │   └── InvalidSessionTransition
# ├── OperationPrecondition
# ├── CorruptDocument
# ├── RenderFailure
# ├── PartialItemFailure
# ├── ConfigurationError
# └── DeliveryError
