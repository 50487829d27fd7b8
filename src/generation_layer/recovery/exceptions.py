"""
Exceptions for the structured output recovery loop.

JSONParseError and SchemaValidationError mark one failed round; the loop
catches them, asks the model for a corrected answer and tries again.
StructuredOutputUnrecoverable is terminal and reaches the caller.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from generation_layer.recovery.structured_output import RecoveryAttempt


class RecoveryError(Exception):
    """
    Base exception for all recovery errors.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize recovery error.

        Args:
            message: Human-readable error description
            details: Structured error data for logging/metrics
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class JSONParseError(RecoveryError):
    """
    Model output is not a JSON object, even after fence stripping and
    balanced-brace extraction.
    """

    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        """
        Initialize JSON parse error.

        Args:
            message: Error description
            raw_content: Malformed content (first 500 chars kept in details)
            parse_error: Original json.JSONDecodeError message
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error

        super().__init__(message, details)
        self.parse_error = parse_error or message


class SchemaValidationError(RecoveryError):
    """
    Parsed JSON doesn't conform to the requested JSON Schema.
    """

    def __init__(
        self,
        message: str,
        validation_errors: list[str] | None = None,
        schema_name: str | None = None
    ):
        """
        Initialize schema validation error.

        Args:
            message: Error description
            validation_errors: List of jsonschema validation error messages
            schema_name: Title of the schema used for validation
        """
        details = {}
        if validation_errors:
            details["validation_errors"] = validation_errors
        if schema_name:
            details["schema_name"] = schema_name

        super().__init__(message, details)
        self.validation_errors = validation_errors or []


class StructuredOutputUnrecoverable(RecoveryError):
    """
    Raised when every recovery round failed.

    Attributes:
        raw_text: Last raw model output
        attempts: History of failed rounds, oldest first
    """

    def __init__(self, raw_text: str, attempts: "list[RecoveryAttempt]"):
        self.raw_text = raw_text
        self.attempts = attempts
        last_error = attempts[-1].parse_error if attempts else "no attempts"
        super().__init__(
            f"Structured output unrecoverable after {len(attempts)} round(s): {last_error}",
            details={
                "rounds": len(attempts),
                "last_error": last_error,
                "content_snippet": raw_text[:500],
            },
        )
