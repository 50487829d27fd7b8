"""
JSON Schema validation of recovered objects.
"""

from typing import Any

import structlog
from jsonschema import Draft7Validator

from .exceptions import SchemaValidationError

logger = structlog.get_logger(__name__)

MAX_REPORTED_ERRORS = 10


class SchemaValidator:
    """
    Validate dicts against an in-memory Draft 7 JSON Schema.
    """

    def __init__(self, schema: dict[str, Any]):
        """
        Initialize schema validator.

        Args:
            schema: JSON Schema dict (checked for validity up front)
        """
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self.schema_name = schema.get("title")
        self._validator = Draft7Validator(schema)

    def validate(self, data: dict) -> None:
        """
        Validate data against the schema.

        Raises:
            SchemaValidationError: If data doesn't conform to schema
        """
        errors = list(self._validator.iter_errors(data))

        if errors:
            error_messages = []
            for error in errors[:MAX_REPORTED_ERRORS]:
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            raise SchemaValidationError(
                f"JSON Schema validation failed with {len(errors)} error(s)",
                validation_errors=error_messages,
                schema_name=self.schema_name
            )

        logger.debug("Validated against JSON Schema", schema_name=self.schema_name)
