"""
Structured output recovery: turn probable JSON into a guaranteed dict.

- json_parse.py: Fence stripping, strict parse, balanced-brace extraction
- schema.py: Draft 7 JSON Schema validation
- structured_output.py: Bounded repair loop with correction prompts
- schemas.py: Schemas for generated file maps and evaluations
"""

from .exceptions import (
    JSONParseError,
    RecoveryError,
    SchemaValidationError,
    StructuredOutputUnrecoverable,
)
from .json_parse import JSONObjectParser
from .schema import SchemaValidator
from .schemas import EVALUATION_SCHEMA, FILE_MAP_SCHEMA
from .structured_output import (
    MAX_RECOVERY_ATTEMPTS,
    RecoveryAttempt,
    StructuredOutputRecovery,
)

__all__ = [
    # Main loop
    "StructuredOutputRecovery",
    "RecoveryAttempt",
    "MAX_RECOVERY_ATTEMPTS",
    # Building blocks
    "JSONObjectParser",
    "SchemaValidator",
    "FILE_MAP_SCHEMA",
    "EVALUATION_SCHEMA",
    # Exceptions
    "RecoveryError",
    "JSONParseError",
    "SchemaValidationError",
    "StructuredOutputUnrecoverable",
]
