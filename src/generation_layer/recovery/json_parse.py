"""
JSON object parsing for model output.

Parse order:
1. Strip surrounding markdown fences, strict json.loads
2. On failure, extract the first balanced {...} block and parse that

The result must be a JSON object (dict); arrays and scalars are rejected.
"""

import json
from typing import Any

import structlog

from generation_layer.llm.text_utils import extract_first_json_object, strip_code_fences
from generation_layer.monitoring.metrics import recovery_rounds_total
from .exceptions import JSONParseError

logger = structlog.get_logger(__name__)


def _ensure_object(parsed: Any, content: str) -> dict:
    if not isinstance(parsed, dict):
        raise JSONParseError(
            f"Model response is not a JSON object (got {type(parsed).__name__})",
            raw_content=content,
            parse_error=f"Expected object, got {type(parsed).__name__}"
        )
    return parsed


class JSONObjectParser:
    """
    Turn model text into a dict or raise JSONParseError.
    """

    def parse(self, content: str) -> dict:
        """
        Parse a JSON object out of model output.

        Args:
            content: Raw model output

        Returns:
            Parsed dict

        Raises:
            JSONParseError: If no JSON object can be recovered from content
        """
        if not content or not content.strip():
            raise JSONParseError(
                "Model response is empty or whitespace-only",
                raw_content=content,
                parse_error="Empty content"
            )

        candidate = strip_code_fences(content)
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            strict_error = f"{e.msg} at line {e.lineno} col {e.colno}"
        else:
            result = _ensure_object(parsed, content)
            recovery_rounds_total.labels(outcome="parsed").inc()
            return result

        extracted = extract_first_json_object(candidate)
        if extracted is None:
            raise JSONParseError(
                f"Failed to parse model response as JSON: {strict_error}",
                raw_content=content,
                parse_error=strict_error
            )

        try:
            parsed = json.loads(extracted)
        except json.JSONDecodeError as e:
            raise JSONParseError(
                f"Failed to parse extracted JSON object: {e.msg}",
                raw_content=content,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}"
            ) from e

        logger.debug("Recovered JSON object by extraction", keys=len(parsed) if isinstance(parsed, dict) else None)
        result = _ensure_object(parsed, content)
        recovery_rounds_total.labels(outcome="extracted").inc()
        return result
