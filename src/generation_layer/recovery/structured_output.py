"""
Structured output recovery: bounded repair loop for model JSON.

Each round:
1. Strip fences and parse strictly
2. On failure, parse the first balanced {...} block
3. Optionally validate against a JSON Schema
4. On failure with rounds left, re-invoke the model with a correction
   prompt that embeds the bad output verbatim, and loop on the new answer

After max_attempts rounds without success, StructuredOutputUnrecoverable is
raised with the last raw text and the per-round history. Callers decide
whether to fall back or surface the error.

Usage:
    recovery = StructuredOutputRecovery(invoker)
    data = await recovery.generate_json(prompt, images, schema=FILE_MAP_SCHEMA)
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

import structlog

from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.models.generation import ImageAttachment
from generation_layer.monitoring.metrics import recovery_rounds_total
from .exceptions import JSONParseError, SchemaValidationError, StructuredOutputUnrecoverable
from .json_parse import JSONObjectParser
from .schema import SchemaValidator

logger = structlog.get_logger(__name__)

MAX_RECOVERY_ATTEMPTS = 3


class TextInvoker(Protocol):
    """Anything that turns a prompt into model text (ResilientInvoker in production)."""

    provider: str

    async def invoke(
        self,
        prompt: str,
        images: Sequence[ImageAttachment] = (),
        json_mode: bool = False,
    ) -> str:
        ...


@dataclass(frozen=True)
class RecoveryAttempt:
    """
    One failed recovery round.

    Attributes:
        attempt: Round number (1-based)
        raw_text: Model output examined in this round
        parse_error: Why it was rejected (parse or schema error)
    """

    attempt: int
    raw_text: str
    parse_error: str

    def __post_init__(self) -> None:
        if self.attempt < 1:
            raise ValueError("attempt must be >= 1")


def _describe(error: JSONParseError | SchemaValidationError) -> str:
    if isinstance(error, SchemaValidationError):
        return f"{error.message}: " + "; ".join(error.validation_errors)
    return error.parse_error


class StructuredOutputRecovery:
    """
    Guarantee a parseable JSON object from text that is only probably JSON.

    Attributes:
        invoker: Used for correction calls (and the first call in generate_json)
        prompt_builder: Renders correction prompts
        max_attempts: Total rounds, including the first parse
    """

    def __init__(
        self,
        invoker: TextInvoker,
        prompt_builder: Optional[PromptBuilder] = None,
        max_attempts: int = MAX_RECOVERY_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.invoker = invoker
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.max_attempts = max_attempts
        self.parser = JSONObjectParser()

    async def generate_json(
        self,
        prompt: str,
        images: Sequence[ImageAttachment] = (),
        schema: Optional[dict[str, Any]] = None,
    ) -> dict:
        """
        Invoke the model in JSON mode and recover its answer.

        Returns:
            Parsed (and schema-valid, if schema given) dict

        Raises:
            StructuredOutputUnrecoverable: All rounds failed
            LLMClientError: Provider failure during any call
        """
        raw_text = await self.invoker.invoke(prompt, images=images, json_mode=True)
        return await self.recover(raw_text, prompt, schema=schema)

    async def recover(
        self,
        raw_text: str,
        original_prompt: str,
        schema: Optional[dict[str, Any]] = None,
    ) -> dict:
        """
        Parse raw_text, asking the model for corrections when it fails.

        Args:
            raw_text: First model output to examine
            original_prompt: Prompt that produced raw_text (embedded in corrections)
            schema: Optional JSON Schema the object must satisfy

        Returns:
            Parsed dict

        Raises:
            StructuredOutputUnrecoverable: All rounds failed
        """
        validator = SchemaValidator(schema) if schema else None
        attempts: list[RecoveryAttempt] = []
        text = raw_text

        for attempt in range(1, self.max_attempts + 1):
            try:
                data = self.parser.parse(text)
                if validator is not None:
                    validator.validate(data)
            except (JSONParseError, SchemaValidationError) as e:
                error = _describe(e)
                attempts.append(RecoveryAttempt(attempt=attempt, raw_text=text, parse_error=error))
                recovery_rounds_total.labels(outcome="failed").inc()
                logger.warning(
                    "Structured output round failed",
                    provider=getattr(self.invoker, "provider", None),
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error_type=type(e).__name__,
                    error=error,
                )
                if attempt < self.max_attempts:
                    correction = self.prompt_builder.build_correction_prompt(
                        original_prompt, text, error, schema
                    )
                    text = await self.invoker.invoke(correction, json_mode=True)
                continue

            if attempt > 1:
                logger.info("Structured output recovered", attempt=attempt)
            return data

        recovery_rounds_total.labels(outcome="unrecoverable").inc()
        logger.error(
            "Structured output unrecoverable",
            provider=getattr(self.invoker, "provider", None),
            rounds=len(attempts),
        )
        raise StructuredOutputUnrecoverable(text, attempts)
