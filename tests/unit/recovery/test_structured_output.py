"""
Unit tests for StructuredOutputRecovery.

The loop gets at most max_attempts rounds; every failed round except the last
one triggers exactly one correction call that embeds the bad output.
"""

import json

import pytest

from generation_layer.llm.exceptions import ProviderAuthenticationError
from generation_layer.recovery import (
    FILE_MAP_SCHEMA,
    RecoveryAttempt,
    StructuredOutputRecovery,
    StructuredOutputUnrecoverable,
)

VALID = json.dumps({"files": {"src/App.jsx": "export default function App() {}"}})


class TestGenerateJson:

    @pytest.mark.asyncio
    async def test_valid_first_answer_needs_one_call(self, scripted_invoker, prompt_builder):
        invoker = scripted_invoker("gemini", [VALID])
        recovery = StructuredOutputRecovery(invoker, prompt_builder)

        data = await recovery.generate_json("build it", schema=FILE_MAP_SCHEMA)

        assert data["files"]["src/App.jsx"].startswith("export default")
        assert len(invoker.calls) == 1
        assert invoker.calls[0]["json_mode"] is True

    @pytest.mark.asyncio
    async def test_recovers_on_third_round(self, scripted_invoker, prompt_builder):
        """invalid, invalid, valid: three invoke calls in total."""
        invoker = scripted_invoker("gemini", ["not json", '{"files": {}}', VALID])
        recovery = StructuredOutputRecovery(invoker, prompt_builder, max_attempts=3)

        data = await recovery.generate_json("build it", schema=FILE_MAP_SCHEMA)

        assert list(data["files"]) == ["src/App.jsx"]
        assert len(invoker.calls) == 3

        first_correction = invoker.calls[1]["prompt"]
        assert "Previous response:\nnot json" in first_correction
        assert "build it" in first_correction
        second_correction = invoker.calls[2]["prompt"]
        assert '{"files": {}}' in second_correction
        assert "JSON Schema validation failed" in second_correction

    @pytest.mark.asyncio
    async def test_correction_calls_carry_no_images(self, scripted_invoker, prompt_builder, png_image):
        invoker = scripted_invoker("gemini", ["nope", VALID])
        recovery = StructuredOutputRecovery(invoker, prompt_builder)

        await recovery.generate_json("build it", images=[png_image])

        assert invoker.calls[0]["images"] == [png_image]
        assert invoker.calls[1]["images"] == []

    @pytest.mark.asyncio
    async def test_unrecoverable_after_max_rounds(self, scripted_invoker, prompt_builder):
        invoker = scripted_invoker("gemini", ["bad 1", "bad 2", "bad 3", VALID])
        recovery = StructuredOutputRecovery(invoker, prompt_builder, max_attempts=3)

        with pytest.raises(StructuredOutputUnrecoverable) as exc_info:
            await recovery.generate_json("build it")

        error = exc_info.value
        assert len(invoker.calls) == 3
        assert error.raw_text == "bad 3"
        assert [attempt.attempt for attempt in error.attempts] == [1, 2, 3]
        assert [attempt.raw_text for attempt in error.attempts] == ["bad 1", "bad 2", "bad 3"]
        assert error.details["rounds"] == 3

    @pytest.mark.asyncio
    async def test_provider_error_during_correction_propagates(self, scripted_invoker, prompt_builder):
        invoker = scripted_invoker("gemini", ["bad", ProviderAuthenticationError("revoked")])
        recovery = StructuredOutputRecovery(invoker, prompt_builder)

        with pytest.raises(ProviderAuthenticationError):
            await recovery.generate_json("build it")


class TestRecover:

    @pytest.mark.asyncio
    async def test_single_round_makes_no_calls(self, scripted_invoker, prompt_builder):
        invoker = scripted_invoker("gemini", [])
        recovery = StructuredOutputRecovery(invoker, prompt_builder, max_attempts=1)

        with pytest.raises(StructuredOutputUnrecoverable):
            await recovery.recover("garbage", "prompt")

        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_extracts_object_without_correction(self, scripted_invoker, prompt_builder):
        invoker = scripted_invoker("gemini", [])
        recovery = StructuredOutputRecovery(invoker, prompt_builder)

        data = await recovery.recover('Sure: {"score": 5} done', "prompt")

        assert data == {"score": 5}
        assert invoker.calls == []


def test_zero_attempts_rejected(scripted_invoker):
    with pytest.raises(ValueError):
        StructuredOutputRecovery(scripted_invoker("gemini", []), max_attempts=0)


def test_attempt_numbers_are_one_based():
    with pytest.raises(ValueError):
        RecoveryAttempt(attempt=0, raw_text="", parse_error="x")
