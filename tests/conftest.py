"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import json
from typing import Any, Sequence, Union

import pytest

from generation_layer.config import Settings
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.models.enums import OutputMode, Platform
from generation_layer.models.generation import (
    GenerationOptions,
    GenerationRequest,
    ImageAttachment,
)

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RECOVERY_MAX_ATTEMPTS = 1
    """
    return Settings(
        # === Application ===
        APP_NAME="UI Generation Layer (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Providers ===
        GEMINI_API_KEYS=["gemini-key-a", "gemini-key-b"],
        GEMINI_MODELS=["gemini-1.5-flash", "gemini-1.5-pro"],
        OPENAI_API_KEYS=["sk-test"],
        OPENAI_MODELS=["gpt-4o-mini"],
        HUGGINGFACE_API_TOKENS=[],
        PRIMARY_PROVIDER="gemini",
        SECONDARY_PROVIDER="openai",
        RATE_LIMIT_BASE_DELAY=0.0,
        SERVER_ERROR_DELAY=0.0,

        # === Pipeline ===
        PROJECTS_DIR=str(tmp_path / "projects"),
        FIGMA_ACCESS_TOKEN=None,
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def prompt_builder() -> PromptBuilder:
    """PromptBuilder over the templates shipped with the package."""
    return PromptBuilder()


@pytest.fixture
def png_image() -> ImageAttachment:
    return ImageAttachment(data=PNG_BYTES, mime_type="image/png", name="mockup.png")


@pytest.fixture
def web_request() -> GenerationRequest:
    """Text-only web/React request in file_map mode."""
    return GenerationRequest(
        prompt="A login screen with email, password and a submit button",
        options=GenerationOptions(platform=Platform.WEB),
        output_mode=OutputMode.FILE_MAP,
    )


@pytest.fixture
def file_map_output() -> str:
    """Well-formed file_map answer for a small React app."""
    return json.dumps({
        "files": {
            "src/App.jsx": (
                "import React, { useState } from 'react';\n"
                "import LoginForm from './components/LoginForm';\n\n"
                "export default function App() {\n"
                "  return <main><LoginForm /></main>;\n"
                "}\n"
            ),
            "src/components/LoginForm.jsx": (
                "import React, { useState } from 'react';\n\n"
                "export default function LoginForm() {\n"
                "  const [email, setEmail] = useState('');\n"
                "  return (\n"
                "    <form aria-label=\"Login\">\n"
                "      <label htmlFor=\"email\">Email</label>\n"
                "      <input id=\"email\" value={email} onChange={e => setEmail(e.target.value)} />\n"
                "      <button type=\"submit\">Sign in</button>\n"
                "    </form>\n"
                "  );\n"
                "}\n"
            ),
        },
        "analysis": "Login screen split into App and LoginForm components.",
    })


@pytest.fixture
def evaluation_output() -> str:
    """Well-formed evaluator answer on the 0-100 scale."""
    return json.dumps(_evaluation_payload(80, 70, 90, 60))


@pytest.fixture
def evaluation_payload():
    """Factory for evaluator answers with the given category scores."""
    return _evaluation_payload


def _evaluation_payload(
    code_quality: float, performance: float, accessibility: float, security: float
) -> dict[str, Any]:
    return {
        "code_quality": {"score": code_quality, "issues": ["Long component"], "recommendations": ["Split it"]},
        "performance": {"score": performance, "issues": [], "recommendations": ["Memoize handlers"]},
        "accessibility": {"score": accessibility, "issues": [], "recommendations": []},
        "security": {"score": security, "issues": ["No CSRF token"], "recommendations": []},
    }


class ScriptedInvoker:
    """TextInvoker that replays scripted answers and records every call.

    Each script entry is either the text to return or an exception to raise.
    """

    def __init__(self, provider: str, script: Sequence[Union[str, BaseException]]):
        self.provider = provider
        self.script = list(script)
        self.calls: list[dict] = []

    async def invoke(
        self,
        prompt: str,
        images: Sequence[ImageAttachment] = (),
        json_mode: bool = False,
    ) -> str:
        self.calls.append({"prompt": prompt, "images": list(images), "json_mode": json_mode})
        if not self.script:
            raise AssertionError(f"{self.provider}: no scripted answer left for call {len(self.calls)}")
        answer = self.script.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def scripted_invoker():
    """Factory: scripted_invoker("gemini", ["answer", SomeError(...)])."""
    return ScriptedInvoker
