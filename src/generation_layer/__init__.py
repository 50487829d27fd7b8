"""
UI Generation Layer.

Turns UI mockups, Figma frames or text descriptions into application source
code for web (React), Android (Jetpack Compose) and iOS (SwiftUI):
- Provider pool rotation and resilient invocation across LLM providers
- Structured output recovery (bounded JSON repair loop)
- Multi-model evaluation with weighted, renormalized score merging
- Generation pipeline: analyze -> generate -> evaluate -> persist

Architecture: FastAPI orchestrator + Gemini/OpenAI/Hugging Face providers + local project store
"""

__version__ = "0.1.0"
