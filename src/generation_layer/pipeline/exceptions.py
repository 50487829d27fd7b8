"""
Exceptions raised by the generation pipeline's own stages.

Provider, recovery and evaluation failures keep their own types; these
cover request validation and post-processing of generated files.
"""

from typing import Any


class PipelineStageError(Exception):
    """
    Base exception for pipeline stage failures.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidGenerationRequest(PipelineStageError):
    """
    Request cannot be analyzed: no prompt/images/design nodes, too many
    images, or an unsupported option combination.
    """
    pass


class InvalidGeneratedPath(PipelineStageError):
    """
    Model produced an absolute path or one escaping the project root.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(
            f"Invalid generated file path '{path}': {reason}",
            details={"path": path, "reason": reason},
        )


class EmptyGeneration(PipelineStageError):
    """
    Generation succeeded at the provider level but yielded no files.
    """
    pass
