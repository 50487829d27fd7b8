"""
Enumerations for UI Generation Layer data models.

All enums are closed sets - no values outside these sets are permitted.
"""

from enum import Enum


class Platform(str, Enum):
    """
    Target platform for generated code.

    Each platform has its own prompt template, default framework and
    file-layout conventions.
    """

    WEB = "web"
    ANDROID = "android"
    IOS = "ios"

    @property
    def default_framework(self) -> str:
        return {
            Platform.WEB: "React",
            Platform.ANDROID: "Jetpack Compose",
            Platform.IOS: "SwiftUI",
        }[self]


class OutputMode(str, Enum):
    """
    How the model is asked to shape its answer.

    FILE_MAP asks for a JSON object mapping relative paths to file contents.
    SINGLE_BLOB asks for plain source text, which is then cut into files
    by the file-splitting heuristic.
    """

    FILE_MAP = "file_map"
    SINGLE_BLOB = "single_blob"


class EvaluationCategory(str, Enum):
    """Quality dimensions every rater scores on a 0-100 scale."""

    CODE_QUALITY = "code_quality"
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    SECURITY = "security"


class RaterKind(str, Enum):
    """Family a rater belongs to (for diagnostics and metrics)."""

    LLM = "llm"
    RULE_BASED = "rule_based"


class PipelineState(str, Enum):
    """
    Generation pipeline states.

    Normal flow: ANALYZING -> GENERATING -> EVALUATING -> PERSISTING -> DONE.
    ERROR is reachable from any non-terminal state.
    """

    ANALYZING = "analyzing"
    GENERATING = "generating"
    EVALUATING = "evaluating"
    PERSISTING = "persisting"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.ERROR)
