"""
Generation pipeline.

Components:
- GenerationPipeline: ANALYZING -> GENERATING -> EVALUATING -> PERSISTING -> DONE
- FileSplitter: Cuts single-blob output into named files
- add_scaffolding: Project files around generated sources
- exceptions: Stage failures (invalid request, invalid path, empty output)
"""

from generation_layer.pipeline.exceptions import (
    EmptyGeneration,
    InvalidGeneratedPath,
    InvalidGenerationRequest,
    PipelineStageError,
)
from generation_layer.pipeline.file_splitter import FileSplitter, normalize_path
from generation_layer.pipeline.orchestrator import (
    Draft,
    GenerationPipeline,
    ProjectStore,
    render_code_for_evaluation,
)
from generation_layer.pipeline.scaffolding import add_scaffolding

__all__ = [
    "GenerationPipeline",
    "Draft",
    "ProjectStore",
    "render_code_for_evaluation",
    "FileSplitter",
    "normalize_path",
    "add_scaffolding",
    "PipelineStageError",
    "InvalidGenerationRequest",
    "InvalidGeneratedPath",
    "EmptyGeneration",
]
