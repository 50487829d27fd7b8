"""
Generation pipeline: analysis -> generation -> evaluation -> persistence.

One GenerationPipeline.run() call drives one request through the states

    ANALYZING -> GENERATING -> EVALUATING -> PERSISTING -> DONE

Any failure short-circuits to ERROR; a run is never marked DONE with a
partial artifact. States run strictly in order within a run.

GENERATING with two providers calls both concurrently, then asks the
primary to merge the two answers. If only one provider succeeds its output
is used as-is; if both fail, the primary's error ends the run.

Usage:
    pipeline = GenerationPipeline(primary, evaluator=evaluator, store=store)
    run = await pipeline.run(request)
    if run.succeeded:
        files = run.artifact.files
"""

import asyncio
import json
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import structlog

from generation_layer.evaluation.evaluator import MultiModelEvaluator
from generation_layer.evaluation.exceptions import EvaluationError
from generation_layer.llm.exceptions import LLMClientError
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.models.artifacts import GenerationArtifact, PipelineError, PipelineRun
from generation_layer.models.enums import OutputMode, PipelineState
from generation_layer.models.evaluation import EvaluationResult
from generation_layer.models.generation import GenerationRequest
from generation_layer.monitoring.metrics import pipeline_duration_seconds, pipeline_runs_total
from generation_layer.pipeline.exceptions import (
    EmptyGeneration,
    InvalidGenerationRequest,
    PipelineStageError,
)
from generation_layer.pipeline.file_splitter import FileSplitter, normalize_path
from generation_layer.pipeline.scaffolding import add_scaffolding
from generation_layer.recovery import (
    FILE_MAP_SCHEMA,
    MAX_RECOVERY_ATTEMPTS,
    RecoveryError,
    StructuredOutputRecovery,
)
from generation_layer.recovery.structured_output import TextInvoker

logger = structlog.get_logger(__name__)

PIPELINE_ERRORS = (LLMClientError, RecoveryError, EvaluationError, PipelineStageError, OSError)


class ProjectStore(Protocol):
    """Where finished projects are written."""

    async def write_project(
        self,
        project_id: str,
        files: dict[str, str],
        metadata: dict[str, Any],
        report: Optional[str] = None,
    ) -> str:
        ...


@dataclass
class Draft:
    """
    One provider's generation.

    Attributes:
        provider: Provider that produced it
        files: Relative path -> content (normalized)
        analysis: Model's description of the result
        raw: Text embedded in a merge prompt
        providers: Providers whose output went into it
    """

    provider: str
    files: dict[str, str]
    analysis: str
    raw: str
    providers: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.providers:
            self.providers = [self.provider]


def render_code_for_evaluation(files: dict[str, str]) -> str:
    """Concatenate files with path markers, in path order."""
    return "\n\n".join(f"// File: {path}\n{content}" for path, content in sorted(files.items()))


def _analysis_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False)


class GenerationPipeline:
    """
    Orchestrates one generation request end to end.

    Attributes:
        primary: Invoker for generation, merging and (via the evaluator) rating
        secondary: Optional second provider generating concurrently
        evaluator: Multi-model evaluator; skipped when None or request.evaluate is False
        store: Project store; skipped when None
    """

    def __init__(
        self,
        primary: TextInvoker,
        evaluator: Optional[MultiModelEvaluator] = None,
        store: Optional[ProjectStore] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        secondary: Optional[TextInvoker] = None,
        splitter: Optional[FileSplitter] = None,
        recovery_attempts: int = MAX_RECOVERY_ATTEMPTS,
    ):
        self.primary = primary
        self.secondary = secondary
        self.evaluator = evaluator
        self.store = store
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.splitter = splitter or FileSplitter()
        self.recovery_attempts = recovery_attempts

        logger.info(
            "GenerationPipeline initialized",
            primary=primary.provider,
            secondary=secondary.provider if secondary else None,
            evaluation=evaluator is not None,
            persistence=store is not None,
        )

    def _enter(self, run: PipelineRun, state: PipelineState) -> None:
        run.state = state
        run.transitions.append(state)
        logger.debug("Pipeline state", run_id=run.run_id, state=state.value)

    async def run(self, request: GenerationRequest) -> PipelineRun:
        """
        Execute the pipeline for one request.

        Never raises: the returned run is either DONE with an artifact or
        ERROR with an error record. Unexpected exceptions are recorded with
        their traceback logged. Cancellation propagates to the caller.
        """
        run = PipelineRun(run_id=uuid.uuid4().hex)
        platform = request.options.platform
        framework = request.options.resolved_framework
        start = time.perf_counter()
        log = logger.bind(run_id=run.run_id, platform=platform.value, framework=framework)

        try:
            self._enter(run, PipelineState.ANALYZING)
            prompt = self._analyze(request)

            self._enter(run, PipelineState.GENERATING)
            draft = await self._generate(request, prompt)
            files = dict(draft.files)
            add_scaffolding(files, request.options, self.prompt_builder, draft.analysis)

            qa: Optional[EvaluationResult] = None
            if request.evaluate and self.evaluator is not None:
                self._enter(run, PipelineState.EVALUATING)
                qa = await self.evaluator.evaluate(
                    render_code_for_evaluation(draft.files), framework, platform.value
                )

            project_id = f"{platform.value}-{uuid.uuid4().hex}"
            artifact = GenerationArtifact(
                project_id=project_id,
                platform=platform,
                framework=framework,
                files=files,
                analysis=draft.analysis,
                qa=qa,
                providers=list(draft.providers),
            )

            if self.store is not None:
                self._enter(run, PipelineState.PERSISTING)
                artifact.location = await self._persist(artifact, request)

            self._enter(run, PipelineState.DONE)
            run.artifact = artifact

        except Exception as e:
            failed_state = run.state
            self._enter(run, PipelineState.ERROR)
            run.error = PipelineError(
                message=getattr(e, "message", None) or str(e),
                error_type=type(e).__name__,
                failed_state=failed_state,
                details=getattr(e, "details", {}) or {},
            )
            log.error(
                "Pipeline run failed",
                failed_state=failed_state.value,
                error_type=type(e).__name__,
                error=run.error.message,
                exc_info=not isinstance(e, PIPELINE_ERRORS),
            )

        run.finished_at = datetime.now(timezone.utc)
        duration = time.perf_counter() - start
        pipeline_runs_total.labels(platform=platform.value, state=run.state.value).inc()
        pipeline_duration_seconds.labels(platform=platform.value).observe(duration)

        if run.succeeded:
            log.info(
                "Pipeline run completed",
                project_id=run.artifact.project_id,
                files=len(run.artifact.files),
                overall_score=run.artifact.qa.overall_score if run.artifact.qa else None,
                duration_ms=int(duration * 1000),
            )
        return run

    def _analyze(self, request: GenerationRequest) -> str:
        if request.is_empty:
            raise InvalidGenerationRequest(
                "Request needs a prompt, at least one image or design nodes"
            )
        return self.prompt_builder.build_generation_prompt(request)

    async def _generate(self, request: GenerationRequest, prompt: str) -> Draft:
        images = request.all_images
        if self.secondary is None:
            return await self._generate_with(self.primary, request, prompt, images)

        primary_result, secondary_result = await asyncio.gather(
            self._generate_with(self.primary, request, prompt, images),
            self._generate_with(self.secondary, request, prompt, images),
            return_exceptions=True,
        )
        for result in (primary_result, secondary_result):
            if isinstance(result, BaseException) and not isinstance(result, PIPELINE_ERRORS):
                raise result

        if isinstance(primary_result, BaseException) and isinstance(secondary_result, BaseException):
            logger.error(
                "Both providers failed",
                primary_error=str(primary_result),
                secondary_error=str(secondary_result),
            )
            raise primary_result
        if isinstance(primary_result, BaseException):
            logger.warning(
                "Primary generation failed, using secondary output",
                provider=self.primary.provider,
                error=str(primary_result),
            )
            return secondary_result
        if isinstance(secondary_result, BaseException):
            logger.warning(
                "Secondary generation failed, using primary output",
                provider=self.secondary.provider,
                error=str(secondary_result),
            )
            return primary_result

        return await self._merge(request, primary_result, secondary_result)

    async def _merge(self, request: GenerationRequest, first: Draft, second: Draft) -> Draft:
        options = request.options
        merge_prompt = self.prompt_builder.build_merge_prompt(
            options.platform,
            options.resolved_framework,
            request.output_mode,
            first=(first.provider, first.raw),
            second=(second.provider, second.raw),
        )
        try:
            merged = await self._generate_with(self.primary, request, merge_prompt, ())
        except (LLMClientError, RecoveryError, PipelineStageError) as e:
            logger.warning(
                "Merge failed, using primary output",
                provider=self.primary.provider,
                error_type=type(e).__name__,
                error=getattr(e, "message", str(e)),
            )
            return first

        merged.providers = [first.provider, second.provider]
        if not merged.analysis:
            merged.analysis = first.analysis
        logger.info("Merged generations", providers=merged.providers, files=len(merged.files))
        return merged

    async def _generate_with(
        self,
        invoker: TextInvoker,
        request: GenerationRequest,
        prompt: str,
        images,
    ) -> Draft:
        options = request.options
        if request.output_mode == OutputMode.FILE_MAP:
            recovery = StructuredOutputRecovery(
                invoker, self.prompt_builder, max_attempts=self.recovery_attempts
            )
            data = await recovery.generate_json(prompt, images, schema=FILE_MAP_SCHEMA)
            raw_files = data["files"]
            analysis = _analysis_text(data.get("analysis"))
            raw = json.dumps(data, ensure_ascii=False)
        else:
            raw = await invoker.invoke(prompt, images=images)
            raw_files = self.splitter.split(raw, options.platform, options.resolved_framework)
            analysis = ""

        files: dict[str, str] = {}
        for path, content in raw_files.items():
            files[normalize_path(path)] = content

        if not files:
            raise EmptyGeneration(
                f"Provider '{invoker.provider}' produced no files",
                details={"provider": invoker.provider, "output_mode": request.output_mode.value},
            )

        logger.debug("Generation draft ready", provider=invoker.provider, files=len(files))
        return Draft(provider=invoker.provider, files=files, analysis=analysis, raw=raw)

    async def _persist(self, artifact: GenerationArtifact, request: GenerationRequest) -> str:
        report = None
        if artifact.qa is not None:
            report = self.prompt_builder.render_evaluation_report(
                artifact.qa, artifact.framework, artifact.platform.value, artifact.project_id
            )
        metadata = {
            "projectId": artifact.project_id,
            "platform": artifact.platform.value,
            "framework": artifact.framework,
            "styling": request.options.styling,
            "architecture": request.options.architecture,
            "outputMode": request.output_mode.value,
            "providers": artifact.providers,
            "analysis": artifact.analysis,
            "qa": artifact.qa.model_dump(mode="json", by_alias=True) if artifact.qa else None,
            "createdAt": artifact.created_at.isoformat(),
        }
        return await self.store.write_project(
            artifact.project_id, artifact.files, metadata, report=report
        )
