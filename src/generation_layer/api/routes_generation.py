"""
Generation API routes.

POST /generate         multipart: prompt + mockup images + options
POST /generate/text    JSON: text prompt + options
POST /generate/figma   JSON: Figma URL + options
POST /analyze          JSON: plan pages and reusable components before generating
POST /evaluate         JSON: score existing code with the multi-model evaluator
GET  /health           provider configuration status

Generation runs as a task that is cancelled when the client disconnects,
which aborts in-flight provider calls.
"""

import asyncio
import contextlib
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status

from generation_layer.api.dependencies import (
    get_evaluator,
    get_figma_source,
    get_pipeline,
    get_primary_invoker,
    get_prompt_builder,
    get_settings,
)
from generation_layer.api.error_handlers import PipelineFailed
from generation_layer.api.models import (
    AnalysisRequest,
    AnalysisResponse,
    EvaluationRequest,
    EvaluationResponse,
    FigmaGenerationRequest,
    GenerationResponse,
    HealthResponse,
    TextGenerationRequest,
)
from generation_layer.config import Settings
from generation_layer.design.figma import FigmaDesignSource
from generation_layer.evaluation.evaluator import MultiModelEvaluator
from generation_layer.llm.invoker import ResilientInvoker
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.llm.registry import is_provider_configured
from generation_layer.models.artifacts import PipelineRun
from generation_layer.models.enums import OutputMode, Platform
from generation_layer.models.generation import (
    SUPPORTED_IMAGE_TYPES,
    GenerationOptions,
    GenerationRequest,
    ImageAttachment,
)
from generation_layer.pipeline.exceptions import InvalidGenerationRequest
from generation_layer.pipeline.orchestrator import GenerationPipeline

logger = structlog.get_logger(__name__)

router = APIRouter()

DISCONNECT_POLL_INTERVAL = 0.5  # seconds
CLIENT_CLOSED_REQUEST = 499


async def run_until_disconnect(
    pipeline: GenerationPipeline,
    generation_request: GenerationRequest,
    request: Request,
) -> PipelineRun:
    """
    Run the pipeline, cancelling it if the client goes away.

    Raises:
        HTTPException: 499 when the client disconnected first
    """
    task = asyncio.create_task(pipeline.run(generation_request))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling generation")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")
    finally:
        if not task.done():
            task.cancel()


def _response_for(run: PipelineRun) -> GenerationResponse:
    if not run.succeeded or run.artifact is None:
        raise PipelineFailed(run)
    return GenerationResponse.from_artifact(run.artifact, run_id=run.run_id)


def _output_mode(requested: Optional[OutputMode], config: Settings) -> OutputMode:
    return requested or OutputMode(config.DEFAULT_OUTPUT_MODE)


async def _read_images(files: list[UploadFile], config: Settings) -> list[ImageAttachment]:
    if len(files) > config.MAX_UPLOAD_IMAGES:
        raise InvalidGenerationRequest(
            f"Too many images: {len(files)} (max {config.MAX_UPLOAD_IMAGES})",
            details={"count": len(files), "max": config.MAX_UPLOAD_IMAGES},
        )

    images = []
    for upload in files:
        mime_type = upload.content_type or ""
        if mime_type not in SUPPORTED_IMAGE_TYPES:
            raise InvalidGenerationRequest(
                f"Unsupported image type for '{upload.filename}': {mime_type or 'unknown'}",
                details={"filename": upload.filename, "content_type": mime_type},
            )
        data = await upload.read()
        if not data:
            raise InvalidGenerationRequest(
                f"Image '{upload.filename}' is empty", details={"filename": upload.filename}
            )
        if len(data) > config.MAX_IMAGE_BYTES:
            raise InvalidGenerationRequest(
                f"Image '{upload.filename}' exceeds {config.MAX_IMAGE_BYTES} bytes",
                details={"filename": upload.filename, "size": len(data)},
            )
        images.append(ImageAttachment(data=data, mime_type=mime_type, name=upload.filename))
    return images


@router.post(
    "/generate",
    response_model=GenerationResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate code from mockup images",
    description="""
    Generate a project from uploaded UI mockups and an optional prompt.

    Images are sent to the providers in upload order. The response carries
    the generated files, the model's analysis and, when enabled, the
    multi-model QA scores (0-100).
    """,
    responses={
        200: {"description": "Generation completed"},
        400: {"description": "Invalid request (no input, bad image type or size)"},
        502: {"description": "Provider rejected the request or output was unrecoverable"},
        503: {"description": "All provider credentials/models exhausted"},
    },
)
async def generate_from_images(
    request: Request,
    images: list[UploadFile] = File(default=[]),
    prompt: str = Form(default=""),
    platform: Platform = Form(default=Platform.WEB),
    framework: Optional[str] = Form(default=None),
    styling: str = Form(default="Tailwind CSS"),
    architecture: str = Form(default="Component-based"),
    custom_logic: str = Form(default="", alias="customLogic"),
    routing: str = Form(default=""),
    output_mode: Optional[OutputMode] = Form(default=None, alias="outputMode"),
    evaluate: bool = Form(default=True),
    pipeline: GenerationPipeline = Depends(get_pipeline),
    config: Settings = Depends(get_settings),
) -> GenerationResponse:
    attachments = await _read_images(images, config)
    generation_request = GenerationRequest(
        prompt=prompt,
        images=attachments,
        options=GenerationOptions(
            platform=platform,
            framework=framework or None,
            styling=styling,
            architecture=architecture,
            custom_logic=custom_logic,
            routing=routing,
        ),
        output_mode=_output_mode(output_mode, config),
        evaluate=evaluate,
    )

    logger.info(
        "Generation request received",
        source="upload",
        images=len(attachments),
        platform=platform.value,
        output_mode=generation_request.output_mode.value,
    )
    run = await run_until_disconnect(pipeline, generation_request, request)
    return _response_for(run)


@router.post(
    "/generate/text",
    response_model=GenerationResponse,
    summary="Generate code from a text prompt",
)
async def generate_from_text(
    body: TextGenerationRequest,
    request: Request,
    pipeline: GenerationPipeline = Depends(get_pipeline),
    config: Settings = Depends(get_settings),
) -> GenerationResponse:
    generation_request = GenerationRequest(
        prompt=body.prompt,
        options=body.to_options(),
        output_mode=_output_mode(body.output_mode, config),
        evaluate=body.evaluate,
    )
    logger.info(
        "Generation request received",
        source="text",
        platform=body.platform.value,
        prompt_length=len(body.prompt),
    )
    run = await run_until_disconnect(pipeline, generation_request, request)
    return _response_for(run)


@router.post(
    "/generate/figma",
    response_model=GenerationResponse,
    summary="Generate code from a Figma file",
    responses={
        400: {"description": "Not a Figma URL"},
        502: {"description": "Figma API or provider failure"},
        503: {"description": "Figma not configured or providers exhausted"},
    },
)
async def generate_from_figma(
    body: FigmaGenerationRequest,
    request: Request,
    pipeline: GenerationPipeline = Depends(get_pipeline),
    figma: Optional[FigmaDesignSource] = Depends(get_figma_source),
    config: Settings = Depends(get_settings),
) -> GenerationResponse:
    if figma is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Figma access token is not configured",
        )

    nodes = await figma.fetch_nodes(body.figma_url, max_frames=body.max_frames or config.FIGMA_MAX_FRAMES)
    generation_request = GenerationRequest(
        prompt=body.prompt,
        design_nodes=nodes,
        options=body.to_options(),
        output_mode=_output_mode(body.output_mode, config),
        evaluate=body.evaluate,
    )
    logger.info(
        "Generation request received",
        source="figma",
        frames=len(nodes),
        platform=body.platform.value,
    )
    run = await run_until_disconnect(pipeline, generation_request, request)
    return _response_for(run)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    summary="Plan an app before generating it",
    description="Returns a markdown plan listing pages and reusable components.",
    responses={
        502: {"description": "Provider rejected the request"},
        503: {"description": "All provider credentials/models exhausted"},
    },
)
async def analyze_prompt(
    body: AnalysisRequest,
    invoker: ResilientInvoker = Depends(get_primary_invoker),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
) -> AnalysisResponse:
    options = body.to_options()
    logger.info(
        "Analysis request received",
        platform=options.platform.value,
        prompt_length=len(body.prompt),
    )
    plan = await invoker.invoke(prompt_builder.build_analysis_prompt(body.prompt, options))
    return AnalysisResponse(
        analysis=plan.strip(),
        prompt=body.prompt,
        platform=options.platform,
        framework=options.resolved_framework,
        styling=options.styling,
        architecture=options.architecture,
        provider=invoker.provider,
    )


@router.post(
    "/evaluate",
    response_model=EvaluationResponse,
    summary="Evaluate existing code",
    description="Score code for quality, performance, accessibility and security (0-100).",
)
async def evaluate_code(
    body: EvaluationRequest,
    evaluator: Optional[MultiModelEvaluator] = Depends(get_evaluator),
) -> EvaluationResponse:
    if evaluator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Evaluation is disabled",
        )
    result = await evaluator.evaluate(body.code, body.framework, body.platform.value)
    return EvaluationResponse(qa=result)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Reports which providers, Figma and evaluation are configured.",
)
async def health_check(config: Settings = Depends(get_settings)) -> HealthResponse:
    services: dict[str, str] = {}
    for role, provider in (("primary", config.PRIMARY_PROVIDER), ("secondary", config.SECONDARY_PROVIDER)):
        if not provider:
            services[role] = "disabled"
            continue
        configured = is_provider_configured(provider, config)
        services[f"{role}:{provider}"] = "ok" if configured else "not_configured"

    services["figma"] = "ok" if config.FIGMA_ACCESS_TOKEN else "not_configured"
    services["evaluation"] = "ok" if config.EVALUATION_ENABLED else "disabled"

    if services.get(f"primary:{config.PRIMARY_PROVIDER}") != "ok":
        overall = "unhealthy"
    elif any(value == "not_configured" for key, value in services.items() if key.startswith("secondary")):
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(status=overall, version=config.APP_VERSION, services=services)
