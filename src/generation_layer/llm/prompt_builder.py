"""
Prompt builder for provider calls.

Responsible for:
- Loading and rendering Jinja2 templates (analysis, generation, merge, correction,
  evaluation, evaluation report)
- Selecting the platform-specific generation template
- Truncating large model outputs before embedding them in follow-up prompts
"""

import json
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader
import structlog

from generation_layer.llm.text_utils import truncate_for_prompt
from generation_layer.models.enums import OutputMode, Platform
from generation_layer.models.evaluation import EvaluationResult
from generation_layer.models.generation import GenerationOptions, GenerationRequest


logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class PromptBuilder:
    """
    Build prompts from GenerationRequest objects and intermediate outputs.

    Handles:
    - Template rendering (Jinja2)
    - Platform/output-mode template selection
    - Truncation of embedded model outputs
    """

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        max_embedded_chars: int = 60000,
    ):
        """
        Initialize prompt builder.

        Args:
            templates_dir: Directory containing prompt templates (defaults to
                the templates shipped with the package)
            max_embedded_chars: Max characters of a previous model output
                embedded in merge/correction/evaluation prompts
        """
        self.templates_dir = Path(templates_dir or DEFAULT_TEMPLATES_DIR)
        self.max_embedded_chars = max_embedded_chars

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False  # We're generating prompts and markdown, not HTML
        )

        logger.debug("PromptBuilder initialized", templates_dir=str(self.templates_dir))

    def render(self, template_name: str, **context: Any) -> str:
        """Render any template in templates_dir with the given context."""
        return self.jinja_env.get_template(template_name).render(**context)

    def build_generation_prompt(self, request: GenerationRequest) -> str:
        """
        Render the platform-specific generation prompt.

        Args:
            request: Generation request with options, prompt and images

        Returns:
            Prompt text (images are attached separately by the client)
        """
        options = request.options
        template = self.jinja_env.get_template(f"generate_{options.platform.value}.txt.j2")
        prompt = template.render(
            platform=options.platform.value,
            framework=options.resolved_framework,
            styling=options.styling,
            architecture=options.architecture,
            custom_logic=options.custom_logic,
            routing=options.routing,
            prompt=request.prompt.strip(),
            image_count=len(request.all_images),
            design_nodes=request.design_nodes,
            output_mode=request.output_mode.value,
        )

        logger.debug(
            "Built generation prompt",
            platform=options.platform.value,
            output_mode=request.output_mode.value,
            prompt_length=len(prompt),
        )
        return prompt

    def build_analysis_prompt(self, prompt: str, options: GenerationOptions) -> str:
        """Render the planning prompt (pages and reusable components as markdown)."""
        return self.jinja_env.get_template("analyze.txt.j2").render(
            prompt=truncate_for_prompt(prompt.strip(), self.max_embedded_chars),
            platform=options.platform.value,
            framework=options.resolved_framework,
            styling=options.styling,
            architecture=options.architecture,
        )

    def build_merge_prompt(
        self,
        platform: Platform,
        framework: str,
        output_mode: OutputMode,
        first: tuple[str, str],
        second: tuple[str, str],
    ) -> str:
        """
        Render the prompt that merges two generations into one.

        Args:
            platform: Target platform
            framework: Target framework
            output_mode: Shape the merged answer must take
            first: (provider name, output) of the primary generation
            second: (provider name, output) of the secondary generation
        """
        return self.jinja_env.get_template("merge.txt.j2").render(
            platform=platform.value,
            framework=framework,
            output_mode=output_mode.value,
            first_name=first[0],
            first_output=truncate_for_prompt(first[1], self.max_embedded_chars),
            second_name=second[0],
            second_output=truncate_for_prompt(second[1], self.max_embedded_chars),
        )

    def build_correction_prompt(
        self,
        original_prompt: str,
        bad_output: str,
        error: str,
        schema: Optional[dict[str, Any]] = None,
    ) -> str:
        """
        Render the repair prompt used by structured output recovery.

        The previous output is embedded verbatim, never truncated; only the
        original prompt is capped at max_embedded_chars.
        """
        return self.jinja_env.get_template("correction.txt.j2").render(
            original_prompt=truncate_for_prompt(original_prompt, self.max_embedded_chars),
            bad_output=bad_output,
            error=error,
            schema=json.dumps(schema, indent=2) if schema else None,
        )

    def build_evaluation_prompt(self, code: str, framework: str, platform: str) -> str:
        return self.jinja_env.get_template("evaluation.txt.j2").render(
            code=truncate_for_prompt(code, self.max_embedded_chars),
            framework=framework,
            platform=platform,
        )

    def render_evaluation_report(
        self,
        result: EvaluationResult,
        framework: str,
        platform: str,
        project_id: Optional[str] = None,
    ) -> str:
        """
        Render a markdown report for a combined evaluation.

        Returns:
            Markdown text with per-category scores, findings and sources
        """
        categories = [
            (category.value.replace("_", " ").title(), score)
            for category, score in result.categories.items()
        ]
        return self.jinja_env.get_template("evaluation_report.md.j2").render(
            result=result,
            categories=categories,
            framework=framework,
            platform=platform,
            project_id=project_id,
        )
