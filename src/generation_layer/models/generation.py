"""
Input models for a generation request.

A GenerationRequest is created per call (HTTP upload, text prompt or Figma
import) and consumed by the pipeline; it is never persisted as-is.
"""

import base64
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from generation_layer.models.enums import OutputMode, Platform

SUPPORTED_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/gif"})


class ImageAttachment(BaseModel):
    """Raw image bytes plus mime type, in upload order."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    data: bytes = Field(..., min_length=1, description="Raw image bytes")
    mime_type: str = Field(default="image/png", description="MIME type (image/png, image/jpeg, ...)")
    name: Optional[str] = Field(default=None, description="Original filename, if any")

    @model_validator(mode="after")
    def check_mime_type(self) -> "ImageAttachment":
        if self.mime_type not in SUPPORTED_IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {self.mime_type}")
        return self

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class BoundingBox(BaseModel):
    """Absolute frame position in the design canvas."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class DesignNode(BaseModel):
    """
    One frame exported from a design source.

    The core never parses the design format itself: the design-source
    collaborator supplies these records already rendered to an image.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Design-source node id")
    name: str = Field(..., description="Human-readable frame name")
    type: str = Field(default="FRAME", description="Node type (FRAME, COMPONENT, ...)")
    bounding_box: Optional[BoundingBox] = Field(default=None, description="Frame geometry")
    image: Optional[ImageAttachment] = Field(default=None, description="Rendered frame image")


class GenerationOptions(BaseModel):
    """User-selected target stack and extra guidance for the prompt."""

    platform: Platform = Field(default=Platform.WEB)
    framework: Optional[str] = Field(
        default=None,
        description="Target framework; defaults to the platform's default (React, Jetpack Compose, SwiftUI)"
    )
    styling: str = Field(default="Tailwind CSS", description="Styling approach (web only)")
    architecture: str = Field(default="Component-based", description="Architecture pattern")
    custom_logic: str = Field(default="", description="Extra behavior the generated app must implement")
    routing: str = Field(default="", description="Routing/navigation notes")

    @property
    def resolved_framework(self) -> str:
        return self.framework or self.platform.default_framework


class GenerationRequest(BaseModel):
    """
    One generation call: prompt text, ordered images and target options.

    At least one of prompt, images or design_nodes must be present; the
    pipeline rejects empty requests in its ANALYZING state.
    """

    prompt: str = Field(default="", description="Free-text description of the UI")
    images: list[ImageAttachment] = Field(default_factory=list, description="Uploaded mockups, in order")
    design_nodes: list[DesignNode] = Field(default_factory=list, description="Frames from a design source")
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    output_mode: OutputMode = Field(default=OutputMode.FILE_MAP)
    evaluate: bool = Field(default=True, description="Run the multi-model evaluator on the result")

    @property
    def all_images(self) -> list[ImageAttachment]:
        """Uploaded images followed by rendered design-node images."""
        rendered = [node.image for node in self.design_nodes if node.image is not None]
        return [*self.images, *rendered]

    @property
    def is_empty(self) -> bool:
        return not self.prompt.strip() and not self.images and not self.design_nodes
