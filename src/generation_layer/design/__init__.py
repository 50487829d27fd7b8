"""
Design-source collaborators.

The pipeline consumes DesignNode records only; parsing a design tool's
document format stays in this package.
"""

from generation_layer.design.exceptions import DesignSourceError, InvalidFigmaUrl
from generation_layer.design.figma import FigmaDesignSource, extract_file_key

__all__ = [
    "FigmaDesignSource",
    "extract_file_key",
    "DesignSourceError",
    "InvalidFigmaUrl",
]
