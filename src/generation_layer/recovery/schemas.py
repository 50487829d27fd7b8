"""
JSON Schemas the pipeline asks models to satisfy.
"""

from generation_layer.models.enums import EvaluationCategory

FILE_MAP_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "generated_file_map",
    "type": "object",
    "required": ["files"],
    "properties": {
        "files": {
            "type": "object",
            "minProperties": 1,
            "propertyNames": {"minLength": 1},
            "additionalProperties": {"type": "string"},
        },
        "analysis": {"type": ["string", "object"]},
    },
}

_CATEGORY_SCHEMA: dict = {
    "type": "object",
    "required": ["score"],
    "properties": {
        "score": {"type": "number", "minimum": 0, "maximum": 100},
        "issues": {"type": "array", "items": {"type": "string"}},
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
}

EVALUATION_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "code_evaluation",
    "type": "object",
    "required": [category.value for category in EvaluationCategory],
    "properties": {category.value: _CATEGORY_SCHEMA for category in EvaluationCategory},
}
