"""
Text processing utilities for the LLM layer.

Models wrap answers in markdown fences, prepend chatter before a JSON object,
or append explanations after it. These helpers peel that off without
touching the payload itself.
"""

import re
from typing import Optional

# ``` or ```lang at the very start, ``` at the very end
_LEADING_FENCE = re.compile(r"^\s*```[\w+\-.]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```\s*$")
_FENCED_BLOCK = re.compile(r"```[\w+\-.]*[ \t]*\r?\n(.*?)```", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence from model output.

    If the whole answer is one fenced block, return its body. If the answer
    has prose around a single fenced block, return the block body. Text
    without fences is returned stripped.

    Examples:
        >>> strip_code_fences("```json\\n{\\"a\\": 1}\\n```")
        '{"a": 1}'
        >>> strip_code_fences("plain")
        'plain'
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        body = _LEADING_FENCE.sub("", stripped, count=1)
        body = _TRAILING_FENCE.sub("", body, count=1)
        return body.strip()

    blocks = _FENCED_BLOCK.findall(stripped)
    if len(blocks) == 1:
        return blocks[0].strip()
    return stripped


def extract_first_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} block in text, or None.

    Braces inside JSON string literals (including escaped quotes) do not
    count toward the balance.

    Examples:
        >>> extract_first_json_object('Sure! {"a": {"b": "}"}} trailing')
        '{"a": {"b": "}"}}'
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def truncate_for_prompt(text: str, max_chars: int) -> str:
    """
    Truncate text embedded in a prompt, marking the cut.

    Args:
        text: Text to embed
        max_chars: Maximum characters kept

    Returns:
        Original text if short enough, else the head plus a truncation marker
    """
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}\n... [truncated {len(text) - max_chars} characters]"
