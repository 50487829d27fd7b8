"""
File splitting heuristic for single-blob generations.

Cuts one block of generated source into named files:

1. Explicit markers win. A line such as `// File: src/App.jsx` (also
   `# File:`, `<!-- File: -->`, `/* File: */`) starts a new file.
2. Otherwise, top-level declarations are detected per language:
   - web: PascalCase `function`, `const` and `class` declarations (JSX/TSX);
     all-caps constants such as `API_URL` are not components and stay put
   - android: capitalized Kotlin `class`, `object`, `interface` and
     composable `fun` declarations
   - ios: Swift `struct`, `class`, `enum` and `protocol` declarations
   A declaration only counts at brace depth 0, measured by a scanner that
   skips string literals and comments. Each file runs from its declaration
   to the next one; shared leading lines (package, imports) are copied into
   every file.
3. With no markers and no declarations, the whole text becomes the
   platform's default file.

The split is a pure function of its input, so running it twice on the same
text yields the same map. Duplicate paths keep the last occurrence.
"""

import re
from typing import Optional

import structlog

from generation_layer.models.enums import Platform
from generation_layer.pipeline.exceptions import InvalidGeneratedPath

logger = structlog.get_logger(__name__)

FILE_MARKER = re.compile(
    r"^[ \t]*(?://|#|<!--|/\*)[ \t]*File:[ \t]*(?P<path>[^\s*>]+)[ \t]*(?:-->|\*/)?[ \t]*$",
    re.MULTILINE | re.IGNORECASE,
)
FENCE_LINE = re.compile(r"^[ \t]*```[\w+\-.]*[ \t]*(?:\r?\n|$)", re.MULTILINE)

_ANNOTATIONS = r"(?:@[A-Za-z_][\w.]*(?:\([^)\n]*\))?[ \t]*\n?)*"

DECLARATION_PATTERNS: dict[Platform, re.Pattern] = {
    Platform.WEB: re.compile(
        r"^(?:export[ \t]+(?:default[ \t]+)?)?"
        r"(?:(?:async[ \t]+)?function[ \t]+|const[ \t]+|class[ \t]+)"
        r"(?P<name>[A-Z](?=[A-Za-z0-9_]*[a-z])[A-Za-z0-9_]*)",
        re.MULTILINE,
    ),
    Platform.ANDROID: re.compile(
        r"^" + _ANNOTATIONS +
        r"(?:(?:public|private|internal|data|sealed|abstract|open|enum)[ \t]+)*"
        r"(?:class|object|interface|fun)[ \t]+(?P<name>[A-Z][A-Za-z0-9_]*)",
        re.MULTILINE,
    ),
    Platform.IOS: re.compile(
        r"^" + _ANNOTATIONS +
        r"(?:(?:public|private|fileprivate|internal|final|open)[ \t]+)*"
        r"(?:struct|class|enum|protocol)[ \t]+(?P<name>[A-Z][A-Za-z0-9_]*)",
        re.MULTILINE,
    ),
}

ANDROID_SOURCE_ROOT = "app/src/main/java/com/example/app"
IOS_SOURCE_ROOT = "App"


def default_path(platform: Platform, framework: Optional[str] = None) -> str:
    """Path used when the text has no markers and no declarations."""
    if platform == Platform.ANDROID:
        return f"{ANDROID_SOURCE_ROOT}/MainActivity.kt"
    if platform == Platform.IOS:
        return f"{IOS_SOURCE_ROOT}/ContentView.swift"
    return f"src/App{_web_extension(framework)}"


def _web_extension(framework: Optional[str]) -> str:
    return ".tsx" if framework and "typescript" in framework.lower() else ".jsx"


def path_for_declaration(name: str, platform: Platform, framework: Optional[str] = None) -> str:
    if platform == Platform.ANDROID:
        return f"{ANDROID_SOURCE_ROOT}/{name}.kt"
    if platform == Platform.IOS:
        return f"{IOS_SOURCE_ROOT}/{name}.swift"
    extension = _web_extension(framework)
    if name == "App":
        return f"src/App{extension}"
    return f"src/components/{name}{extension}"


def top_level_offsets(text: str, offsets: set[int]) -> set[int]:
    """
    Return the subset of offsets that sit in code at brace depth 0.

    Offsets inside string literals, comments or any {...} body are
    dropped. A single quote opens a string only when it does not follow a
    letter or digit, so apostrophes in JSX text ("Don't") are ignored.
    """
    result: set[int] = set()
    depth = 0
    state = "code"
    quote = ""
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if state == "code":
            if index in offsets and depth == 0:
                result.add(index)
            nxt = text[index + 1] if index + 1 < length else ""
            if char == "/" and nxt == "/":
                state = "line_comment"
                index += 2
                continue
            if char == "/" and nxt == "*":
                state = "block_comment"
                index += 2
                continue
            if char in ('"', "`") or (char == "'" and not (index and text[index - 1].isalnum())):
                state = "string"
                quote = char
            elif char == "{":
                depth += 1
            elif char == "}":
                depth = max(depth - 1, 0)
        elif state == "line_comment":
            if char == "\n":
                state = "code"
        elif state == "block_comment":
            if char == "*" and index + 1 < length and text[index + 1] == "/":
                state = "code"
                index += 2
                continue
        else:
            if char == "\\":
                index += 2
                continue
            if char == quote or (char == "\n" and quote != "`"):
                state = "code"
        index += 1

    return result


class FileSplitter:
    """
    Split generated source text into a path -> content map.
    """

    def split(
        self,
        text: str,
        platform: Platform,
        framework: Optional[str] = None,
    ) -> dict[str, str]:
        """
        Split text into files.

        Args:
            text: Generated source, possibly fenced
            platform: Selects declaration patterns and path layout
            framework: Used for the web file extension (.jsx/.tsx)

        Returns:
            Relative path -> file content (never empty for non-blank text)
        """
        cleaned = FENCE_LINE.sub("", text)
        if not cleaned.strip():
            return {}

        files = self._split_on_markers(cleaned)
        if files:
            logger.debug("Split on file markers", files=len(files))
            return files

        files = self._split_on_declarations(cleaned, platform, framework)
        if files:
            logger.debug("Split on declarations", platform=platform.value, files=len(files))
            return files

        return {default_path(platform, framework): _finish(cleaned)}

    def _split_on_markers(self, text: str) -> dict[str, str]:
        markers = list(FILE_MARKER.finditer(text))
        preamble = text[:markers[0].start()].strip() if markers else ""
        if preamble:
            logger.debug("Dropping text before first file marker", chars=len(preamble))
        files: dict[str, str] = {}
        for position, marker in enumerate(markers):
            end = markers[position + 1].start() if position + 1 < len(markers) else len(text)
            path = marker.group("path")
            if path.startswith("./"):
                path = path[2:]
            files[path] = _finish(text[marker.end():end])
        return files

    def _split_on_declarations(
        self, text: str, platform: Platform, framework: Optional[str]
    ) -> dict[str, str]:
        pattern = DECLARATION_PATTERNS[platform]
        candidates = {match.start(): match for match in pattern.finditer(text)}
        if not candidates:
            return {}

        starts = sorted(top_level_offsets(text, set(candidates)))
        if not starts:
            return {}

        header = text[:starts[0]].strip()
        files: dict[str, str] = {}
        for position, start in enumerate(starts):
            end = starts[position + 1] if position + 1 < len(starts) else len(text)
            body = text[start:end].strip()
            if header:
                body = f"{header}\n\n{body}"
            name = candidates[start].group("name")
            files[path_for_declaration(name, platform, framework)] = _finish(body)
        return files


def _finish(content: str) -> str:
    return content.strip("\n") + "\n"


def normalize_path(path: str) -> str:
    """
    Normalize a generated file path to a clean relative POSIX path.

    Backslashes become slashes and leading "./" segments are dropped.

    Raises:
        InvalidGeneratedPath: Empty, absolute, or containing ".."
    """
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    if not normalized or normalized.endswith("/"):
        raise InvalidGeneratedPath(path, "empty file name")
    if normalized.startswith("/") or re.match(r"^[A-Za-z]:", normalized):
        raise InvalidGeneratedPath(path, "absolute paths are not allowed")
    if ".." in normalized.split("/"):
        raise InvalidGeneratedPath(path, "parent directory references are not allowed")
    return normalized
