"""Unit tests for text utilities (fence stripping, JSON extraction, truncation)."""

import json

from generation_layer.llm.text_utils import (
    extract_first_json_object,
    strip_code_fences,
    truncate_for_prompt,
)


class TestStripCodeFences:

    def test_plain_text_unchanged(self):
        assert strip_code_fences("  const a = 1;  ") == "const a = 1;"

    def test_whole_answer_fenced(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_fence_without_language(self):
        assert strip_code_fences("```\nhello\n```") == "hello"

    def test_single_block_inside_prose(self):
        text = "Here is your component:\n```jsx\nexport default App;\n```\nEnjoy!"
        assert strip_code_fences(text) == "export default App;"

    def test_multiple_blocks_left_alone(self):
        text = "```js\na\n```\nand\n```js\nb\n```"
        assert strip_code_fences(text) == text.strip()


class TestExtractFirstJsonObject:

    def test_object_with_surrounding_chatter(self):
        text = 'Sure! Here it is: {"files": {"a.js": "x"}} Let me know.'
        assert json.loads(extract_first_json_object(text)) == {"files": {"a.js": "x"}}

    def test_braces_inside_strings_ignored(self):
        text = 'prefix {"code": "function f() { return \\"}\\"; }"} suffix'
        extracted = extract_first_json_object(text)
        assert json.loads(extracted)["code"] == 'function f() { return "}"; }'

    def test_unbalanced_prefix_skipped(self):
        text = 'broken { "a": 1 and then {"b": 2}'
        # The first "{" never closes, so extraction starts over at the next one
        assert extract_first_json_object(text) == '{"b": 2}'

    def test_no_object(self):
        assert extract_first_json_object("no json here") is None

    def test_nested_objects(self):
        text = '{"a": {"b": {"c": 1}}}'
        assert extract_first_json_object(text) == text


class TestTruncateForPrompt:

    def test_short_text_unchanged(self):
        assert truncate_for_prompt("short", 100) == "short"

    def test_long_text_marked(self):
        result = truncate_for_prompt("x" * 150, 100)
        assert result.startswith("x" * 100)
        assert "[truncated 50 characters]" in result
