"""Classify free-form model output into recipe data.

Language models asked for JSON do not always return JSON. The cooking steps in
particular come back as an array, as an object, as a brace-delimited list of
strings (not valid JSON), or as a numbered list in prose. `parse_model_output`
tries each shape in turn and reports which one it found so the caller can
decide whether the result is usable or the deterministic fallback is needed.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Union

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")
_QUOTED_LITERAL = re.compile(r'"((?:[^"\\]|\\.)*)"')
_COOKING_METHOD_OPEN = re.compile(r'"cookingMethod"\s*:\s*\{')
_NUMBERED_LINE = re.compile(r"(?m)^\s*\d+\.\s+(.+?)\s*$")


@dataclass(frozen=True)
class ParsedStrict:
    """The response held a valid JSON object, used as-is."""

    data: dict[str, Any]


@dataclass(frozen=True)
class ParsedRecoveredObject:
    """A JSON object whose cookingMethod had to be rebuilt from quoted strings."""

    data: dict[str, Any]


@dataclass(frozen=True)
class ParsedRecoveredSteps:
    """Only the cooking steps could be salvaged."""

    steps: list[str]


@dataclass(frozen=True)
class ParseFailed:
    reason: str


ParseResult = Union[ParsedStrict, ParsedRecoveredObject, ParsedRecoveredSteps, ParseFailed]


def _unescape(literal: str) -> str:
    try:
        return json.loads(f'"{literal}"')
    except json.JSONDecodeError:
        return literal


def quoted_steps(segment: str) -> list[str]:
    """Quoted string literals in `segment`, minus the first one.

    The first literal in an object-shaped cookingMethod is almost always a
    key such as "steps" rather than an instruction.
    """
    literals = [_unescape(m) for m in _QUOTED_LITERAL.findall(segment)]
    return [text.strip() for text in literals[1:] if text.strip()]


def _closing_brace(text: str, open_index: int) -> int | None:
    """Index of the brace closing the one at `open_index`, skipping quoted text."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(open_index, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _object_segment(block: str) -> tuple[int, int, str] | None:
    """Span of the cookingMethod member and the text inside its braces."""
    match = _COOKING_METHOD_OPEN.search(block)
    if not match:
        return None
    close = _closing_brace(block, match.end() - 1)
    if close is None:
        return None
    return match.start(), close + 1, block[match.end():close]


def _steps_from_object(block: str, method: dict[str, Any]) -> list[str]:
    found = _object_segment(block)
    segment = found[2] if found else json.dumps(method, ensure_ascii=False)
    return quoted_steps(segment)


def _recover_brace_list(block: str) -> ParseResult | None:
    found = _object_segment(block)
    if found is None:
        return None
    start, end, segment = found
    steps = quoted_steps(segment)
    if not steps:
        return None

    # Splice the steps back in as a JSON array and retry the whole object.
    repaired = (
        block[:start]
        + '"cookingMethod": '
        + json.dumps(steps, ensure_ascii=False)
        + block[end:]
    )
    try:
        data = json.loads(repaired)
    except json.JSONDecodeError:
        return ParsedRecoveredSteps(steps)
    if not isinstance(data, dict):
        return ParsedRecoveredSteps(steps)
    data["cookingMethod"] = "\n".join(steps)
    return ParsedRecoveredObject(data)


def parse_model_output(raw: str | None) -> ParseResult:
    """Classify a raw model response. Never raises."""
    if not raw or not raw.strip():
        return ParseFailed("empty response")

    block_match = _JSON_BLOCK.search(raw)
    if block_match:
        block = block_match.group(0)
        try:
            data = json.loads(block)
        except json.JSONDecodeError:
            data = None

        if isinstance(data, dict):
            method = data.get("cookingMethod")
            if isinstance(method, dict):
                steps = _steps_from_object(block, method)
                return ParsedRecoveredObject({**data, "cookingMethod": "\n".join(steps)})
            return ParsedStrict(data)

        recovered = _recover_brace_list(block)
        if recovered is not None:
            return recovered

    numbered = _NUMBERED_LINE.findall(raw)
    if numbered:
        return ParsedRecoveredSteps(numbered)

    return ParseFailed("no JSON object or numbered steps found")
