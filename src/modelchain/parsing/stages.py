"""JSON extraction stages.

Each stage turns raw model text into a Python value or reports that it found
nothing. Stages are independent objects so the pipeline can order, tag and
test them separately.
"""

from __future__ import annotations

__all__ = [
    "Expect",
    "FenceStrippedStage",
    "NativeJsonStage",
    "RegexExtractStage",
    "Stage",
    "has_code_fence",
    "strip_code_fences",
]

import json
import re
from typing import Any, Literal, Protocol

Expect = Literal["auto", "object", "array"]

_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_PATTERN = re.compile(r"\[.*\]", re.DOTALL)
_FENCE_LINE = re.compile(r"^\s*```", re.MULTILINE)
_FENCE_OPEN = re.compile(r"^\s*```[\w+-]*[ \t]*\n?", re.MULTILINE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$", re.MULTILINE)

_NOTHING: tuple[Any, bool] = (None, False)


class Stage(Protocol):
    """A single extraction attempt."""

    def try_parse(self, text: str) -> tuple[Any, bool]:
        """Return ``(value, True)`` on success or ``(None, False)``."""
        ...


def _loads(candidate: str) -> tuple[Any, bool]:
    try:
        return json.loads(candidate), True
    except (ValueError, RecursionError):
        return _NOTHING


def has_code_fence(text: str) -> bool:
    """Whether any line of ``text`` opens or closes a Markdown code fence."""
    return _FENCE_LINE.search(text) is not None


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence delimiter lines, with or without a language tag."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text)).strip()


class NativeJsonStage:
    """Parse the whole text when it already looks like a JSON document."""

    def try_parse(self, text: str) -> tuple[Any, bool]:
        trimmed = text.strip()
        if not trimmed.startswith(("{", "[")):
            return _NOTHING
        return _loads(trimmed)


class RegexExtractStage:
    """Pull the widest ``{...}`` or ``[...]`` span out of surrounding prose.

    With ``expect="auto"`` whichever of the object and array spans starts
    first is tried first, then the other. Fenced replies are left to
    ``FenceStrippedStage`` unless ``skip_fenced`` is False.
    """

    def __init__(self, expect: Expect = "auto", *, skip_fenced: bool = True) -> None:
        if expect not in ("auto", "object", "array"):
            raise ValueError(f"Unsupported expect value: {expect!r}")
        self.expect = expect
        self.skip_fenced = skip_fenced

    def try_parse(self, text: str) -> tuple[Any, bool]:
        if self.skip_fenced and has_code_fence(text):
            return _NOTHING

        if self.expect == "object":
            return self._parse_match(_OBJECT_PATTERN.search(text))
        if self.expect == "array":
            return self._parse_match(_ARRAY_PATTERN.search(text))

        obj_match = _OBJECT_PATTERN.search(text)
        arr_match = _ARRAY_PATTERN.search(text)
        candidates = [m for m in (obj_match, arr_match) if m is not None]
        candidates.sort(key=lambda m: m.start())
        for match in candidates:
            value, ok = self._parse_match(match)
            if ok:
                return value, True
        return _NOTHING

    @staticmethod
    def _parse_match(match: re.Match[str] | None) -> tuple[Any, bool]:
        if match is None:
            return _NOTHING
        return _loads(match.group(0))


class FenceStrippedStage:
    """Run an inner stage on the text with code fences removed.

    Produces nothing when the text has no fences to strip.
    """

    def __init__(self, inner: Stage) -> None:
        self.inner = inner

    def try_parse(self, text: str) -> tuple[Any, bool]:
        stripped = strip_code_fences(text)
        if stripped == text.strip():
            return _NOTHING
        return self.inner.try_parse(stripped)
