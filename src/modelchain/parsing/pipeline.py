"""Response parsing and validation pipeline.

Turns raw model text into validated data through a fixed, short-circuiting
sequence of stages:

1. native JSON parse of the trimmed text
2. regex extraction of an object or array span from surrounding prose
3. code-fence stripping, then 1 and 2 again on the stripped text
4. an optional preprocess hook on whatever was extracted
5. schema validation with pydantic
6. an optional fallback when nothing could be extracted

Every call returns ``data`` plus ``meta`` recording which path succeeded.
Nothing here raises on bad model output; degradation is reported in ``meta``.
"""

from __future__ import annotations

__all__ = [
    "BatchParseMeta",
    "BatchParsedResult",
    "ParseMeta",
    "ParseMethod",
    "ParsedResult",
    "QualityRecord",
    "parse_and_validate",
    "parse_array_response",
    "quality_record",
]

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from modelchain.parsing.stages import (
    Expect,
    FenceStrippedStage,
    NativeJsonStage,
    RegexExtractStage,
    Stage,
)

logger = structlog.get_logger(__name__)


class ParseMethod(StrEnum):
    """Which stage produced the parsed value."""

    NATIVE_JSON = "native-json"
    REGEX_EXTRACT = "regex-extract"
    STRIPPED_FENCES = "stripped-fences"
    STRIPPED_FENCES_REGEX = "stripped-fences-regex"
    FALLBACK = "fallback"
    NONE = "none"


class ParseMeta(BaseModel):
    """Diagnostics for one parse."""

    parse_method: ParseMethod = ParseMethod.NONE
    schema_valid: bool = False
    fallback_used: bool = False
    errors: list[str] = Field(default_factory=list)


class BatchParseMeta(ParseMeta):
    """Diagnostics for an item-by-item array parse."""

    item_errors: int = 0


class ParsedResult(BaseModel):
    """Parsed data plus diagnostics. ``data`` is None only on total failure."""

    data: Any = None
    meta: ParseMeta = Field(default_factory=ParseMeta)


class BatchParsedResult(BaseModel):
    """Item list plus diagnostics for an array parse."""

    data: list[Any] = Field(default_factory=list)
    meta: BatchParseMeta = Field(default_factory=BatchParseMeta)


class QualityRecord(BaseModel):
    """Flat parse-quality record for usage tracking."""

    capability: str
    parse_method: ParseMethod
    schema_valid: bool
    fallback_used: bool
    error_count: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    extras: dict[str, Any] = Field(default_factory=dict)


Schema = Any  # anything TypeAdapter accepts, or a TypeAdapter


def _stages(expect: Expect) -> list[tuple[ParseMethod, Stage]]:
    return [
        (ParseMethod.NATIVE_JSON, NativeJsonStage()),
        (ParseMethod.REGEX_EXTRACT, RegexExtractStage(expect)),
        (ParseMethod.STRIPPED_FENCES, FenceStrippedStage(NativeJsonStage())),
        (
            ParseMethod.STRIPPED_FENCES_REGEX,
            FenceStrippedStage(RegexExtractStage(expect, skip_fenced=False)),
        ),
    ]


def _extract(
    text: str,
    expect: Expect,
    accept: Callable[[Any], bool] = lambda _: True,
) -> tuple[Any, ParseMethod | None]:
    """Run the stages in order; return the first accepted value and its tag."""
    for method, stage in _stages(expect):
        value, ok = stage.try_parse(text)
        if ok and accept(value):
            return value, method
    return None, None


def _type_adapter(schema: Schema) -> TypeAdapter[Any]:
    if isinstance(schema, TypeAdapter):
        return schema
    return TypeAdapter(schema)


def _flatten_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ()))
        msg = error.get("msg", "invalid value")
        messages.append(f"{path}: {msg}" if path else msg)
    return messages or ["Unknown validation error"]


def parse_and_validate(
    text: str,
    schema: Schema,
    *,
    fallback: Callable[[], Any] | None = None,
    preprocess: Callable[[Any], Any] | None = None,
    expect: Expect = "auto",
) -> ParsedResult:
    """Parse model text and validate it against a schema.

    Args:
        text: Raw text from the model.
        schema: A pydantic model, any type pydantic can validate, or a
            ``TypeAdapter``.
        fallback: Called with no arguments when nothing could be extracted.
        preprocess: Applied to the extracted value before validation, e.g.
            to wrap a bare array in an envelope object.
        expect: ``"object"`` or ``"array"`` to restrict regex extraction,
            ``"auto"`` to take whichever span starts first.

    Returns:
        ParsedResult. On schema mismatch ``data`` is the raw extracted value
        and ``meta.schema_valid`` is False; on total failure ``data`` is the
        fallback's value or None.
    """
    adapter = _type_adapter(schema)
    meta = ParseMeta()
    text = text or ""

    raw, method = _extract(text, expect)

    if method is not None:
        meta.parse_method = method

        if preprocess is not None:
            try:
                raw = preprocess(raw)
            except Exception as exc:
                meta.errors.append(f"preprocess: {exc}")
                logger.warning("preprocess_failed", error=str(exc))

        try:
            validated = adapter.validate_python(raw)
        except ValidationError as exc:
            meta.errors.extend(_flatten_errors(exc))
            logger.warning(
                "schema_validation_failed",
                parse_method=meta.parse_method,
                errors=meta.errors[:3],
            )
            return ParsedResult(data=raw, meta=meta)

        meta.schema_valid = True
        return ParsedResult(data=adapter.dump_python(validated, by_alias=True), meta=meta)

    meta.fallback_used = True
    if fallback is not None:
        meta.parse_method = ParseMethod.FALLBACK
        logger.warning("all_parsing_failed_using_fallback", text_length=len(text))
        try:
            return ParsedResult(data=fallback(), meta=meta)
        except Exception as exc:
            meta.errors.append(f"fallback: {exc}")
            logger.warning("fallback_failed", error=str(exc))
            return ParsedResult(data=None, meta=meta)

    meta.errors.append("Could not extract JSON from LLM output")
    logger.warning("all_parsing_failed", text_length=len(text))
    return ParsedResult(data=None, meta=meta)


def parse_array_response(
    text: str,
    item_schema: Schema,
    *,
    fallback_item: Callable[[int, Any], Any] | None = None,
    originals: Sequence[Any] = (),
) -> BatchParsedResult:
    """Parse a JSON array and validate each element independently.

    Elements that fail validation are kept in their raw form and counted in
    ``meta.item_errors``; nothing is dropped.

    Args:
        text: Raw text from the model.
        item_schema: Schema for a single array element.
        fallback_item: ``(index, original) -> item`` used to build one item
            per original input when no array can be extracted.
        originals: The inputs the model was asked about.

    Returns:
        BatchParsedResult with ``meta.schema_valid`` True only when every
        element validated.
    """
    adapter = _type_adapter(item_schema)
    meta = BatchParseMeta()
    text = text or ""

    items, method = _extract(text, "array", accept=lambda value: isinstance(value, list))

    if method is None:
        meta.fallback_used = True
        meta.parse_method = ParseMethod.FALLBACK
        if fallback_item is not None:
            logger.warning("array_parsing_failed_using_fallback", items=len(originals))
            try:
                data = [fallback_item(i, orig) for i, orig in enumerate(originals)]
            except Exception as exc:
                meta.errors.append(f"fallback: {exc}")
                logger.warning("fallback_failed", error=str(exc))
                return BatchParsedResult(data=[], meta=meta)
            return BatchParsedResult(data=data, meta=meta)
        meta.errors.append("Could not extract JSON array from LLM output")
        logger.warning("array_parsing_failed", text_length=len(text))
        return BatchParsedResult(data=[], meta=meta)

    meta.parse_method = method
    data: list[Any] = []
    for item in items:
        try:
            data.append(adapter.dump_python(adapter.validate_python(item), by_alias=True))
        except ValidationError:
            meta.item_errors += 1
            data.append(item)

    meta.schema_valid = meta.item_errors == 0
    if meta.item_errors:
        meta.errors.append(f"{meta.item_errors}/{len(items)} items failed schema validation")
        logger.warning("array_items_invalid", item_errors=meta.item_errors, total=len(items))

    return BatchParsedResult(data=data, meta=meta)


def quality_record(capability: str, meta: ParseMeta, **extras: Any) -> QualityRecord:
    """Build a parse-quality record from ``meta`` for a usage tracker."""
    return QualityRecord(
        capability=capability,
        parse_method=meta.parse_method,
        schema_valid=meta.schema_valid,
        fallback_used=meta.fallback_used,
        error_count=len(meta.errors),
        extras=extras,
    )
