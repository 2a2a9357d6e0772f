"""Parsing and validation of structured model output."""

from modelchain.parsing.pipeline import (
    BatchParsedResult,
    BatchParseMeta,
    ParsedResult,
    ParseMeta,
    ParseMethod,
    QualityRecord,
    parse_and_validate,
    parse_array_response,
    quality_record,
)
from modelchain.parsing.stages import (
    FenceStrippedStage,
    NativeJsonStage,
    RegexExtractStage,
    has_code_fence,
    strip_code_fences,
)

__all__ = [
    "BatchParseMeta",
    "BatchParsedResult",
    "FenceStrippedStage",
    "NativeJsonStage",
    "ParseMeta",
    "ParseMethod",
    "ParsedResult",
    "QualityRecord",
    "RegexExtractStage",
    "has_code_fence",
    "parse_and_validate",
    "parse_array_response",
    "quality_record",
    "strip_code_fences",
]
