"""Embeddings path: one fixed backend, no fallback chain."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modelchain.llm.errors import ConfigurationError

if TYPE_CHECKING:
    from modelchain.core.types import EmbeddingResult
    from modelchain.llm.adapters.base import EmbeddingAdapter

logger = structlog.get_logger(__name__)

__all__ = ["run_embeddings"]


async def run_embeddings(texts: list[str], embedder: EmbeddingAdapter | None) -> EmbeddingResult:
    """Embed texts with the single configured embeddings backend.

    Args:
        texts: Texts to embed.
        embedder: The Workers AI adapter, or None when it is not configured.

    Returns:
        The backend's EmbeddingResult.

    Raises:
        ConfigurationError: If no embeddings backend is configured.
    """
    if embedder is None:
        raise ConfigurationError("Cloudflare AI credentials required for embeddings")
    logger.debug("embeddings_requested", count=len(texts))
    return await embedder.embed(texts)
