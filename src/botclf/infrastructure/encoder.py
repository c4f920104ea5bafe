"""Sentence-embedding backend (Sentence-Transformers).

Default model: distiluse-base-multilingual-cased-v2, a distilled Universal
Sentence Encoder producing 512-d vectors.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

import numpy as np

DEFAULT_ENCODER = "distiluse-base-multilingual-cased-v2"

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    dimension: int

    def embed(self, texts: Sequence[str]) -> np.ndarray:  # pragma: no cover - protocol
        ...


class SentenceEncoder:
    def __init__(self, model, model_name: str = DEFAULT_ENCODER):
        self.model = model
        self.model_name = model_name

    @classmethod
    def load(cls, model_name: str = DEFAULT_ENCODER) -> SentenceEncoder:
        # heavy import (torch + transformers) deferred until an encoder is needed
        from sentence_transformers import SentenceTransformer

        logger.info("Loading sentence encoder %s...", model_name)
        model = SentenceTransformer(model_name)
        logger.info("Sentence encoder loaded!")
        return cls(model, model_name)

    @property
    def dimension(self) -> int:
        return int(self.model.get_sentence_embedding_dimension())

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        try:
            vectors = self.model.encode(list(texts), convert_to_numpy=True, show_progress_bar=False)
        except Exception:
            logger.exception("Embedding error")
            raise
        return np.asarray(vectors, dtype=np.float32)


def check_dimension(embeddings: np.ndarray, expected: int) -> np.ndarray:
    """Ensure a 2-d (n, expected) matrix."""
    if embeddings.ndim != 2 or embeddings.shape[1] != expected:
        raise ValueError(
            f"Embedding dimensionality mismatch: expected {expected}, got shape {tuple(embeddings.shape)}"
        )
    return embeddings
