"""Single-text inference & reporting arithmetic."""
from __future__ import annotations

import logging

from botclf.domain.models import BOT_DETAIL, NOT_BOT_DETAIL, PredictionResult
from botclf.infrastructure.encoder import Embedder
from botclf.services.classifier import predict_proba
from botclf.services.training import TrainedClassifier

logger = logging.getLogger(__name__)


def build_result(text: str, not_bot_prob: float, bot_prob: float) -> PredictionResult:
    """Turn the two class probabilities into a report.

    Ties resolve to "Not a bot" (bot must be strictly larger).
    """
    p0 = float(not_bot_prob)
    p1 = float(bot_prob)
    return PredictionResult(
        text=text,
        prediction="Bot" if p1 > p0 else "Not a bot",
        confidence=max(p0, p1) * 100,
        details={
            NOT_BOT_DETAIL: f"{p0 * 100:.2f}%",
            BOT_DETAIL: f"{p1 * 100:.2f}%",
        },
        raw_output={"human": p0, "bot": p1},
    )


def predict(classifier: TrainedClassifier, embedder: Embedder, text: str) -> PredictionResult:
    try:
        embedding = embedder.embed([text])
        probs = predict_proba(classifier.model, embedding)
        if probs.shape[-1] != 2:
            raise ValueError(f"Expected 2 class probabilities, got {probs.shape[-1]}")
    except Exception:
        logger.exception("Prediction error")
        raise
    not_bot_prob, bot_prob = probs[0]
    return build_result(text, not_bot_prob, bot_prob)
