from __future__ import annotations

import zlib
from collections.abc import Sequence

import numpy as np
import pytest

from botclf.domain.models import LabeledText, TrainingConfig
from botclf.runtime import AppContext

BOT_MARKERS = ("click", "free", "win", "follow", "$")


class FakeEmbedder:
    """Deterministic stand-in for the sentence encoder.

    Texts containing a spam marker are shifted along the first dimensions so
    the two classes are linearly separable.
    """

    def __init__(self, dimension: int = 512):
        self.dimension = dimension
        self.calls: list[list[str]] = []

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        self.calls.append(list(texts))
        rows = []
        for text in texts:
            rng = np.random.default_rng(zlib.crc32(text.encode("utf-8")))
            vec = rng.standard_normal(self.dimension).astype(np.float32) * 0.1
            if any(m in text.lower() for m in BOT_MARKERS):
                vec[:16] += 1.0
            rows.append(vec)
        return np.stack(rows)


class BrokenEmbedder:
    dimension = 512

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        raise RuntimeError("encoder offline")


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def records() -> list[LabeledText]:
    human = [
        "just got back from the gym",
        "dinner with friends tonight",
        "my dog loves the snow",
        "reading a great novel this week",
        "rainy day, staying in",
        "the train is late again",
        "baked bread for the first time",
        "finally finished the puzzle",
        "coffee then emails",
        "watching the game with dad",
    ]
    bots = [
        "click here for free followers",
        "win a free phone now",
        "follow back guaranteed click link",
        "earn $500 daily click now",
        "free giveaway follow to win",
        "click to claim your prize",
        "win cash fast click here",
        "free crypto, follow and retweet",
        "get $100 free when you click",
        "follow for a chance to win",
    ]
    out: list[LabeledText] = []
    for h, b in zip(human, bots):
        out.append(LabeledText(input=h, output=0))
        out.append(LabeledText(input=b, output=1))
    return out


@pytest.fixture
def small_config() -> TrainingConfig:
    return TrainingConfig(epochs=3, batch_size=4, seed=0)


@pytest.fixture(autouse=True)
def _reset_context():
    AppContext.reset()
    yield
    AppContext.reset()


@pytest.fixture
def broken_embedder() -> BrokenEmbedder:
    return BrokenEmbedder()


@pytest.fixture
def make_embedder():
    return FakeEmbedder
