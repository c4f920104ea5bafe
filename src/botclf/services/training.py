"""Training orchestration: embed -> one-hot -> build -> compile -> fit.

Responsibilities:
    * Encode the dataset texts with the injected embedder
    * Hold out the trailing validation fraction (before any shuffling)
    * Run the mini-batch loop & report per-epoch metrics through a callback
"""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np
import torch
import torch.nn as nn

from botclf.domain.models import EpochLog, LabeledText, TrainingConfig
from botclf.infrastructure.encoder import Embedder, check_dimension
from botclf.services.classifier import (
    CompiledModel,
    accuracy,
    build_model,
    compile_model,
    one_hot,
)

EpochCallback = Callable[[EpochLog], None]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrainedClassifier:
    model: nn.Module
    config: TrainingConfig
    history: list[EpochLog] = field(default_factory=list)
    train_count: int = 0
    validation_count: int = 0


def log_epoch(entry: EpochLog) -> None:
    logger.info(entry.describe())


def split_validation(n: int, validation_split: float) -> tuple[int, int]:
    """Return (train_count, validation_count); validation rows are the tail.

    Training rows are the first floor(n * (1 - split)), as tfjs-layers does.
    """
    split_at = int(math.floor(n * (1 - validation_split)))
    return split_at, n - split_at


def _evaluate(compiled: CompiledModel, x: torch.Tensor, y: torch.Tensor) -> tuple[float, float]:
    compiled.model.eval()
    with torch.no_grad():
        probs = compiled.model(x)
        loss = compiled.loss_fn(probs, y).item()
    return loss, accuracy(probs, y)


def fit(
    compiled: CompiledModel,
    x: np.ndarray | torch.Tensor,
    y: torch.Tensor,
    config: TrainingConfig,
    on_epoch_end: EpochCallback | None = None,
) -> list[EpochLog]:
    x_all = torch.as_tensor(x, dtype=torch.float32)
    y_all = torch.as_tensor(y, dtype=torch.float32)
    if x_all.shape[0] != y_all.shape[0]:
        raise ValueError(f"x and y size mismatch: {x_all.shape[0]} != {y_all.shape[0]}")
    n_train, n_val = split_validation(x_all.shape[0], config.validation_split)
    if n_train == 0:
        raise ValueError("No training rows left after validation split")
    x_train, y_train = x_all[:n_train], y_all[:n_train]
    x_val, y_val = x_all[n_train:], y_all[n_train:]

    generator = torch.Generator()
    if config.seed is not None:
        generator.manual_seed(config.seed)

    history: list[EpochLog] = []
    for epoch in range(config.epochs):
        compiled.model.train()
        order = (
            torch.randperm(n_train, generator=generator)
            if config.shuffle
            else torch.arange(n_train)
        )
        total_loss = 0.0
        correct = 0.0
        for start in range(0, n_train, config.batch_size):
            idx = order[start : start + config.batch_size]
            xb, yb = x_train[idx], y_train[idx]
            compiled.optimizer.zero_grad()
            probs = compiled.model(xb)
            loss = compiled.loss_fn(probs, yb)
            loss.backward()
            compiled.optimizer.step()
            total_loss += loss.item() * len(idx)
            correct += accuracy(probs.detach(), yb) * len(idx)
        entry = EpochLog(
            epoch=epoch + 1,
            loss=total_loss / n_train,
            accuracy=correct / n_train,
        )
        if n_val:
            entry.val_loss, entry.val_accuracy = _evaluate(compiled, x_val, y_val)
        history.append(entry)
        if on_epoch_end is not None:
            on_epoch_end(entry)
    compiled.model.eval()
    return history


def train_model(
    records: Sequence[LabeledText],
    embedder: Embedder,
    config: TrainingConfig | None = None,
    on_epoch_end: EpochCallback | None = log_epoch,
) -> TrainedClassifier:
    cfg = config or TrainingConfig()
    try:
        if cfg.seed is not None:
            torch.manual_seed(cfg.seed)
        logger.info("Encoding tweets...")
        embeddings = check_dimension(
            embedder.embed([r.input for r in records]), cfg.embedding_dim
        )
        targets = one_hot([r.output for r in records], cfg.num_classes)

        compiled = compile_model(build_model(cfg), cfg)

        logger.info("Training model...")
        history = fit(compiled, embeddings, targets, cfg, on_epoch_end=on_epoch_end)
    except Exception:
        logger.exception("Training error")
        raise
    n_train, n_val = split_validation(len(records), cfg.validation_split)
    return TrainedClassifier(
        model=compiled.model,
        config=cfg,
        history=history,
        train_count=n_train,
        validation_count=n_val,
    )
