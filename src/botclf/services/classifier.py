"""Dense classification head on top of sentence embeddings (torch)."""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F

from botclf.domain.models import TrainingConfig

LossFn = Callable[[torch.Tensor, torch.Tensor], torch.Tensor]

_EPS = 1e-7


def one_hot(labels: Sequence[int], num_classes: int = 2) -> torch.Tensor:
    """Not a bot -> [1, 0], bot -> [0, 1]."""
    idx = torch.as_tensor(list(labels), dtype=torch.long)
    return F.one_hot(idx, num_classes=num_classes).to(torch.float32)


def build_model(config: TrainingConfig) -> nn.Sequential:
    return nn.Sequential(
        nn.Linear(config.embedding_dim, config.hidden_units),
        nn.ReLU(),
        nn.Dropout(config.dropout),
        nn.Linear(config.hidden_units, config.second_hidden_units),
        nn.ReLU(),
        nn.Linear(config.second_hidden_units, config.num_classes),
        nn.Softmax(dim=-1),
    )


def categorical_crossentropy(probs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
    # model already emits probabilities; clamp keeps log finite
    return -(targets * torch.log(probs.clamp(_EPS, 1.0 - _EPS))).sum(dim=-1).mean()


def accuracy(probs: torch.Tensor, targets: torch.Tensor) -> float:
    if probs.shape[0] == 0:
        return 0.0
    return (probs.argmax(dim=-1) == targets.argmax(dim=-1)).float().mean().item()


@dataclass(slots=True)
class CompiledModel:
    model: nn.Module
    optimizer: torch.optim.Optimizer
    loss_fn: LossFn
    config: TrainingConfig


def compile_model(model: nn.Module, config: TrainingConfig) -> CompiledModel:
    optimizer = torch.optim.Adam(model.parameters(), lr=config.learning_rate)
    return CompiledModel(
        model=model,
        optimizer=optimizer,
        loss_fn=categorical_crossentropy,
        config=config,
    )


def predict_proba(model: nn.Module, embeddings: np.ndarray | torch.Tensor) -> np.ndarray:
    x = torch.as_tensor(embeddings, dtype=torch.float32)
    if x.ndim == 1:
        x = x.unsqueeze(0)
    model.eval()
    with torch.no_grad():
        probs = model(x)
    return probs.cpu().numpy()
