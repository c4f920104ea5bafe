from __future__ import annotations

import math

import numpy as np
import pytest
import torch
import torch.nn as nn

from botclf.domain.models import TrainingConfig
from botclf.services.classifier import (
    accuracy,
    build_model,
    categorical_crossentropy,
    compile_model,
    one_hot,
    predict_proba,
)


def test_one_hot_layout():
    encoded = one_hot([0, 1, 1], 2)
    assert encoded.tolist() == [[1.0, 0.0], [0.0, 1.0], [0.0, 1.0]]
    assert encoded.dtype == torch.float32


def test_build_model_layers():
    model = build_model(TrainingConfig())
    kinds = [type(layer) for layer in model]
    assert kinds == [nn.Linear, nn.ReLU, nn.Dropout, nn.Linear, nn.ReLU, nn.Linear, nn.Softmax]
    assert model[0].in_features == 512
    assert model[0].out_features == 128
    assert model[2].p == pytest.approx(0.2)
    assert model[3].out_features == 64
    assert model[5].out_features == 2


def test_predict_proba_rows_are_distributions():
    model = build_model(TrainingConfig())
    x = np.random.default_rng(0).standard_normal((5, 512)).astype(np.float32)
    probs = predict_proba(model, x)
    assert probs.shape == (5, 2)
    assert np.allclose(probs.sum(axis=1), 1.0, atol=1e-5)
    assert (probs >= 0).all()


def test_predict_proba_accepts_single_vector():
    model = build_model(TrainingConfig())
    probs = predict_proba(model, np.zeros(512, dtype=np.float32))
    assert probs.shape == (1, 2)


def test_compile_model_uses_adam_with_configured_rate():
    cfg = TrainingConfig(learning_rate=0.01)
    compiled = compile_model(build_model(cfg), cfg)
    assert isinstance(compiled.optimizer, torch.optim.Adam)
    assert compiled.optimizer.param_groups[0]["lr"] == pytest.approx(0.01)
    assert compiled.loss_fn is categorical_crossentropy


def test_categorical_crossentropy_matches_manual_value():
    probs = torch.tensor([[0.8, 0.2], [0.4, 0.6]])
    targets = one_hot([0, 1])
    expected = -(math.log(0.8) + math.log(0.6)) / 2
    assert categorical_crossentropy(probs, targets).item() == pytest.approx(expected, rel=1e-5)


def test_accuracy_counts_argmax_matches():
    probs = torch.tensor([[0.8, 0.2], [0.7, 0.3], [0.1, 0.9], [0.4, 0.6]])
    targets = one_hot([0, 1, 1, 1])
    assert accuracy(probs, targets) == pytest.approx(0.75)
    assert accuracy(probs[:0], targets[:0]) == 0.0
