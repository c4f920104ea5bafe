"""Persistence of run artifacts (manifest, history JSONL, weights, predictions)."""
from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson
import torch

from botclf.domain.models import EpochLog, PredictionResult, TrainingConfig, TrainingManifest
from botclf.services.classifier import build_model
from botclf.services.training import TrainedClassifier

MANIFEST_FILE = "training_manifest.json"
HISTORY_FILE = "history.jsonl"
MODEL_FILE = "model.pt"
PREDICTIONS_FILE = "predictions.jsonl"


def ensure_run_dir(base: Path, timestamp: str) -> Path:
    run_dir = base / timestamp
    base.mkdir(parents=True, exist_ok=True)
    # a run directory is never reused
    run_dir.mkdir(exist_ok=False)
    # latest pointer
    (base / "latest.txt").write_text(timestamp, encoding="utf-8")
    return run_dir


def write_manifest(run_dir: Path, manifest: TrainingManifest) -> Path:
    p = run_dir / MANIFEST_FILE
    p.write_bytes(orjson.dumps(manifest.model_dump(mode="json"), option=orjson.OPT_INDENT_2))
    return p


def read_manifest(run_dir: Path) -> TrainingManifest:
    p = run_dir / MANIFEST_FILE
    return TrainingManifest.model_validate(orjson.loads(p.read_bytes()))


def write_history(run_dir: Path, history: Iterable[EpochLog]) -> Path:
    p = run_dir / HISTORY_FILE
    with p.open("wb") as f:
        for entry in history:
            f.write(orjson.dumps(entry.model_dump()) + b"\n")
    return p


def append_predictions(run_dir: Path, results: Iterable[PredictionResult]) -> Path:
    p = run_dir / PREDICTIONS_FILE
    with p.open("ab") as f:
        for r in results:
            f.write(orjson.dumps(r.model_dump()) + b"\n")
    return p


def read_jsonl(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        return []
    out: list[dict[str, Any]] = []
    with path.open("rb") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            out.append(orjson.loads(line))
    return out


def save_classifier(run_dir: Path, classifier: TrainedClassifier, encoder_model: str) -> Path:
    p = run_dir / MODEL_FILE
    torch.save(
        {
            "state_dict": classifier.model.state_dict(),
            "config": classifier.config.model_dump(),
            "encoder_model": encoder_model,
        },
        p,
    )
    return p


def load_classifier(run_dir: Path) -> tuple[TrainedClassifier, str]:
    """Rebuild the network from `model.pt`; returns (classifier, encoder model name)."""
    p = run_dir / MODEL_FILE
    if not p.exists():
        raise FileNotFoundError(f"Model weights not found: {p}")
    payload = torch.load(p, map_location="cpu")
    config = TrainingConfig.model_validate(payload["config"])
    model = build_model(config)
    model.load_state_dict(payload["state_dict"])
    model.eval()
    history = [EpochLog.model_validate(row) for row in read_jsonl(run_dir / HISTORY_FILE)]
    return TrainedClassifier(model=model, config=config, history=history), payload["encoder_model"]
