"""High-level orchestration: end-to-end train + sample inference.

Responsibilities:
    * Train the classifier on the loaded dataset
    * Score each sample text & print its report
    * Persist run artifacts (manifest, history, weights, predictions) when an
      output root is given
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from rich.json import JSON

from botclf.domain.models import LabeledText, PredictionResult, TrainingConfig, TrainingManifest
from botclf.infrastructure.artifacts import (
    append_predictions,
    ensure_run_dir,
    save_classifier,
    write_history,
    write_manifest,
)
from botclf.infrastructure.encoder import Embedder
from botclf.infrastructure.logging import get_console
from botclf.services.prediction import predict
from botclf.services.training import EpochCallback, TrainedClassifier, log_epoch, train_model

logger = logging.getLogger(__name__)


class RunOutput:
    def __init__(
        self,
        *,
        classifier: TrainedClassifier,
        predictions: list[PredictionResult],
        run_dir: Path | None = None,
    ) -> None:
        self.classifier = classifier
        self.predictions = predictions
        self.run_dir = run_dir

    @property
    def history(self):
        return self.classifier.history


def persist_training(
    output_root: Path,
    classifier: TrainedClassifier,
    *,
    encoder_model: str,
    dataset_size: int,
) -> Path:
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S-%f")
    run_dir = ensure_run_dir(output_root, timestamp)
    manifest = TrainingManifest(
        timestamp=timestamp,
        encoder_model=encoder_model,
        config=classifier.config,
        dataset_size=dataset_size,
        train_count=classifier.train_count,
        validation_count=classifier.validation_count,
        final_epoch=classifier.history[-1] if classifier.history else None,
    )
    write_manifest(run_dir, manifest)
    write_history(run_dir, classifier.history)
    save_classifier(run_dir, classifier, encoder_model)
    logger.info("Saved run artifacts -> %s", run_dir)
    return run_dir


def print_tweet(text: str) -> None:
    get_console().print(f'Tweet: "{text}"', markup=False, highlight=False)


def print_result(result: PredictionResult) -> None:
    get_console().print("Result:", JSON.from_data(result.report()))


def analyze_samples(
    classifier: TrainedClassifier,
    embedder: Embedder,
    samples: Sequence[str],
    *,
    run_dir: Path | None = None,
) -> list[PredictionResult]:
    logger.info("Analyzing text samples...")
    results: list[PredictionResult] = []
    for text in samples:
        print_tweet(text)
        result = predict(classifier, embedder, text)
        print_result(result)
        results.append(result)
    if run_dir is not None and results:
        append_predictions(run_dir, results)
    return results


def run_demo(
    *,
    records: Sequence[LabeledText],
    embedder: Embedder,
    samples: Sequence[str],
    config: TrainingConfig | None = None,
    encoder_model: str = "",
    output_root: Path | None = None,
    on_epoch_end: EpochCallback | None = log_epoch,
) -> RunOutput:
    classifier = train_model(records, embedder, config, on_epoch_end=on_epoch_end)
    logger.info("Training complete!")
    run_dir = None
    if output_root is not None:
        run_dir = persist_training(
            output_root,
            classifier,
            encoder_model=encoder_model,
            dataset_size=len(records),
        )
    predictions = analyze_samples(classifier, embedder, samples, run_dir=run_dir)
    return RunOutput(classifier=classifier, predictions=predictions, run_dir=run_dir)
