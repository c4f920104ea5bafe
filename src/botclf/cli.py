"""CLI layer (run/train/predict/eval)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.json import JSON

from botclf.domain.models import TrainingConfig
from botclf.infrastructure.artifacts import append_predictions, load_classifier
from botclf.infrastructure.dataset_loader import load_dataset
from botclf.infrastructure.encoder import Embedder, SentenceEncoder
from botclf.infrastructure.logging import enable_json_logging, get_console, log_run_start, render_panel
from botclf.pipelines.evaluate_run import app as eval_app
from botclf.runtime import AppContext, bootstrap
from botclf.services.runner import analyze_samples, persist_training, run_demo
from botclf.services.training import train_model

app = typer.Typer(help="Bot / not-a-bot text classifier on sentence embeddings")
app.add_typer(eval_app, name="eval")

logger = logging.getLogger("botclf.cli")


@app.callback()
def init(
    config: Annotated[
        Path | None, typer.Option(help="YAML config (defaults to $BOTCLF_CONFIG)")
    ] = None,
    json_logs: Annotated[bool, typer.Option("--json-logs", help="Emit JSON log lines")] = False,
) -> None:
    """Bootstrap environment (dotenv + config + logging) before any command."""
    bootstrap(force=True, config_path=config)
    if json_logs:
        enable_json_logging()


def _encoder_factory(model_name: str) -> Embedder:
    return SentenceEncoder.load(model_name)


def _training_config(overrides: dict[str, Any]) -> TrainingConfig:
    base = AppContext.get().config.training.model_dump()
    base.update({k: v for k, v in overrides.items() if v is not None})
    return TrainingConfig.model_validate(base)


def _fail(exc: Exception) -> typer.Exit:
    logger.error("Run aborted: %s", exc, exc_info=exc)
    return typer.Exit(code=1)


EncoderOpt = Annotated[str | None, typer.Option(help="Sentence-Transformers model name")]
DatasetOpt = Annotated[Path | None, typer.Option(help="Training dataset (.json / .jsonl)")]
EpochsOpt = Annotated[int | None, typer.Option(help="Training epochs")]
BatchOpt = Annotated[int | None, typer.Option(help="Mini-batch size")]
LrOpt = Annotated[float | None, typer.Option(help="Adam learning rate")]
ValSplitOpt = Annotated[float | None, typer.Option(help="Trailing fraction held out for validation")]
SeedOpt = Annotated[int | None, typer.Option(help="Random seed")]


@app.command("run")
def run_cmd(
    dataset: DatasetOpt = None,
    encoder: EncoderOpt = None,
    epochs: EpochsOpt = None,
    batch_size: BatchOpt = None,
    learning_rate: LrOpt = None,
    validation_split: ValSplitOpt = None,
    seed: SeedOpt = None,
    text: Annotated[
        list[str] | None, typer.Option("--text", help="Sample text to score (repeatable)")
    ] = None,
    output_dir: Annotated[
        Path | None, typer.Option(help="Persist run artifacts under this directory")
    ] = None,
    json_out: Annotated[bool, typer.Option("--json", help="Emit predictions JSON at the end")] = False,
) -> None:
    """Train on the dataset, then score the sample texts."""
    cfg = AppContext.get().config
    try:
        training = _training_config(
            {
                "epochs": epochs,
                "batch_size": batch_size,
                "learning_rate": learning_rate,
                "validation_split": validation_split,
                "seed": seed,
            }
        )
        dataset_path = dataset or cfg.dataset_path
        records = load_dataset(dataset_path)
        encoder_model = encoder or cfg.encoder_model
        log_run_start(encoder_model=encoder_model, dataset=str(dataset_path), records=len(records))
        embedder = _encoder_factory(encoder_model)
        out = run_demo(
            records=records,
            embedder=embedder,
            samples=text or cfg.samples,
            config=training,
            encoder_model=encoder_model,
            output_root=output_dir or cfg.output_root,
        )
    except Exception as exc:
        raise _fail(exc) from exc
    if json_out:
        get_console().print(JSON.from_data([p.model_dump() for p in out.predictions]))
    if out.run_dir is not None:
        render_panel("artifacts", f"Run Dir: {out.run_dir}", style="blue")


@app.command("train")
def train_cmd(
    dataset: DatasetOpt = None,
    encoder: EncoderOpt = None,
    epochs: EpochsOpt = None,
    batch_size: BatchOpt = None,
    learning_rate: LrOpt = None,
    validation_split: ValSplitOpt = None,
    seed: SeedOpt = None,
    output_dir: Annotated[Path, typer.Option(help="Run artifacts root")] = Path("output"),
) -> None:
    """Train and persist the classifier without scoring samples."""
    cfg = AppContext.get().config
    try:
        training = _training_config(
            {
                "epochs": epochs,
                "batch_size": batch_size,
                "learning_rate": learning_rate,
                "validation_split": validation_split,
                "seed": seed,
            }
        )
        dataset_path = dataset or cfg.dataset_path
        records = load_dataset(dataset_path)
        encoder_model = encoder or cfg.encoder_model
        log_run_start(encoder_model=encoder_model, dataset=str(dataset_path), records=len(records))
        classifier = train_model(records, _encoder_factory(encoder_model), training)
        logger.info("Training complete!")
        run_dir = persist_training(
            output_dir, classifier, encoder_model=encoder_model, dataset_size=len(records)
        )
    except Exception as exc:
        raise _fail(exc) from exc
    last = classifier.history[-1]
    info = [
        f"epochs: {len(classifier.history)}",
        f"train/val rows: {classifier.train_count}/{classifier.validation_count}",
        f"final {last.describe()}",
        f"Run Dir: {run_dir}",
    ]
    if last.val_accuracy is not None:
        info.insert(3, f"val_loss = {last.val_loss:.4f}, val_accuracy = {last.val_accuracy:.4f}")
    render_panel("train summary", "\n".join(info), style="green")


@app.command("predict")
def predict_cmd(
    run_dir: Path,
    texts: list[str],
    json_out: Annotated[bool, typer.Option("--json", help="Emit predictions JSON")] = False,
    save: Annotated[bool, typer.Option(help="Append results to predictions.jsonl")] = False,
) -> None:
    """Score texts with a classifier persisted by `train` or `run --output-dir`."""
    try:
        classifier, encoder_model = load_classifier(run_dir)
        embedder = _encoder_factory(encoder_model)
        results = analyze_samples(classifier, embedder, texts, run_dir=run_dir if save else None)
    except Exception as exc:
        raise _fail(exc) from exc
    if json_out:
        get_console().print(JSON.from_data([r.model_dump() for r in results]))


if __name__ == "__main__":  # pragma: no cover
    app()
