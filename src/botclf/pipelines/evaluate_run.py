from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any

import orjson
import typer
from rich.table import Table

from botclf.infrastructure.artifacts import PREDICTIONS_FILE, read_jsonl
from botclf.infrastructure.logging import get_console

app = typer.Typer(
    help="Summarize the predictions of a run directory (predictions.jsonl -> evaluation.json)"
)


def summarize_predictions(rows: list[dict[str, Any]]) -> dict[str, Any]:
    total = len(rows)
    labels: Counter[str] = Counter()
    confidences: list[float] = []
    for row in rows:
        labels[row.get("prediction", "unknown")] += 1
        conf = row.get("confidence")
        if isinstance(conf, (int, float)):
            confidences.append(float(conf))
    return {
        "total": total,
        "label_counts": dict(sorted(labels.items())),
        "bot_rate": (labels["Bot"] / total) if total else 0.0,
        "mean_confidence": (sum(confidences) / len(confidences)) if confidences else None,
        "min_confidence": min(confidences) if confidences else None,
    }


@app.command()
def run(run_dir: Path) -> None:
    if not run_dir.exists():
        raise typer.BadParameter(f"Run directory not found: {run_dir}")
    metrics = summarize_predictions(read_jsonl(run_dir / PREDICTIONS_FILE))

    # Write dedicated evaluation artifact (non-destructive)
    (run_dir / "evaluation.json").write_bytes(orjson.dumps(metrics, option=orjson.OPT_INDENT_2))

    table = Table(title="Run Evaluation")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("total", str(metrics["total"]))
    for label, count in metrics["label_counts"].items():
        table.add_row(f"label:{label}", str(count))
    table.add_row("bot_rate", f"{metrics['bot_rate']:.2%}")
    if metrics["mean_confidence"] is not None:
        table.add_row("mean_confidence", f"{metrics['mean_confidence']:.2f}%")
        table.add_row("min_confidence", f"{metrics['min_confidence']:.2f}%")
    get_console().print(table)


if __name__ == "__main__":  # pragma: no cover
    app()
