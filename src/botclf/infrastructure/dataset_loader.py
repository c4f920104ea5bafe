"""Dataset loading (JSON / JSONL) into validated training pairs."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from botclf.domain.models import LabeledText


def _read_rows(path: Path) -> list[dict[str, Any]]:
    if path.suffix == ".jsonl":
        out: list[dict[str, Any]] = []
        with path.open("rb") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                out.append(orjson.loads(line))
        return out
    if path.suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, list):
            return list(data)
        if isinstance(data, dict):
            return [data]
        raise ValueError("JSON dataset must be object or list")
    raise ValueError("Dataset must be .json or .jsonl")


def load_dataset(path: str | Path) -> list[LabeledText]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Dataset not found: {p}")
    records: list[LabeledText] = []
    for idx, row in enumerate(_read_rows(p)):
        try:
            records.append(LabeledText.model_validate(row))
        except ValidationError as exc:
            raise ValueError(f"Invalid dataset row {idx} in {p}: {exc}") from exc
    if not records:
        raise ValueError(f"Dataset is empty: {p}")
    return records
