"""Runtime context & bootstrap utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from botclf.domain.models import TrainingConfig
from botclf.infrastructure.encoder import DEFAULT_ENCODER
from botclf.infrastructure.logging import setup_logging

DEFAULT_CONFIG_PATH = Path("src/configs/default.yaml")
DEFAULT_DATASET = "src/datasets/tweets.jsonl"

DEFAULT_SAMPLES = [
    "Peace it middle money must off enough great mind house machine.",
    "Less choose coach with community catch.",
    "Tree community work leave many piece eight fear.",
    "Cold now after answer serious kid list late instead.",
]


@dataclass(slots=True)
class RuntimeConfig:
    raw: dict[str, Any]
    path: Path

    @property
    def encoder_model(self) -> str:
        return os.getenv("BOTCLF_ENCODER") or self.raw.get("encoder_model", DEFAULT_ENCODER)

    @property
    def dataset_path(self) -> Path:
        return Path(self.raw.get("dataset", DEFAULT_DATASET))

    @property
    def output_root(self) -> Path | None:
        value = self.raw.get("output_root")
        return Path(value) if value else None

    @property
    def samples(self) -> list[str]:
        return list(self.raw.get("samples") or DEFAULT_SAMPLES)

    @property
    def training(self) -> TrainingConfig:
        return TrainingConfig.model_validate(self.raw.get("training") or {})


class AppContext:
    _instance: AppContext | None = None

    def __init__(self, config: RuntimeConfig):
        self.config = config

    @classmethod
    def init(cls, config: RuntimeConfig) -> AppContext:
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def get(cls) -> AppContext:
        if cls._instance is None:
            raise RuntimeError("AppContext not initialized")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def load_config(path: Path) -> RuntimeConfig:
    if not path.exists():
        return RuntimeConfig(raw={}, path=path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return RuntimeConfig(raw=data, path=path)


def bootstrap(force: bool = False, config_path: Path | None = None) -> AppContext:
    if not force:
        try:
            return AppContext.get()
        except RuntimeError:
            pass
    else:
        AppContext.reset()
    load_dotenv(override=False)
    setup_logging()
    cfg_path = config_path or Path(os.getenv("BOTCLF_CONFIG", str(DEFAULT_CONFIG_PATH)))
    config = load_config(cfg_path)
    return AppContext.init(config)
