"""Domain models (Pydantic) defining stable contracts for training & prediction runs."""
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Label = Literal[0, 1]
PredictionLabel = Literal["Bot", "Not a bot"]

NOT_BOT_DETAIL = "Probability user is not a bot"
BOT_DETAIL = "Probability user is a bot"


# -------------------- Dataset -------------------- #


class LabeledText(BaseModel):
    """One training pair: 0 = not a bot, 1 = bot."""

    input: str
    output: Label

    @field_validator("input")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("input text must not be empty")
        return v


# -------------------- Training Configuration -------------------- #


class TrainingConfig(BaseModel):
    """Network shape & fit parameters.

    Defaults reproduce the reference setup: 512-d sentence embeddings, a
    128/64 dense stack with 0.2 dropout, Adam at 1e-3, 50 epochs of batch 12
    with the trailing 20% of rows held out for validation.
    """

    embedding_dim: int = Field(512, gt=0)
    num_classes: int = Field(2, ge=2, le=2)
    hidden_units: int = Field(128, gt=0)
    dropout: float = Field(0.2, ge=0.0, lt=1.0)
    second_hidden_units: int = Field(64, gt=0)
    learning_rate: float = Field(0.001, gt=0.0)
    epochs: int = Field(50, gt=0)
    batch_size: int = Field(12, gt=0)
    validation_split: float = Field(0.2, ge=0.0, lt=1.0)
    shuffle: bool = True
    seed: int | None = None


# -------------------- Training Artifacts -------------------- #


class EpochLog(BaseModel):
    """Metrics reported at the end of one epoch (1-based)."""

    epoch: int
    loss: float
    accuracy: float
    val_loss: float | None = None
    val_accuracy: float | None = None

    def describe(self) -> str:
        return f"Epoch {self.epoch}: loss = {self.loss:.4f}, accuracy = {self.accuracy:.4f}"


class TrainingManifest(BaseModel):
    """High-level metadata about a training run (no weights)."""

    timestamp: str
    encoder_model: str
    config: TrainingConfig
    dataset_size: int
    train_count: int
    validation_count: int
    final_epoch: EpochLog | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# -------------------- Prediction -------------------- #


class PredictionResult(BaseModel):
    """Outcome of scoring a single text."""

    text: str
    prediction: PredictionLabel
    confidence: float
    details: dict[str, str]
    raw_output: dict[str, float]

    @property
    def is_bot(self) -> bool:
        return self.prediction == "Bot"

    def report(self) -> dict[str, Any]:
        """Console view: label, formatted confidence & per-class details."""
        return {
            "Prediction": self.prediction,
            "Confidence": f"{self.confidence:.2f}%",
            "Details": dict(self.details),
        }


__all__ = [
    "BOT_DETAIL",
    "EpochLog",
    "Label",
    "LabeledText",
    "NOT_BOT_DETAIL",
    "PredictionLabel",
    "PredictionResult",
    "TrainingConfig",
    "TrainingManifest",
]
