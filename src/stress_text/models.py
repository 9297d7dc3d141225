"""Data models for stress text classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

MIN_STRESS_LEVEL = 0
MAX_STRESS_LEVEL = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TrainingSample:
    """A labeled text sample collected from the user.

    Attributes:
        text: Non-empty raw text.
        stress_level: Human-provided stress level in ``[0, 100]``.
        timestamp: When the sample was recorded (UTC).
    """

    text: str
    stress_level: int
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("Training sample text must be a non-empty string")
        if isinstance(self.stress_level, bool) or not isinstance(self.stress_level, int):
            raise ValueError(
                f"stress_level must be an integer, got {type(self.stress_level).__name__}"
            )
        if not MIN_STRESS_LEVEL <= self.stress_level <= MAX_STRESS_LEVEL:
            raise ValueError(
                f"stress_level must be in [{MIN_STRESS_LEVEL}, {MAX_STRESS_LEVEL}], "
                f"got {self.stress_level}"
            )

    @property
    def label(self) -> float:
        """Stress level normalized to ``[0, 1]``."""
        return self.stress_level / MAX_STRESS_LEVEL

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "stress_level": self.stress_level,
            "timestamp": int(self.timestamp.timestamp() * 1000),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrainingSample":
        """Deserialize a sample; the timestamp is epoch milliseconds."""
        millis = data["timestamp"]
        if isinstance(millis, bool) or not isinstance(millis, (int, float)):
            raise ValueError(f"timestamp must be epoch milliseconds, got {millis!r}")
        return cls(
            text=data["text"],
            stress_level=data["stress_level"],
            timestamp=datetime.fromtimestamp(millis / 1000, tz=timezone.utc),
        )


@dataclass(frozen=True)
class TrainingStep:
    """Progress snapshot recorded during gradient descent."""

    iteration: int
    accuracy: float
    loss: float

    def to_dict(self) -> dict:
        return {
            "iteration": self.iteration,
            "accuracy": round(self.accuracy, 4),
            "loss": round(self.loss, 6),
        }


@dataclass
class TrainingReport:
    """Outcome of retraining the classifier from the persisted sample log."""

    success: bool
    message: str
    data_points: int

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "data_points": self.data_points,
        }
