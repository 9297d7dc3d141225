"""Binary logistic regression trained by full-batch gradient descent.

Labels are probabilities in ``[0, 1]`` (stress level / 100), so the model
is fit on soft targets with the usual cross-entropy gradient. Every call to
:meth:`LogisticRegression.fit` starts from zero weights; there is no warm
start, early stopping, regularization or learning-rate schedule.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from loguru import logger

from .models import TrainingStep

if TYPE_CHECKING:
    from .storage import ModelStore

LOG_EVERY = 100


def sigmoid(z: float) -> float:
    """Numerically stable logistic function."""
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


def _dot(weights: list[float], x: list[float]) -> float:
    return sum(w * v for w, v in zip(weights, x))


@dataclass
class LogisticRegression:
    """Logistic regression over dense feature vectors.

    Args:
        learning_rate: Gradient descent step size.
        iterations: Number of full passes over the training set.
    """

    learning_rate: float = 0.01
    iterations: int = 1000

    # Learned parameters
    weights_: list[float] = field(default_factory=list, repr=False)
    bias_: float = 0.0
    history_: list[TrainingStep] = field(default_factory=list, repr=False)

    @property
    def n_features(self) -> int:
        return len(self.weights_)

    def fit(self, X: list[list[float]], y: list[float]) -> "LogisticRegression":
        """Train on feature vectors and soft labels.

        Args:
            X: Feature vectors, all of the same length.
            y: Target probabilities, one per vector.

        Returns:
            Self (for method chaining).

        Raises:
            ValueError: If ``X`` is empty, ``X`` and ``y`` differ in length,
                or the vectors in ``X`` differ in length.
        """
        if len(X) != len(y):
            raise ValueError(f"X ({len(X)}) and y ({len(y)}) must have same length")
        if not X:
            raise ValueError("Cannot fit on an empty training set")

        n_samples = len(X)
        n_features = len(X[0])
        for i, row in enumerate(X):
            if len(row) != n_features:
                raise ValueError(
                    f"Shape mismatch: row {i} has {len(row)} features, expected {n_features}"
                )

        self.weights_ = [0.0] * n_features
        self.bias_ = 0.0
        self.history_ = []

        logger.info(
            "Logistic regression training started: {} samples, {} features, "
            "{} iterations, learning rate {}",
            n_samples, n_features, self.iterations, self.learning_rate,
        )

        for iteration in range(self.iterations):
            predictions = [sigmoid(self.bias_ + _dot(self.weights_, x)) for x in X]

            dw = [0.0] * n_features
            db = 0.0
            for x, pred, target in zip(X, predictions, y):
                error = pred - target
                db += error
                for j in range(n_features):
                    dw[j] += error * x[j]

            step = self.learning_rate / n_samples
            for j in range(n_features):
                self.weights_[j] -= step * dw[j]
            self.bias_ -= step * db

            if iteration % LOG_EVERY == 0 or iteration == self.iterations - 1:
                record = TrainingStep(
                    iteration=iteration,
                    accuracy=_accuracy(predictions, y),
                    loss=_mse(predictions, y),
                )
                self.history_.append(record)
                logger.debug(
                    "Iter {:04d}/{} accuracy={:.2%} loss={:.6f}",
                    iteration, self.iterations, record.accuracy, record.loss,
                )

        final = [self.predict_proba(x) for x in X]
        logger.info(
            "Logistic regression training complete: accuracy={:.2%} loss={:.6f}",
            _accuracy(final, y), _mse(final, y),
        )
        return self

    def predict(self, x: list[float]) -> float:
        """Raw linear score ``bias + weights . x``.

        Raises:
            ValueError: If ``x`` does not match the number of weights.
        """
        if len(x) != len(self.weights_):
            raise ValueError(
                f"Shape mismatch: got {len(x)} features, model has {len(self.weights_)}"
            )
        return self.bias_ + _dot(self.weights_, x)

    def predict_proba(self, x: list[float]) -> float:
        """Probability of the positive (stressed) class."""
        return sigmoid(self.predict(x))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {"weights": list(self.weights_), "bias": self.bias_}

    @classmethod
    def from_dict(cls, data: dict) -> "LogisticRegression":
        """Deserialize learned parameters.

        Raises:
            ValueError: If the payload is structurally invalid.
        """
        weights, bias = _parse_state(data)
        model = cls()
        model.weights_ = weights
        model.bias_ = bias
        return model

    def save(self, store: "ModelStore", fit_id: Optional[str] = None) -> None:
        store.save_classifier(self.to_dict(), fit_id)

    def load(self, store: "ModelStore") -> bool:
        """Restore parameters; ``False`` leaves the current ones untouched."""
        data = store.load_classifier()
        if data is None:
            return False

        try:
            weights, bias = _parse_state(data)
        except ValueError as e:
            logger.warning("Failed to load logistic regression model: {}", e)
            return False

        self.weights_ = weights
        self.bias_ = bias
        return True


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_state(data: dict) -> tuple[list[float], float]:
    try:
        weights = data["weights"]
        bias = data["bias"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"missing classifier field: {e}") from e

    if not isinstance(weights, list) or not all(_is_number(w) for w in weights):
        raise ValueError("weights must be a list of numbers")
    if not _is_number(bias):
        raise ValueError("bias must be a number")
    return [float(w) for w in weights], float(bias)


def _accuracy(predictions: list[float], y: list[float]) -> float:
    correct = sum(1 for p, t in zip(predictions, y) if (p > 0.5) == (t > 0.5))
    return correct / len(y)


def _mse(predictions: list[float], y: list[float]) -> float:
    return sum((p - t) ** 2 for p, t in zip(predictions, y)) / len(y)
