"""Stress level estimation from free text.

Ties the TF-IDF vectorizer and the logistic regression together and owns
their lifecycle:

- restore a persisted model, or cold-start from a built-in synthetic corpus;
- collect labeled samples and retrain once enough have accumulated;
- score text on a 0-100 scale without ever raising to the caller.

Example::

    store = ModelStore(DirectoryStore("~/.stress_text"))
    classifier = StressTextClassifier(store)
    classifier.initialize()

    classifier.predict("Deadlines everywhere, I can't sleep")   # e.g. 58
    classifier.add_training_data("Quiet weekend at the lake", 10)
"""

from __future__ import annotations

import math
import threading
import uuid
from typing import Optional

from loguru import logger

from .models import MAX_STRESS_LEVEL, TrainingReport, TrainingSample
from .regression import LogisticRegression
from .storage import ModelStore
from .vectorizer import TfidfVectorizer

DEFAULT_SCORE = 50
MIN_TRAINING_SAMPLES = 5
RETRAIN_THRESHOLD = 10

# (text, stress level): three high, three medium, three low
SYNTHETIC_CORPUS: tuple[tuple[str, int], ...] = (
    ("I'm feeling overwhelmed anxious stressed can't cope", 85),
    ("Everything is too much pressure deadline worry panic", 90),
    ("Nervous tension headache exhausted burnout tired", 80),
    ("Feeling okay decent manageable normal routine", 40),
    ("Little stressed but handling it fine working through", 50),
    ("Some pressure but under control stable balanced", 45),
    ("Calm relaxed peaceful content happy energized", 10),
    ("Great day wonderful motivated focused productive", 15),
    ("Feeling good positive balanced clear minded", 20),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class StressTextClassifier:
    """TF-IDF + logistic regression stress classifier with persistence.

    The classifier starts *not ready*; :meth:`initialize` (or a successful
    :meth:`train`) makes it *ready*. While not ready, :meth:`predict`
    returns ``default_score``.

    Args:
        store: Model store used for model state and the sample log.
        max_features: Vocabulary size bound for the vectorizer.
        min_training_samples: Smallest dataset :meth:`train` accepts.
        retrain_threshold: Sample log size at which
            :meth:`add_training_data` retrains automatically.
        default_score: Score returned when no prediction can be made.
    """

    def __init__(
        self,
        store: ModelStore,
        max_features: int = 100,
        min_training_samples: int = MIN_TRAINING_SAMPLES,
        retrain_threshold: int = RETRAIN_THRESHOLD,
        default_score: int = DEFAULT_SCORE,
    ) -> None:
        self.store = store
        self.max_features = max_features
        self.min_training_samples = min_training_samples
        self.retrain_threshold = retrain_threshold
        self.default_score = default_score

        # Replaced as a unit so readers never see a half-trained pair
        self._model: Optional[tuple[TfidfVectorizer, LogisticRegression]] = None
        self._lock = threading.RLock()

    @property
    def is_ready(self) -> bool:
        """Whether a trained model is available for prediction."""
        return self._model is not None

    @property
    def vocabulary_size(self) -> int:
        model = self._model
        return model[0].size if model else 0

    @property
    def sample_count(self) -> int:
        """Number of samples in the persisted training log."""
        return len(self.store.load_samples())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load the persisted model, or seed one from synthetic data.

        Safe to call more than once; a ready classifier is left as is.
        """
        with self._lock:
            if self.is_ready:
                return

            vectorizer = TfidfVectorizer(max_features=self.max_features)
            regression = LogisticRegression()
            vec_loaded = vectorizer.load(self.store)
            reg_loaded = regression.load(self.store)

            consistent = (
                regression.n_features == vectorizer.size and self.store.fit_ids_match()
            )
            if vec_loaded and reg_loaded and consistent:
                self._model = (vectorizer, regression)
                logger.info(
                    "Text classifier loaded from storage ({} features)", vectorizer.size
                )
                return

            if vec_loaded and reg_loaded:
                logger.warning(
                    "Stored model is inconsistent ({} weights for {} terms, "
                    "same training run: {}); reseeding",
                    regression.n_features, vectorizer.size, self.store.fit_ids_match(),
                )
            self.seed_with_synthetic_data()

    def seed_with_synthetic_data(self) -> None:
        """Replace the sample log with the built-in corpus and train on it."""
        samples = [TrainingSample(text, level) for text, level in SYNTHETIC_CORPUS]
        with self._lock:
            self.store.save_samples(samples)
            self.train(samples)
        logger.info("Text classifier seeded with synthetic data")

    def train(self, data: list[TrainingSample]) -> bool:
        """Retrain from scratch on ``data`` and persist the result.

        Args:
            data: Labeled samples; the whole set is used.

        Returns:
            ``True`` if a model was trained, ``False`` if ``data`` has fewer
            than ``min_training_samples`` entries (nothing changes).
        """
        if len(data) < self.min_training_samples:
            logger.warning(
                "Not enough data to train text classifier: {} samples (need {})",
                len(data), self.min_training_samples,
            )
            return False

        texts = [sample.text for sample in data]
        labels = [sample.label for sample in data]

        with self._lock:
            vectorizer = TfidfVectorizer(max_features=self.max_features)
            vectors = vectorizer.fit_transform(texts)
            regression = LogisticRegression().fit(vectors, labels)

            fit_id = uuid.uuid4().hex
            vectorizer.save(self.store, fit_id)
            regression.save(self.store, fit_id)
            self._model = (vectorizer, regression)

        logger.info(
            "Text classifier trained on {} samples ({} features)",
            len(data), vectorizer.size,
        )
        return True

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def predict(self, text: str) -> int:
        """Estimate the stress level of ``text``.

        Returns:
            Integer in ``[0, 100]``; ``default_score`` when the classifier
            is not ready or anything goes wrong.
        """
        model = self._model
        if model is None:
            logger.warning("Classifier not ready, returning default score")
            return self.default_score

        vectorizer, regression = model
        try:
            probability = regression.predict_proba(vectorizer.transform(text))
            return _round_half_up(probability * MAX_STRESS_LEVEL)
        except Exception:
            logger.exception("Prediction failed, returning default score")
            return self.default_score

    def most_informative_terms(self, top_n: int = 10) -> list[tuple[str, float]]:
        """Vocabulary terms with their learned weights, most stress-raising first."""
        model = self._model
        if model is None:
            return []

        vectorizer, regression = model
        terms = sorted(vectorizer.vocabulary_, key=vectorizer.vocabulary_.get)
        ranked = sorted(
            zip(terms, regression.weights_), key=lambda x: x[1], reverse=True
        )
        return [(term, round(weight, 6)) for term, weight in ranked[:top_n]]

    # ------------------------------------------------------------------
    # Training data
    # ------------------------------------------------------------------

    def add_training_data(self, text: str, stress_level: int) -> bool:
        """Record a labeled sample, retraining once the log is large enough.

        Retraining always covers the entire accumulated log.

        Returns:
            Whether the classifier was retrained.

        Raises:
            ValueError: If ``text`` is empty or ``stress_level`` is not an
                integer in ``[0, 100]``.
        """
        sample = TrainingSample(text, stress_level)
        with self._lock:
            samples = self.store.append_sample(sample)
            if len(samples) >= self.retrain_threshold:
                return self.train(samples)
        return False

    def retrain_from_log(self) -> TrainingReport:
        """Retrain on the persisted log, falling back to synthetic data."""
        with self._lock:
            samples = self.store.load_samples()
            if len(samples) < self.min_training_samples:
                self.seed_with_synthetic_data()
                return TrainingReport(
                    success=True,
                    message=(
                        "Trained on synthetic stress patterns "
                        "(add more real data for personalization)"
                    ),
                    data_points=len(SYNTHETIC_CORPUS),
                )

            trained = self.train(samples)
        return TrainingReport(
            success=trained,
            message="Trained on recorded samples" if trained else "Training failed",
            data_points=len(samples),
        )
