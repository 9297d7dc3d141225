"""Stress Text Classifier -- on-device stress estimation from free text."""

__version__ = "0.1.0"

from .classifier import (
    DEFAULT_SCORE,
    SYNTHETIC_CORPUS,
    StressTextClassifier,
)
from .config import Settings, load_settings
from .models import TrainingReport, TrainingSample, TrainingStep
from .regression import LogisticRegression, sigmoid
from .storage import DirectoryStore, KeyValueStore, MemoryStore, ModelStore
from .tokenizer import tokenize
from .vectorizer import TfidfVectorizer

__all__ = [
    # Core
    "StressTextClassifier",
    "DEFAULT_SCORE",
    "SYNTHETIC_CORPUS",
    # Models
    "TrainingSample",
    "TrainingStep",
    "TrainingReport",
    # Features and regression
    "tokenize",
    "TfidfVectorizer",
    "LogisticRegression",
    "sigmoid",
    # Persistence
    "KeyValueStore",
    "MemoryStore",
    "DirectoryStore",
    "ModelStore",
    # Configuration
    "Settings",
    "load_settings",
]
