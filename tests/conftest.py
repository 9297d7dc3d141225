"""Shared test fixtures for stress-text-classifier tests."""

from __future__ import annotations

import pytest
from loguru import logger

from stress_text.classifier import StressTextClassifier
from stress_text.models import TrainingSample
from stress_text.storage import MemoryStore, ModelStore


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def log_messages() -> list[str]:
    """Captured loguru messages as ``"LEVEL message"`` strings."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda msg: messages.append(f"{msg.record['level'].name} {msg.record['message']}"),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def model_store(memory_store: MemoryStore) -> ModelStore:
    return ModelStore(memory_store)


@pytest.fixture
def classifier(model_store: ModelStore) -> StressTextClassifier:
    """A classifier that has not been initialized."""
    return StressTextClassifier(model_store)


@pytest.fixture
def seeded_classifier(classifier: StressTextClassifier) -> StressTextClassifier:
    """A classifier cold-started from the synthetic corpus."""
    classifier.initialize()
    return classifier


@pytest.fixture
def high_stress_samples() -> list[TrainingSample]:
    return [
        TrainingSample("Deadline panic tonight, boss yelling, total panic", 90),
        TrainingSample("Panic attack before exam, heart racing", 95),
        TrainingSample("Cannot sleep, panic about rent and bills", 85),
    ]


@pytest.fixture
def low_stress_samples() -> list[TrainingSample]:
    return [
        TrainingSample("Lazy sunday morning reading in the garden", 10),
        TrainingSample("Walked the dog along the beach, sunny and calm", 5),
        TrainingSample("Yoga session then tea with friends", 15),
    ]
