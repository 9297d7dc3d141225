"""Persistence boundary for model state and the training sample log.

The classifier never touches files or databases directly. It talks to a
:class:`ModelStore`, which in turn wraps any object implementing the
:class:`KeyValueStore` protocol (``get``/``put`` over bytes). Two stores ship
with the package:

- :class:`MemoryStore` keeps records in a dict (tests, ephemeral sessions).
- :class:`DirectoryStore` writes one JSON file per key under a directory.

Every record is a JSON object carrying a ``version`` field. Records that
cannot be decoded, or whose version does not match
:data:`SCHEMA_VERSION`, are reported as absent rather than raising.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from .models import TrainingSample

SCHEMA_VERSION = 1

VECTORIZER_KEY = "stress_text_tfidf_model"
CLASSIFIER_KEY = VECTORIZER_KEY + "_lr"
SAMPLES_KEY = "stress_text_training_data"
SAMPLES_BACKUP_KEY = SAMPLES_KEY + "_unreadable"

_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(Protocol):
    """Minimal byte store the model state is persisted to."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def put(self, key: str, value: bytes) -> None:
        ...


class MemoryStore:
    """Dict-backed key-value store."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class DirectoryStore:
    """Key-value store that keeps each key in ``<directory>/<key>.json``.

    Args:
        directory: Target directory; created on first write.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def put(self, key: str, value: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Readers only ever see complete records.
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(value)
        tmp.replace(path)


class ModelStore:
    """Scoped save/load of the vectorizer, classifier and sample log records.

    Args:
        backend: Any :class:`KeyValueStore` implementation.
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    # ------------------------------------------------------------------
    # Generic record helpers
    # ------------------------------------------------------------------

    def _get(self, key: str) -> Optional[bytes]:
        try:
            return self.backend.get(key)
        except OSError as e:
            logger.warning("Cannot read record {!r}: {}", key, e)
            return None

    def _write(self, key: str, payload: dict, fit_id: Optional[str] = None) -> None:
        record = {"version": SCHEMA_VERSION, **payload}
        if fit_id is not None:
            record["fit_id"] = fit_id
        self.backend.put(key, json.dumps(record).encode("utf-8"))

    def _read(self, key: str) -> Optional[dict]:
        raw = self._get(key)
        if raw is None:
            return None

        try:
            record = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Discarding unreadable record {!r}: {}", key, e)
            return None

        if not isinstance(record, dict):
            logger.warning("Discarding record {!r}: expected a JSON object", key)
            return None

        version = record.pop("version", None)
        if version != SCHEMA_VERSION:
            logger.warning(
                "Discarding record {!r}: schema version {!r} (expected {})",
                key, version, SCHEMA_VERSION,
            )
            return None
        return record

    # ------------------------------------------------------------------
    # Model records
    # ------------------------------------------------------------------

    def save_vectorizer(self, payload: dict, fit_id: Optional[str] = None) -> None:
        self._write(VECTORIZER_KEY, payload, fit_id)

    def load_vectorizer(self) -> Optional[dict]:
        return self._read(VECTORIZER_KEY)

    def save_classifier(self, payload: dict, fit_id: Optional[str] = None) -> None:
        self._write(CLASSIFIER_KEY, payload, fit_id)

    def load_classifier(self) -> Optional[dict]:
        return self._read(CLASSIFIER_KEY)

    def fit_ids_match(self) -> bool:
        """Whether both model records were written by the same training run."""
        vectorizer = self._read(VECTORIZER_KEY) or {}
        classifier = self._read(CLASSIFIER_KEY) or {}
        fit_id = vectorizer.get("fit_id")
        return fit_id is not None and fit_id == classifier.get("fit_id")

    # ------------------------------------------------------------------
    # Training sample log
    # ------------------------------------------------------------------

    def save_samples(self, samples: list[TrainingSample]) -> None:
        self._write(SAMPLES_KEY, {"samples": [s.to_dict() for s in samples]})

    def _log_entries(self) -> Optional[list]:
        """Raw entries of the training log, or ``None`` if it is absent or unusable."""
        record = self._read(SAMPLES_KEY)
        if record is None:
            return None

        entries = record.get("samples")
        if not isinstance(entries, list):
            logger.warning("Discarding training log: 'samples' is not a list")
            return None
        return entries

    def load_samples(self) -> list[TrainingSample]:
        """Load the training log, skipping entries that fail validation.

        Returns:
            Samples in insertion order; empty if the log is absent or
            unreadable.
        """
        return _parse_samples(self._log_entries() or [])

    def append_sample(self, sample: TrainingSample) -> list[TrainingSample]:
        """Append one sample to the persisted log.

        Stored entries are kept verbatim, including ones that fail
        validation. A log that cannot be used at all is copied to
        :data:`SAMPLES_BACKUP_KEY` before a new one is started.

        Returns:
            The valid samples of the updated log, in insertion order.
        """
        entries = self._log_entries()
        if entries is None:
            raw = self._get(SAMPLES_KEY)
            if raw is not None:
                logger.warning(
                    "Moving unusable training log to {!r}", SAMPLES_BACKUP_KEY
                )
                self.backend.put(SAMPLES_BACKUP_KEY, raw)
            entries = []

        entries.append(sample.to_dict())
        self._write(SAMPLES_KEY, {"samples": entries})
        return _parse_samples(entries)


def _parse_samples(entries: list) -> list[TrainingSample]:
    samples: list[TrainingSample] = []
    for position, entry in enumerate(entries):
        try:
            samples.append(TrainingSample.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed training sample #{}: {}", position, e)
    return samples
