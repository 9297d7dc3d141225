"""Tests for TF-IDF vectorization."""

from __future__ import annotations

import math

import pytest

from stress_text.classifier import SYNTHETIC_CORPUS
from stress_text.storage import MemoryStore, ModelStore, VECTORIZER_KEY
from stress_text.vectorizer import TfidfVectorizer


@pytest.fixture
def corpus() -> list[str]:
    return [text for text, _ in SYNTHETIC_CORPUS]


@pytest.fixture
def fitted(corpus) -> TfidfVectorizer:
    return TfidfVectorizer().fit(corpus)


class TestFit:
    def test_vocabulary_bounded_by_max_features(self, corpus):
        vec = TfidfVectorizer(max_features=10).fit(corpus)
        assert vec.size == 10

    def test_indices_are_dense(self, corpus):
        for max_features in (1, 5, 100):
            vec = TfidfVectorizer(max_features=max_features).fit(corpus)
            assert sorted(vec.vocabulary_.values()) == list(range(vec.size))

    def test_ranked_by_global_frequency_then_first_seen(self):
        docs = ["beta alpha", "alpha gamma", "delta delta delta"]
        vec = TfidfVectorizer().fit(docs)
        assert vec.vocabulary_ == {"delta": 0, "alpha": 1, "beta": 2, "gamma": 3}

    def test_underscored_words_count_as_separate_terms(self):
        vec = TfidfVectorizer().fit(["panic_attack tonight", "panic attack"])
        assert vec.vocabulary_ == {"panic": 0, "attack": 1, "tonight": 2}
        assert vec.idf_["panic"] == 0.0

    def test_max_features_keeps_earliest_ties(self):
        docs = ["beta alpha", "alpha gamma"]
        vec = TfidfVectorizer(max_features=2).fit(docs)
        assert vec.vocabulary_ == {"alpha": 0, "beta": 1}

    def test_idf_values(self):
        docs = ["beta alpha", "alpha gamma alpha", "alpha"]
        vec = TfidfVectorizer().fit(docs)
        assert vec.idf_["alpha"] == 0.0
        assert vec.idf_["beta"] == pytest.approx(math.log(3))
        assert vec.idf_["gamma"] == pytest.approx(math.log(3))

    def test_idf_non_negative_with_one_entry_per_term(self, fitted):
        assert fitted.idf_.keys() == fitted.vocabulary_.keys()
        assert all(w >= 0 for w in fitted.idf_.values())

    def test_idf_zero_only_for_terms_in_every_document(self):
        docs = ["calm day", "calm night", "calm morning rain"]
        vec = TfidfVectorizer().fit(docs)
        zero_terms = {t for t, w in vec.idf_.items() if w == 0}
        assert zero_terms == {"calm"}

    def test_refit_replaces_state(self):
        vec = TfidfVectorizer().fit(["panic deadline", "panic worry"])
        vec.fit(["calm relaxed", "calm peaceful"])
        assert "panic" not in vec.vocabulary_
        assert "panic" not in vec.idf_
        assert sorted(vec.vocabulary_.values()) == list(range(vec.size))

    def test_empty_corpus_gives_empty_vocabulary(self):
        vec = TfidfVectorizer().fit(["some words here"])
        vec.fit([])
        assert vec.size == 0
        assert vec.idf_ == {}
        assert vec.transform("some words here") == []

    def test_invalid_max_features(self):
        with pytest.raises(ValueError, match="max_features"):
            TfidfVectorizer(max_features=0)


class TestTransform:
    def test_vector_length_matches_vocabulary(self, fitted):
        assert len(fitted.transform("anything at all")) == fitted.size

    def test_tf_counts_all_tokens(self):
        vec = TfidfVectorizer().fit(["beta alpha", "alpha gamma"])
        vector = vec.transform("beta beta gamma xyz")
        ln2 = math.log(2)
        assert vector == pytest.approx([0.0, 0.5 * ln2, 0.25 * ln2])

    def test_empty_document_is_zero_vector(self, fitted):
        assert fitted.transform("") == [0.0] * fitted.size

    def test_out_of_vocabulary_is_zero_vector(self, fitted):
        assert fitted.transform("zebra xylophone") == [0.0] * fitted.size

    def test_deterministic(self, fitted):
        text = "I'm feeling overwhelmed anxious stressed"
        assert fitted.transform(text) == fitted.transform(text)

    def test_does_not_mutate_state(self, fitted):
        vocabulary = dict(fitted.vocabulary_)
        idf = dict(fitted.idf_)
        fitted.transform("brand new unseen words")
        assert fitted.vocabulary_ == vocabulary
        assert fitted.idf_ == idf

    def test_fit_transform_equals_fit_then_transform(self, corpus):
        combined = TfidfVectorizer().fit_transform(corpus)
        vec = TfidfVectorizer().fit(corpus)
        assert combined == [vec.transform(doc) for doc in corpus]


class TestPersistence:
    def test_to_dict_uses_ordered_pairs(self):
        vec = TfidfVectorizer().fit(["beta alpha", "alpha gamma"])
        data = vec.to_dict()
        assert data["vocabulary"] == [["alpha", 0], ["beta", 1], ["gamma", 2]]
        assert [term for term, _ in data["idf"]] == ["alpha", "beta", "gamma"]

    def test_save_then_load(self, fitted):
        store = ModelStore(MemoryStore())
        fitted.save(store)

        restored = TfidfVectorizer()
        assert restored.load(store) is True
        assert restored.vocabulary_ == fitted.vocabulary_
        assert restored.idf_ == pytest.approx(fitted.idf_)

    def test_load_missing_returns_false(self, fitted):
        vocabulary = dict(fitted.vocabulary_)
        assert fitted.load(ModelStore(MemoryStore())) is False
        assert fitted.vocabulary_ == vocabulary

    def test_load_corrupt_leaves_state(self, fitted):
        backend = MemoryStore()
        backend.put(VECTORIZER_KEY, b"{not json")
        vocabulary = dict(fitted.vocabulary_)
        assert fitted.load(ModelStore(backend)) is False
        assert fitted.vocabulary_ == vocabulary

    @pytest.mark.parametrize("payload", [
        {"vocabulary": [["calm", 0]]},
        {"vocabulary": [["calm", 1]], "idf": [["calm", 0.5]]},
        {"vocabulary": [["calm", 0]], "idf": [["worry", 0.5]]},
        {"vocabulary": [["calm", "0"]], "idf": [["calm", 0.5]]},
        {"vocabulary": "calm", "idf": []},
    ])
    def test_from_dict_rejects_malformed(self, payload):
        with pytest.raises(ValueError):
            TfidfVectorizer.from_dict(payload)

    def test_from_dict_roundtrip(self, fitted):
        restored = TfidfVectorizer.from_dict(fitted.to_dict())
        text = "pressure deadline worry"
        assert restored.transform(text) == pytest.approx(fitted.transform(text))
