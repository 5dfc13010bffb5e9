"""
Tests for corpus loading.
"""
import json
import logging

import pytest

from markov_service.services.corpus import (
    CorpusFormatError,
    add_records,
    build_model,
    file_type,
    iter_message_records,
    iter_text_records,
    load_file,
    to_words,
)
from markov_service.services.markov import ChainModel, MarkovError


class TestHelpers:
    """Test suite for tokenizing and file type detection."""

    def test_to_words_splits_whitespace(self):
        """Test any whitespace run separates tokens."""
        assert to_words("  the cat\tsat \n on ") == ["the", "cat", "sat", "on"]

    def test_to_words_empty(self):
        """Test blank text has no tokens."""
        assert to_words("   ") == []

    @pytest.mark.parametrize("name,expected", [
        ("corpus.txt", "txt"),
        ("result.json", "json"),
        ("archive.tar.gz", "gz"),
        ("README", ""),
        ("data.v2/notes", ""),
    ])
    def test_file_type(self, name, expected):
        """Test extension after the last dot."""
        assert file_type(name) == expected


class TestReaders:
    """Test suite for record readers."""

    def test_text_records(self, corpus_path, sample_corpus):
        """Test one record per line."""
        records = list(iter_text_records(corpus_path))

        assert records[0] == sample_corpus[0]
        assert "" in records
        assert len(records) == len(sample_corpus) + 2

    def test_message_records(self, chat_export_path):
        """Test only string text fields are records."""
        records = list(iter_message_records(chat_export_path))

        assert records == [
            "the stars are bright over the hills tonight",
            "short one",
            "",
            "we should build a telescope next summer",
        ]

    def test_message_records_bad_json(self, tmp_path):
        """Test unparsable JSON raises CorpusFormatError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CorpusFormatError):
            list(iter_message_records(path))

    def test_message_records_missing_messages(self, tmp_path):
        """Test unexpected shape raises CorpusFormatError."""
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"items": []}), encoding="utf-8")

        with pytest.raises(CorpusFormatError):
            list(iter_message_records(path))

    def test_text_records_invalid_utf8(self, tmp_path):
        """Test undecodable text file raises CorpusFormatError."""
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"one two three four five\ncaf\xe9 au lait is very good\n")

        with pytest.raises(CorpusFormatError):
            list(iter_text_records(path))

    def test_message_records_invalid_utf8(self, tmp_path):
        """Test undecodable JSON export raises CorpusFormatError."""
        path = tmp_path / "chat.json"
        path.write_bytes(b'{"messages": [{"text": "caf\xe9 au lait is very good"}]}')

        with pytest.raises(CorpusFormatError):
            list(iter_message_records(path))

    def test_corpus_format_error_hierarchy(self):
        """Test error is both a MarkovError and a ValueError."""
        assert issubclass(CorpusFormatError, MarkovError)
        assert issubclass(CorpusFormatError, ValueError)


class TestLoading:
    """Test suite for loading records into a model."""

    def test_add_records_filters_short(self):
        """Test records under min_tokens never reach the model."""
        model = ChainModel()

        added = add_records(model, ["one two three four five", "one two", ""], min_tokens=5)

        assert added == 1
        assert model.chain_count == 1
        assert len(model) == 5

    def test_add_records_min_tokens_one(self):
        """Test every non-empty record counts with min_tokens=1."""
        model = ChainModel()

        added = add_records(model, ["solo", "", "a b"], min_tokens=1)

        assert added == 2

    def test_load_text_file(self, corpus_path, sample_corpus):
        """Test text file loads each long line."""
        model = ChainModel()

        added = load_file(model, corpus_path)

        assert added == len(sample_corpus)
        assert model.get("short") is None

    def test_load_json_file(self, chat_export_path):
        """Test JSON export loads long string messages."""
        model = ChainModel()

        added = load_file(model, chat_export_path)

        assert added == 2
        assert "telescope" in model
        assert "entities" not in model

    def test_load_unknown_type_skips(self, tmp_path, caplog):
        """Test unknown extension is skipped with a warning."""
        path = tmp_path / "notes.md"
        path.write_text("one two three four five six\n", encoding="utf-8")
        model = ChainModel()

        with caplog.at_level(logging.WARNING):
            added = load_file(model, path)

        assert added == 0
        assert len(model) == 0
        assert "Unknown" in caplog.text

    def test_load_missing_file_raises(self, tmp_path):
        """Test unreadable file propagates OSError."""
        with pytest.raises(OSError):
            load_file(ChainModel(), tmp_path / "missing.txt")

    def test_load_error_leaves_model_untouched(self, tmp_path):
        """Test a file that fails mid-read adds no chains."""
        path = tmp_path / "mixed.txt"
        path.write_bytes(b"one two three four five\n" * 3000 + b"caf\xe9 au lait is very good\n")
        model = ChainModel()

        with pytest.raises(CorpusFormatError):
            load_file(model, path)

        assert len(model) == 0
        assert model.chain_count == 0

    def test_build_model(self, corpus_path, chat_export_path, sample_corpus):
        """Test building from several files."""
        model = build_model([corpus_path, chat_export_path])

        assert model.chain_count == len(sample_corpus) + 2

    def test_generated_text_comes_from_corpus(self, corpus_path, sample_corpus):
        """Test disjoint lines regenerate exactly."""
        model = build_model([corpus_path])

        for _ in range(20):
            assert " ".join(model.generate()) in sample_corpus
