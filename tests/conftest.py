"""
Shared pytest fixtures for Markov chain tests.
"""
import json
import random
from pathlib import Path
from typing import Dict, List

import pytest

from markov_service.services.markov import END, START, ChainModel, WeightedSampler


# Chat export in the shape of a messenger JSON dump
SAMPLE_CHAT_EXPORT = {
    "name": "Space Club",
    "type": "private_group",
    "messages": [
        {"id": 1, "type": "message", "text": "the stars are bright over the hills tonight"},
        {"id": 2, "type": "message", "text": "short one"},
        {"id": 3, "type": "message", "text": [
            {"type": "bold", "text": "rich"},
            " text entities are skipped entirely",
        ]},
        {"id": 4, "type": "service", "action": "pin_message"},
        {"id": 5, "type": "message", "text": ""},
        {"id": 6, "type": "message", "text": "we should build a telescope next summer"},
    ],
}


@pytest.fixture
def sample_corpus() -> List[str]:
    """Lines with no shared words, so every chain is its own path."""
    return [
        "hello friend how are you",
        "the universe is full of wonders",
        "safety and discipline matter very much",
    ]


@pytest.fixture
def sample_chains() -> List[List[str]]:
    return [
        ["a", "b", "c"],
        ["d", "e"],
        ["f"],
    ]


@pytest.fixture
def seeded_sampler() -> WeightedSampler:
    return WeightedSampler(random.Random(1234))


@pytest.fixture
def model(seeded_sampler) -> ChainModel:
    return ChainModel(sampler=seeded_sampler)


@pytest.fixture
def corpus_path(sample_corpus, tmp_path) -> Path:
    """Plain-text corpus with a too-short line and a blank line mixed in."""
    file_path = tmp_path / "corpus.txt"
    lines = sample_corpus[:1] + ["too short to count", ""] + sample_corpus[1:]
    file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return file_path


@pytest.fixture
def chat_export_path(tmp_path) -> Path:
    file_path = tmp_path / "result.json"
    file_path.write_text(json.dumps(SAMPLE_CHAT_EXPORT), encoding="utf-8")
    return file_path


# Helper functions for tests


def counts_by_value(model: ChainModel) -> Dict[tuple, int]:
    """Every edge count keyed by (source value, destination value)."""
    def name(endpoint):
        if endpoint is START or endpoint is END:
            return endpoint
        return model.node(endpoint).value

    counts = {(START, name(dest)): c for dest, c in model.start_edges.items()}
    for node in model.nodes:
        for dest, c in node.edges.items():
            counts[(node.value, name(dest))] = c
    return counts
