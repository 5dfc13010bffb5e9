"""
Corpus loading for the chain model.

Supported inputs:
- `.txt`: one record per line
- `.json`: chat export with a top-level `messages` array; each message's
  `text` field is one record (non-string `text` values are skipped)

Each record is split on whitespace and becomes one chain.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from .markov import ChainModel, MarkovError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class CorpusFormatError(MarkovError, ValueError):
    """Raised when a corpus file does not have the expected shape."""


def to_words(text: str) -> List[str]:
    return text.split()


def file_type(file_name: PathLike) -> str:
    """Extension after the last dot, or "" when there is none."""
    name = Path(file_name).name
    dot = name.rfind(".")
    if dot == -1:
        return ""
    return name[dot + 1:]


def iter_text_records(path: PathLike) -> Iterator[str]:
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            for line in f:
                yield line.rstrip("\n")
    except UnicodeDecodeError as e:
        raise CorpusFormatError(f"{path}: not valid UTF-8: {e}") from e


def iter_message_records(path: PathLike) -> Iterator[str]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorpusFormatError(f"{path}: parsing failed: {e}") from e

    if not isinstance(raw, dict) or not isinstance(raw.get("messages"), list):
        raise CorpusFormatError(f"{path}: expected an object with a 'messages' array")

    for message in raw["messages"]:
        if not isinstance(message, dict):
            continue
        text = message.get("text")
        # Rich-text messages store a list of entities here
        if isinstance(text, str):
            yield text


READERS = {
    "txt": iter_text_records,
    "json": iter_message_records,
}


def add_records(model: ChainModel, records: Iterable[str], min_tokens: int = 5) -> int:
    """
    Tokenize records and ingest the ones with at least `min_tokens` words.

    Returns:
        Number of chains added
    """
    added = 0
    for text in records:
        if not text:
            continue
        words = to_words(text)
        if len(words) >= min_tokens and model.add_chain(words):
            added += 1
    return added


def load_file(model: ChainModel, path: PathLike, min_tokens: int = 5) -> int:
    """
    Load one corpus file into `model`, choosing the reader by extension.

    Unknown extensions are skipped with a warning. The whole file is read
    before anything is ingested, so a reader error leaves `model` untouched.

    Returns:
        Number of chains added
    """
    ft = file_type(path)
    reader = READERS.get(ft)
    logger.info(f'[Corpus] Parsing file "{path}"')

    if reader is None:
        logger.warning(f'[Corpus] Unknown "{ft}" file type, skipping {path}')
        return 0

    records = list(reader(path))
    added = add_records(model, records, min_tokens=min_tokens)
    logger.info(f"[Corpus] {path}: {added} chains")
    return added


def build_model(paths: Iterable[PathLike], min_tokens: int = 5) -> ChainModel:
    model = ChainModel()
    for path in paths:
        load_file(model, path, min_tokens=min_tokens)
    return model
