#!/usr/bin/env python3
"""
Build a Markov chain from corpus files and print generated sentences.

Usage:
    markov-chain corpus.txt chat.json --count 10
    markov-chain corpus.txt --output graph.dot --max-steps 200

The model graph is written to markov.dot (or --output) before generation
starts. Without --count the command prints forever; stop it with Ctrl-C.
"""

import argparse
import itertools
import random
import sys
from pathlib import Path
from typing import List, Optional

from markov_service.config import settings, max_steps_or_none
from markov_service.services.corpus import load_file
from markov_service.services.markov import ChainModel, WeightedSampler
from markov_service.utils.logger import setup_logger

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markov-chain",
        description="Build a Markov chain from .txt/.json files and generate text.",
    )
    parser.add_argument("files", nargs="*", help="Corpus files (.txt lines or .json message logs)")
    parser.add_argument("--output", type=Path, default=Path(settings.DOT_OUTPUT_PATH),
                        help="Where to write the Graphviz DOT export")
    parser.add_argument("--count", type=int, default=None,
                        help="Number of sentences to print (default: forever)")
    parser.add_argument("--min-tokens", type=int, default=settings.MIN_CHAIN_TOKENS,
                        help="Skip records with fewer words")
    parser.add_argument("--max-steps", type=int, default=settings.GENERATE_MAX_STEPS,
                        help="Cap on tokens per sentence (0 = no cap)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # Service modules log through plain child loggers of the package
    setup_logger("markov_service", propagate=True)

    if not args.files:
        print("USAGE: markov-chain file_names")
        return 1

    sampler = WeightedSampler(random.Random(args.seed)) if args.seed is not None else None
    model = ChainModel(sampler=sampler)
    for file_name in args.files:
        load_file(model, file_name, min_tokens=args.min_tokens)

    args.output.write_text(model.export(), encoding="utf-8")
    stats = model.get_stats()
    logger.info(f"[Markov] {stats.node_count} nodes, {stats.edge_count} edges -> {args.output}")

    if not model.start_edges:
        logger.error("[Markov] No chains were loaded, nothing to generate")
        return 1

    max_steps = max_steps_or_none(args.max_steps)
    rounds = itertools.count() if args.count is None else range(args.count)
    try:
        for _ in rounds:
            print(" ".join(str(t) for t in model.generate(max_steps=max_steps)))
            print(settings.OUTPUT_SEPARATOR)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
