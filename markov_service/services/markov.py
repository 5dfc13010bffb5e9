"""
First-order Markov chain over token sequences.

Each distinct token becomes a node; each ingested chain adds weighted edges
START -> first, token -> next, last -> END. Generation is a weighted random
walk from START until END is drawn. The whole graph exports to Graphviz DOT.

Note: there is no built-in length cap on generation. A model with a strong
cycle (A -> B -> A rarely choosing END) can run for a very long time; pass
`max_steps` when output must be bounded.
"""
from __future__ import annotations

import itertools
import logging
import random
import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)


class Sentinel(Enum):
    """Virtual endpoints of every chain. Never materialized as nodes."""
    START = "start"
    END = "end"


START = Sentinel.START
END = Sentinel.END

# Edge table keys: a node id or one of the sentinels
Endpoint = Union[int, Sentinel]
EdgeTable = Dict[Endpoint, int]


class MarkovError(RuntimeError):
    """Base error for the chain model."""


class EmptyEdgeTableError(MarkovError):
    """Raised when sampling a table with no outgoing edges."""


@dataclass(eq=False)
class Node:
    """One distinct token value and its outgoing transitions."""
    value: Hashable
    id: int
    edges: Counter = field(default_factory=Counter)


@dataclass
class ChainStats:
    """Size summary of a chain model."""
    node_count: int = 0
    edge_count: int = 0
    start_count: int = 0
    chain_count: int = 0
    transition_count: int = 0


class WeightedSampler:
    """
    Picks one destination of an edge table, proportional to its count.

    Stateless apart from the random source. By default every thread gets
    its own `random.Random`, so concurrent generation never shares state.
    """

    _local = threading.local()

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng

    @property
    def rng(self) -> random.Random:
        if self._rng is not None:
            return self._rng
        rng = getattr(self._local, "rng", None)
        if rng is None:
            rng = random.Random()
            self._local.rng = rng
        return rng

    def sample(self, edge_table: EdgeTable) -> Endpoint:
        """
        Draw one destination.

        Args:
            edge_table: Mapping destination -> positive count

        Returns:
            A node id or END

        Raises:
            EmptyEdgeTableError: If the table has no entries
        """
        if not edge_table:
            raise EmptyEdgeTableError("cannot sample from an empty edge table")
        destinations = list(edge_table.keys())
        weights = list(edge_table.values())
        return self.rng.choices(destinations, weights=weights)[0]


class ChainModel:
    """
    Markov chain built from token sequences.

    Nodes live in an arena indexed by id (ids start at 1 for every model);
    `_nodes` maps a token value to its node so each value is stored once.
    """

    def __init__(self, sampler: Optional[WeightedSampler] = None):
        self.sampler = sampler or WeightedSampler()
        self._nodes: Dict[Hashable, Node] = {}
        self._arena: List[Node] = []
        self._ids = itertools.count(1)
        self.start_edges: Counter = Counter()
        self.chain_count = 0

    def __len__(self) -> int:
        return len(self._arena)

    def __contains__(self, value: object) -> bool:
        return value in self._nodes

    # --- node registry ---
    def get_or_create(self, value: Hashable) -> Node:
        node = self._nodes.get(value)
        if node is None:
            node = Node(value=value, id=next(self._ids))
            self._nodes[value] = node
            self._arena.append(node)
        return node

    def get(self, value: Hashable) -> Optional[Node]:
        return self._nodes.get(value)

    def node(self, node_id: int) -> Node:
        """Arena lookup by id."""
        if node_id < 1 or node_id > len(self._arena):
            raise KeyError(node_id)
        return self._arena[node_id - 1]

    @property
    def nodes(self) -> List[Node]:
        """All nodes in creation (id) order."""
        return list(self._arena)

    # --- edges ---
    def edge_table(self, source: Endpoint) -> EdgeTable:
        """Outgoing counts of START or of a node id."""
        if source is START:
            return self.start_edges
        if source is END:
            raise ValueError("END has no outgoing edges")
        return self.node(source).edges

    def connect(self, source: Endpoint, destination: Endpoint):
        """Record one observed transition source -> destination."""
        if source is START and destination is END:
            raise ValueError("a chain cannot go straight from START to END")
        self.edge_table(source)[destination] += 1

    # --- ingestion ---
    def add_chain(self, tokens: Iterable[Hashable]) -> bool:
        """
        Ingest one chain of tokens.

        An empty chain records nothing. Returns True when the chain was
        recorded.
        """
        previous: Endpoint = START
        for token in tokens:
            current = self.get_or_create(token).id
            self.connect(previous, current)
            previous = current

        if previous is START:
            return False

        self.connect(previous, END)
        self.chain_count += 1
        return True

    def add_chains(self, chains: Iterable[Iterable[Hashable]]) -> int:
        """Ingest many chains, returning how many were non-empty."""
        return sum(1 for chain in chains if self.add_chain(chain))

    def merge(self, other: "ChainModel") -> "ChainModel":
        """
        Add every count of `other` into this model.

        Nodes are matched by value; new values get fresh ids here.
        """
        id_map: Dict[Endpoint, Endpoint] = {END: END}
        for node in other._arena:
            id_map[node.id] = self.get_or_create(node.value).id

        for dest, count in other.start_edges.items():
            self.start_edges[id_map[dest]] += count
        for node in other._arena:
            table = self.node(id_map[node.id]).edges
            for dest, count in node.edges.items():
                table[id_map[dest]] += count

        self.chain_count += other.chain_count
        logger.debug(f"[Markov] Merged {len(other)} nodes, {other.chain_count} chains")
        return self

    # --- generation ---
    def iter_generate(self, max_steps: Optional[int] = None) -> Iterator[Hashable]:
        """
        Walk the chain from START, yielding each token as it is drawn.

        Args:
            max_steps: Stop after this many tokens even if END was not drawn.
                None means no limit.
        """
        current = self.sampler.sample(self.start_edges)
        steps = 0
        while current is not END:
            if max_steps is not None and steps >= max_steps:
                logger.warning(f"[Markov] Generation stopped at max_steps={max_steps}")
                return
            node = self.node(current)
            yield node.value
            steps += 1
            current = self.sampler.sample(node.edges)

    def generate(self, max_steps: Optional[int] = None) -> List[Hashable]:
        return list(self.iter_generate(max_steps=max_steps))

    # --- export ---
    def export(self) -> str:
        """Render the whole model as an undirected Graphviz DOT graph."""
        lines = [
            "graph G {",
            "start [shape = Msquare];",
            "end [shape = Msquare];",
        ]
        for node in self._arena:
            lines.append(f'{node.id} [label = "{_dot_escape(node.value)}"];')
        for dest, count in self.start_edges.items():
            lines.append(f'start -- {_dot_id(dest)} [label = "{count}"];')
        for node in self._arena:
            for dest, count in node.edges.items():
                lines.append(f'{node.id} -- {_dot_id(dest)} [label = "{count}"];')
        lines.append("}")
        return "\n".join(lines) + "\n"

    to_dot = export

    def get_stats(self) -> ChainStats:
        edge_count = len(self.start_edges) + sum(len(n.edges) for n in self._arena)
        transitions = sum(self.start_edges.values()) + sum(
            sum(n.edges.values()) for n in self._arena
        )
        return ChainStats(
            node_count=len(self._arena),
            edge_count=edge_count,
            start_count=len(self.start_edges),
            chain_count=self.chain_count,
            transition_count=transitions,
        )


def _dot_id(endpoint: Endpoint) -> str:
    if isinstance(endpoint, Sentinel):
        return endpoint.value
    return str(endpoint)


def _dot_escape(value: Hashable) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def train_from_chains(chains: Iterable[Iterable[Hashable]]) -> ChainModel:
    model = ChainModel()
    model.add_chains(chains)
    return model
