"""Data model for reducer definitions, traversal state and the reducer map."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class ReducerDefinition:
    """A reducer found in the source tree, keyed by its state member name."""

    name: str
    definition_path: Path
    saga_path: Optional[Path] = None

    @property
    def directory(self) -> Path:
        """The folder holding the reducer definition and its action files."""
        return self.definition_path.parent


# reducer name -> definition
UsageResult = Dict[str, ReducerDefinition]

# (resolved file, restriction signature); one traversal node
CacheKey = Tuple[Path, Optional[Tuple[str, ...]]]


def sort_reducers(reducers: Iterable[ReducerDefinition]) -> List[ReducerDefinition]:
    """Order reducers by name so generated output never depends on scan order."""
    return sorted(reducers, key=lambda reducer: reducer.name)


@dataclass
class TraversalContext:
    """
    Mutable state shared by every call of one traversal phase.

    The driver owns one context per phase and passes it down; nothing in here
    is global, so several phases can run in one process.

    ``cache`` only ever holds final results: everything reachable from a
    node, with no part of it cut off by the path that led there.
    """

    excluded: FrozenSet[str] = frozenset()
    cache_enabled: bool = True
    cache: Dict[CacheKey, UsageResult] = field(default_factory=dict)
    files_scanned: int = 0
    usages_found: int = 0

    def results_for(self, stack: Tuple[Path, ...]) -> Dict[CacheKey, UsageResult]:
        """
        Pick the result store for one top-level scan.

        A scan from an empty stack shares the phase cache. A scan with
        caching disabled, or one that starts below files the caller treats
        as ancestors, gets a private store that is dropped when it ends.
        """
        if self.cache_enabled and not stack:
            return self.cache
        return {}


@dataclass
class ScanState:
    """
    Bookkeeping for one top-level scan.

    Nodes are numbered in visiting order. ``low`` tracks the oldest open node
    each one can get back to, so a group of files importing each other in a
    circle is finished all at once, when its first node closes, and every
    member gets the union of the group's findings.

    Attributes:
        results: Finished nodes; the phase cache or a private store.
        blocked: Files the caller treats as ancestors. Edges into them are cut.
        order: Visiting number of every node opened in this scan.
        low: Smallest visiting number reachable through open nodes.
        open_nodes: Nodes opened but not yet finished, oldest first.
        partial: Findings of open nodes so far.
    """

    results: Dict[CacheKey, UsageResult]
    blocked: FrozenSet[Path] = frozenset()
    order: Dict[CacheKey, int] = field(default_factory=dict)
    low: Dict[CacheKey, int] = field(default_factory=dict)
    open_nodes: List[CacheKey] = field(default_factory=list)
    partial: Dict[CacheKey, UsageResult] = field(default_factory=dict)

    def is_open(self, key: CacheKey) -> bool:
        return key in self.order and key not in self.results

    def open(self, key: CacheKey) -> None:
        self.order[key] = self.low[key] = len(self.order)
        self.open_nodes.append(key)

    def link(self, key: CacheKey, reachable: int) -> None:
        """Record that ``key`` can get back to the node numbered ``reachable``."""
        self.low[key] = min(self.low[key], reachable)

    def close(self, key: CacheKey, found: UsageResult) -> UsageResult:
        """
        Finish a node.

        Returns the node's findings so far while it is still part of an
        open circle, or the final result of the whole circle once ``key``
        is its oldest member.
        """
        self.partial[key] = found
        if self.low[key] != self.order[key]:
            return found

        members = []
        while True:
            member = self.open_nodes.pop()
            members.append(member)
            if member == key:
                break

        result: UsageResult = {}
        for member in reversed(members):
            result.update(self.partial.pop(member))
        for member in members:
            self.results[member] = result
        return result


@dataclass(frozen=True)
class ContainerUsage:
    """Reducers a single container file needs beyond the global ones."""

    key: str
    path: Path
    reducers: Tuple[ReducerDefinition, ...]

    @property
    def reducer_names(self) -> List[str]:
        return [reducer.name for reducer in self.reducers]


@dataclass
class ReducerMap:
    """Everything one run found, ready for the exporters."""

    reducers: List[ReducerDefinition]
    global_reducers: List[ReducerDefinition]
    containers: Dict[str, ContainerUsage] = field(default_factory=dict)
    files_scanned: int = 0
    usages_found: int = 0

    def __repr__(self) -> str:
        return (
            f"ReducerMap(reducers={len(self.reducers)}, global={len(self.global_reducers)}, "
            f"containers={len(self.containers)}, usages={self.usages_found})"
        )
