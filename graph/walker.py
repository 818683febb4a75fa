"""Recursive import-graph walker that finds the reducers a file depends on."""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

from scanner.resolver import ModuleResolver
from scanner.restrictions import (
    Restriction,
    incoming_restriction,
    restriction_signature,
    should_traverse,
)
from scanner.tokenizer import ACTION_FILE_MARKER, summarize
from .model import CacheKey, ReducerDefinition, ScanState, TraversalContext, UsageResult


logger = logging.getLogger(__name__)

Stack = Tuple[Path, ...]


class UsageGraphWalker:
    """
    Walk the import/require graph from an entry file and collect reducer usage.

    A file uses a reducer when it is one of the reducer's core files: with
    ``action_filenames`` configured, any listed file directly inside the
    reducer's folder; otherwise any file whose action marker names the
    reducer. Usage propagates up through every importing file.

    Each (file, restriction) node is read at most once per scan, and at most
    once per phase while caching is on. Files that import each other in a
    circle are finished together and share one result, so a back-edge adds
    nothing that its target does not already contribute.

    The walker holds only static configuration. Per-phase state (the cache,
    the excluded global reducers and the counters) lives in the
    TraversalContext passed to ``scan``.
    """

    def __init__(
        self,
        reducers: Iterable[ReducerDefinition],
        base_path: Path,
        resolver: Optional[ModuleResolver] = None,
        action_filenames: Optional[Sequence[str]] = None,
    ):
        self.reducers = list(reducers)
        self.base_path = base_path
        self.resolver = resolver or ModuleResolver()
        self.action_filenames = frozenset(action_filenames) if action_filenames else None

    def scan(
        self,
        file: Path,
        context: TraversalContext,
        stack: Stack = (),
        restriction: Restriction = None,
    ) -> UsageResult:
        """
        Find every reducer reachable from ``file``.

        Args:
            file: Module path to start from; resolved like an import target.
            context: Cache, exclusions and counters for the current phase.
            stack: Files treated as already being visited. References into
                   them are cycles and contribute nothing.
            restriction: Names the referencing edge destructured, if any.

        Returns:
            Reducer name to definition. Empty when ``file`` does not resolve.
        """
        resolved = self.resolver.resolve(file)
        if resolved is None:
            logger.debug("%sunresolved: %s", _indent(len(stack)), file)
            return {}
        if resolved in stack:
            return {}

        state = ScanState(results=context.results_for(stack), blocked=frozenset(stack))
        key, restrict_imports = self._node(resolved, restriction)
        if key in state.results:
            return dict(state.results[key])
        return dict(self._visit(key, restrict_imports, context, state, len(stack)))

    def is_core_file(self, file_path: Path, action_owner: Optional[str], reducer: ReducerDefinition) -> bool:
        """
        Check whether a file belongs to a reducer's public surface.

        ``action_owner`` is the value of the file's action marker, if any.
        """
        if self.action_filenames is not None:
            return file_path.parent == reducer.directory and file_path.name in self.action_filenames
        return action_owner == reducer.name

    def _node(self, file_path: Path, restriction: Restriction) -> Tuple[CacheKey, Restriction]:
        restrict_imports = incoming_restriction(file_path, restriction, self.resolver)
        return (file_path, restriction_signature(restrict_imports)), restrict_imports

    def _visit(
        self,
        key: CacheKey,
        restrict_imports: Restriction,
        context: TraversalContext,
        state: ScanState,
        depth: int,
    ) -> UsageResult:
        file_path = key[0]
        indent = _indent(depth)
        state.open(key)

        logger.debug("%sscanning: %s", indent, file_path)

        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("%sno such file: %s", indent, file_path)
            return state.close(key, {})

        context.files_scanned += 1

        source = summarize(content)
        local = self._local_usage(file_path, source.constants.get(ACTION_FILE_MARKER), context, indent)

        discovered: Dict[str, ReducerDefinition] = {}

        for reference in source.references:
            if not should_traverse(reference, restrict_imports):
                logger.debug("%s  ignoring import not in module list: %s", indent, ", ".join(reference.specifiers))
                continue

            for specifier in reference.specifiers:
                for target in self.resolver.resolve_specifier(file_path, specifier, self.base_path):
                    if target in state.blocked:
                        logger.debug("%s  cycle back to: %s", indent, target)
                        continue

                    child, child_restriction = self._node(target, reference.restriction)
                    if child in state.results:
                        discovered.update(state.results[child])
                    elif state.is_open(child):
                        logger.debug("%s  cycle back to: %s", indent, target)
                        state.link(key, state.order[child])
                    else:
                        discovered.update(self._visit(child, child_restriction, context, state, depth + 1))
                        state.link(key, state.low[child])

        discovered.update(local)
        return state.close(key, discovered)

    def _local_usage(
        self,
        file_path: Path,
        action_owner: Optional[str],
        context: TraversalContext,
        indent: str,
    ) -> UsageResult:
        used: UsageResult = {}
        for reducer in self.reducers:
            if reducer.name in context.excluded:
                continue
            if self.is_core_file(file_path, action_owner, reducer):
                logger.debug("%s  found reducer usage: %s", indent, reducer.name)
                used[reducer.name] = reducer
                context.usages_found += 1
        return used


def _indent(depth: int) -> str:
    return " " * (depth * 3)
