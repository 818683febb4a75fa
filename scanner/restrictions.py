"""Restriction filtering for imports that pass through aggregator (index) files."""

from pathlib import Path
from typing import FrozenSet, Optional, Tuple

from .resolver import ModuleResolver
from .tokenizer import ReferenceToken


Restriction = Optional[FrozenSet[str]]


def incoming_restriction(file_path: Path, restriction: Restriction, resolver: ModuleResolver) -> Restriction:
    """
    Restriction that applies to the references inside ``file_path``.

    Only aggregator files narrow their traversal: when ``import { a } from
    './dir'`` lands on ``dir/index.js``, only the parts of the index that
    provide ``a`` are followed. Any other file is traversed in full.
    """
    if restriction is None or not resolver.is_aggregator(file_path):
        return None
    return restriction


def restriction_signature(restriction: Restriction) -> Optional[Tuple[str, ...]]:
    """Hashable, order-independent form of a restriction for cache keys."""
    if restriction is None:
        return None
    return tuple(sorted(restriction))


def should_traverse(reference: ReferenceToken, restrict_imports: Restriction) -> bool:
    """
    Decide whether a reference inside an aggregator should be followed.

    An unrestricted aggregator follows everything. References that forward
    every name (``export *``, require) are always followed. Anything else is
    followed only if one of the names it binds was asked for.
    """
    if restrict_imports is None:
        return True
    if reference.bindings is None:
        return True
    return not reference.bindings.isdisjoint(restrict_imports)
