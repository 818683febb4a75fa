"""Scanner module for source discovery, module resolution and reference extraction."""

from .discovery import iter_files
from .tokenizer import tokenize, summarize
from .resolver import ModuleResolver
from .restrictions import should_traverse
from .reducers import build_registry, find_reducer_definitions

__all__ = [
    "iter_files",
    "tokenize",
    "summarize",
    "ModuleResolver",
    "should_traverse",
    "build_registry",
    "find_reducer_definitions",
]
