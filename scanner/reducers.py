"""Discovery of reducer definitions and their saga modules."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Pattern

from graph.model import ReducerDefinition, sort_reducers
from .discovery import iter_files
from .tokenizer import REDUCER_NAME_MARKER, SAGA_FILE_MARKER, summarize


logger = logging.getLogger(__name__)


def read_source(file_path: Path) -> str:
    """Read a scanned file as text; undecodable bytes never stop a scan."""
    return file_path.read_text(encoding="utf-8", errors="replace")


def find_saga_filenames(
    root: Path,
    base: Optional[Path] = None,
    ignore_pattern: Optional[Pattern[str]] = None,
) -> Dict[str, str]:
    """
    Map reducer names to the filename of the saga module that declares them.

    A saga module declares its reducer with ``PRM_SAGA_FILE_FOR_REDUCER``.
    When several files claim the same reducer, the last one in scan order
    wins.
    """
    saga_filenames: Dict[str, str] = {}
    for file_path in iter_files(root, base=base, ignore_pattern=ignore_pattern):
        reducer_name = summarize(read_source(file_path)).constants.get(SAGA_FILE_MARKER)
        if reducer_name is not None:
            saga_filenames[reducer_name] = file_path.name
    return saga_filenames


def find_reducer_definitions(
    root: Path,
    base: Optional[Path] = None,
    ignore_pattern: Optional[Pattern[str]] = None,
    saga_filename: Optional[str] = None,
) -> List[ReducerDefinition]:
    """
    Find every reducer definition under a root directory.

    Args:
        root: Folder to scan recursively.
        base: Directory that ``ignore_pattern`` paths are relative to.
        ignore_pattern: Paths to skip.
        saga_filename: Fixed saga filename next to every reducer. None means
                       pre-scan for saga markers; an empty string disables
                       sagas altogether.

    Returns:
        Definitions in scan order, one per ``PRM_REDUCER_NAME`` file.
    """
    saga_filenames: Dict[str, str] = {}
    if saga_filename is None:
        saga_filenames = find_saga_filenames(root, base=base, ignore_pattern=ignore_pattern)

    reducers: List[ReducerDefinition] = []
    for file_path in iter_files(root, base=base, ignore_pattern=ignore_pattern):
        reducer_name = summarize(read_source(file_path)).constants.get(REDUCER_NAME_MARKER)
        if reducer_name is None:
            continue

        saga_path = None
        saga_name = saga_filename or saga_filenames.get(reducer_name)
        if saga_name:
            candidate = file_path.parent / saga_name
            if candidate.is_file():
                saga_path = candidate

        reducers.append(ReducerDefinition(
            name=reducer_name,
            definition_path=file_path,
            saga_path=saga_path,
        ))

    return reducers


def build_registry(
    roots: Iterable[Path],
    base: Optional[Path] = None,
    ignore_pattern: Optional[Pattern[str]] = None,
    saga_filename: Optional[str] = None,
) -> List[ReducerDefinition]:
    """
    Collect reducers from several roots into one registry sorted by name.

    The first definition found for a name wins: earlier roots take
    precedence over later ones.
    """
    registry: Dict[str, ReducerDefinition] = {}
    for root in roots:
        logger.info("Finding reducers in %s ...", root)
        for reducer in find_reducer_definitions(
            root,
            base=base,
            ignore_pattern=ignore_pattern,
            saga_filename=saga_filename,
        ):
            if reducer.name in registry:
                logger.debug(
                    "duplicate reducer %s in %s, keeping %s",
                    reducer.name, reducer.definition_path, registry[reducer.name].definition_path,
                )
                continue
            registry[reducer.name] = reducer
    return sort_reducers(registry.values())
