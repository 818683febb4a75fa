"""Reducer map builder that orchestrates discovery and usage scanning."""

import logging
from pathlib import Path
from typing import Dict

from errors import (
    DiscoveryError,
    ERROR_NO_MAIN_APP_FILE_FOUND,
    ERROR_NO_REDUCER_REFERENCES_FOUND,
    ERROR_NO_REDUCERS_FOUND,
)
from graph.model import ContainerUsage, ReducerMap, TraversalContext, sort_reducers
from graph.walker import UsageGraphWalker
from settings import MapperSettings
from .discovery import get_display_path, is_container_candidate, iter_files
from .reducers import build_registry
from .resolver import ModuleResolver


logger = logging.getLogger(__name__)


def scan_container_folder(
    walker: UsageGraphWalker,
    folder: Path,
    context: TraversalContext,
    settings: MapperSettings,
) -> Dict[str, ContainerUsage]:
    """
    Scan every route module under a container folder.

    Each file is an independent top-level scan with an empty stack; the
    context (and its cache) is shared across files.
    """
    containers: Dict[str, ContainerUsage] = {}
    for file_path in iter_files(folder, base=settings.base_path, ignore_pattern=settings.ignore_pattern):
        if not is_container_candidate(file_path):
            continue
        key = get_display_path(file_path, settings.base_path)
        usage = walker.scan(file_path, context)
        containers[key] = ContainerUsage(
            key=key,
            path=file_path,
            reducers=tuple(sort_reducers(usage.values())),
        )
        logger.debug("%s uses: %s", key, ", ".join(containers[key].reducer_names) or "(none)")
    return containers


def build_reducer_map(settings: MapperSettings) -> ReducerMap:
    """
    Find all reducers, then which ones the app and each container use.

    Args:
        settings: Resolved options for this run.

    Returns:
        ReducerMap with the global reducers and per-container usage.

    Raises:
        DiscoveryError: If no reducers exist, the main app file is missing,
            or no file uses any reducer.
        OSError: If reading a source file fails for any reason other than
            the file not existing.
    """
    reducers = build_registry(
        settings.redux_paths,
        base=settings.base_path,
        ignore_pattern=settings.ignore_pattern,
        saga_filename=settings.saga_filename,
    )
    logger.debug("reducers found: %s", ", ".join(reducer.name for reducer in reducers))
    if not reducers:
        raise DiscoveryError(ERROR_NO_REDUCERS_FOUND)

    if not settings.main_app_path.is_file():
        raise DiscoveryError(ERROR_NO_MAIN_APP_FILE_FOUND, str(settings.main_app_path))

    walker = UsageGraphWalker(
        reducers,
        base_path=settings.base_path,
        resolver=ModuleResolver(),
        action_filenames=settings.action_filenames,
    )

    logger.info("Finding global reducers in %s ...", settings.main_app_path)
    global_context = TraversalContext(cache_enabled=not settings.disable_cache)
    global_reducers = sort_reducers(walker.scan(settings.main_app_path, global_context).values())
    logger.debug("global reducers: %s", ", ".join(reducer.name for reducer in global_reducers))

    # Cached results from the global phase still contain the global reducers
    container_context = TraversalContext(
        excluded=frozenset(reducer.name for reducer in global_reducers),
        cache_enabled=not settings.disable_cache,
    )
    containers: Dict[str, ContainerUsage] = {}
    for folder in settings.container_paths:
        logger.info("Scanning reducer usage in %s ...", folder)
        containers.update(scan_container_folder(walker, folder, container_context, settings))

    usages_found = global_context.usages_found + container_context.usages_found
    if not usages_found:
        raise DiscoveryError(ERROR_NO_REDUCER_REFERENCES_FOUND)

    return ReducerMap(
        reducers=reducers,
        global_reducers=global_reducers,
        containers=containers,
        files_scanned=global_context.files_scanned + container_context.files_scanned,
        usages_found=usages_found,
    )
