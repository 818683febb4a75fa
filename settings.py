"""Option merging, side-car config loading and validation."""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Tuple

import yaml

from errors import (
    ConfigurationError,
    ERROR_BAD_REGEXP,
    ERROR_INVALID_CONFIG_FILE,
    ERROR_NOT_EXECUTED_IN_NODE_PATH,
    ERROR_REQUIRED_PARAM_NOT_SPECIFIED,
)


PROJECT_MARKER = "package.json"

# Looked up in the project root, first match wins
CONFIG_FILENAMES = ("redux-mapper.json", "redux-mapper.yaml", "redux-mapper.yml")

REQUIRED_OPTIONS = (
    "mainAppPath",
    "basePath",
    "containerPaths",
    "globalReducersOutputPath",
    "reducerMapOutputPath",
    "reduxPaths",
)

OPTION_NAMES = REQUIRED_OPTIONS + (
    "actionFilenames",
    "disableCache",
    "ignorePaths",
    "sagaFilename",
    "verboseLogging",
)


@dataclass(frozen=True)
class MapperSettings:
    """Fully resolved options for one run. All paths are absolute."""

    project_root: Path
    base_path: Path
    main_app_path: Path
    container_paths: Tuple[Path, ...]
    redux_paths: Tuple[Path, ...]
    global_reducers_output_path: Path
    reducer_map_output_path: Path
    action_filenames: Optional[Tuple[str, ...]] = None
    ignore_pattern: Optional[Pattern[str]] = None
    saga_filename: Optional[str] = None
    disable_cache: bool = False
    verbose_logging: bool = False


def find_project_root(start: Path) -> Path:
    """
    Find the nearest directory at or above ``start`` holding ``package.json``.

    Raises:
        ConfigurationError: If no ancestor carries the marker file.
    """
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / PROJECT_MARKER).is_file():
            return candidate
    raise ConfigurationError(ERROR_NOT_EXECUTED_IN_NODE_PATH)


def find_config_file(project_root: Path) -> Optional[Path]:
    for filename in CONFIG_FILENAMES:
        candidate = project_root / filename
        if candidate.is_file():
            return candidate
    return None


def load_config_file(config_path: Optional[Path]) -> Dict[str, Any]:
    """
    Load the ``config`` mapping of a side-car file.

    JSON files go through ``json``; YAML files through ``yaml.safe_load``.

    Args:
        config_path: The side-car file, or None when there is none.

    Returns:
        Option name to value. Empty when there is no file or no ``config`` key.

    Raises:
        ConfigurationError: If the file cannot be parsed or has the wrong shape.
    """
    if config_path is None:
        return {}

    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(ERROR_INVALID_CONFIG_FILE, f"{config_path.name} ({e})")

    try:
        if config_path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(ERROR_INVALID_CONFIG_FILE, f"{config_path.name} ({e})")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(ERROR_INVALID_CONFIG_FILE, config_path.name)

    options = data.get("config", {})
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise ConfigurationError(ERROR_INVALID_CONFIG_FILE, config_path.name)
    return {key: value for key, value in options.items() if key in OPTION_NAMES}


def merge_options(cli_options: Dict[str, Any], file_options: Dict[str, Any]) -> Dict[str, Any]:
    """Fill every option left unset on the command line from the config file."""
    merged = dict(cli_options)
    for name, value in file_options.items():
        if merged.get(name) is None:
            merged[name] = value
    return merged


def split_list(value: Any) -> List[str]:
    """Split a comma list (or a list from the config file) into clean items."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = str(value).split(",")
    return [item.strip() for item in items if item.strip()]


def compile_ignore_pattern(pattern: Optional[str]) -> Optional[Pattern[str]]:
    """
    Compile the ``ignorePaths`` regular expression.

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(ERROR_BAD_REGEXP, f"{pattern} ({e})")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def build_settings(options: Dict[str, Any], project_root: Path) -> MapperSettings:
    """
    Validate merged options and resolve them against the project root.

    ``basePath`` is relative to the project root; every other path option is
    relative to ``basePath``.

    Raises:
        ConfigurationError: If a required option is missing or the ignore
            pattern is invalid.
    """
    for name in REQUIRED_OPTIONS:
        value = options.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(
                ERROR_REQUIRED_PARAM_NOT_SPECIFIED,
                f"-{name}",
                [f"Specify a value for argument -{name} either on the command line "
                 f"or in {CONFIG_FILENAMES[0]}"],
            )

    ignore_pattern = compile_ignore_pattern(options.get("ignorePaths"))

    base_path = (project_root / str(options["basePath"]).strip()).resolve()

    def under_base(sub_path: str) -> Path:
        return (base_path / sub_path.strip().lstrip("/\\")).resolve()

    action_filenames = split_list(options.get("actionFilenames"))
    saga_filename = options.get("sagaFilename")

    return MapperSettings(
        project_root=project_root,
        base_path=base_path,
        main_app_path=under_base(str(options["mainAppPath"])),
        container_paths=tuple(under_base(p) for p in split_list(options["containerPaths"])),
        redux_paths=tuple(under_base(p) for p in split_list(options["reduxPaths"])),
        global_reducers_output_path=under_base(str(options["globalReducersOutputPath"])),
        reducer_map_output_path=under_base(str(options["reducerMapOutputPath"])),
        action_filenames=tuple(action_filenames) or None,
        ignore_pattern=ignore_pattern,
        saga_filename=None if saga_filename is None else str(saga_filename).strip(),
        disable_cache=_as_bool(options.get("disableCache")),
        verbose_logging=_as_bool(options.get("verboseLogging")),
    )
