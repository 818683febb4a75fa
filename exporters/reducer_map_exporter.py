"""Exporter for the reducer map data file read by the runtime loader."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from graph.model import ReducerDefinition, ReducerMap, sort_reducers
from .references import AUTOGENERATED_HEADER, import_function, module_reference


# Wraps values that must be emitted as code instead of JSON strings
_CODE_OPEN = "$$"
_CODE_CLOSE = "$$"


def _code(text: str) -> str:
    return f"{_CODE_OPEN}{text}{_CODE_CLOSE}"


def strip_reducers(reducers: Iterable[ReducerDefinition], output_dir: Path) -> List[Dict[str, Any]]:
    """
    Reduce definitions to what the runtime loader needs.

    Each entry carries the reducer name and a lazy import function, plus a
    lazy saga import function when the reducer has a saga module.
    """
    stripped: List[Dict[str, Any]] = []
    for reducer in sort_reducers(reducers):
        entry: Dict[str, Any] = {
            "reducerName": reducer.name,
            "importFunc": _code(import_function(module_reference(reducer.definition_path, output_dir))),
        }
        if reducer.saga_path is not None:
            entry["sagaImportFunc"] = _code(import_function(module_reference(reducer.saga_path, output_dir)))
        stripped.append(entry)
    return stripped


def to_reducer_map(reducer_map: ReducerMap, output_path: Path, indent: int = 2) -> str:
    """
    Render the reducer map as a CommonJS module.

    Args:
        reducer_map: Result of a mapper run.
        output_path: Where the file will be written; import functions are
                     relative to its folder.
        indent: JSON indentation level.

    Returns:
        JavaScript source text with ``global`` and ``containerSpecific``.
    """
    output_dir = output_path.parent

    container_specific: Dict[str, Any] = {}
    for key in sorted(reducer_map.containers):
        container = reducer_map.containers[key]
        container_specific[key] = {
            "importFunc": _code(import_function(module_reference(container.path, output_dir))),
            "reducers": strip_reducers(container.reducers, output_dir),
        }

    data = {
        "global": strip_reducers(reducer_map.global_reducers, output_dir),
        "containerSpecific": container_specific,
    }

    body = json.dumps(data, indent=indent, ensure_ascii=False)
    body = body.replace(f'"{_CODE_OPEN}', "").replace(f'{_CODE_CLOSE}"', "")

    return f"{AUTOGENERATED_HEADER}module.exports = {body};\n"
