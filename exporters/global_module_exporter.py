"""Exporter for the module that registers every global reducer up front."""

from pathlib import Path
from typing import Iterable

from graph.model import ReducerDefinition, sort_reducers
from .references import AUTOGENERATED_HEADER, module_reference


def to_global_module(global_reducers: Iterable[ReducerDefinition], output_path: Path) -> str:
    """
    Render the global reducers module.

    One default import per reducer, relative to the output file's folder,
    followed by a default export mapping each reducer name to its import.

    Args:
        global_reducers: Reducers reachable from the main app file.
        output_path: Where the module will be written.

    Returns:
        JavaScript source text.
    """
    reducers = sort_reducers(global_reducers)
    output_dir = output_path.parent

    lines = [AUTOGENERATED_HEADER.rstrip("\n")]
    for reducer in reducers:
        reference = module_reference(reducer.definition_path, output_dir)
        lines.append(f'import {reducer.name} from "{reference}";')

    lines.append("")
    lines.append("export default {")
    for reducer in reducers:
        lines.append(f"  {reducer.name},")
    lines.append("};")

    return "\n".join(lines) + "\n"
