"""Module reference helpers shared by the exporters."""

import os
from pathlib import Path


AUTOGENERATED_HEADER = (
    "/* AUTOGENERATED FILE - DO NOT MODIFY */\n"
    "/* generated by redux-mapper */\n"
)


def module_reference(target: Path, from_dir: Path) -> str:
    """
    Build an import specifier for ``target`` as seen from ``from_dir``.

    The result uses forward slashes, has no extension and always starts
    with ``./`` or ``../`` so bundlers treat it as a relative path.
    """
    relative = os.path.relpath(str(target), str(from_dir)).replace("\\", "/")
    relative = os.path.splitext(relative)[0]
    if not relative.startswith(("./", "../")):
        relative = f"./{relative}"
    return relative


def import_function(reference: str) -> str:
    """Literal text of a function that lazily loads ``reference`` at runtime."""
    return f"function() {{ return System.import('{reference}'); }}"
