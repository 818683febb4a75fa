"""Module resolution: mapping import specifiers to actual files."""

import os
from pathlib import Path
from typing import List, Optional, Sequence


DEFAULT_EXTENSIONS = (".jsx", ".js")
DEFAULT_INDEX_FILENAME = "index.js"


class ModuleResolver:
    """
    Resolve module specifiers the way the bundler does.

    A path resolves to the first existing candidate among: the path itself,
    the path with each source extension appended, and the directory's index
    file. Anything else is unresolved (None), which is not an error.
    """

    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        index_filename: str = DEFAULT_INDEX_FILENAME,
    ):
        self.extensions = tuple(extensions)
        self.index_filename = index_filename

    def resolve(self, module_path: Path) -> Optional[Path]:
        """
        Resolve a module path to an existing file.

        Args:
            module_path: Absolute, normalized path built from a specifier.

        Returns:
            The file the specifier refers to, or None.
        """
        if module_path.is_file():
            return module_path

        for extension in self.extensions:
            candidate = module_path.with_name(module_path.name + extension)
            if candidate.is_file():
                return candidate

        index = module_path / self.index_filename
        if module_path.is_dir() and index.is_file():
            return index

        return None

    def is_aggregator(self, file_path: Path) -> bool:
        """Check whether a resolved file is a directory index (barrel) file."""
        return file_path.name == self.index_filename

    def candidate_paths(self, source_file: Path, specifier: str, base_path: Path) -> List[Path]:
        """
        Build the module paths a specifier could mean.

        We cannot tell a relative specifier from a root-relative one, so both
        are tried: first against the referencing file's directory, then
        against the project base path.

        Args:
            source_file: The file containing the reference.
            specifier: The raw specifier string.
            base_path: The project's source root.

        Returns:
            Unresolved candidate module paths, relative attempt first.
        """
        normalized = specifier.strip().replace("\\", "/").lstrip("/")
        if not normalized:
            return []

        candidates = []
        for anchor in (source_file.parent, base_path):
            candidate = Path(os.path.normpath(os.path.join(str(anchor), normalized)))
            if candidate not in candidates:
                candidates.append(candidate)
        return candidates

    def resolve_specifier(self, source_file: Path, specifier: str, base_path: Path) -> List[Path]:
        """Resolve every candidate of a specifier, dropping misses and duplicates."""
        resolved: List[Path] = []
        for candidate in self.candidate_paths(source_file, specifier, base_path):
            target = self.resolve(candidate)
            if target is not None and target not in resolved:
                resolved.append(target)
        return resolved
