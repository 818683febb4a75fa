"""Minimal tokenizer for marker constants and module references in JS/JSX source."""

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple, Union


REDUCER_NAME_MARKER = "PRM_REDUCER_NAME"
ACTION_FILE_MARKER = "PRM_ACTION_FILE_FOR_REDUCER"
SAGA_FILE_MARKER = "PRM_SAGA_FILE_FOR_REDUCER"

KIND_IMPORT = "import"
KIND_EXPORT = "export"
KIND_REQUIRE = "require"


@dataclass(frozen=True)
class ConstantToken:
    """``NAME = 'value'`` with an upper-case NAME and a literal string value."""

    name: str
    value: str


@dataclass(frozen=True)
class ReferenceToken:
    """
    A reference from one module to one or more others.

    Attributes:
        kind: ``import``, ``export`` (re-export) or ``require``.
        specifiers: Target module specifiers, in source order.
        bindings: Names the statement makes visible in the referencing file,
            or None when it forwards everything (``export *``, require).
        restriction: Names consumed from the target, or None when the whole
            target is consumed.
    """

    kind: str
    specifiers: Tuple[str, ...]
    bindings: Optional[FrozenSet[str]] = None
    restriction: Optional[FrozenSet[str]] = None


Token = Union[ConstantToken, ReferenceToken]


_QUOTED = r"""(?:'[^'\n]*'|"[^"\n]*")"""

# Order matters: earlier alternatives win at the same position
_TOKEN_PATTERNS = [
    ("LINE_COMMENT", r"//[^\n]*"),
    ("BLOCK_COMMENT", r"/\*.*?(?:\*/|\Z)"),
    ("IMPORT", r"\bimport\b\s*(?:(?P<import_clause>[\w$*{}\s,]+?)\s*\bfrom\s*)?"
               r"(?P<import_source>" + _QUOTED + r")"),
    ("EXPORT_FROM", r"\bexport\s*(?P<export_clause>\*(?:\s*as\s+[\w$]+)?|\{[^}]*\})"
                    r"\s*from\s*(?P<export_source>" + _QUOTED + r")"),
    ("REQUIRE", r"\brequire\s*\(\s*(?P<require_args>\[[^\]]*\]|" + _QUOTED + r")"),
    ("CONSTANT", r"\b(?P<const_name>[A-Z_][A-Z0-9_]*)\s*=\s*(?P<const_value>" + _QUOTED + r")"),
    ("STRING", r"""'(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`"""),
    ("WORD", r"[\w$]+"),
    ("OTHER", r"[^\w$/'\"`]+|."),
]

_TOKEN_REGEX = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_PATTERNS),
    re.DOTALL,
)

_STRING_LITERAL = re.compile(_QUOTED)


def _unquote(literal: str) -> str:
    return literal[1:-1]


def _split_names(text: str) -> List[str]:
    return [part.strip() for part in text.replace("\n", " ").split(",") if part.strip()]


def _split_alias(entry: str) -> Tuple[str, str]:
    """Split ``a as b`` into (``a``, ``b``); a plain ``a`` gives (``a``, ``a``)."""
    parts = entry.split()
    if len(parts) == 3 and parts[1] == "as":
        return parts[0], parts[2]
    return parts[0], parts[-1]


def parse_import_clause(clause: Optional[str]) -> Tuple[FrozenSet[str], Optional[FrozenSet[str]]]:
    """
    Parse the part of an import between ``import`` and ``from``.

    Returns:
        (bindings, restriction): local names bound by the import, and the
        destructured imported names (None when the clause has no braces).
    """
    if not clause:
        return frozenset(), None

    clause = clause.strip()
    if clause.startswith("type ") or clause.startswith("typeof "):
        clause = clause.split(None, 1)[1]

    bindings = set()
    restriction = None

    brace = re.search(r"\{([^}]*)\}", clause)
    if brace:
        restriction = set()
        for entry in _split_names(brace.group(1)):
            imported, local = _split_alias(entry)
            restriction.add(imported)
            bindings.add(local)
        clause = clause[:brace.start()] + clause[brace.end():]

    for entry in _split_names(clause):
        # default import, or "* as ns"
        bindings.add(_split_alias(entry)[1])

    return frozenset(bindings), None if restriction is None else frozenset(restriction)


def parse_export_clause(clause: str) -> Tuple[Optional[FrozenSet[str]], Optional[FrozenSet[str]]]:
    """
    Parse the part of a re-export between ``export`` and ``from``.

    Returns:
        (bindings, restriction): exported names (None for a bare ``export *``),
        and the names taken from the target (None when everything is).
    """
    clause = clause.strip()
    if clause.startswith("*"):
        rest = clause[1:].split()
        if len(rest) == 2 and rest[0] == "as":
            return frozenset([rest[1]]), None
        return None, None

    bindings = set()
    restriction = set()
    for entry in _split_names(clause.strip("{}")):
        imported, exported = _split_alias(entry)
        restriction.add(imported)
        bindings.add(exported)
    return frozenset(bindings), frozenset(restriction)


def tokenize(content: str) -> Iterator[Token]:
    """
    Scan source text and yield constant and reference tokens in source order.

    Comments and string literals are consumed without producing tokens.
    """
    for match in _TOKEN_REGEX.finditer(content):
        kind = match.lastgroup

        if kind == "IMPORT":
            bindings, restriction = parse_import_clause(match.group("import_clause"))
            yield ReferenceToken(
                kind=KIND_IMPORT,
                specifiers=(_unquote(match.group("import_source")),),
                bindings=bindings,
                restriction=restriction,
            )

        elif kind == "EXPORT_FROM":
            bindings, restriction = parse_export_clause(match.group("export_clause"))
            yield ReferenceToken(
                kind=KIND_EXPORT,
                specifiers=(_unquote(match.group("export_source")),),
                bindings=bindings,
                restriction=restriction,
            )

        elif kind == "REQUIRE":
            args = match.group("require_args")
            specifiers = tuple(_unquote(s) for s in _STRING_LITERAL.findall(args))
            if specifiers:
                yield ReferenceToken(kind=KIND_REQUIRE, specifiers=specifiers)

        elif kind == "CONSTANT":
            yield ConstantToken(
                name=match.group("const_name"),
                value=_unquote(match.group("const_value")),
            )


def find_constant(content: str, name: str) -> Optional[str]:
    """Return the value of the first ``name = '...'`` assignment, if any."""
    for token in tokenize(content):
        if isinstance(token, ConstantToken) and token.name == name:
            return token.value
    return None


def extract_references(content: str) -> List[ReferenceToken]:
    """Return every import, re-export and require reference in source order."""
    return [token for token in tokenize(content) if isinstance(token, ReferenceToken)]


@dataclass(frozen=True)
class SourceSummary:
    """First value of each constant, plus every reference, from one pass."""

    constants: Dict[str, str]
    references: Tuple[ReferenceToken, ...]


def summarize(content: str) -> SourceSummary:
    constants: Dict[str, str] = {}
    references = []
    for token in tokenize(content):
        if isinstance(token, ConstantToken):
            constants.setdefault(token.name, token.value)
        else:
            references.append(token)
    return SourceSummary(constants=constants, references=tuple(references))
