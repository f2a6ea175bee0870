"""sjavac/literals.py – lexical predicates for s-Java values.

Pure functions recognising literal and identifier forms, plus the fixed
type-compatibility table shared by assignment and argument passing.

Compatibility (target ← accepted sources)::

    int      ← int
    double   ← int, double
    boolean  ← boolean, int, double
    char     ← char
    String   ← String
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class VarType(Enum):
    """The five primitive s-Java types."""

    INT = "int"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    CHAR = "char"
    STRING = "String"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Literal forms
# ---------------------------------------------------------------------------

INT_RE = re.compile(r"[+-]?[0-9]+")
DOUBLE_RE = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|[0-9]*\.[0-9]+)")
BOOLEAN_RE = re.compile(r"true|false")
CHAR_RE = re.compile(r"'[^'\\]'")
STRING_RE = re.compile(r'"[^"\\]*"')

VARIABLE_NAME_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*|_[a-zA-Z0-9][a-zA-Z0-9_]*")
METHOD_NAME_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*")

# Matches either quoted literal form; used to blank out literal content.
_QUOTED_RE = re.compile(r""""[^"\\]*"|'[^'\\]'""")

RESERVED_WORDS: FrozenSet[str] = frozenset({
    "int", "double", "boolean", "char", "String",
    "void", "final", "if", "while", "true", "false", "return",
})

_COMPATIBILITY: Dict[VarType, FrozenSet[VarType]] = {
    VarType.INT: frozenset({VarType.INT}),
    VarType.DOUBLE: frozenset({VarType.INT, VarType.DOUBLE}),
    VarType.BOOLEAN: frozenset({VarType.BOOLEAN, VarType.INT, VarType.DOUBLE}),
    VarType.CHAR: frozenset({VarType.CHAR}),
    VarType.STRING: frozenset({VarType.STRING}),
}

# Order matters: "5" is an int before it is a double.
_INFERENCE_ORDER = (
    (VarType.INT, INT_RE),
    (VarType.DOUBLE, DOUBLE_RE),
    (VarType.BOOLEAN, BOOLEAN_RE),
    (VarType.CHAR, CHAR_RE),
    (VarType.STRING, STRING_RE),
)

CONDITION_TYPES: FrozenSet[VarType] = frozenset(
    {VarType.BOOLEAN, VarType.INT, VarType.DOUBLE}
)


def is_int(text: str) -> bool:
    return INT_RE.fullmatch(text) is not None


def is_double(text: str) -> bool:
    return DOUBLE_RE.fullmatch(text) is not None


def is_boolean(text: str) -> bool:
    return BOOLEAN_RE.fullmatch(text) is not None


def is_char(text: str) -> bool:
    return CHAR_RE.fullmatch(text) is not None


def is_string(text: str) -> bool:
    return STRING_RE.fullmatch(text) is not None


def is_identifier(text: str) -> bool:
    """True when *text* has the lexical shape of a variable name."""
    return VARIABLE_NAME_RE.fullmatch(text) is not None


def is_valid_variable_name(name: str) -> bool:
    return is_identifier(name) and name not in RESERVED_WORDS


def is_valid_method_name(name: str) -> bool:
    return METHOD_NAME_RE.fullmatch(name) is not None and name not in RESERVED_WORDS


def is_compatible(target: VarType, source: VarType) -> bool:
    """Can a value of type *source* be stored into a *target* slot?"""
    return source in _COMPATIBILITY[target]


def infer_literal_type(text: str) -> Optional[VarType]:
    """Return the type of the literal *text*, or ``None`` if it is no literal."""
    for var_type, pattern in _INFERENCE_ORDER:
        if pattern.fullmatch(text):
            return var_type
    return None


def matches_literal(target: VarType, text: str) -> bool:
    """Check *text* against the literal grammar of *target*, with widening.

    Any numeric literal is accepted where a ``boolean`` is expected, and an
    int literal where a ``double`` is expected.
    """
    literal_type = infer_literal_type(text)
    return literal_type is not None and is_compatible(target, literal_type)


def strip_literals(text: str) -> str:
    """Remove the content of string/char literals from *text*."""
    return _QUOTED_RE.sub("", text)


def split_arguments(raw: str) -> List[str]:
    """Split a call's argument text on commas outside quoted literals.

    Returns an empty list for an empty (or all-whitespace) argument list.
    Every piece is stripped; empty pieces are kept so callers can reject
    them.
    """
    if not raw.strip():
        return []
    pieces: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None
    for ch in raw:
        if quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
            current.append(ch)
        elif ch == ",":
            pieces.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    pieces.append("".join(current).strip())
    return pieces


def opens_block(text: str, literal_aware: bool = True) -> bool:
    if literal_aware:
        text = strip_literals(text)
    return "{" in text


def closes_block(text: str, literal_aware: bool = True) -> bool:
    if literal_aware:
        text = strip_literals(text)
    return "}" in text
