"""sjavac/statements.py – statement values produced by the classifier.

Each normalized line classifies into exactly one of these.  They carry
the captured sub-text only; all semantic checks happen in
:mod:`sjavac.scope`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from sjavac.literals import VarType


@dataclass(frozen=True)
class Declarator:
    """One ``name [= value]`` entry of a declaration."""

    name: str
    value: Optional[str] = None


@dataclass(frozen=True)
class VariableDeclaration:
    kind: ClassVar[str] = "declaration"

    var_type: VarType
    is_final: bool
    declarators: Tuple[Declarator, ...]


@dataclass(frozen=True)
class Assignment:
    kind: ClassVar[str] = "assignment"

    # (target name, value text) pairs, left to right.
    items: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class MethodHeader:
    kind: ClassVar[str] = "method"

    name: str
    raw_parameters: str


@dataclass(frozen=True)
class MethodCall:
    kind: ClassVar[str] = "call"

    name: str
    arguments: Tuple[str, ...]


@dataclass(frozen=True)
class IfHeader:
    kind: ClassVar[str] = "if"

    condition: str


@dataclass(frozen=True)
class WhileHeader:
    kind: ClassVar[str] = "while"

    condition: str


@dataclass(frozen=True)
class Return:
    kind: ClassVar[str] = "return"


@dataclass(frozen=True)
class BlockClose:
    kind: ClassVar[str] = "close"


@dataclass(frozen=True)
class Unrecognized:
    kind: ClassVar[str] = "unrecognized"

    text: str


@dataclass(frozen=True)
class Parameter:
    """A single parameter of a method header."""

    var_type: VarType
    name: str
    is_final: bool = False


Statement = Union[
    VariableDeclaration,
    Assignment,
    MethodHeader,
    MethodCall,
    IfHeader,
    WhileHeader,
    Return,
    BlockClose,
    Unrecognized,
]

BlockHeader = Union[IfHeader, WhileHeader]
