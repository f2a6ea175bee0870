"""
Symbol tables for the s-Java verifier.

Variables and methods live in two independent namespaces: a
``VariableTable`` per scope, and one file-wide ``MethodRegistry`` owned
by the validation context.  A method and a variable may share a name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from sjavac.errors import RedefinedMethodError, RedefinedVariableError
from sjavac.literals import VarType

if TYPE_CHECKING:
    from sjavac.scope import MethodScope

logger = logging.getLogger(__name__)


@dataclass
class Variable:
    """A declared variable and its initialization state.

    Mutated in place by assignments; a block that initializes an
    ancestor's variable therefore initializes it for the ancestor too.
    """

    name: str
    var_type: VarType
    is_final: bool = False
    is_initialized: bool = False
    is_parameter: bool = False
    decl_line: int = 0

    def __post_init__(self) -> None:
        if self.is_parameter:
            self.is_initialized = True

    def initialize(self) -> None:
        self.is_initialized = True


class VariableTable:
    """Name → ``Variable`` for a single scope.  Lookups never walk parents."""

    def __init__(self) -> None:
        self._variables: Dict[str, Variable] = {}

    def declare(self, variable: Variable) -> Variable:
        existing = self._variables.get(variable.name)
        if existing is not None:
            raise RedefinedVariableError(
                variable.name,
                line=variable.decl_line,
                original_line=existing.decl_line,
            )
        self._variables[variable.name] = variable
        return variable

    def lookup(self, name: str) -> Optional[Variable]:
        return self._variables.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables.values())

    def __len__(self) -> int:
        return len(self._variables)


@dataclass
class Method:
    """A registered method signature.

    ``body_scope`` is attached once the body has been validated.
    """

    name: str
    parameters: List[Variable] = field(default_factory=list)
    decl_line: int = 0
    header_index: int = 0
    end_index: int = 0
    body_scope: Optional["MethodScope"] = None

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def signature(self) -> str:
        params = ", ".join(f"{p.var_type} {p.name}" for p in self.parameters)
        return f"void {self.name}({params})"


class MethodRegistry:
    """File-wide, write-once-per-name method table."""

    def __init__(self) -> None:
        self._methods: Dict[str, Method] = {}

    def register(self, method: Method) -> Method:
        existing = self._methods.get(method.name)
        if existing is not None:
            raise RedefinedMethodError(
                method.name,
                line=method.decl_line,
                original_line=existing.decl_line,
            )
        self._methods[method.name] = method
        logger.debug("registered %s at line %d", method.signature, method.decl_line)
        return method

    def resolve(self, name: str) -> Optional[Method]:
        return self._methods.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __iter__(self) -> Iterator[Method]:
        return iter(self._methods.values())

    def __len__(self) -> int:
        return len(self._methods)
