"""
Condition checking for ``if``/``while`` headers.

A condition is a flat chain of operands joined by ``&&`` or ``||``; there
is no precedence and no grouping.  Each operand is a boolean, int or
double literal, or an initialized variable of one of those types.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, List

from sjavac.errors import (
    E,
    ConditionError,
    UninitializedVariableError,
)
from sjavac.literals import (
    CONDITION_TYPES,
    is_boolean,
    is_double,
    is_identifier,
    is_int,
)

if TYPE_CHECKING:
    from sjavac.scope import Scope

logger = logging.getLogger(__name__)

OPERATORS = ("&&", "||")
_OPERATOR_RE = re.compile(r"&&|\|\|")


def split_condition(text: str) -> List[str]:
    """Split *text* on the logical operators and strip every operand."""
    return [segment.strip() for segment in _OPERATOR_RE.split(text)]


def check_condition(text: str, scope: "Scope", line: int) -> None:
    """Validate condition *text* against *scope*; raise on the first problem."""
    stripped = text.strip()
    if stripped.startswith(OPERATORS) or stripped.endswith(OPERATORS):
        raise ConditionError(
            f"Condition cannot start or end with a logical operator: {stripped}",
            line=line,
            code=E.MISPLACED_OPERATOR,
        )

    operands = split_condition(text)
    if any(not operand for operand in operands):
        raise ConditionError(
            f"Empty operand in condition: {stripped}",
            line=line,
            code=E.EMPTY_OPERAND,
        )

    for operand in operands:
        _check_operand(operand, scope, line)
    logger.debug("line %d: condition ok (%d operand(s))", line, len(operands))


def _check_operand(operand: str, scope: "Scope", line: int) -> None:
    if is_boolean(operand) or is_int(operand) or is_double(operand):
        return

    if not is_identifier(operand):
        raise ConditionError(
            f"Invalid token in condition: {operand}",
            line=line,
            code=E.INVALID_CONDITION_TOKEN,
        )

    variable = scope.find_variable(operand)
    if variable is None:
        raise ConditionError(
            f"Variable in condition not declared: {operand}",
            line=line,
            code=E.UNDECLARED_IN_CONDITION,
        )
    if not variable.is_initialized:
        raise UninitializedVariableError(operand, line=line)
    if variable.var_type not in CONDITION_TYPES:
        raise ConditionError(
            f"Variable {operand} of type {variable.var_type} cannot be used in a condition",
            line=line,
            code=E.INVALID_CONDITION_TYPE,
        )
