"""
grammar.py — s-Java statement classifier
========================================

A parsimonious PEG grammar that recognises one normalized source line and
a ``NodeVisitor`` that turns the parse tree into a value from
:mod:`sjavac.statements`.

Usage::

    from sjavac.grammar import classify

    classify("final int a = 5, b;")
    # VariableDeclaration(var_type=<VarType.INT: 'int'>, is_final=True, ...)

    classify("intx;")
    # Unrecognized(text='intx;')

Classification only captures sub-text.  Names are matched loosely
(``\\w+``) so that ``int 2x;`` is a declaration with an invalid name, which
the scope layer reports as a variable error rather than as garbage.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from sjavac.literals import VarType, split_arguments
from sjavac.statements import (
    Assignment,
    BlockClose,
    Declarator,
    IfHeader,
    MethodCall,
    MethodHeader,
    Parameter,
    Return,
    Statement,
    Unrecognized,
    VariableDeclaration,
    WhileHeader,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 - GRAMMAR
# ═══════════════════════════════════════════════════════════════════

SJAVA_GRAMMAR = Grammar(r'''
    statement         = declaration / method_header / if_header / while_header
                      / return_stmt / method_call / assignment / block_close

    # ── variables ──────────────────────────────────────────────────
    declaration       = final_modifier? type_name ws declarator more_declarators _ ";"
    more_declarators  = (_ "," _ declarator)*
    declarator        = identifier initializer?
    initializer       = _ "=" _ value

    assignment        = assignment_item more_assignments _ ";"
    more_assignments  = (_ "," _ assignment_item)*
    assignment_item   = identifier _ "=" _ value

    # ── methods ────────────────────────────────────────────────────
    method_header     = "void" ws identifier _ "(" raw_params ")" _ "{"
    method_call       = identifier _ "(" raw_args ")" _ ";"
    parameter         = final_modifier? type_name ws identifier

    # ── control flow ───────────────────────────────────────────────
    if_header         = "if" _ "(" condition ")" _ "{"
    while_header      = "while" _ "(" condition ")" _ "{"
    return_stmt       = "return" _ ";"
    block_close       = "}"

    # ── terminals ──────────────────────────────────────────────────
    final_modifier    = "final" ws
    type_name         = "int" / "double" / "boolean" / "char" / "String"
    identifier        = ~r"\w+"
    value             = string_literal / char_literal / bare_value
    string_literal    = ~r'"[^"\\]*"'
    char_literal      = ~r"'[^'\\]'"
    bare_value        = ~r"[^,;]+"
    raw_params        = ~r"[^)]*"
    raw_args          = ~r"(?:\"[^\"\\]*\"|'[^'\\]'|[^)\"'])*"
    condition         = ~r".+(?=\)\s*\{\Z)"

    ws                = ~r"\s+"
    _                 = ~r"\s*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 - VISITOR (parse tree → statement)
# ═══════════════════════════════════════════════════════════════════

class StatementBuilder(NodeVisitor):
    """Builds a statement value from a parse of ``SJAVA_GRAMMAR``."""

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_statement(self, node, visited_children):
        return visited_children[0]

    # ─────────────────────────────────────────────────────────────
    # Variables
    # ─────────────────────────────────────────────────────────────

    def visit_declaration(self, node, visited_children):
        _, var_type, _, first, rest, _, _ = visited_children
        return VariableDeclaration(
            var_type=var_type,
            is_final=bool(node.children[0].text),
            declarators=(first, *rest),
        )

    def visit_more_declarators(self, node, visited_children):
        return [item[-1] for item in visited_children]

    def visit_declarator(self, node, visited_children):
        name, initializer = visited_children
        value = initializer[0] if node.children[1].text else None
        return Declarator(name=name, value=value)

    def visit_initializer(self, node, visited_children):
        return visited_children[-1]

    def visit_assignment(self, node, visited_children):
        first, rest, _, _ = visited_children
        return Assignment(items=(first, *rest))

    def visit_more_assignments(self, node, visited_children):
        return [item[-1] for item in visited_children]

    def visit_assignment_item(self, node, visited_children):
        name, _, _, _, value = visited_children
        return (name, value)

    # ─────────────────────────────────────────────────────────────
    # Methods
    # ─────────────────────────────────────────────────────────────

    def visit_method_header(self, node, visited_children):
        _, _, name, _, _, params, _, _, _ = visited_children
        return MethodHeader(name=name, raw_parameters=params)

    def visit_method_call(self, node, visited_children):
        name, _, _, args, _, _, _ = visited_children
        return MethodCall(name=name, arguments=tuple(split_arguments(args)))

    def visit_parameter(self, node, visited_children):
        _, var_type, _, name = visited_children
        return Parameter(
            var_type=var_type,
            name=name,
            is_final=bool(node.children[0].text),
        )

    # ─────────────────────────────────────────────────────────────
    # Control flow
    # ─────────────────────────────────────────────────────────────

    def visit_if_header(self, node, visited_children):
        return IfHeader(condition=visited_children[3])

    def visit_while_header(self, node, visited_children):
        return WhileHeader(condition=visited_children[3])

    def visit_return_stmt(self, node, visited_children):
        return Return()

    def visit_block_close(self, node, visited_children):
        return BlockClose()

    # ─────────────────────────────────────────────────────────────
    # Terminals
    # ─────────────────────────────────────────────────────────────

    def visit_type_name(self, node, visited_children):
        return VarType(node.text)

    def visit_identifier(self, node, visited_children):
        return node.text

    def visit_value(self, node, visited_children):
        return node.text.strip()

    def visit_raw_params(self, node, visited_children):
        return node.text

    def visit_raw_args(self, node, visited_children):
        return node.text

    def visit_condition(self, node, visited_children):
        return node.text


# ═══════════════════════════════════════════════════════════════════
#  PART 3 - PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def classify(text: str) -> Statement:
    """Classify one normalized line.  Never raises; unknown lines are
    returned as :class:`Unrecognized`."""
    try:
        tree = SJAVA_GRAMMAR.parse(text)
    except ParseError:
        logger.debug("unrecognized line: %r", text)
        return Unrecognized(text=text)
    return StatementBuilder().visit(tree)


def parse_parameter(text: str) -> Optional[Parameter]:
    """Parse a single ``[final] TYPE NAME`` parameter, or return ``None``."""
    try:
        tree = SJAVA_GRAMMAR["parameter"].parse(text.strip())
    except ParseError:
        return None
    return StatementBuilder().visit(tree)


def split_parameters(raw: str) -> List[str]:
    """Split a method header's parameter text on commas.

    An all-whitespace list yields ``[]``.  Pieces are stripped but empty
    pieces are kept so that ``(int a,)`` can be rejected.
    """
    if not raw.strip():
        return []
    return [piece.strip() for piece in raw.split(",")]
