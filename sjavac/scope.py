"""
s-Java Scope Tree and Semantic Validation

Turns the flat sequence of normalized lines into a tree of scopes and
validates it depth-first:

    FileScope                 globals, method registration
    └── MethodScope           one per method, in registration order
        └── BlockScope        one per if/while body, nested freely

Validation runs in two phases:
1. Registration - the file scope walks every top-level line in order,
   processing global declarations/assignments and registering methods.
2. Body validation - every registered method body is validated, creating
   block scopes lazily as ``if``/``while`` headers are met.

Identifier lookup inside a method walks: local table → per-method copies
of globals that were uninitialized at file scope → parent chain.  Because
assignments mutate the ``Variable`` found by lookup, a block that
initializes an ancestor's variable initializes it for the ancestor, while
one method initializing a global only touches its own copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import ClassVar, Dict, List, Optional, Sequence, Set, Tuple

from sjavac.conditions import check_condition
from sjavac.config import VerifierConfig
from sjavac.errors import (
    E,
    MethodError,
    RedefinedVariableError,
    ScopeError,
    UndeclaredVariableError,
    UninitializedVariableError,
    UnterminatedBlockError,
    VariableError,
)
from sjavac.grammar import classify, parse_parameter, split_parameters
from sjavac.literals import (
    VarType,
    closes_block,
    infer_literal_type,
    is_compatible,
    is_identifier,
    is_valid_method_name,
    is_valid_variable_name,
    opens_block,
)
from sjavac.preprocess import SourceLine
from sjavac.statements import (
    Assignment,
    BlockHeader,
    BlockClose,
    IfHeader,
    MethodCall,
    MethodHeader,
    Return,
    Statement,
    VariableDeclaration,
    WhileHeader,
)
from sjavac.symbols import Method, MethodRegistry, Variable, VariableTable

logger = logging.getLogger(__name__)


# ============================================================================
# PART 1 - VALIDATION CONTEXT
# ============================================================================


@dataclass
class ValidationContext:
    """State shared by every scope of one validation run.

    A fresh context (and therefore a fresh method registry) is built for
    each run, so two runs over the same lines never interfere.
    """

    lines: Sequence[SourceLine]
    methods: MethodRegistry = field(default_factory=MethodRegistry)
    config: VerifierConfig = field(default_factory=VerifierConfig)
    _classified: Dict[int, Statement] = field(default_factory=dict, repr=False)

    def statement_at(self, index: int) -> Statement:
        statement = self._classified.get(index)
        if statement is None:
            statement = classify(self.lines[index].text)
            self._classified[index] = statement
        return statement

    def line_number(self, index: int) -> int:
        return self.lines[index].line_number


# ============================================================================
# PART 2 - SCOPE BASE
# ============================================================================


class Scope:
    """A lexical region governing the line range ``[start, end)``.

    Holds its own variable table (local declarations only), a back
    reference to its parent, and the child scopes it spawned.
    """

    kind: ClassVar[str] = "scope"

    def __init__(
        self,
        context: ValidationContext,
        parent: Optional["Scope"] = None,
        start: int = 0,
        end: Optional[int] = None,
    ) -> None:
        self.context = context
        self.parent = parent
        self.start = start
        self.end = len(context.lines) if end is None else end
        self.variables = VariableTable()
        self.children: List[Scope] = []
        self.statements: List[Tuple[int, Statement]] = []
        self.depth = 0 if parent is None else parent.depth + 1
        if parent is not None:
            parent.children.append(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} lines {self.first_line}-{self.last_line}>"

    @property
    def first_line(self) -> int:
        if self.start < len(self.context.lines):
            return self.context.line_number(self.start)
        return 0

    @property
    def last_line(self) -> int:
        index = min(self.end, len(self.context.lines) - 1)
        return self.context.line_number(index) if index >= 0 else 0

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_variable(self, name: str) -> Optional[Variable]:
        scope: Optional[Scope] = self
        while scope is not None:
            variable = scope.lookup_local(name)
            if variable is not None:
                return variable
            scope = scope.parent
        return None

    def lookup_local(self, name: str) -> Optional[Variable]:
        return self.variables.lookup(name)

    def enclosing_method(self) -> Optional["MethodScope"]:
        scope: Optional[Scope] = self
        while scope is not None:
            if isinstance(scope, MethodScope):
                return scope
            scope = scope.parent
        return None

    def validate(self) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Statement processing
    # ------------------------------------------------------------------

    def _record(self, line: int, statement: Statement) -> None:
        self.statements.append((line, statement))
        method = self.enclosing_method()
        if method is not None:
            method.note_statement(line, statement)

    def _validate_body(self) -> None:
        """Validate every line between this scope's header and its closing line.

        Nested blocks are walked with an explicit stack of
        ``(scope, next index)`` frames, so any nesting depth the source
        holds is accepted.  A frame whose index reaches its scope's end has
        its closing line checked and is dropped.
        """
        stack: List[Tuple[Scope, int]] = [(self, self.start + 1)]
        while stack:
            scope, index = stack.pop()
            if index >= scope.end:
                scope._check_closing_line()
                logger.debug("leaving %s scope opened at line %d", scope.kind, scope.first_line)
                continue
            statement = self.context.statement_at(index)
            if isinstance(statement, (IfHeader, WhileHeader)):
                block = scope.open_block(statement, index)
                stack.append((scope, block.end + 1))
                stack.append((block, block.start + 1))
            else:
                scope._process(index, statement)
                stack.append((scope, index + 1))

    def _process(self, index: int, statement: Statement) -> None:
        """Validate the non-block statement at *index*."""
        line = self.context.line_number(index)

        if isinstance(statement, VariableDeclaration):
            self._record(line, statement)
            self.declare(statement, line)
        elif isinstance(statement, Assignment):
            self._record(line, statement)
            self.assign(statement, line)
        elif isinstance(statement, MethodCall):
            self._record(line, statement)
            self.call(statement, line)
        elif isinstance(statement, Return):
            self._record(line, statement)
        elif isinstance(statement, MethodHeader):
            raise ScopeError(
                f"Method declarations cannot be nested: {statement.name}",
                line=line,
                code=E.INVALID_STATEMENT,
            )
        elif isinstance(statement, BlockClose):
            raise ScopeError("Unexpected closing brace", line=line, code=E.UNEXPECTED_CLOSE)
        else:
            raise ScopeError(
                f"Invalid statement: {self.context.lines[index].text}",
                line=line,
                code=E.INVALID_STATEMENT,
            )

    def declare(self, statement: VariableDeclaration, line: int) -> None:
        """Declare every name of *statement*, left to right.

        An initializer is checked before its own name is declared, so in
        ``int a = a;`` the value refers to an ``a`` of an enclosing scope.
        """
        for declarator in statement.declarators:
            name = declarator.name
            if not is_valid_variable_name(name):
                raise VariableError(
                    f"Invalid variable name: {name}",
                    line=line,
                    code=E.INVALID_VARIABLE_NAME,
                )
            existing = self.variables.lookup(name)
            if existing is not None:
                raise RedefinedVariableError(name, line=line, original_line=existing.decl_line)
            if declarator.value is not None:
                self.check_value(statement.var_type, declarator.value, line)
            elif statement.is_final:
                raise VariableError(
                    f"Final variable must be initialized at declaration: {name}",
                    line=line,
                    code=E.FINAL_WITHOUT_VALUE,
                )
            self.variables.declare(
                Variable(
                    name=name,
                    var_type=statement.var_type,
                    is_final=statement.is_final,
                    is_initialized=declarator.value is not None,
                    decl_line=line,
                )
            )

    def assign(self, statement: Assignment, line: int) -> None:
        for name, value in statement.items:
            target = self.find_variable(name)
            if target is None:
                raise UndeclaredVariableError(name, line=line)
            if target.is_final and target.is_initialized:
                raise VariableError(
                    f"Cannot assign a value to final variable: {name}",
                    line=line,
                    code=E.FINAL_REASSIGNMENT,
                )
            self.check_value(target.var_type, value, line)
            target.initialize()

    def check_value(self, target: VarType, value: str, line: int) -> None:
        """Check that *value* (a literal or a variable name) fits *target*."""
        literal_type = infer_literal_type(value)
        if literal_type is not None:
            if not is_compatible(target, literal_type):
                raise VariableError(
                    f"Type mismatch: cannot assign {value} to {target}",
                    line=line,
                    code=E.TYPE_MISMATCH,
                )
            return

        if not is_identifier(value):
            raise VariableError(
                f"Invalid value for type {target}: {value}",
                line=line,
                code=E.INVALID_VALUE,
            )

        source = self._resolve_initialized(value, line)
        if not is_compatible(target, source.var_type):
            raise VariableError(
                f"Type mismatch: cannot assign {source.var_type} variable {value} to {target}",
                line=line,
                code=E.TYPE_MISMATCH,
            )

    def _resolve_initialized(self, name: str, line: int) -> Variable:
        variable = self.find_variable(name)
        if variable is None:
            raise UndeclaredVariableError(name, line=line)
        if not variable.is_initialized:
            raise UninitializedVariableError(name, line=line)
        return variable

    def call(self, statement: MethodCall, line: int) -> None:
        method = self.context.methods.resolve(statement.name)
        if method is None:
            raise MethodError(
                f"Method not declared: {statement.name}",
                line=line,
                code=E.UNDECLARED_METHOD,
            )

        arguments = statement.arguments
        for position, argument in enumerate(arguments, start=1):
            if not argument:
                raise MethodError(
                    f"Empty argument {position} in call to {statement.name}",
                    line=line,
                    code=E.INVALID_ARGUMENT,
                )
        if len(arguments) != method.arity:
            raise MethodError(
                f"Method {statement.name} expects {method.arity} argument(s), "
                f"got {len(arguments)}",
                line=line,
                code=E.ARITY_MISMATCH,
            )

        for position, (argument, parameter) in enumerate(zip(arguments, method.parameters), start=1):
            argument_type = self._argument_type(argument, line)
            if not is_compatible(parameter.var_type, argument_type):
                raise MethodError(
                    f"Argument {position} of {statement.name}: expected "
                    f"{parameter.var_type}, got {argument_type}",
                    line=line,
                    code=E.ARGUMENT_TYPE_MISMATCH,
                )

    def _argument_type(self, argument: str, line: int) -> VarType:
        literal_type = infer_literal_type(argument)
        if literal_type is not None:
            return literal_type
        if not is_identifier(argument):
            raise MethodError(
                f"Invalid argument: {argument}",
                line=line,
                code=E.INVALID_ARGUMENT,
            )
        return self._resolve_initialized(argument, line).var_type

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def open_block(self, statement: BlockHeader, index: int) -> "BlockScope":
        """Open the ``if``/``while`` block headed at *index*.

        Records the header, checks its condition against this scope and
        returns the child scope; its body is left to the caller.
        """
        line = self.context.line_number(index)
        self._record(line, statement)
        check_condition(statement.condition, self, line)
        end = self._find_block_end(index, statement.kind)
        logger.debug("entering %s block at line %d", statement.kind, line)
        return BlockScope(self.context, self, index, end, statement.kind, statement.condition)

    def _find_block_end(self, index: int, kind: str) -> int:
        """Index of the line closing the block opened at *index*."""
        aware = self.context.config.literal_aware_braces
        lines = self.context.lines
        depth = 1
        for position in range(index + 1, len(lines)):
            text = lines[position].text
            if opens_block(text, aware):
                depth += 1
            if closes_block(text, aware):
                depth -= 1
                if depth == 0:
                    return position
        raise UnterminatedBlockError(kind, self.context.line_number(index))

    def _check_closing_line(self) -> None:
        if not isinstance(self.context.statement_at(self.end), BlockClose):
            raise ScopeError(
                f"Invalid statement: {self.context.lines[self.end].text}",
                line=self.context.line_number(self.end),
                code=E.INVALID_STATEMENT,
            )


# ============================================================================
# PART 3 - FILE SCOPE
# ============================================================================


class FileScope(Scope):
    """The root scope: globals and method registration."""

    kind = "file"

    def __init__(self, context: ValidationContext) -> None:
        super().__init__(context, parent=None, start=0, end=len(context.lines))

    @property
    def methods(self) -> MethodRegistry:
        return self.context.methods

    def validate(self) -> None:
        logger.debug("file scope: %d line(s)", len(self.context.lines))
        self._register()
        for method in self.context.methods:
            scope = MethodScope(self.context, self, method)
            scope.validate()
            method.body_scope = scope
        logger.debug(
            "file scope ok: %d global(s), %d method(s)",
            len(self.variables),
            len(self.context.methods),
        )

    def _register(self) -> None:
        index = 0
        while index < self.end:
            line = self.context.line_number(index)
            statement = self.context.statement_at(index)

            if isinstance(statement, VariableDeclaration):
                self._record(line, statement)
                self.declare(statement, line)
            elif isinstance(statement, Assignment):
                self._record(line, statement)
                self.assign(statement, line)
            elif isinstance(statement, MethodHeader):
                index = self._register_method(statement, index)
                continue
            elif isinstance(statement, MethodCall):
                raise ScopeError(
                    f"Method call outside of a method body: {statement.name}",
                    line=line,
                    code=E.CALL_OUTSIDE_METHOD,
                )
            elif isinstance(statement, (IfHeader, WhileHeader)):
                raise ScopeError(
                    f"'{statement.kind}' block outside of a method body",
                    line=line,
                    code=E.INVALID_STATEMENT,
                )
            elif isinstance(statement, Return):
                raise ScopeError(
                    "'return' outside of a method body",
                    line=line,
                    code=E.INVALID_STATEMENT,
                )
            elif isinstance(statement, BlockClose):
                raise ScopeError("Unexpected closing brace", line=line, code=E.UNEXPECTED_CLOSE)
            else:
                raise ScopeError(
                    f"Invalid statement: {self.context.lines[index].text}",
                    line=line,
                    code=E.INVALID_STATEMENT,
                )
            index += 1

    def _register_method(self, header: MethodHeader, index: int) -> int:
        line = self.context.line_number(index)
        if not is_valid_method_name(header.name):
            raise MethodError(
                f"Invalid method name: {header.name}",
                line=line,
                code=E.INVALID_METHOD_NAME,
            )
        parameters = self._parse_parameters(header.raw_parameters, line)
        end = self._find_block_end(index, "method")
        method = Method(
            name=header.name,
            parameters=parameters,
            decl_line=line,
            header_index=index,
            end_index=end,
        )
        self.context.methods.register(method)
        return end + 1

    def _parse_parameters(self, raw: str, line: int) -> List[Variable]:
        parameters: List[Variable] = []
        seen: Set[str] = set()
        for piece in split_parameters(raw):
            if not piece:
                raise MethodError(
                    "Empty parameter in method declaration",
                    line=line,
                    code=E.INVALID_PARAMETER,
                )
            parsed = parse_parameter(piece)
            if parsed is None:
                raise MethodError(
                    f"Invalid parameter: {piece}",
                    line=line,
                    code=E.INVALID_PARAMETER,
                )
            if not is_valid_variable_name(parsed.name):
                raise VariableError(
                    f"Invalid parameter name: {parsed.name}",
                    line=line,
                    code=E.INVALID_VARIABLE_NAME,
                )
            if parsed.name in seen:
                raise MethodError(
                    f"Duplicate parameter name: {parsed.name}",
                    line=line,
                    code=E.INVALID_PARAMETER,
                )
            seen.add(parsed.name)
            parameters.append(
                Variable(
                    name=parsed.name,
                    var_type=parsed.var_type,
                    is_final=parsed.is_final,
                    is_parameter=True,
                    decl_line=line,
                )
            )
        return parameters


# ============================================================================
# PART 4 - METHOD SCOPE
# ============================================================================


class MethodScope(Scope):
    """A method body, from its header line to its closing ``}``."""

    kind = "method"

    def __init__(self, context: ValidationContext, parent: FileScope, method: Method) -> None:
        super().__init__(context, parent, method.header_index, method.end_index)
        self.method = method
        self.global_copies = VariableTable()
        self.last_statement: Optional[Tuple[int, Statement]] = None

    @property
    def name(self) -> str:
        return self.method.name

    def lookup_local(self, name: str) -> Optional[Variable]:
        local = self.variables.lookup(name)
        if local is not None:
            return local
        return self.global_copies.lookup(name)

    def note_statement(self, line: int, statement: Statement) -> None:
        self.last_statement = (line, statement)

    def validate(self) -> None:
        logger.debug("entering method %s at line %d", self.name, self.method.decl_line)
        for parameter in self.method.parameters:
            self.variables.declare(replace(parameter))
        self._copy_uninitialized_globals()

        self._validate_body()
        self._check_return()
        logger.debug("leaving method %s", self.name)

    def _copy_uninitialized_globals(self) -> None:
        for variable in self.parent.variables:
            if variable.is_initialized or variable.name in self.variables:
                continue
            self.global_copies.declare(replace(variable))

    def _check_return(self) -> None:
        if self.last_statement is None:
            raise MethodError(
                f"Method {self.name} must contain at least one statement",
                line=self.method.decl_line,
                code=E.EMPTY_METHOD,
            )
        line, statement = self.last_statement
        if not isinstance(statement, Return):
            raise MethodError(
                f"Last statement of method {self.name} must be 'return;'",
                line=line,
                code=E.MISSING_RETURN,
            )


# ============================================================================
# PART 5 - BLOCK SCOPE
# ============================================================================


class BlockScope(Scope):
    """The body of an ``if`` or ``while`` block."""

    kind = "block"

    def __init__(
        self,
        context: ValidationContext,
        parent: Scope,
        start: int,
        end: int,
        keyword: str,
        condition: str,
    ) -> None:
        super().__init__(context, parent, start, end)
        self.keyword = keyword
        self.condition = condition

    def validate(self) -> None:
        # Blocks reached from a method body are walked by the method's
        # stack; this covers a block validated on its own.
        self._validate_body()
