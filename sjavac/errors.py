# sjavac/errors.py
"""
s-Java Verifier Error Types and Reporting

Error Hierarchy:
────────────────
┌─────────────────────────────────────────────────────────────────────┐
│  SjavaError (base)                                                  │
│  ├── ScopeError          - unrecognized statement, bad structure    │
│  │   └── UnterminatedBlockError                                     │
│  ├── VariableError       - names, declarations, initialization      │
│  │   ├── RedefinedVariableError                                     │
│  │   ├── UndeclaredVariableError                                    │
│  │   └── UninitializedVariableError                                 │
│  ├── MethodError         - signatures, calls, return rule           │
│  │   └── RedefinedMethodError                                       │
│  ├── ConditionError      - if/while condition text                  │
│  └── SourceError         - file acquisition (exit code 2)           │
└─────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Each error carries a code ``SJV-NNNN``:
  - 1000-1999: Scope-structure errors
  - 2000-2999: Variable errors
  - 3000-3999: Method errors
  - 4000-4999: Condition errors
  - 9000-9999: Source acquisition errors

Validation is fail-fast: the first error raised anywhere in the
depth-first traversal propagates to the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, List, Optional

EXIT_VALID: int = 0
EXIT_INVALID: int = 1
EXIT_SOURCE: int = 2


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorCategory(Enum):
    """Coarse error kinds; one per exception family."""

    SCOPE = "scope"
    VARIABLE = "variable"
    METHOD = "method"
    CONDITION = "condition"
    SOURCE = "source"


class ErrorCode:
    """
    Structured error code of the form ``SJV-NNNN``.

    Compares equal to another ``ErrorCode`` with the same number, and to
    its own string form.
    """

    __slots__ = ("prefix", "number", "category")

    def __init__(self, number: int, category: ErrorCategory, prefix: str = "SJV") -> None:
        self.prefix = prefix
        self.number = number
        self.category = category

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.category.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class SjavaErrorCodes:
    """Predefined error codes."""

    # ═══════════════════════════════════════════════════════════════════════════
    # SCOPE-STRUCTURE ERRORS (1000-1999)
    # ═══════════════════════════════════════════════════════════════════════════

    INVALID_STATEMENT = ErrorCode(1000, ErrorCategory.SCOPE)
    UNTERMINATED_BLOCK = ErrorCode(1001, ErrorCategory.SCOPE)
    CALL_OUTSIDE_METHOD = ErrorCode(1002, ErrorCategory.SCOPE)
    UNEXPECTED_CLOSE = ErrorCode(1003, ErrorCategory.SCOPE)

    # ═══════════════════════════════════════════════════════════════════════════
    # VARIABLE ERRORS (2000-2999)
    # ═══════════════════════════════════════════════════════════════════════════

    INVALID_VARIABLE_NAME = ErrorCode(2000, ErrorCategory.VARIABLE)
    REDEFINED_VARIABLE = ErrorCode(2001, ErrorCategory.VARIABLE)
    UNDECLARED_VARIABLE = ErrorCode(2002, ErrorCategory.VARIABLE)
    UNINITIALIZED_VARIABLE = ErrorCode(2003, ErrorCategory.VARIABLE)
    FINAL_REASSIGNMENT = ErrorCode(2004, ErrorCategory.VARIABLE)
    FINAL_WITHOUT_VALUE = ErrorCode(2005, ErrorCategory.VARIABLE)
    TYPE_MISMATCH = ErrorCode(2006, ErrorCategory.VARIABLE)
    INVALID_VALUE = ErrorCode(2007, ErrorCategory.VARIABLE)

    # ═══════════════════════════════════════════════════════════════════════════
    # METHOD ERRORS (3000-3999)
    # ═══════════════════════════════════════════════════════════════════════════

    INVALID_METHOD_NAME = ErrorCode(3000, ErrorCategory.METHOD)
    REDEFINED_METHOD = ErrorCode(3001, ErrorCategory.METHOD)
    UNDECLARED_METHOD = ErrorCode(3002, ErrorCategory.METHOD)
    ARITY_MISMATCH = ErrorCode(3003, ErrorCategory.METHOD)
    ARGUMENT_TYPE_MISMATCH = ErrorCode(3004, ErrorCategory.METHOD)
    INVALID_ARGUMENT = ErrorCode(3005, ErrorCategory.METHOD)
    INVALID_PARAMETER = ErrorCode(3006, ErrorCategory.METHOD)
    MISSING_RETURN = ErrorCode(3007, ErrorCategory.METHOD)
    EMPTY_METHOD = ErrorCode(3008, ErrorCategory.METHOD)

    # ═══════════════════════════════════════════════════════════════════════════
    # CONDITION ERRORS (4000-4999)
    # ═══════════════════════════════════════════════════════════════════════════

    INVALID_CONDITION_TOKEN = ErrorCode(4000, ErrorCategory.CONDITION)
    MISPLACED_OPERATOR = ErrorCode(4001, ErrorCategory.CONDITION)
    EMPTY_OPERAND = ErrorCode(4002, ErrorCategory.CONDITION)
    UNDECLARED_IN_CONDITION = ErrorCode(4003, ErrorCategory.CONDITION)
    INVALID_CONDITION_TYPE = ErrorCode(4004, ErrorCategory.CONDITION)

    # ═══════════════════════════════════════════════════════════════════════════
    # SOURCE ERRORS (9000-9999)
    # ═══════════════════════════════════════════════════════════════════════════

    FILE_NOT_FOUND = ErrorCode(9000, ErrorCategory.SOURCE)
    UNREADABLE_FILE = ErrorCode(9001, ErrorCategory.SOURCE)
    BAD_SUFFIX = ErrorCode(9002, ErrorCategory.SOURCE)


E = SjavaErrorCodes


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE LOCATION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """
    Location of an error.  ``line == 0`` means "no specific line", used for
    whole-unit failures such as an unterminated block.
    """

    file: str = ""
    line: int = 0

    def with_file(self, file: str) -> "SourceSpan":
        return SourceSpan(file=file, line=self.line)

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"
        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
        return ":".join(parts)


@dataclass
class ErrorNote:
    """Extra context attached to an error, e.g. where a name was first declared."""

    message: str
    line: int = 0
    label: str = "note"

    def __str__(self) -> str:
        prefix = f"{self.label}: " if self.label else ""
        if self.line:
            return f"line {self.line}: {prefix}{self.message}"
        return f"{prefix}{self.message}"


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class SjavaError(Exception):
    """
    Base exception for every verification failure.

    Carries a human-readable message, an ``ErrorCode`` and the original
    source line of the offending statement.
    """

    default_code: ErrorCode = E.INVALID_STATEMENT

    def __init__(
        self,
        message: str,
        line: int = 0,
        code: Optional[ErrorCode] = None,
        file: str = "",
        notes: Optional[List[ErrorNote]] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.span = SourceSpan(file=file, line=line)
        self.notes: List[ErrorNote] = list(notes or [])
        self.hint = hint

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def category(self) -> ErrorCategory:
        return self.code.category

    @property
    def exit_code(self) -> int:
        return EXIT_INVALID

    def add_note(self, message: str, line: int = 0, label: str = "note") -> "SjavaError":
        self.notes.append(ErrorNote(message=message, line=line, label=label))
        return self

    def with_hint(self, hint: str) -> "SjavaError":
        self.hint = hint
        return self

    def with_file(self, file: str) -> "SjavaError":
        """Attach the source file name (the core only knows line numbers)."""
        self.span = self.span.with_file(file)
        return self

    def to_gcc_format(self) -> str:
        """Format as ``file:line: error: message [SJV-NNNN]``."""
        lines = [f"{self.span}: error: {self.message} [{self.code}]"]
        for note in self.notes:
            lines.append(str(note))
        if self.hint:
            lines.append(f"hint: {self.hint}")
        return "\n".join(lines)

    def to_json(self) -> Dict[str, Any]:
        return {
            "code": self.code.code,
            "category": self.category.value,
            "message": self.message,
            "location": {
                "file": self.span.file,
                "line": self.span.line,
            },
            "notes": [
                {"message": n.message, "line": n.line, "label": n.label}
                for n in self.notes
            ],
            "hint": self.hint,
        }

    def __str__(self) -> str:
        if self.line > 0:
            return f"Error at line {self.line}: {self.message}"
        return self.message


# ───────────────────────────────────────────────────────────────────────────────
# SCOPE-STRUCTURE ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class ScopeError(SjavaError):
    """Structural error: unrecognized statement, misplaced construct."""

    default_code = E.INVALID_STATEMENT


class UnterminatedBlockError(ScopeError):
    """A block or method body whose closing brace is never found."""

    def __init__(self, kind: str, opened_at: int, **kwargs: Any) -> None:
        super().__init__(
            f"Unclosed {kind} opened at line {opened_at}",
            line=0,
            code=E.UNTERMINATED_BLOCK,
            **kwargs,
        )
        self.opened_at = opened_at


# ───────────────────────────────────────────────────────────────────────────────
# VARIABLE ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class VariableError(SjavaError):
    """Variable naming, declaration, initialization or typing error."""

    default_code = E.INVALID_VALUE


class RedefinedVariableError(VariableError):
    """A name declared twice in the same scope."""

    def __init__(self, name: str, line: int, original_line: int = 0, **kwargs: Any) -> None:
        super().__init__(
            f"Variable already declared in this scope: {name}",
            line=line,
            code=E.REDEFINED_VARIABLE,
            **kwargs,
        )
        self.symbol = name
        if original_line:
            self.add_note("previously declared here", line=original_line)


class UndeclaredVariableError(VariableError):
    """Reference to a name with no declaration in the scope chain."""

    def __init__(self, name: str, line: int, **kwargs: Any) -> None:
        super().__init__(
            f"Variable not declared: {name}",
            line=line,
            code=E.UNDECLARED_VARIABLE,
            **kwargs,
        )
        self.symbol = name


class UninitializedVariableError(VariableError):
    """Use of a declared variable before it was given a value."""

    def __init__(self, name: str, line: int, **kwargs: Any) -> None:
        super().__init__(
            f"Variable not initialized: {name}",
            line=line,
            code=E.UNINITIALIZED_VARIABLE,
            **kwargs,
        )
        self.symbol = name


# ───────────────────────────────────────────────────────────────────────────────
# METHOD ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class MethodError(SjavaError):
    """Method signature, call or return-rule error."""

    default_code = E.UNDECLARED_METHOD


class RedefinedMethodError(MethodError):
    """Two methods with the same name (there is no overloading)."""

    def __init__(self, name: str, line: int, original_line: int = 0, **kwargs: Any) -> None:
        super().__init__(
            f"Method already declared: {name}",
            line=line,
            code=E.REDEFINED_METHOD,
            **kwargs,
        )
        self.symbol = name
        if original_line:
            self.add_note("previously declared here", line=original_line)


# ───────────────────────────────────────────────────────────────────────────────
# CONDITION ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class ConditionError(SjavaError):
    """Malformed ``if``/``while`` condition."""

    default_code = E.INVALID_CONDITION_TOKEN


# ───────────────────────────────────────────────────────────────────────────────
# SOURCE ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SourceError(SjavaError):
    """The source file could not be acquired; maps to exit code 2."""

    default_code = E.UNREADABLE_FILE

    @property
    def exit_code(self) -> int:
        return EXIT_SOURCE
