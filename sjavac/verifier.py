"""
Verification driver.

Ties preprocessing, scope construction and validation together, and
dumps a validated scope tree for inspection::

    from sjavac.verifier import check_file

    report = check_file("program.sjava")
    if not report.ok:
        print(report.error.to_gcc_format())

Depends on:
    - sexpdata (S-expression rendering of the scope tree)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import sexpdata
from sexpdata import Symbol

from sjavac.config import VerifierConfig
from sjavac.errors import EXIT_VALID, SjavaError
from sjavac.preprocess import SourceLine, preprocess, read_source
from sjavac.scope import BlockScope, FileScope, MethodScope, Scope, ValidationContext
from sjavac.symbols import Variable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def verify_lines(
    lines: Iterable[SourceLine],
    config: Optional[VerifierConfig] = None,
) -> FileScope:
    """Validate normalized *lines*; return the validated root scope.

    Raises the first :class:`~sjavac.errors.SjavaError` encountered.
    """
    context = ValidationContext(
        lines=tuple(SourceLine(*line) for line in lines),
        config=config or VerifierConfig(),
    )
    root = FileScope(context)
    root.validate()
    return root


def verify_source(
    text: str,
    config: Optional[VerifierConfig] = None,
    filename: Optional[str] = None,
) -> FileScope:
    """Preprocess and validate the source *text*."""
    try:
        return verify_lines(preprocess(text), config)
    except SjavaError as exc:
        if filename:
            exc.with_file(filename)
        raise


def verify_file(
    path: Union[str, Path],
    config: Optional[VerifierConfig] = None,
) -> FileScope:
    config = config or VerifierConfig()
    text = read_source(path, config)
    return verify_source(text, config, filename=str(path))


@dataclass
class VerificationReport:
    """Outcome of :func:`check_file`."""

    path: str
    ok: bool
    exit_code: int
    elapsed: float
    error: Optional[SjavaError] = None
    root: Optional[FileScope] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "file": self.path,
            "ok": self.ok,
            "exit_code": self.exit_code,
            "elapsed": round(self.elapsed, 6),
            "error": self.error.to_json() if self.error is not None else None,
        }


def check_file(
    path: Union[str, Path],
    config: Optional[VerifierConfig] = None,
) -> VerificationReport:
    """Verify *path* and return a report instead of raising."""
    t0 = time.monotonic()
    try:
        root = verify_file(path, config)
    except SjavaError as exc:
        elapsed = time.monotonic() - t0
        logger.info("%s: invalid (%s) in %.3fs", path, exc.code, elapsed)
        return VerificationReport(
            path=str(path),
            ok=False,
            exit_code=exc.exit_code,
            elapsed=elapsed,
            error=exc,
        )
    elapsed = time.monotonic() - t0
    logger.info("%s: valid in %.3fs", path, elapsed)
    return VerificationReport(
        path=str(path),
        ok=True,
        exit_code=EXIT_VALID,
        elapsed=elapsed,
        root=root,
    )


# ---------------------------------------------------------------------------
# Scope-tree dumps
# ---------------------------------------------------------------------------

def _variable_to_dict(variable: Variable) -> Dict[str, Any]:
    return {
        "name": variable.name,
        "type": str(variable.var_type),
        "final": variable.is_final,
        "initialized": variable.is_initialized,
        "parameter": variable.is_parameter,
        "line": variable.decl_line,
    }


def scope_tree_to_dict(scope: Scope) -> Dict[str, Any]:
    """JSON-friendly nested dict of *scope* and its descendants."""
    result: Dict[str, Any] = {
        "kind": scope.kind,
        "lines": [scope.first_line, scope.last_line],
    }
    if isinstance(scope, MethodScope):
        result["name"] = scope.name
        result["signature"] = scope.method.signature
    elif isinstance(scope, BlockScope):
        result["keyword"] = scope.keyword
        result["condition"] = scope.condition
    result["variables"] = [_variable_to_dict(v) for v in scope.variables]
    if isinstance(scope, MethodScope):
        result["global_copies"] = [_variable_to_dict(v) for v in scope.global_copies]
    result["children"] = [scope_tree_to_dict(child) for child in scope.children]
    return result


def _variable_to_sexp(variable: Variable) -> List[Any]:
    item: List[Any] = [
        Symbol("var"),
        Symbol(variable.name),
        Symbol(str(variable.var_type)),
        Symbol("initialized" if variable.is_initialized else "uninitialized"),
    ]
    if variable.is_final:
        item.append(Symbol("final"))
    if variable.is_parameter:
        item.append(Symbol("param"))
    return item


def _scope_to_sexp(scope: Scope) -> List[Any]:
    node: List[Any] = [Symbol(scope.kind)]
    if isinstance(scope, MethodScope):
        node.append(Symbol(scope.name))
    elif isinstance(scope, BlockScope):
        node.extend([Symbol(scope.keyword), scope.condition])
    node.append([Symbol("lines"), scope.first_line, scope.last_line])
    node.extend(_variable_to_sexp(v) for v in scope.variables)
    node.extend(_scope_to_sexp(child) for child in scope.children)
    return node


def scope_tree_to_sexp(scope: Scope) -> str:
    """Render *scope* as an S-expression, e.g.
    ``(file (lines 1 9) (var a int initialized) (method foo (lines 3 9)))``."""
    return sexpdata.dumps(_scope_to_sexp(scope))
