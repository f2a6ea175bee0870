"""sjavac — static verifier for s-Java source files.

s-Java is a small C-family language: global variables, ``void`` methods,
``if``/``while`` blocks and five primitive types.  This package reads one
source unit, checks it for structural and semantic well-formedness, and
reports either success or the first violation together with the line it
originated from.

Submodules
----------
literals
    Literal/identifier predicates, ``VarType`` and the type compatibility
    table.

statements / grammar
    Statement value types and the parsimonious PEG grammar that classifies
    one normalized line into exactly one of them.

symbols
    ``Variable``, ``VariableTable``, ``Method`` and ``MethodRegistry``.

conditions
    Validation of ``if``/``while`` condition text.

scope
    The scope tree (file → method → block) and the shared
    statement-processing algorithm.

preprocess / verifier
    Line normalisation and the driver tying everything together.

errors
    Error codes (``SJV-NNNN``), ``SourceSpan`` and the exception hierarchy.

main
    Command-line entry point (``python -m sjavac FILE``).

Usage
-----
Command-line::

    python -m sjavac program.sjava
    python -m sjavac program.sjava --format json -v

Programmatic::

    from sjavac.verifier import verify_source
    from sjavac.errors import SjavaError

    try:
        root = verify_source(text)
    except SjavaError as exc:
        print(exc.line, exc)
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "config",
    "conditions",
    "errors",
    "grammar",
    "literals",
    "preprocess",
    "scope",
    "statements",
    "symbols",
    "verifier",
]
