# tests/test_symbols.py
"""
Tests for variables, per-scope variable tables and the method registry.
"""

import pytest

from sjavac.errors import E, RedefinedMethodError, RedefinedVariableError
from sjavac.literals import VarType
from sjavac.symbols import Method, MethodRegistry, Variable, VariableTable


class TestVariable:

    def test_defaults(self):
        v = Variable("a", VarType.INT)
        assert not v.is_final
        assert not v.is_initialized
        assert not v.is_parameter

    def test_parameter_is_always_initialized(self):
        v = Variable("a", VarType.INT, is_parameter=True, is_initialized=False)
        assert v.is_initialized

    def test_initialize(self):
        v = Variable("a", VarType.DOUBLE)
        v.initialize()
        v.initialize()
        assert v.is_initialized


class TestVariableTable:

    def test_declare_and_lookup(self):
        table = VariableTable()
        v = table.declare(Variable("a", VarType.INT, decl_line=3))
        assert table.lookup("a") is v
        assert "a" in table
        assert len(table) == 1
        assert list(table) == [v]

    def test_lookup_missing(self):
        assert VariableTable().lookup("nope") is None

    def test_duplicate_is_rejected_regardless_of_type(self):
        table = VariableTable()
        table.declare(Variable("a", VarType.INT, decl_line=1))
        with pytest.raises(RedefinedVariableError) as exc_info:
            table.declare(Variable("a", VarType.STRING, is_final=True, decl_line=4))
        err = exc_info.value
        assert err.line == 4
        assert err.code == E.REDEFINED_VARIABLE
        assert err.notes[0].line == 1

    def test_tables_are_independent(self):
        outer, inner = VariableTable(), VariableTable()
        outer.declare(Variable("a", VarType.INT))
        inner.declare(Variable("a", VarType.CHAR))
        assert inner.lookup("a").var_type is VarType.CHAR


class TestMethodRegistry:

    def _method(self, name, line, *params):
        return Method(
            name=name,
            parameters=[Variable(p, t, is_parameter=True) for p, t in params],
            decl_line=line,
        )

    def test_register_and_resolve(self):
        registry = MethodRegistry()
        m = registry.register(self._method("foo", 1, ("a", VarType.INT)))
        assert registry.resolve("foo") is m
        assert registry.resolve("bar") is None
        assert "foo" in registry
        assert len(registry) == 1

    def test_no_overloading(self):
        registry = MethodRegistry()
        registry.register(self._method("f", 1, ("a", VarType.INT)))
        with pytest.raises(RedefinedMethodError) as exc_info:
            registry.register(self._method("f", 5, ("b", VarType.DOUBLE)))
        assert exc_info.value.line == 5
        assert exc_info.value.code == E.REDEFINED_METHOD

    def test_iteration_keeps_registration_order(self):
        registry = MethodRegistry()
        for index, name in enumerate(("b", "a", "c")):
            registry.register(self._method(name, index + 1))
        assert [m.name for m in registry] == ["b", "a", "c"]

    def test_signature(self):
        m = self._method("foo", 1, ("a", VarType.INT), ("s", VarType.STRING))
        assert m.arity == 2
        assert m.signature == "void foo(int a, String s)"
