# tests/test_scope.py
"""
Tests for the scope tree: declarations, assignments, lookups with
shadowing, initialization tracking, method calls and the return rule.
"""

import pytest

from sjavac.config import VerifierConfig
from sjavac.errors import (
    E,
    ConditionError,
    MethodError,
    RedefinedMethodError,
    RedefinedVariableError,
    ScopeError,
    UndeclaredVariableError,
    UninitializedVariableError,
    UnterminatedBlockError,
    VariableError,
)
from sjavac.literals import VarType
from sjavac.scope import BlockScope, FileScope, MethodScope
from sjavac.verifier import scope_tree_to_dict, verify_lines, verify_source
from tests.conftest import VALID_PROGRAM, lines


def fails(error_type, *texts, config=None):
    """Validate *texts* and return the raised error (which must occur)."""
    with pytest.raises(error_type) as exc_info:
        verify_lines(lines(*texts), config)
    return exc_info.value


# ---------------------------------------------------------------------------
# Tree shape
# ---------------------------------------------------------------------------

class TestScopeTree:

    @pytest.fixture(scope="class")
    def root(self):
        return verify_source(VALID_PROGRAM)

    def test_root_is_file_scope(self, root):
        assert isinstance(root, FileScope)
        assert root.parent is None
        assert root.depth == 0

    def test_methods_in_registration_order(self, root):
        assert [child.name for child in root.children] == ["main", "helper"]
        assert all(isinstance(child, MethodScope) for child in root.children)

    def test_body_scope_attached(self, root):
        for method in root.methods:
            assert method.body_scope is not None
            assert method.body_scope.method is method

    def test_nested_blocks(self, root):
        main = root.children[0]
        (if_block,) = main.children
        (while_block,) = if_block.children
        assert isinstance(if_block, BlockScope)
        assert (if_block.keyword, if_block.condition) == ("if", "flag && a")
        assert (while_block.keyword, while_block.condition) == ("while", "RATE || false")
        assert while_block.parent is if_block
        assert while_block.depth == 3

    def test_line_ranges(self, root):
        main, helper = root.children
        assert (main.first_line, main.last_line) == (6, 17)
        assert (helper.first_line, helper.last_line) == (19, 22)
        assert (main.children[0].first_line, main.children[0].last_line) == (9, 14)

    def test_declarations_reachable(self, root):
        main = root.children[0]
        while_block = main.children[0].children[0]
        for name in ("count", "RATE", "name", "a", "flag", "local", "c"):
            assert while_block.find_variable(name) is not None, name

    def test_parameters(self, root):
        main = root.children[0]
        flag = main.variables.lookup("flag")
        assert flag.is_parameter and flag.is_final and flag.is_initialized
        assert flag.var_type is VarType.BOOLEAN

    def test_global_copy_isolated_from_file_scope(self, root):
        main = root.children[0]
        assert main.global_copies.lookup("name").is_initialized
        assert not root.variables.lookup("name").is_initialized

    def test_last_statement_is_return(self, root):
        line, statement = root.children[0].last_statement
        assert line == 16
        assert statement.kind == "return"

    def test_validation_is_repeatable(self):
        first = scope_tree_to_dict(verify_source(VALID_PROGRAM))
        second = scope_tree_to_dict(verify_source(VALID_PROGRAM))
        assert first == second

    def test_failure_is_repeatable(self):
        source = lines("int x = 5;", "int x = 6;")
        errors = []
        for _ in range(2):
            with pytest.raises(RedefinedVariableError) as exc_info:
                verify_lines(source)
            errors.append((exc_info.value.code, exc_info.value.line))
        assert errors[0] == errors[1] == (E.REDEFINED_VARIABLE, 2)


# ---------------------------------------------------------------------------
# Declarations and assignments
# ---------------------------------------------------------------------------

class TestDeclarations:

    def test_duplicate_at_file_scope(self):
        err = fails(RedefinedVariableError, "int x = 5;", "int x = 6;")
        assert err.line == 2

    def test_duplicate_of_different_type(self):
        err = fails(RedefinedVariableError, "int x;", "String x;")
        assert err.line == 2

    def test_duplicate_on_one_line(self):
        err = fails(RedefinedVariableError, "int a = 1, a = 2;")
        assert err.line == 1

    def test_later_entries_see_earlier_ones(self):
        root = verify_lines(lines("int a = 1, b = a;"))
        assert root.variables.lookup("b").is_initialized

    def test_final_without_value(self):
        err = fails(VariableError, "final int a;", "a = 5;")
        assert err.code == E.FINAL_WITHOUT_VALUE
        assert err.line == 1

    @pytest.mark.parametrize("text", ["int 2x = 5;", "int _ = 5;", "int __a;", "int while = 1;"])
    def test_invalid_name(self, text):
        err = fails(VariableError, text)
        assert err.code == E.INVALID_VARIABLE_NAME

    def test_widening(self):
        root = verify_lines(lines("boolean b = 3.5;", "double d = 1;", "boolean c = d;"))
        assert len(root.variables) == 3

    def test_type_mismatch(self):
        err = fails(VariableError, "int i = 3.5;")
        assert err.code == E.TYPE_MISMATCH
        assert err.line == 1

    def test_type_mismatch_through_variable(self):
        err = fails(VariableError, "double d = 1.5;", "int i = d;")
        assert err.code == E.TYPE_MISMATCH
        assert err.line == 2

    def test_char_and_string_do_not_mix(self):
        assert fails(VariableError, 'char c = "a";').code == E.TYPE_MISMATCH
        assert fails(VariableError, "String s = 'a';").code == E.TYPE_MISMATCH

    def test_invalid_value(self):
        err = fails(VariableError, "int a = 1 + 2;")
        assert err.code == E.INVALID_VALUE

    def test_undeclared_value(self):
        err = fails(UndeclaredVariableError, "int a = b;")
        assert err.line == 1

    def test_uninitialized_value(self):
        err = fails(UninitializedVariableError, "int a;", "int b = a;")
        assert err.line == 2

    def test_assignment_initializes(self):
        root = verify_lines(lines("int a;", "a = 3;", "int b = a;"))
        assert root.variables.lookup("a").is_initialized

    def test_assignment_to_undeclared(self):
        err = fails(UndeclaredVariableError, "a = 3;")
        assert err.line == 1

    def test_final_reassignment(self):
        err = fails(VariableError, "final int a = 1;", "a = 2;")
        assert err.code == E.FINAL_REASSIGNMENT
        assert err.line == 2

    def test_reassigning_non_final_is_fine(self):
        verify_lines(lines("int a = 1;", "a = 2, a = 3;"))

    def test_missing_space_after_type(self):
        err = fails(ScopeError, "intx;")
        assert err.code == E.INVALID_STATEMENT


# ---------------------------------------------------------------------------
# File-scope structure
# ---------------------------------------------------------------------------

class TestFileScope:

    def test_call_outside_method(self):
        err = fails(ScopeError, "void foo() {", "return;", "}", "foo();")
        assert err.code == E.CALL_OUTSIDE_METHOD
        assert err.line == 4

    @pytest.mark.parametrize("text", ["if (true) {", "while (true) {", "return;"])
    def test_control_flow_outside_method(self, text):
        err = fails(ScopeError, "int a;", text, "}")
        assert err.code == E.INVALID_STATEMENT
        assert err.line == 2

    def test_stray_close(self):
        err = fails(ScopeError, "int a;", "}")
        assert err.code == E.UNEXPECTED_CLOSE

    def test_globals_after_method_are_visible(self):
        verify_lines(lines(
            "void foo() {",
            "int b = late;",
            "return;",
            "}",
            "int late = 1;",
        ))

    def test_duplicate_method(self):
        err = fails(
            RedefinedMethodError,
            "void f(int a) {", "return;", "}",
            "void f(double b) {", "return;", "}",
        )
        assert err.line == 4

    def test_method_and_variable_may_share_a_name(self):
        verify_lines(lines("int foo = 1;", "void foo() {", "foo();", "return;", "}"))

    @pytest.mark.parametrize("header", ["void _foo() {", "void 1foo() {", "void while() {"])
    def test_invalid_method_name(self, header):
        err = fails(MethodError, header, "return;", "}")
        assert err.code == E.INVALID_METHOD_NAME
        assert err.line == 1

    @pytest.mark.parametrize("header", [
        "void foo(int a,) {",
        "void foo(, int a) {",
        "void foo(int a,, int b) {",
        "void foo(inta) {",
        "void foo(int a b) {",
        "void foo(int a, double a) {",
    ])
    def test_bad_parameter_list(self, header):
        err = fails(MethodError, header, "return;", "}")
        assert err.code == E.INVALID_PARAMETER
        assert err.line == 1

    def test_invalid_parameter_name(self):
        err = fails(VariableError, "void foo(int _) {", "return;", "}")
        assert err.code == E.INVALID_VARIABLE_NAME

    def test_nested_method_declaration(self):
        err = fails(ScopeError, "void foo() {", "void bar() {", "return;", "}", "return;", "}")
        assert err.line == 2

    def test_unterminated_method(self):
        err = fails(UnterminatedBlockError, "void foo() {", "return;")
        assert err.line == 0
        assert err.opened_at == 1

    def test_unterminated_block(self):
        err = fails(UnterminatedBlockError, "void foo() {", "if (true) {", "return;", "}")
        assert err.line == 0
        assert err.opened_at == 1

    def test_closing_line_must_be_a_lone_brace(self):
        err = fails(ScopeError, "void foo() {", "return; }")
        assert err.code == E.INVALID_STATEMENT
        assert err.line == 2


# ---------------------------------------------------------------------------
# Initialization tracking and shadowing
# ---------------------------------------------------------------------------

class TestInitialization:

    def test_shadowing_initializer_reads_outer_variable(self):
        root = verify_lines(lines(
            "int a = 5;",
            "void f() {",
            "int a = a;",
            "return;",
            "}",
        ))
        local = root.children[0].variables.lookup("a")
        assert local.is_initialized
        assert local.decl_line == 3

    def test_shadowing_initializer_in_block(self):
        verify_lines(lines(
            "void f(double d) {",
            "if (true) {",
            "double d = d;",
            "}",
            "return;",
            "}",
        ))

    def test_initializer_reads_uninitialized_outer_variable(self):
        err = fails(
            UninitializedVariableError,
            "int a;",
            "void f() {",
            "int a = a;",
            "return;",
            "}",
        )
        assert err.line == 3

    def test_initializer_cannot_read_its_own_name(self):
        err = fails(UndeclaredVariableError, "void f() {", "int a = a;", "return;", "}")
        assert err.line == 2

    def test_redefinition_reported_before_value(self):
        err = fails(
            RedefinedVariableError,
            "void f() {",
            "int a = 1;",
            "int a = missing;",
            "return;",
            "}",
        )
        assert err.line == 3

    def test_global_initialized_in_nested_block(self):
        verify_lines(lines(
            "int x;",
            "void foo() {",
            "if (true) {",
            "x = 1;",
            "}",
            "int y = x;",
            "return;",
            "}",
        ))

    def test_global_uninitialized_before_assignment(self):
        err = fails(
            UninitializedVariableError,
            "int x;",
            "void foo() {",
            "int y = x;",
            "x = 1;",
            "return;",
            "}",
        )
        assert err.line == 3

    def test_method_shadow_isolation(self):
        err = fails(
            UninitializedVariableError,
            "int x;",
            "void foo() {",
            "x = 1;",
            "int y = x;",
            "return;",
            "}",
            "void bar() {",
            "int z = x;",
            "return;",
            "}",
        )
        assert err.line == 8

    def test_global_initialized_at_file_scope_is_shared(self):
        verify_lines(lines(
            "int x;",
            "x = 2;",
            "void foo() {",
            "int y = x;",
            "return;",
            "}",
        ))

    def test_local_initialized_in_block_propagates_up(self):
        root = verify_lines(lines(
            "void foo() {",
            "int a;",
            "while (true) {",
            "a = 5;",
            "}",
            "int b = a;",
            "return;",
            "}",
        ))
        method = root.children[0]
        assert method.variables.lookup("a").is_initialized

    def test_block_locals_invisible_to_siblings(self):
        err = fails(
            UndeclaredVariableError,
            "void foo() {",
            "if (true) {",
            "int inner = 1;",
            "}",
            "if (true) {",
            "int c = inner;",
            "}",
            "return;",
            "}",
        )
        assert err.line == 6

    def test_block_locals_invisible_after_block(self):
        err = fails(
            UndeclaredVariableError,
            "void foo() {",
            "if (true) {",
            "int inner = 1;",
            "}",
            "inner = 2;",
            "return;",
            "}",
        )
        assert err.line == 5

    def test_shadowing_in_block(self):
        verify_lines(lines(
            "int a = 1;",
            "void foo(int a) {",
            "if (true) {",
            'String a = "x";',
            "}",
            "return;",
            "}",
        ))

    def test_parameter_shadows_uninitialized_global(self):
        root = verify_lines(lines(
            "int g;",
            "void foo(int g) {",
            "int h = g;",
            "return;",
            "}",
        ))
        assert root.children[0].global_copies.lookup("g") is None

    def test_local_redeclaring_parameter(self):
        err = fails(RedefinedVariableError, "void foo(int a) {", "int a = 1;", "return;", "}")
        assert err.line == 2

    def test_final_parameter_cannot_be_assigned(self):
        err = fails(VariableError, "void foo(final int a) {", "a = 1;", "return;", "}")
        assert err.code == E.FINAL_REASSIGNMENT

    def test_parameter_can_be_assigned(self):
        verify_lines(lines("void foo(int a) {", "a = 1;", "return;", "}"))


# ---------------------------------------------------------------------------
# Method calls
# ---------------------------------------------------------------------------

class TestMethodCalls:

    def test_forward_and_mutual_recursion(self):
        verify_lines(lines(
            "void a(int n) {",
            "b(n);",
            "return;",
            "}",
            "void b(int n) {",
            "a(n);",
            "b(1);",
            "return;",
            "}",
        ))

    def test_undeclared_method(self):
        err = fails(MethodError, "void foo() {", "bar();", "return;", "}")
        assert err.code == E.UNDECLARED_METHOD
        assert err.line == 2

    def test_arity(self):
        err = fails(MethodError, "void foo(int a) {", "foo(1, 2);", "return;", "}")
        assert err.code == E.ARITY_MISMATCH

    def test_argument_widening(self):
        verify_lines(lines(
            "void foo(double d, boolean b) {",
            "foo(1, 2.5);",
            "foo(d, d);",
            "return;",
            "}",
        ))

    def test_argument_type_mismatch(self):
        err = fails(MethodError, 'void foo(int a) {', 'foo("s");', "return;", "}")
        assert err.code == E.ARGUMENT_TYPE_MISMATCH

    def test_argument_variable_type_mismatch(self):
        err = fails(MethodError, "void foo(int a) {", "double d = 1.0;", "foo(d);", "return;", "}")
        assert err.code == E.ARGUMENT_TYPE_MISMATCH
        assert err.line == 3

    def test_uninitialized_argument(self):
        err = fails(UninitializedVariableError, "void foo(int a) {", "int b;", "foo(b);", "return;", "}")
        assert err.line == 3

    def test_empty_argument(self):
        err = fails(MethodError, "void foo(int a, int b) {", "foo(1,);", "return;", "}")
        assert err.code == E.INVALID_ARGUMENT

    def test_invalid_argument(self):
        err = fails(MethodError, "void foo(int a) {", "foo(1 + 1);", "return;", "}")
        assert err.code == E.INVALID_ARGUMENT


# ---------------------------------------------------------------------------
# Return rule, blocks and conditions
# ---------------------------------------------------------------------------

class TestReturnRule:

    def test_call_as_last_statement(self):
        err = fails(MethodError, "void foo() {", "foo();", "}")
        assert err.code == E.MISSING_RETURN
        assert err.line == 2

    def test_empty_method(self):
        err = fails(MethodError, "void foo() {", "}")
        assert err.code == E.EMPTY_METHOD
        assert err.line == 1

    def test_statement_after_return(self):
        err = fails(MethodError, "void foo() {", "return;", "int a = 1;", "}")
        assert err.code == E.MISSING_RETURN
        assert err.line == 3

    def test_nested_trailing_return_counts(self):
        verify_lines(lines("void foo() {", "if (true) {", "return;", "}", "}"))

    def test_block_after_return(self):
        err = fails(MethodError, "void foo() {", "return;", "while (true) {", "int a;", "}", "}")
        assert err.line == 4

    def test_return_inside_block_is_legal(self):
        verify_lines(lines("void foo() {", "while (true) {", "return;", "}", "return;", "}"))


class TestBlocks:

    def test_condition_failure(self):
        err = fails(ConditionError, "void foo() {", "while (a || ) {", "}", "return;", "}")
        assert err.code == E.MISPLACED_OPERATOR
        assert err.line == 2

    def test_condition_checked_against_scope(self):
        verify_lines(lines(
            "void foo(int n) {",
            "boolean done = false;",
            "while (done || n) {",
            "done = true;",
            "}",
            "return;",
            "}",
        ))

    def test_error_inside_block_surfaces_first(self):
        err = fails(
            VariableError,
            "void foo() {",
            "if (true) {",
            "int a = 1.5;",
            "}",
            "int b = 1.5;",
            "return;",
            "}",
        )
        assert err.line == 3

    def test_unrecognized_in_body(self):
        err = fails(ScopeError, "void foo() {", "int a = 5", "return;", "}")
        assert err.code == E.INVALID_STATEMENT
        assert err.line == 2

    def test_brace_in_string_literal(self):
        verify_lines(lines("void foo() {", 'String s = "}";', "return;", "}"))

    def test_brace_in_string_literal_raw_mode(self):
        config = VerifierConfig(literal_aware_braces=False)
        err = fails(
            ScopeError,
            "void foo() {", 'String s = "}";', "return;", "}",
            config=config,
        )
        assert err.line == 3

    def test_deep_nesting_is_valid(self):
        # Deeper than the interpreter's default recursion limit.
        depth = 1100
        texts = (
            ["int g;", "void foo() {"]
            + ["if (true) {" if level % 2 else "while (true) {" for level in range(depth)]
            + ["g = 1;"]
            + ["}"] * depth
            + ["int h = g;", "return;", "}"]
        )
        root = verify_lines(lines(*texts))
        scope = root.children[0]
        for _ in range(depth):
            scope = scope.children[0]
        assert isinstance(scope, BlockScope)
        assert scope.depth == depth + 1
        assert scope.first_line == depth + 2
        assert scope.find_variable("g").is_initialized

    def test_error_deep_inside_nesting(self):
        depth = 300
        texts = (
            ["void foo() {"]
            + ["if (true) {"] * depth
            + ["int a = 1.5;"]
            + ["}"] * depth
            + ["return;", "}"]
        )
        err = fails(VariableError, *texts)
        assert err.code == E.TYPE_MISMATCH
        assert err.line == depth + 2

    def test_block_closing_line_checked_after_nested_block(self):
        err = fails(
            ScopeError,
            "void foo() {",
            "if (true) {",
            "while (true) {",
            "}",
            "return; }",
            "return;",
            "}",
        )
        assert err.code == E.INVALID_STATEMENT
        assert err.line == 5

    def test_empty_block_is_fine(self):
        verify_lines(lines("void foo() {", "if (true) {", "}", "return;", "}"))
