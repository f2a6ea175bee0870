# tests/conftest.py
"""
Shared helpers, fixtures and sample programs for the sjavac test-suite.
"""

import textwrap

import pytest

from sjavac.preprocess import SourceLine


def lines(*texts):
    """Number *texts* 1..n as already-normalized source lines."""
    return [SourceLine(number, text) for number, text in enumerate(texts, start=1)]


def source(text):
    return textwrap.dedent(text).lstrip("\n")


# ---------------------------------------------------------------------------
# Sample programs
# ---------------------------------------------------------------------------

VALID_PROGRAM = source("""
    // globals
    int count = 0;
    final double RATE = 1.5;
    String name;

    void main(int a, final boolean flag) {
        name = "sjava";
        int local = a;
        if (flag && a) {
            count = local;
            while (RATE || false) {
                char c = 'x';
            }
        }
        helper(a, 2.5);
        return;
    }

    void helper(int x, double y) {
        boolean b = y;
        return;
    }
""")

# Method call with a wrong argument type on line 3.
INVALID_PROGRAM = source("""
    void foo(int a) {
        String s = "text";
        foo(s);
        return;
    }
""")


@pytest.fixture
def valid_file(tmp_path):
    path = tmp_path / "valid.sjava"
    path.write_text(VALID_PROGRAM, encoding="utf-8")
    return path


@pytest.fixture
def invalid_file(tmp_path):
    path = tmp_path / "invalid.sjava"
    path.write_text(INVALID_PROGRAM, encoding="utf-8")
    return path
