from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    NonBooleanConditionError,
    UndefinedVariableError,
    run_program,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("if true { 1 } else { 2 }", ("number", 1), None, id="then-branch"),
    pytest.param("if false { 1 } else { 2 }", ("number", 2), None, id="else-branch"),
    pytest.param("if false { 1 }", ("null", None), None, id="no-else-gives-null"),
    pytest.param("if true { }", ("null", None), None, id="empty-branch"),
    pytest.param("let n = 2; if n == 1 { \"a\" } else if n == 2 { \"b\" } else { \"c\" }", ("string", "b"), None, id="else-if"),
    pytest.param("let n = 9; if n == 1 { \"a\" } else if n == 2 { \"b\" } else { \"c\" }", ("string", "c"), None, id="else-if-fallthrough"),
    pytest.param("let n = 9; if n == 1 { \"a\" } else if n == 2 { \"b\" }", ("null", None), None, id="else-if-no-match"),
    pytest.param("if (1 == 1) { 7 }", ("number", 7), None, id="parenthesized-test"),
    pytest.param("if 1 { 2 }", None, NonBooleanConditionError, id="number-test"),
    pytest.param('if "yes" { 2 }', None, NonBooleanConditionError, id="string-test"),
    pytest.param("if null { 2 }", None, NonBooleanConditionError, id="null-test"),
    pytest.param("if [] { 2 }", None, NonBooleanConditionError, id="array-test"),
    pytest.param("if false { undefined_name } else { 3 }", ("number", 3), None, id="untaken-branch-not-evaluated"),
    pytest.param("if true { undefined_name }", None, UndefinedVariableError, id="taken-branch-evaluated"),
    pytest.param("if true { if false { 1 } else { 2 } }", ("number", 2), None, id="nested-if"),
    pytest.param("if true and 1 == 1 { 5 }", ("number", 5), None, id="logical-test"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_control_flow(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_program_value_is_last_statement() -> None:
    assert run_program("1; 2; 3").value == 3
    assert run_program("").__class__.__name__ == "AvNull"


def test_recursive_sum_with_branching() -> None:
    source = dedent(
        """\
        func sum_to(n) {
          if n == 0 {
            0
          } else {
            n + sum_to(n - 1)
          }
        }
        sum_to(100)
        """
    )
    assert run_program(source).value == 5050


def test_branch_selected_by_function_result() -> None:
    source = dedent(
        """\
        func classify(v) {
          if v == 0 { "zero" } else if v % 2 == 0 { "even" } else { "odd" }
        }
        [classify(0), classify(3), classify(8)]
        """
    )
    items = run_program(source).items
    assert [item.value for item in items] == ["zero", "odd", "even"]
