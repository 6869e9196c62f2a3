from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    AviiRuntimeError,
    DivisionByZeroError,
    LexError,
    NonBooleanConditionError,
    ParseError,
    TypeMismatchError,
    UndefinedVariableError,
    run_program,
)
from avii_ref.evaluator import evaluate
from avii_ref.runtime import (
    ArityMismatchError,
    AssignToConstantError,
    AviiInternalError,
    CallDepthExceededError,
    DuplicateDefinitionError,
    Environment,
    InvalidPropertyAccessError,
    NotCallableError,
    UnknownOperatorError,
)
from avii_ref.tree import mk_tree


@pytest.mark.parametrize(
    "exc_type",
    [
        UndefinedVariableError,
        DuplicateDefinitionError,
        AssignToConstantError,
        DivisionByZeroError,
        ArityMismatchError,
        NonBooleanConditionError,
        UnknownOperatorError,
        InvalidPropertyAccessError,
        TypeMismatchError,
        NotCallableError,
        CallDepthExceededError,
    ],
    ids=lambda exc: exc.__name__,
)
def test_runtime_errors_share_base(exc_type: type) -> None:
    assert issubclass(exc_type, AviiRuntimeError)


def test_internal_error_is_not_a_runtime_error() -> None:
    assert not issubclass(AviiInternalError, AviiRuntimeError)


def test_runtime_error_str_without_line() -> None:
    err = DivisionByZeroError("Division by zero")
    assert str(err) == "Division by zero"

    err.line = 3
    assert str(err) == "Division by zero (line 3)"


def test_runtime_error_reports_innermost_line() -> None:
    source = dedent(
        """\
        let a = 1;
        let b = 2;
        let c = a +
          (b / 0);
        """
    )
    with pytest.raises(DivisionByZeroError) as exc_info:
        run_program(source)

    assert exc_info.value.line == 4
    assert "(line 4)" in str(exc_info.value)


def test_error_inside_function_reports_body_line() -> None:
    source = dedent(
        """\
        func boom() {
          missing_name
        }
        boom()
        """
    )
    with pytest.raises(UndefinedVariableError) as exc_info:
        run_program(source)

    assert exc_info.value.line == 2
    assert "missing_name" in str(exc_info.value)


def test_error_messages_name_the_problem() -> None:
    with pytest.raises(AssignToConstantError, match="constant 'k'"):
        run_program("const k = 1; k = 2;")

    with pytest.raises(TypeMismatchError, match="string and bool"):
        run_program('"a" * true')

    with pytest.raises(NotCallableError, match="number"):
        run_program("5()")

    with pytest.raises(UnknownOperatorError, match="'and' is not defined for two numbers"):
        run_program("1 and 2")


def test_lex_and_parse_errors_surface_before_evaluation() -> None:
    env = Environment.global_scope()
    with pytest.raises(LexError):
        run_program("let side = 1; @", env)
    with pytest.raises(ParseError):
        run_program("let side = 1; let", env)

    # Nothing ran, so the name is still free.
    assert env.get("side") is None


def test_state_before_runtime_error_is_kept() -> None:
    env = Environment.global_scope()
    with pytest.raises(DivisionByZeroError):
        run_program("let kept = 1; 1 / 0; let lost = 2;", env)

    assert env.get("kept") is not None
    assert env.get("lost") is None


def test_unknown_node_is_internal_error() -> None:
    with pytest.raises(AviiInternalError):
        evaluate(mk_tree("mystery", []), Environment.global_scope())


def test_evaluate_accepts_expression_nodes() -> None:
    from avii_ref.parser_rd import parse_expr_fragment

    result = evaluate(parse_expr_fragment("PI * 0 + 2"))
    assert result.value == 2
