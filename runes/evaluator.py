# runes/evaluator.py
# ------------------------------------------------------------
# Expression evaluator + action executor
# - evaluate() is read-only over the fact mapping
# - execute_action() is the only mutating entry point
# - every failure raises a typed EngineError, never a guess
# ------------------------------------------------------------

import copy
from typing import Callable, Dict, Mapping, MutableMapping, Tuple, Type

from . import ast
from .errors import DivisionByZero, EvaluationError, UnknownVariable, ValueTypeError
from .facts import (
    ArrayValue, BooleanValue, Fact, FactValue, NullValue, NumberValue, ObjectValue, StringValue,
)

Facts = Mapping[str, Fact]


# ------------ value helpers ------------
def values_equal(left: FactValue, right: FactValue) -> bool:
    """Same-variant scalar equality; every other pairing is unequal."""
    for kind in (StringValue, NumberValue, BooleanValue):
        if isinstance(left, kind) and isinstance(right, kind):
            return left.value == right.value
    return isinstance(left, NullValue) and isinstance(right, NullValue)


def _numbers(left: FactValue, right: FactValue, verb: str) -> Tuple[float, float]:
    a, b = left.as_number(), right.as_number()
    if a is None or b is None:
        raise ValueTypeError(f"Cannot {verb} these types")
    return a, b


def _operands(expr: ast.BinaryOp, facts: Facts) -> Tuple[FactValue, FactValue]:
    # both sides always evaluated, left first
    left = evaluate(expr.left, facts)
    right = evaluate(expr.right, facts)
    return left, right


# ------------ node handlers ------------
def _eval_string(expr: ast.StringLiteral, facts: Facts) -> FactValue:
    return StringValue(expr.value)


def _eval_number(expr: ast.NumberLiteral, facts: Facts) -> FactValue:
    return NumberValue(expr.value)


def _eval_boolean(expr: ast.BooleanLiteral, facts: Facts) -> FactValue:
    return BooleanValue(expr.value)


def _eval_variable(expr: ast.Variable, facts: Facts) -> FactValue:
    fact = facts.get(expr.name)
    if fact is None:
        raise UnknownVariable(expr.name)
    return fact.value


def _eval_field_access(expr: ast.FieldAccess, facts: Facts) -> FactValue:
    obj = evaluate(expr.obj, facts).as_object()
    if obj is None:
        raise ValueTypeError("Cannot access field on non-object")
    if expr.field not in obj:
        raise EvaluationError(f"Field '{expr.field}' not found")
    return obj[expr.field]


def _eval_add(expr: ast.Add, facts: Facts) -> FactValue:
    left, right = _operands(expr, facts)
    if isinstance(left, StringValue) and isinstance(right, StringValue):
        return StringValue(left.value + right.value)
    a, b = _numbers(left, right, "add")
    return NumberValue(a + b)


def _eval_subtract(expr: ast.Subtract, facts: Facts) -> FactValue:
    a, b = _numbers(*_operands(expr, facts), "subtract")
    return NumberValue(a - b)


def _eval_multiply(expr: ast.Multiply, facts: Facts) -> FactValue:
    a, b = _numbers(*_operands(expr, facts), "multiply")
    return NumberValue(a * b)


def _eval_divide(expr: ast.Divide, facts: Facts) -> FactValue:
    a, b = _numbers(*_operands(expr, facts), "divide")
    if b == 0.0:
        raise DivisionByZero()
    return NumberValue(a / b)


def _eval_equal(expr: ast.Equal, facts: Facts) -> FactValue:
    return BooleanValue(values_equal(*_operands(expr, facts)))


def _eval_not_equal(expr: ast.NotEqual, facts: Facts) -> FactValue:
    return BooleanValue(not values_equal(*_operands(expr, facts)))


def _ordering(compare: Callable[[float, float], bool]):
    def handler(expr: ast.BinaryOp, facts: Facts) -> FactValue:
        a, b = _numbers(*_operands(expr, facts), "compare")
        return BooleanValue(compare(a, b))
    return handler


def _eval_and(expr: ast.And, facts: Facts) -> FactValue:
    left, right = _operands(expr, facts)
    return BooleanValue(left.is_truthy() and right.is_truthy())


def _eval_or(expr: ast.Or, facts: Facts) -> FactValue:
    left, right = _operands(expr, facts)
    return BooleanValue(left.is_truthy() or right.is_truthy())


def _eval_not(expr: ast.Not, facts: Facts) -> FactValue:
    return BooleanValue(not evaluate(expr.operand, facts).is_truthy())


# Registry of evaluable node kinds
EVALUATORS: Dict[Type[ast.ValueExpr], Callable[..., FactValue]] = {
    ast.StringLiteral:  _eval_string,
    ast.NumberLiteral:  _eval_number,
    ast.BooleanLiteral: _eval_boolean,
    ast.Variable:       _eval_variable,
    ast.FieldAccess:    _eval_field_access,

    ast.Add:            _eval_add,
    ast.Subtract:       _eval_subtract,
    ast.Multiply:       _eval_multiply,
    ast.Divide:         _eval_divide,

    ast.Equal:          _eval_equal,
    ast.NotEqual:       _eval_not_equal,
    ast.LessThan:       _ordering(lambda a, b: a < b),
    ast.LessEqual:      _ordering(lambda a, b: a <= b),
    ast.GreaterThan:    _ordering(lambda a, b: a > b),
    ast.GreaterEqual:   _ordering(lambda a, b: a >= b),

    ast.And:            _eval_and,
    ast.Or:             _eval_or,
    ast.Not:            _eval_not,
}


# ------------ public entry points ------------
def evaluate(expr: ast.ValueExpr, facts: Facts) -> FactValue:
    handler = EVALUATORS.get(type(expr))
    if handler is None:
        if isinstance(expr, ast.ActionStmt):
            raise EvaluationError(f"Invalid action expression in value position: {type(expr).__name__}")
        raise EvaluationError(f"Unsupported expression type: {type(expr).__name__}")
    return handler(expr, facts)


def evaluate_condition(expr: ast.ValueExpr, facts: Facts) -> bool:
    return evaluate(expr, facts).is_truthy()


def _detached(value: FactValue) -> FactValue:
    # objects and arrays are mutable; a stored value must not alias another fact
    if isinstance(value, (ObjectValue, ArrayValue)):
        return copy.deepcopy(value)
    return value


def execute_action(action: ast.ActionStmt, facts: MutableMapping[str, Fact]) -> None:
    if isinstance(action, ast.Assignment):
        value = _detached(evaluate(action.value, facts))
        facts[action.name] = Fact(action.name, value)
        return

    if isinstance(action, ast.FieldAssignment):
        value = _detached(evaluate(action.value, facts))
        fact = facts.get(action.obj)
        if fact is None:
            raise UnknownVariable(action.obj)
        fact.set_field(action.field, value)
        return

    raise EvaluationError("Invalid action expression")
