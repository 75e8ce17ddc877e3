# runes/ast.py
# ------------------------------------------------------------
# Expression tree shared by the parser and the evaluator.
# ValueExpr nodes are evaluable; ActionStmt nodes only appear
# as the "then" part of a rule.
# ------------------------------------------------------------

from dataclasses import dataclass, fields
from typing import Any, Dict


class Node:
    __slots__ = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": type(self).__name__}
        for f in fields(self):
            val = getattr(self, f.name)
            out[f.name] = val.to_dict() if isinstance(val, Node) else val
        return out


class ValueExpr(Node):
    __slots__ = ()


class ActionStmt(Node):
    __slots__ = ()


# ------------ literals ------------
@dataclass(frozen=True)
class StringLiteral(ValueExpr):
    value: str


@dataclass(frozen=True)
class NumberLiteral(ValueExpr):
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class BooleanLiteral(ValueExpr):
    value: bool


# ------------ variables / fields ------------
@dataclass(frozen=True)
class Variable(ValueExpr):
    name: str


@dataclass(frozen=True)
class FieldAccess(ValueExpr):
    obj: ValueExpr
    field: str


# ------------ operators ------------
@dataclass(frozen=True)
class BinaryOp(ValueExpr):
    left: ValueExpr
    right: ValueExpr


class Add(BinaryOp): pass
class Subtract(BinaryOp): pass
class Multiply(BinaryOp): pass
class Divide(BinaryOp): pass

class Equal(BinaryOp): pass
class NotEqual(BinaryOp): pass
class LessThan(BinaryOp): pass
class LessEqual(BinaryOp): pass
class GreaterThan(BinaryOp): pass
class GreaterEqual(BinaryOp): pass

class And(BinaryOp): pass
class Or(BinaryOp): pass


@dataclass(frozen=True)
class Not(ValueExpr):
    operand: ValueExpr


# ------------ actions ------------
@dataclass(frozen=True)
class Assignment(ActionStmt):
    name: str
    value: ValueExpr


@dataclass(frozen=True)
class FieldAssignment(ActionStmt):
    obj: str
    field: str
    value: ValueExpr


def field_path(path: str) -> ValueExpr:
    """'a' -> Variable(a); 'a.b.c' -> FieldAccess(FieldAccess(Variable(a), b), c)"""
    head, *rest = path.split(".")
    expr: ValueExpr = Variable(head)
    for name in rest:
        expr = FieldAccess(expr, name)
    return expr
