# runes/parser.py
# ------------------------------------------------------------
# GRL-like rule text -> Rule
#
#   rule <name> ["<description>"] [salience <int>] {
#       when <condition>
#       then <action>; <action>;
#   }
#
# One pattern splits header/when/then; conditions, values and
# actions are then parsed by small recursive functions.
# No state is kept between calls.
# ------------------------------------------------------------

import math
import re
from typing import Dict, List, Type

from . import ast
from .errors import (
    ActionParseError,
    ConditionParseError,
    GrlSyntaxError,
    UnknownOperator,
    ValueParseError,
)
from .rule import Rule

RULE_PATTERN = re.compile(
    r'rule\s+(\w+)\s*(?:"([^"]*)")?\s*(?:salience\s+([+-]?\d+))?\s*'
    r'\{\s*when\s+(.*?)\s+then\s+(.*?)\s*\}'
)
COMPARISON_PATTERN = re.compile(r"(\w+(?:\.\w+)*)\s*([=!<>]+)\s*(.+)")
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
PATH_PATTERN = re.compile(r"\w+(?:\.\w+)*")
TARGET_PATTERN = re.compile(r"(\w+)(?:\.(\w+))?")

COMPARISONS: Dict[str, Type[ast.BinaryOp]] = {
    "==": ast.Equal,
    "!=": ast.NotEqual,
    "<":  ast.LessThan,
    "<=": ast.LessEqual,
    ">":  ast.GreaterThan,
    ">=": ast.GreaterEqual,
}


def parse_rule(grl_text: str) -> Rule:
    normalized = grl_text.replace("\r", "").replace("\n", " ")
    m = RULE_PATTERN.search(normalized)
    if m is None:
        raise GrlSyntaxError()

    name, description, salience, when_clause, then_clause = m.groups()
    return Rule(
        name=name,
        salience=int(salience) if salience is not None else 0,
        when=parse_condition(when_clause),
        then=tuple(parse_actions(then_clause)),
        description=description,
    )


def parse_condition(condition_text: str) -> ast.ValueExpr:
    """
    `&&` is split before `||`, each on its first occurrence, so
    'a || b && c' reads as (a || b) && c. No parentheses.
    """
    trimmed = condition_text.strip()

    pos = trimmed.find(" && ")
    if pos >= 0:
        return ast.And(parse_condition(trimmed[:pos]), parse_condition(trimmed[pos + 4:]))

    pos = trimmed.find(" || ")
    if pos >= 0:
        return ast.Or(parse_condition(trimmed[:pos]), parse_condition(trimmed[pos + 4:]))

    m = COMPARISON_PATTERN.fullmatch(trimmed)
    if m is None:
        raise ConditionParseError(f"Cannot parse condition: {trimmed}")

    lhs, operator, rhs = m.groups()
    node = COMPARISONS.get(operator)
    if node is None:
        raise UnknownOperator(operator)
    return node(ast.field_path(lhs), parse_value(rhs))


def parse_value(value_text: str) -> ast.ValueExpr:
    trimmed = value_text.strip()

    if NUMBER_PATTERN.fullmatch(trimmed):
        number = float(trimmed)
        if not math.isfinite(number):
            raise ValueParseError(f"Number out of range: {trimmed}")
        return ast.NumberLiteral(number)

    if trimmed == "true":
        return ast.BooleanLiteral(True)
    if trimmed == "false":
        return ast.BooleanLiteral(False)

    if len(trimmed) >= 2 and trimmed[0] == '"' and trimmed[-1] == '"' and '"' not in trimmed[1:-1]:
        return ast.StringLiteral(trimmed[1:-1])

    if PATH_PATTERN.fullmatch(trimmed):
        return ast.field_path(trimmed)

    pos = trimmed.rfind(" + ")
    if pos >= 0:
        return ast.Add(parse_value(trimmed[:pos]), parse_value(trimmed[pos + 3:]))

    raise ValueParseError(f"Cannot parse value: {trimmed}")


def parse_action(action_text: str) -> ast.ActionStmt:
    trimmed = action_text.strip()
    pos = trimmed.find(" = ")
    if pos < 0:
        raise ActionParseError(f"Cannot parse action: {trimmed}")

    target = TARGET_PATTERN.fullmatch(trimmed[:pos].strip())
    if target is None:
        raise ActionParseError(f"Cannot parse action: {trimmed}")

    obj, field = target.groups()
    value = parse_value(trimmed[pos + 3:])
    if field is not None:
        return ast.FieldAssignment(obj, field, value)
    return ast.Assignment(obj, value)


def parse_actions(actions_text: str) -> List[ast.ActionStmt]:
    return [parse_action(seg) for seg in actions_text.split(";") if seg.strip()]
