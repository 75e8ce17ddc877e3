"""
runes: a single-pass forward rule engine with a GRL-like rule language.
"""

from .engine import ExecutionResult, RuleEngine
from .errors import (
    ActionParseError,
    ConditionParseError,
    DivisionByZero,
    DuplicateRuleError,
    EngineError,
    EvaluationError,
    GrlSyntaxError,
    ParseError,
    UnknownOperator,
    UnknownVariable,
    ValueParseError,
    ValueTypeError,
)
from .facts import (
    ArrayValue,
    BooleanValue,
    Fact,
    FactValue,
    NullValue,
    NumberValue,
    ObjectValue,
    StringValue,
)
from .knowledge_base import KnowledgeBase
from .parser import parse_rule
from .rule import Rule

__version__ = "0.1.0"
