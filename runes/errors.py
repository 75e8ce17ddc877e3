# runes/errors.py
# ------------------------------------------------------------
# Error taxonomy: evaluation errors abort an execute() call,
# parse errors abort a parse_rule() call. Nothing is retried.
# ------------------------------------------------------------

from typing import Any, Dict


class EngineError(Exception):
    """Base class for failures raised while evaluating guards or running actions."""

    kind = "engine_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": str(self)}


class EvaluationError(EngineError):
    kind = "evaluation_error"


class UnknownVariable(EngineError):
    kind = "unknown_variable"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown variable: {name}")


class ValueTypeError(EngineError):
    """Operand variant(s) not supported by the operator."""

    kind = "type_error"


class DivisionByZero(EngineError):
    kind = "division_by_zero"

    def __init__(self) -> None:
        super().__init__("Division by zero")


# ------------ parser ------------
class ParseError(ValueError):
    """Base class for rule text that cannot be turned into a Rule."""

    kind = "parse_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": str(self)}


class GrlSyntaxError(ParseError):
    kind = "syntax_error"

    def __init__(self, message: str = "Invalid GRL syntax"):
        super().__init__(message)


class ConditionParseError(ParseError):
    kind = "condition_parse_error"


class ValueParseError(ParseError):
    kind = "value_parse_error"


class ActionParseError(ParseError):
    kind = "action_parse_error"


class UnknownOperator(ParseError):
    kind = "unknown_operator"

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unknown operator: {operator}")


# ------------ knowledge base ------------
class DuplicateRuleError(ValueError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Rule '{name}' already exists")
