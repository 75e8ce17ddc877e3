# runes/rule.py
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .ast import ActionStmt, ValueExpr


@dataclass(frozen=True)
class Rule:
    """A named guard/actions pair. Higher salience fires first."""

    name: str
    salience: int
    when: ValueExpr
    then: Tuple[ActionStmt, ...]
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "then", tuple(self.then))

    def with_description(self, description: str) -> "Rule":
        return replace(self, description=description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "salience": self.salience,
            "when": self.when.to_dict(),
            "then": [a.to_dict() for a in self.then],
        }
