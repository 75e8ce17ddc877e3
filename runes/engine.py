# runes/engine.py
# ------------------------------------------------------------
# Single-pass rule execution:
#   snapshot rules by salience -> evaluate each guard once
#   -> run actions of matching rules -> record firing
# Errors abort the pass; mutations already applied are kept.
# ------------------------------------------------------------

import time
from dataclasses import dataclass, field
from typing import List, MutableMapping, Optional

import structlog

from .errors import EngineError
from .evaluator import evaluate_condition, execute_action
from .facts import Fact
from .knowledge_base import KnowledgeBase
from .parser import parse_rule
from .rule import Rule

logger = structlog.get_logger(__name__)


@dataclass
class ExecutionResult:
    rules_fired: List[str] = field(default_factory=list)
    # never populated: actions do not report their targets
    facts_modified: List[str] = field(default_factory=list)
    execution_time_ms: float = 0.0


class RuleEngine:
    def __init__(self, knowledge_base: Optional[KnowledgeBase] = None):
        self.knowledge_base = knowledge_base if knowledge_base is not None else KnowledgeBase()

    def add_rule(self, rule: Rule) -> None:
        self.knowledge_base.add(rule)

    def add_grl(self, grl_text: str) -> Rule:
        """Parse a GRL rule and add it; returns the parsed rule."""
        rule = parse_rule(grl_text)
        self.knowledge_base.add(rule)
        return rule

    def execute(self, facts: MutableMapping[str, Fact]) -> ExecutionResult:
        start = time.perf_counter()
        result = ExecutionResult()

        for rule in self.knowledge_base.sorted_by_salience():
            try:
                if not evaluate_condition(rule.when, facts):
                    continue
                for action in rule.then:
                    execute_action(action, facts)
            except EngineError as ex:
                logger.warning("execution_aborted", rule=rule.name, error=ex.kind, message=str(ex),
                               fired=list(result.rules_fired))
                raise
            result.rules_fired.append(rule.name)
            logger.debug("rule_fired", rule=rule.name, salience=rule.salience)

        result.execution_time_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("execution_completed", rules=len(self.knowledge_base),
                     fired=len(result.rules_fired), elapsed_ms=round(result.execution_time_ms, 3))
        return result
