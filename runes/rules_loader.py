# runes/rules_loader.py
# ------------------------------------------------------------
# Ruleset loader: one rule per file in a rulesets directory
# - *.grl  : rule text, parsed by runes.parser
# - *.json : rule document validated against RULE_SCHEMA
# Bad files are skipped and reported, never fatal.
# ------------------------------------------------------------

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

import structlog
from jsonschema import ValidationError, validate

from .errors import DuplicateRuleError, ParseError
from .knowledge_base import KnowledgeBase
from .parser import parse_action, parse_condition, parse_rule
from .rule import Rule

logger = structlog.get_logger(__name__)

RULE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "GRL Rule",
    "type": "object",
    "required": ["name", "when", "then"],
    "properties": {
        "name": {"type": "string", "pattern": r"^\w+$"},
        "description": {"type": "string"},
        "salience": {"type": "integer"},
        "when": {"type": "string", "minLength": 1},
        "then": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "minLength": 1},
        },
        "disabled": {"type": "boolean"},
    },
    "additionalProperties": False,
}

RULE_SUFFIXES = (".grl", ".json")


@dataclass
class LoadReport:
    knowledge_base: KnowledgeBase = field(default_factory=KnowledgeBase)
    errors: List[Dict[str, str]] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "count": len(self.knowledge_base),
            "names": self.knowledge_base.names(),
            "errors": self.errors,
        }


class _Skipped(Exception):
    """Internal: the file is fine but must not be loaded."""


def rule_from_document(doc: Dict[str, Any]) -> Rule:
    """Build a Rule from an already-decoded JSON rule document."""
    validate(instance=doc, schema=RULE_SCHEMA)
    return Rule(
        name=doc["name"],
        salience=int(doc.get("salience", 0)),
        when=parse_condition(doc["when"]),
        then=tuple(parse_action(a) for a in doc["then"]),
        description=doc.get("description"),
    )


def _read_rule(path: str) -> Rule:
    with open(path, "r", encoding="utf-8") as f:
        if path.lower().endswith(".grl"):
            return parse_rule(f.read())
        doc = json.load(f)
    if isinstance(doc, dict) and doc.get("disabled") is True:
        raise _Skipped("Rule disabled via 'disabled': true (skipped)")
    return rule_from_document(doc)


def load_rules(directory: str) -> LoadReport:
    """Load every rule file in `directory`, collecting per-file errors."""
    report = LoadReport()
    if not os.path.isdir(directory):
        logger.warning("rules_dir_missing", directory=directory)
        return report

    for fname in sorted(os.listdir(directory)):
        if not fname.lower().endswith(RULE_SUFFIXES):
            continue
        path = os.path.join(directory, fname)

        try:
            rule = _read_rule(path)
            report.knowledge_base.add(rule)
        except _Skipped as ex:
            error = str(ex)
        except json.JSONDecodeError as ex:
            error = f"JSON parse error: {ex}"
        except ValidationError as ex:
            error = f"Schema validation error: {ex.message}"
        except ParseError as ex:
            error = f"GRL parse error: {ex}"
        except DuplicateRuleError as ex:
            error = f"Duplicate rule name '{ex.name}' (already loaded)"
        except (OSError, UnicodeDecodeError) as ex:
            error = f"Cannot read file: {ex}"
        else:
            continue

        report.errors.append({"file": fname, "error": error})
        logger.warning("rule_file_skipped", file=fname, error=error)

    logger.info("rules_loaded", directory=directory, count=len(report.knowledge_base),
                errors=len(report.errors))
    return report


def validate_directory(directory: str) -> List[Dict[str, str]]:
    return load_rules(directory).errors
