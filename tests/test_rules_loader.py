import json
import os

import pytest
from jsonschema import ValidationError

from runes import ast
from runes.rules_loader import load_rules, rule_from_document, validate_directory

REPO_RULESETS = os.path.join(os.path.dirname(os.path.dirname(__file__)), "rulesets")


def write(tmp_path, name, content):
    path = tmp_path / name
    if isinstance(content, (dict, list)):
        content = json.dumps(content)
    path.write_text(content, encoding="utf-8")
    return path


def test_missing_directory_is_empty(tmp_path):
    report = load_rules(str(tmp_path / "nope"))
    assert len(report.knowledge_base) == 0
    assert report.errors == []


def test_loads_grl_and_json(tmp_path):
    write(tmp_path, "a.grl", "rule A salience 1 { when x == 1 then y = 2; }")
    write(tmp_path, "b.json", {"name": "B", "salience": 7, "when": "x > 0", "then": ["z = x + 1"]})
    write(tmp_path, "notes.txt", "ignored")

    report = load_rules(str(tmp_path))

    assert report.errors == []
    assert report.summary() == {"count": 2, "names": ["A", "B"], "errors": []}
    b = report.knowledge_base.get("B")
    assert b.salience == 7
    assert b.then == (ast.Assignment("z", ast.Add(ast.Variable("x"), ast.NumberLiteral(1))),)
    assert [r.name for r in report.knowledge_base.sorted_by_salience()] == ["B", "A"]


def test_bad_files_are_reported_not_fatal(tmp_path):
    write(tmp_path, "1_ok.grl", "rule Ok { when x == 1 then y = 2; }")
    write(tmp_path, "2_dup.grl", "rule Ok { when x == 2 then y = 3; }")
    write(tmp_path, "3_broken.grl", "rule {")
    write(tmp_path, "4_bad.json", "{not json")
    write(tmp_path, "5_schema.json", {"name": "S", "when": "x == 1", "then": [], "extra": 1})
    write(tmp_path, "6_off.json", {"name": "Off", "when": "x == 1", "then": ["y = 1"], "disabled": True})
    write(tmp_path, "7_value.json", {"name": "V", "when": "x == 1", "then": ["y = x * 2"]})

    report = load_rules(str(tmp_path))

    assert report.knowledge_base.names() == ["Ok"]
    errors = {e["file"]: e["error"] for e in report.errors}
    assert set(errors) == {"2_dup.grl", "3_broken.grl", "4_bad.json", "5_schema.json", "6_off.json", "7_value.json"}
    assert "Duplicate rule name 'Ok'" in errors["2_dup.grl"]
    assert "Invalid GRL syntax" in errors["3_broken.grl"]
    assert errors["4_bad.json"].startswith("JSON parse error")
    assert errors["5_schema.json"].startswith("Schema validation error")
    assert "disabled" in errors["6_off.json"]
    assert "Cannot parse value: x * 2" in errors["7_value.json"]


def test_rule_from_document_validates_schema():
    with pytest.raises(ValidationError):
        rule_from_document({"name": "X", "when": "a == 1"})
    rule = rule_from_document({"name": "X", "description": "d", "when": "a == 1", "then": ["b = 2"]})
    assert rule.description == "d"
    assert rule.salience == 0


def test_shipped_rulesets_are_valid():
    assert validate_directory(REPO_RULESETS) == []


def test_integral_float_salience_becomes_int():
    rule = rule_from_document({"name": "F", "salience": 3.0, "when": "a == 1", "then": ["b = 2"]})
    assert rule.salience == 3
    assert isinstance(rule.salience, int)
    assert rule.to_dict()["salience"] == 3
