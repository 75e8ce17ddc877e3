import pytest
from fastapi.testclient import TestClient

from runes.config import Settings
from runes.main import create_app

SPEED_UP = """
rule SpeedUp "speed up" salience 10 {
    when TestCar.SpeedUp == true && TestCar.Speed < TestCar.MaxSpeed
    then TestCar.Speed = TestCar.Speed + TestCar.SpeedIncrement;
}
"""


@pytest.fixture
def rules_dir(tmp_path):
    (tmp_path / "speed_up.grl").write_text(SPEED_UP, encoding="utf-8")
    (tmp_path / "broken.grl").write_text("rule nope", encoding="utf-8")
    return tmp_path


@pytest.fixture
def client(rules_dir):
    app = create_app(Settings(rules_dir=str(rules_dir), json_logs=False))
    return TestClient(app)


def test_root(client):
    assert client.get("/").json() == {"message": "Rule engine API running!"}


def test_reload_reports_errors(client, rules_dir):
    (rules_dir / "extra.grl").write_text("rule Extra salience 20 { when a == 1 then b = 2; }", encoding="utf-8")
    res = client.post("/rules/reload").json()
    assert res["count"] == 2
    assert res["names"] == ["Extra", "SpeedUp"]
    assert [e["file"] for e in res["errors"]] == ["broken.grl"]
    assert client.get("/rules/list").json() == {"count": 2, "names": ["Extra", "SpeedUp"]}


def test_get_rule(client):
    body = client.get("/rules/SpeedUp").json()
    assert body["name"] == "SpeedUp"
    assert body["salience"] == 10
    assert body["when"]["type"] == "And"
    assert body["then"][0] == {
        "type": "FieldAssignment",
        "obj": "TestCar",
        "field": "Speed",
        "value": {
            "type": "Add",
            "left": {"type": "FieldAccess", "obj": {"type": "Variable", "name": "TestCar"}, "field": "Speed"},
            "right": {"type": "FieldAccess", "obj": {"type": "Variable", "name": "TestCar"}, "field": "SpeedIncrement"},
        },
    }
    assert client.get("/rules/Unknown").status_code == 404


def test_execute(client):
    res = client.post("/rules/execute", json={"facts": {
        "TestCar": {"SpeedUp": True, "Speed": 50, "MaxSpeed": 100, "SpeedIncrement": 10},
    }})
    assert res.status_code == 200
    body = res.json()
    assert body["rules_fired"] == ["SpeedUp"]
    assert body["facts_modified"] == []
    assert body["facts"]["TestCar"]["Speed"] == 60.0


def test_execute_engine_error_is_422(client):
    res = client.post("/rules/execute", json={"facts": {"TestCar": {"SpeedUp": True}}})
    assert res.status_code == 422
    assert res.json()["error"] == "evaluation_error"


def test_add_parse_and_delete(client):
    res = client.post("/rules", json={"text": "rule Flag salience 1 { when x == 1 then y = true; }"})
    assert res.status_code == 201
    assert client.post("/rules", json={"text": "rule Flag { when x == 2 then y = false; }"}).status_code == 409

    car = {"SpeedUp": False, "Speed": 0, "MaxSpeed": 0, "SpeedIncrement": 0}
    res = client.post("/rules/execute", json={"facts": {"x": 1, "TestCar": car}})
    assert res.json()["rules_fired"] == ["Flag"]
    assert res.json()["facts"]["y"] is True

    assert client.delete("/rules/Flag").json() == {"removed": "Flag"}
    assert client.delete("/rules/Flag").status_code == 404


def test_parse_endpoint_errors(client):
    res = client.post("/rules/parse", json={"text": "rule R { when x =< 1 then y = 1; }"})
    assert res.status_code == 400
    assert res.json() == {"error": "unknown_operator", "message": "Unknown operator: =<"}

    res = client.post("/rules/parse", json={"text": "rule R { when x == 1 then y = 1; }"})
    assert res.status_code == 200
    assert res.json()["when"] == {
        "type": "Equal",
        "left": {"type": "Variable", "name": "x"},
        "right": {"type": "NumberLiteral", "value": 1.0},
    }
