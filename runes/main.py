# runes/main.py
import threading
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import Settings, get_settings
from .engine import RuleEngine
from .errors import DuplicateRuleError, EngineError, ParseError
from .facts import facts_from_python, facts_to_python
from .logging_config import configure_logging
from .parser import parse_rule
from .rules_loader import load_rules


class RuleTextIn(BaseModel):
    text: str     # GRL rule text


class ExecuteIn(BaseModel):
    # {"TestCar": {"Speed": 50, "MaxSpeed": 100}}
    facts: Dict[str, Any] = Field(default_factory=dict)


class _RuleState:
    """The loaded engine; every read or write goes through `lock`."""

    def __init__(self, rules_dir: str):
        self.rules_dir = rules_dir
        self.lock = threading.Lock()
        self.engine = RuleEngine()

    def reload(self) -> Dict[str, Any]:
        report = load_rules(self.rules_dir)
        with self.lock:
            self.engine = RuleEngine(report.knowledge_base)
        return report.summary()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    app = FastAPI(title="Runes Rule Engine")
    state = _RuleState(settings.rules_dir)
    state.reload()
    app.state.rules = state

    @app.exception_handler(ParseError)
    async def parse_error_handler(request, exc: ParseError):
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(EngineError)
    async def engine_error_handler(request, exc: EngineError):
        return JSONResponse(status_code=422, content=exc.to_dict())

    @app.get("/")
    def root():
        return {"message": "Rule engine API running!"}

    # ----- rules -----
    @app.post("/rules/reload")
    def rules_reload():
        return state.reload()

    @app.get("/rules/list")
    def rules_list():
        with state.lock:
            rules = state.engine.knowledge_base.sorted_by_salience()
        return {"count": len(rules), "names": [r.name for r in rules]}

    @app.get("/rules/{name}")
    def rules_get(name: str):
        with state.lock:
            rule = state.engine.knowledge_base.get(name)
        if rule is None:
            raise HTTPException(status_code=404, detail=f"Rule '{name}' not loaded. Call /rules/reload or check /rules/list.")
        return rule.to_dict()

    @app.post("/rules", status_code=201)
    def rules_add(body: RuleTextIn):
        rule = parse_rule(body.text)
        with state.lock:
            try:
                state.engine.add_rule(rule)
            except DuplicateRuleError as ex:
                raise HTTPException(status_code=409, detail=str(ex))
        return rule.to_dict()

    @app.delete("/rules/{name}")
    def rules_delete(name: str):
        with state.lock:
            rule = state.engine.knowledge_base.remove(name)
        if rule is None:
            raise HTTPException(status_code=404, detail=f"Rule '{name}' not loaded.")
        return {"removed": rule.name}

    @app.post("/rules/parse")
    def rules_parse(body: RuleTextIn):
        return parse_rule(body.text).to_dict()

    # ----- execution -----
    @app.post("/rules/execute")
    def rules_execute(body: ExecuteIn):
        try:
            facts = facts_from_python(body.facts)
        except TypeError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        with state.lock:
            result = state.engine.execute(facts)
        return {
            "rules_fired": result.rules_fired,
            "facts_modified": result.facts_modified,
            "execution_time_ms": result.execution_time_ms,
            "facts": facts_to_python(facts),
        }

    return app
