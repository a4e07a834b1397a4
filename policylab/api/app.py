from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..compiler import CompileError, CompiledPolicy, compile_policy
from ..config_model.model import RootCfg, load_config
from ..simulation import simulate_policy
from ..templates import SAMPLE_CONTRACT_TEXT, SAMPLE_POLICY_DSL
from ..utils.log import logger_from_config


def _error(code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": code, "message": message})


def create_app(cfg: Optional[RootCfg] = None) -> FastAPI:
    cfg = cfg or load_config()
    log = logger_from_config(cfg, "policylab.api")
    max_dsl = cfg.api.max_dsl_chars
    max_contract = cfg.api.max_contract_chars

    # ---- request bodies (limits come from config) ----

    class CompileBody(BaseModel):
        dsl: str = Field(..., min_length=1, max_length=max_dsl)

    class SimulateBody(BaseModel):
        dsl: str = Field(..., min_length=1, max_length=max_dsl)
        contractText: str = Field(..., min_length=1, max_length=max_contract)

    class SimulateCompiledBody(BaseModel):
        compiledPolicy: Dict[str, Any]
        contractText: str = Field(..., min_length=1, max_length=max_contract)

    app = FastAPI(title="policylab", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        log.info("request validation failed", extra={"path": request.url.path})
        return JSONResponse(
            status_code=400,
            content={"error": "VALIDATION_ERROR", "details": jsonable_encoder(exc.errors())},
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "tool": cfg.env.project_name}

    @app.get("/templates")
    def templates():
        return {"policyDsl": SAMPLE_POLICY_DSL, "contractText": SAMPLE_CONTRACT_TEXT}

    @app.post("/compile")
    def compile_route(body: CompileBody):
        try:
            policy = compile_policy(body.dsl)
        except CompileError as e:
            log.warning("dsl compile failed", extra={"error": str(e)})
            return _error("DSL_COMPILE_ERROR", str(e))
        return {"compiledPolicy": policy.to_dict()}

    @app.post("/simulate")
    def simulate_route(body: SimulateBody):
        try:
            policy = compile_policy(body.dsl)
        except CompileError as e:
            log.warning("simulation compile failed", extra={"error": str(e)})
            return _error("SIMULATION_ERROR", str(e))
        result = simulate_policy(policy, body.contractText)
        log.info(
            "simulation complete",
            extra={"risk_score": result.risk_score, "verdict": result.verdict},
        )
        return {"compiledPolicy": policy.to_dict(), "simulation": result.to_dict()}

    @app.post("/simulate/compiled")
    def simulate_compiled_route(body: SimulateCompiledBody):
        try:
            policy = CompiledPolicy.from_dict(body.compiledPolicy)
        except ValueError as e:
            log.warning("compiled policy rejected", extra={"error": str(e)})
            return _error("SIMULATION_ERROR", str(e))
        result = simulate_policy(policy, body.contractText)
        return {"simulation": result.to_dict()}

    return app


app = create_app()
