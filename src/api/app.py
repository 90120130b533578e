# src/api/app.py — v1
"""FastAPI application exposing the compliance analysis pipeline.

Routes:
    POST /compliance?policy=<url>&webpage=<url>   -> {"Response": "..."}
    GET  /health                                  -> {"status": "ok"}

Pipeline errors map to their status code (400 input/fetch, 500
analysis/persistence) with a {"detail": "..."} body.
"""

from __future__ import annotations

import json
import logging
import time
import uuid

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from policylens.api.dependencies import get_orchestrator
from policylens.api.models import ComplianceRequest, ComplianceResponse, HealthResponse
from policylens.core.errors import PipelineError
from policylens.logging.context import clear_context, set_request_context
from policylens.pipeline.orchestrator import AnalysisOrchestrator
from policylens.version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(title="policylens", version=__version__)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    clear_context()
    set_request_context(request_id)
    t0 = time.monotonic()
    logger.info("%s %s started", request.method, request.url.path)
    response = await call_next(request)
    logger.info(
        "%s %s finished: %d in %.0f ms",
        request.method, request.url.path, response.status_code,
        (time.monotonic() - t0) * 1000,
    )
    response.headers["x-request-id"] = request_id
    return response


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc, exc_info=exc.__cause__ is not None)
    else:
        logger.warning("Request rejected: %s", exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


async def _read_body(request: Request) -> ComplianceRequest:
    """Parse an optional JSON body; anything unparsable counts as empty."""
    raw = await request.body()
    if not raw:
        return ComplianceRequest()
    try:
        return ComplianceRequest.model_validate(json.loads(raw))
    except ValueError:
        return ComplianceRequest()


@app.post("/compliance", response_model=ComplianceResponse)
async def compliance(
    request: Request,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> ComplianceResponse:
    params = request.query_params
    body = await _read_body(request)
    policy = params.get("policy") or body.policy
    webpage = params.get("webpage") or params.get("target") or body.webpage

    result = await orchestrator.handle_request(policy, webpage)
    return ComplianceResponse(response=result.response_text())
