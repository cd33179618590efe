"""
Mayfair Backend — API Smoke Test & Debug Routes
=================================================

What:  GET /api/test proves requests reach the API layer at all.
       GET /api/debug reports which deployment env vars are present.
Who:   Used when a deployment comes up with every feature route answering
       503, to tell "routing is broken" apart from "configuration is missing".

The debug router is only included when ENABLE_DEBUG_ENDPOINT is true, and it
never returns a secret's value, only "SET" or "NOT SET".
"""

import os

from fastapi import APIRouter, Request

from mayfair.schemas.envelope import ApiTestResponse, DebugResponse, utc_timestamp

router = APIRouter(tags=["System"])
debug_router = APIRouter(tags=["System"])

# Presence-only: values are never echoed
SECRET_ENV_VARS = (
    "DATABASE_URL",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "JWT_SECRET",
)


@router.get("/test", response_model=ApiTestResponse, summary="API smoke test")
async def api_test() -> ApiTestResponse:
    return ApiTestResponse(message="API is working!", timestamp=utc_timestamp())


@debug_router.get("/debug", response_model=DebugResponse, summary="Environment presence check")
async def api_debug(request: Request) -> DebugResponse:
    settings = request.app.state.settings
    env_check = {"NODE_ENV": os.environ.get("NODE_ENV")}
    for name in SECRET_ENV_VARS:
        env_check[name] = "SET" if os.environ.get(name) else "NOT SET"
    env_check["CORS_ORIGIN"] = settings.cors_origin or "NOT SET"
    return DebugResponse(environment=env_check, timestamp=utc_timestamp())
