from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .api_models import ToolCallRequest, ToolCallResponse, ToolsListResponse, MCPMetadata
from .config import AppConfig, EnvSettings, load_config
from .errors import R1Error, classify_error
from .mcp_sse import mcp_sse_endpoint
from .r1_client import R1Client
from .session import R1Session
from .token_cache import TokenCache
from .token_service import TokenService
from .tools import call_tool, tool_infos
from .tools.venues import handle_venues_query


logger = logging.getLogger("r1_server")


def setup_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@dataclass
class AppState:
    env: EnvSettings
    cfg: AppConfig
    http: httpx.AsyncClient
    session: R1Session


def create_app(
    env: Optional[EnvSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> FastAPI:
    """Build the application.

    ``transport`` and ``sleep`` are injection points for tests; production
    uses the default httpx transport and ``asyncio.sleep``.
    """
    setup_logging()
    env = env or EnvSettings()
    env.require_credentials()

    cfg = load_config(env.config_file)

    http = httpx.AsyncClient(timeout=cfg.http.timeout_s, transport=transport)
    client = R1Client(http, region=env.region)
    tokens = TokenService(
        TokenCache(),
        client,
        tenant_id=env.tenant_id,
        client_id=env.client_id,
        client_secret=env.client_secret.get_secret_value(),
    )
    session = R1Session(cfg, client, tokens, sleep=sleep)

    state = AppState(env=env, cfg=cfg, http=http, session=session)
    logger.info("r1_server_configured", extra={"region": env.region or "global"})

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await state.http.aclose()
        logger.info("r1_server_stopped")

    app = FastAPI(title="R1 Server (for MCP Platform)", version="0.1.0", lifespan=lifespan)
    app.state.r1 = state

    def get_state() -> AppState:
        return state

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/mcp/metadata")
    async def mcp_metadata():
        """MCP platform metadata endpoint for capability discovery."""
        return MCPMetadata().model_dump()

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        # Avoid leaking internal details to callers by default.
        logger.exception("unhandled_exception", extra={"path": str(request.url.path)})
        return JSONResponse(
            status_code=500,
            content=ToolCallResponse(
                status="error",
                error={"code": "internal_error", "message": "Internal server error"},
            ).model_dump(),
        )

    def require_internal_api_key(
        st: AppState = Depends(get_state),
        x_internal_api_key: Optional[str] = Header(default=None, alias="X-Internal-Api-Key"),
    ):
        expected = st.env.internal_api_key.get_secret_value() if st.env.internal_api_key else None
        if expected is None:
            return
        if not x_internal_api_key or x_internal_api_key != expected:
            raise HTTPException(status_code=401, detail="Missing or invalid X-Internal-Api-Key")

    @app.post("/v1/tools/list", dependencies=[Depends(require_internal_api_key)])
    async def tools_list(st: AppState = Depends(get_state)):
        return ToolsListResponse(tools=tool_infos(st.cfg)).model_dump()

    @app.post("/v1/tools/call", dependencies=[Depends(require_internal_api_key)])
    async def tools_call(req: ToolCallRequest, st: AppState = Depends(get_state)):
        # If configured, fail closed when context is missing (platform integration bug).
        if st.env.require_authz_context:
            if not req.context or (not req.context.subject and not req.context.scopes):
                raise HTTPException(status_code=400, detail="Missing authz context")

        try:
            data = await call_tool(st.session, req.context, req.tool, req.args)
            content_blocks = data.pop("content", None) or None
            return ToolCallResponse(
                status="ok",
                data=data,
                content=content_blocks,
                meta={"tool": req.tool},
            ).model_dump()
        except HTTPException:
            raise
        except KeyError as e:
            return ToolCallResponse(
                status="error",
                error={"code": "unknown_tool", "message": str(e)},
                meta={"tool": req.tool},
            ).model_dump()
        except ValueError as e:
            return ToolCallResponse(
                status="error",
                error={"code": "invalid_request", "message": str(e)},
                meta={"tool": req.tool},
            ).model_dump()
        except PermissionError as e:
            return ToolCallResponse(
                status="error",
                error={"code": "not_authorized", "message": str(e)},
                meta={"tool": req.tool},
            ).model_dump()
        except R1Error as e:
            category = classify_error(e)
            logger.warning(
                "tool_call_failed",
                extra={"tool": req.tool, "category": category.value, "error": str(e)},
            )
            return ToolCallResponse(
                status="error",
                error={"code": category.value, "message": str(e), "details": {"rpc_code": category.rpc_code}},
                meta={"tool": req.tool},
            ).model_dump()
        except Exception:
            logger.exception("tool_call_failed", extra={"tool": req.tool})
            return ToolCallResponse(
                status="error",
                error={"code": "internal_error", "message": "Internal server error"},
                meta={"tool": req.tool},
            ).model_dump()

    @app.post("/mcp")
    async def mcp(request: Request, st: AppState = Depends(get_state)):
        api_key = st.env.internal_api_key.get_secret_value() if st.env.internal_api_key else None
        return await mcp_sse_endpoint(
            request,
            st.session,
            allowed_ips=st.env.mcp_allowed_ips,
            api_key=api_key,
        )

    # -------------------------------------------------------------------------
    # Plain REST facade
    # -------------------------------------------------------------------------

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "R1 API server is running!"

    @app.get("/ruckus-auth/token")
    async def ruckus_auth_token(st: AppState = Depends(get_state)):
        try:
            token = await st.session.tokens.get_valid_token()
        except Exception as e:
            logger.warning("rest_token_failed", extra={"error": str(e)})
            return JSONResponse(status_code=500, content={"error": str(e) or "Failed to get token"})
        return {"token": token}

    @app.get("/venues")
    async def venues(st: AppState = Depends(get_state)):
        try:
            return await handle_venues_query(st.session, {})
        except Exception as e:
            logger.warning("rest_venues_failed", extra={"error": str(e)})
            return JSONResponse(status_code=500, content={"error": str(e) or "Failed to fetch venues"})

    return app
