"""
Local API emulator.

Serves the registered handler units over HTTP with FastAPI so the API can be
exercised offline against DynamoDB Local. Requests are converted to the same
InvocationRequest shape API Gateway produces, and handler results are turned
back into native JSON responses.

Run with: python -m local.server  (from src/, or after `pip install -e .`)
"""

import asyncio
from contextlib import asynccontextmanager
import json
import os
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
import uvicorn

from handlers.dispatcher import BoundRoute, Dispatcher
from handlers.main import get_dispatcher
from local.table_setup import LocalTableSetup
from models.request import InvocationRequest, InvocationResult
from utils.config import Settings
from utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 3000

# Statuses whose responses must not carry a body.
_NO_BODY_STATUSES = {204, 304}


async def body_as_string(request: Request) -> Optional[str]:
    """
    Handlers always receive a string body, so a JSON payload is decoded and
    re-serialized; anything else is passed through as text.
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.dumps(json.loads(raw))
    except ValueError:
        return raw.decode("utf-8", errors="replace")


def to_transport_response(result: InvocationResult) -> Response:
    """Render a handler result as a FastAPI response without double-encoding."""
    status = result.status_code or 200
    if status in _NO_BODY_STATUSES:
        return Response(status_code=status, headers=result.headers)

    content: Any = {}
    if result.body:
        try:
            content = json.loads(result.body)
        except ValueError:
            content = result.body
    if content is None:
        content = {}
    return JSONResponse(content=content, status_code=status, headers=result.headers)


def _endpoint(dispatcher: Dispatcher, bound: BoundRoute):
    async def endpoint(request: Request) -> Response:
        invocation = InvocationRequest(
            path_parameters=dict(request.path_params),
            query_string_parameters=dict(request.query_params),
            headers=dict(request.headers),
            body=await body_as_string(request),
        )
        result = await dispatcher.invoke(bound, invocation)
        return to_transport_response(result)

    endpoint.__name__ = f"{bound.definition.handler_cls.__name__}_{bound.definition.operation}"
    return endpoint


def create_app(dispatcher: Optional[Dispatcher] = None, setup_table: bool = True) -> FastAPI:
    """
    Build the emulator app.

    The Dispatcher is constructed before the app exists, so a duplicate route
    aborts start-up instead of surfacing on the first request.
    """
    dispatcher = dispatcher or get_dispatcher()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if setup_table:
            settings = Settings.from_environment()
            await asyncio.to_thread(LocalTableSetup(settings).setup)
        logger.info("Local API ready", extra={"routes": len(dispatcher.routes)})
        yield

    app = FastAPI(title="Local API emulator", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for bound in dispatcher.routes:
        app.add_api_route(
            bound.path,
            _endpoint(dispatcher, bound),
            methods=[bound.method.value],
            name=bound.definition.label,
        )
        logger.info("Registered route", extra={"route": bound.definition.label})

    app.state.dispatcher = dispatcher
    return app


def main() -> None:
    """Load `.env`, then serve on localhost (PORT, default 3000)."""
    load_dotenv(os.environ.get("ENV_FILE") or None)
    os.environ.setdefault("IS_LOCAL", "true")

    port = int(os.environ.get("PORT", DEFAULT_PORT))
    uvicorn.run(create_app(), host="127.0.0.1", port=port)


if __name__ == "__main__":
    main()
