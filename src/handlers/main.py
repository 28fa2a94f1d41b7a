"""
Single entrypoint Lambda that routes API Gateway requests to handler units.

The routing table is built from the same manifest the local server uses, so
a route that works offline resolves identically once deployed.
"""

import asyncio
from typing import Optional

from handlers.dispatcher import Dispatcher
from handlers.manifest import HANDLER_UNITS
from handlers.registry import RouteRegistry
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Built on first invocation and reused while the container stays warm
_dispatcher: Optional[Dispatcher] = None


def get_dispatcher() -> Dispatcher:
    """Lazy-build the Dispatcher; a duplicate route fails the cold start."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher(RouteRegistry.from_manifest(HANDLER_UNITS))
    return _dispatcher


def lambda_handler(event, context):
    """Entry point invoked by API Gateway (REST or HTTP API proxy integration)."""
    return asyncio.run(get_dispatcher().handle_event(event))
