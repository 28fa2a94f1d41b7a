"""
Dispatcher shared by the Lambda entrypoint and the local emulation server.

Construction instantiates every registered handler class once, builds the
`(method, path)` routing table and aborts on duplicates before any request
can be served. After that the table is read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import inspect
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from pydantic import ValidationError as PayloadError

from handlers.registry import HttpMethod, RouteDefinition, RouteRegistry
from models.request import InvocationRequest, InvocationResult
from utils.error_handling import DuplicateRouteError
from utils.logging_config import get_logger
from utils.response import HeaderMode, build_response

logger = get_logger(__name__)

_PARAM = re.compile(r"\{(\w+)\}")


class DispatcherState(str, Enum):
    STARTING = "STARTING"
    LISTENING = "LISTENING"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class BoundRoute:
    """A route definition bound to the handler instance that serves it."""

    definition: RouteDefinition
    instance: Any
    pattern: Pattern[str]

    @property
    def method(self) -> HttpMethod:
        return self.definition.method

    @property
    def path(self) -> str:
        return self.definition.path

    @property
    def operation(self):
        return getattr(self.instance, self.definition.operation)


def path_to_regex(path_template: str) -> Pattern[str]:
    """`/items/{id}` -> `^/items/(?P<id>[^/]+)$`."""
    escaped = re.escape(path_template)
    # re.escape turns "{id}" into "\{id\}".
    regex = re.sub(r"\\\{(\w+)\\\}", r"(?P<\1>[^/]+)", escaped)
    return re.compile(f"^{regex}$")


def _normalize_path(path: str) -> str:
    return "/" + path.strip("/")


class Dispatcher:
    """Route table plus the request/response bridge around handler operations."""

    def __init__(self, registry: RouteRegistry):
        self.state = DispatcherState.STARTING
        self._routes: Dict[Tuple[HttpMethod, str], BoundRoute] = {}
        try:
            self._build(registry)
        except DuplicateRouteError:
            self.state = DispatcherState.ABORTED
            raise
        self.state = DispatcherState.LISTENING

    def _build(self, registry: RouteRegistry) -> None:
        instances = {handler_cls: handler_cls() for handler_cls in registry.handler_classes}

        for definition in registry.definitions:
            key = (definition.method, definition.path)
            if key in self._routes:
                logger.error("Duplicate route", extra={"route": definition.label})
                raise DuplicateRouteError(definition.label)

            self._routes[key] = BoundRoute(
                definition=definition,
                instance=instances[definition.handler_cls],
                pattern=path_to_regex(definition.path),
            )
            logger.info("Registered route", extra={"route": definition.label})

    @property
    def routes(self) -> List[BoundRoute]:
        return list(self._routes.values())

    def match(self, method: str, path: str) -> Optional[Tuple[BoundRoute, Dict[str, str]]]:
        """Find the route serving `method path` and the path parameters it binds."""
        try:
            verb = HttpMethod(method.upper())
        except ValueError:
            return None

        path = _normalize_path(path)
        exact = self._routes.get((verb, path))
        if exact is not None and not _PARAM.search(path):
            return exact, {}

        for bound in self._routes.values():
            if bound.method != verb:
                continue
            found = bound.pattern.match(path)
            if found:
                return bound, found.groupdict()
        return None

    async def invoke(self, bound: BoundRoute, request: InvocationRequest) -> InvocationResult:
        """
        Call a handler operation and coerce its return value.

        Handlers are expected to translate their own errors; anything that
        escapes becomes a 500 here so a single bad request never takes the
        process down.
        """
        try:
            result = bound.operation(request)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, InvocationResult):
                return result
            return InvocationResult.model_validate(result or {})
        except Exception as exc:
            logger.exception("Unhandled handler error", extra={"route": bound.definition.label})
            return InvocationResult.model_validate(
                build_response(500, {"error": str(exc)}, HeaderMode.ALLOW)
            )

    async def handle_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Serve an API Gateway proxy event (REST v1 or HTTP API v2)."""
        method, path = event_route(event)
        matched = self.match(method, path)
        if matched is None:
            logger.info("Route not found", extra={"method": method, "path": path})
            return build_response(
                404,
                {"message": "Route not found", "route": f"{method} {path}"},
                HeaderMode.ALLOW,
            )

        bound, params = matched
        try:
            request = InvocationRequest.model_validate(event)
        except PayloadError as exc:
            logger.exception("Unreadable proxy event", extra={"route": bound.definition.label})
            return build_response(
                500, {"error": f"Invalid event: {exc.error_count()} errors"}, HeaderMode.ALLOW
            )

        request.path_parameters = {**params, **request.path_parameters}
        result = await self.invoke(bound, request)
        return result.to_proxy()


def event_route(event: Dict[str, Any]) -> Tuple[str, str]:
    """Pull method and path from either proxy event format."""
    http = (event.get("requestContext") or {}).get("http") or {}
    method = event.get("httpMethod") or http.get("method") or ""
    path = event.get("path") or event.get("rawPath") or http.get("path") or "/"
    return method.upper(), path
