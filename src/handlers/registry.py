"""
Route declarations for handler units.

Decorators only attach `(method, path)` metadata to a class or function;
nothing is collected at import time. A `RouteRegistry` is then built from an
explicit manifest of handler classes and handed to the Dispatcher.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from utils.error_handling import ConfigurationError

BASE_PATH_ATTR = "__route_base__"
ROUTE_ATTR = "__route__"

T = TypeVar("T")


class HttpMethod(str, Enum):
    """HTTP verbs a handler operation may be bound to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


def join_path(base_path: str, sub_path: str) -> str:
    """`("items", "{id}")` -> `/items/{id}`; empty segments are dropped."""
    segments = [
        part
        for segment in (base_path, sub_path)
        for part in (segment or "").split("/")
        if part
    ]
    return "/" + "/".join(segments)


def controller(base_path: str) -> Callable[[Type[T]], Type[T]]:
    """Class decorator recording the base path of a handler unit."""

    def decorator(cls: Type[T]) -> Type[T]:
        setattr(cls, BASE_PATH_ATTR, base_path)
        return cls

    return decorator


def route(method: Union[HttpMethod, str], sub_path: str = "") -> Callable[[T], T]:
    """Method decorator recording the verb and sub path of an operation."""
    verb = HttpMethod(method.upper() if isinstance(method, str) else method)

    def decorator(fn: T) -> T:
        setattr(fn, ROUTE_ATTR, (verb, sub_path))
        return fn

    return decorator


def get(sub_path: str = ""):
    return route(HttpMethod.GET, sub_path)


def post(sub_path: str = ""):
    return route(HttpMethod.POST, sub_path)


def put(sub_path: str = ""):
    return route(HttpMethod.PUT, sub_path)


def patch(sub_path: str = ""):
    return route(HttpMethod.PATCH, sub_path)


def delete(sub_path: str = ""):
    return route(HttpMethod.DELETE, sub_path)


@dataclass(frozen=True)
class RouteDefinition:
    """One operation of one handler class bound to a method and full path."""

    method: HttpMethod
    path: str
    handler_cls: type
    operation: str

    @property
    def label(self) -> str:
        return f"[{self.method.value}] {self.path}"


class RouteRegistry:
    """Ordered bookkeeping of route definitions; conflicts are the Dispatcher's job."""

    def __init__(self) -> None:
        self._definitions: List[RouteDefinition] = []
        self._handler_classes: List[type] = []

    @classmethod
    def from_manifest(cls, handler_classes: Iterable[type]) -> "RouteRegistry":
        registry = cls()
        for handler_cls in handler_classes:
            registry.add_controller(handler_cls)
        return registry

    @property
    def definitions(self) -> Tuple[RouteDefinition, ...]:
        return tuple(self._definitions)

    @property
    def handler_classes(self) -> Tuple[type, ...]:
        return tuple(self._handler_classes)

    def add_controller(self, handler_cls: type) -> None:
        """Register every decorated operation of a decorated class, in definition order."""
        base_path = self._base_path(handler_cls)
        for name, member in vars(handler_cls).items():
            metadata = getattr(member, ROUTE_ATTR, None)
            if metadata is None:
                continue
            method, sub_path = metadata
            self._append(RouteDefinition(method, join_path(base_path, sub_path), handler_cls, name))

    def add(
        self,
        handler_cls: type,
        method: Union[HttpMethod, str],
        sub_path: str,
        operation: str,
        base_path: Optional[str] = None,
    ) -> None:
        """Register one operation explicitly, without decorators."""
        if not callable(getattr(handler_cls, operation, None)):
            raise ConfigurationError(f"{handler_cls.__name__} has no operation {operation!r}")
        if base_path is None:
            base_path = self._base_path(handler_cls)
        verb = HttpMethod(method.upper() if isinstance(method, str) else method)
        self._append(RouteDefinition(verb, join_path(base_path, sub_path), handler_cls, operation))

    def _append(self, definition: RouteDefinition) -> None:
        if definition.handler_cls not in self._handler_classes:
            self._handler_classes.append(definition.handler_cls)
        self._definitions.append(definition)

    @staticmethod
    def _base_path(handler_cls: type) -> str:
        base_path = getattr(handler_cls, BASE_PATH_ATTR, None)
        if base_path is None:
            raise ConfigurationError(
                f"{handler_cls.__name__} is not a controller; decorate it with @controller(base_path)"
            )
        return base_path
