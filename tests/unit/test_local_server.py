"""
Local emulation server tests using FastAPI's TestClient.

The lifespan (table bootstrap) only runs when the client is used as a
context manager, so most tests skip it entirely.
"""

import json
import os
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
import pytest

from handlers.dispatcher import Dispatcher
from handlers.registry import RouteRegistry, controller, get, post
from local import server
from models.request import InvocationResult
from utils.error_handling import DuplicateRouteError


@pytest.fixture
def client(dispatcher, items_service):
    return TestClient(server.create_app(dispatcher, setup_table=False))


def test_crud_round_trip(client):
    resp = client.post("/items", json={"name": "A", "description": "B"})
    assert resp.status_code == 201
    item_id = resp.json()["id"]

    resp = client.get(f"/items/{item_id}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "A"
    assert resp.headers["access-control-allow-origin"] == "*"

    resp = client.put(f"/items/{item_id}", json={"description": "C"})
    assert resp.status_code == 204
    assert resp.content == b""

    item = client.get(f"/items/{item_id}").json()
    assert item["name"] == "A"
    assert item["description"] == "C"

    assert client.delete(f"/items/{item_id}").status_code == 204
    assert client.delete(f"/items/{item_id}").status_code == 204
    assert client.get(f"/items/{item_id}").status_code == 404


def test_list_returns_json_array_not_a_string(client):
    client.post("/items", json={"name": "A"})

    resp = client.get("/items")

    assert resp.status_code == 200
    assert isinstance(resp.json(), list)
    assert resp.json()[0]["name"] == "A"


def test_invalid_body_is_a_client_error(client):
    resp = client.post("/items", content=b"{broken", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert "message" in resp.json()


def test_unregistered_method_is_not_routed(client):
    assert client.patch("/items/1", json={}).status_code == 405


@controller("echo")
class EchoController:
    @post()
    async def echo(self, request):
        return {"statusCode": 200, "headers": {}, "body": request.body}

    @get("boom")
    async def boom(self, request):
        raise RuntimeError("exploded")

    @get("plain")
    async def plain(self, request):
        return {"statusCode": 200, "headers": {}, "body": "just text"}

    @get("empty")
    async def empty(self, request):
        return {"statusCode": 202}


@pytest.fixture
def echo_client():
    dispatcher = Dispatcher(RouteRegistry.from_manifest([EchoController]))
    return TestClient(server.create_app(dispatcher, setup_table=False))


def test_parsed_body_reaches_handler_as_string(echo_client):
    resp = echo_client.post("/echo", json={"a": [1, 2]})
    assert resp.status_code == 200
    assert resp.json() == {"a": [1, 2]}


def test_uncaught_handler_error_becomes_500(echo_client):
    resp = echo_client.get("/echo/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": "exploded"}


def test_non_json_string_body_is_passed_through(echo_client):
    assert echo_client.get("/echo/plain").json() == "just text"


def test_missing_body_defaults_to_empty_object(echo_client):
    resp = echo_client.get("/echo/empty")
    assert resp.status_code == 202
    assert resp.json() == {}


def test_to_transport_response_defaults():
    resp = server.to_transport_response(InvocationResult(body=json.dumps({"x": 1})))
    assert resp.status_code == 200
    assert json.loads(resp.body) == {"x": 1}


def test_duplicate_routes_abort_app_creation():
    @controller("echo")
    class AnotherEcho:
        @post()
        async def again(self, request):
            return {"statusCode": 200}

    with pytest.raises(DuplicateRouteError):
        server.create_app(
            Dispatcher(RouteRegistry.from_manifest([EchoController, AnotherEcho])),
            setup_table=False,
        )


def test_lifespan_bootstraps_local_table(dispatcher):
    setup = MagicMock()
    with patch.object(server, "LocalTableSetup", return_value=setup) as setup_cls:
        with TestClient(server.create_app(dispatcher, setup_table=True)):
            pass

    setup_cls.assert_called_once()
    setup.setup.assert_called_once_with()


def test_main_runs_uvicorn():
    with patch.dict(os.environ, {"PORT": "4321"}):
        os.environ.pop("IS_LOCAL", None)
        with patch.object(server, "load_dotenv"), patch.object(server, "uvicorn") as fake_uvicorn:
            server.main()
        assert os.environ["IS_LOCAL"] == "true"

    _, kwargs = fake_uvicorn.run.call_args
    assert kwargs["port"] == 4321
    assert kwargs["host"] == "127.0.0.1"
