import json

import pytest

from handlers import main


@pytest.fixture(autouse=True)
def fresh_dispatcher(monkeypatch):
    monkeypatch.setattr(main, "_dispatcher", None)


def test_main_creates_and_reads_an_item(items_service):
    created = main.lambda_handler(
        {
            "httpMethod": "POST",
            "path": "/items",
            "body": json.dumps({"name": "A", "description": "B"}),
        },
        None,
    )
    assert created["statusCode"] == 201
    item_id = json.loads(created["body"])["id"]

    fetched = main.lambda_handler(
        {"requestContext": {"http": {"method": "GET", "path": f"/items/{item_id}"}}},
        None,
    )
    assert fetched["statusCode"] == 200
    assert json.loads(fetched["body"])["name"] == "A"


def test_main_no_content_has_empty_body(items_service):
    resp = main.lambda_handler({"httpMethod": "DELETE", "path": "/items/abc"}, None)
    assert resp["statusCode"] == 204
    assert resp["body"] == ""


def test_main_unknown_route():
    event = {"requestContext": {"http": {"method": "GET", "path": "/unknown"}}}
    resp = main.lambda_handler(event, None)
    assert resp["statusCode"] == 404
    body = json.loads(resp["body"])
    assert body["message"] == "Route not found"


def test_dispatcher_is_built_once():
    assert main.get_dispatcher() is main.get_dispatcher()
    routes = [(r.method.value, r.path) for r in main.get_dispatcher().routes]
    assert routes == [
        ("GET", "/items"),
        ("GET", "/items/{id}"),
        ("POST", "/items"),
        ("PUT", "/items/{id}"),
        ("DELETE", "/items/{id}"),
    ]
