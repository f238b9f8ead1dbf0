from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from magic_chess.engine.types import Refusal
from magic_chess.protocol.http.app import create_app
from magic_chess.protocol.http.error import RuleRefusalError


def test_error_envelope_for_http_exception() -> None:
    app: FastAPI = create_app()

    @app.get("/boom")
    def boom():  # type: ignore[no-redef]
        raise HTTPException(status_code=400, detail="oops")

    client = TestClient(app)
    r = client.get("/boom")
    assert r.status_code == 400
    body = r.json()
    assert "error" in body
    err = body["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "oops"
    assert err["type"] == "client_error"
    assert err["request_id"]


def test_error_envelope_for_rule_refusal() -> None:
    app: FastAPI = create_app()

    @app.get("/refuse")
    def refuse():  # type: ignore[no-redef]
        raise RuleRefusalError(Refusal.SELF_CHECK, "king would be in check")

    r = TestClient(app).get("/refuse")
    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "conflict"
    assert err["reason"] == "SelfCheck"
    assert err["message"] == "king would be in check"


def test_unhandled_exception_is_hidden() -> None:
    app: FastAPI = create_app()

    @app.get("/crash")
    def crash():  # type: ignore[no-redef]
        raise RuntimeError("secret detail")

    r = TestClient(app, raise_server_exceptions=False).get("/crash")
    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "internal_error"
    assert err["type"] == "server_error"
    assert "secret" not in err["message"]


def test_validation_error_lists_fields() -> None:
    r = TestClient(create_app()).post("/api/perft", json={"depth": 9})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert any(f["field"].endswith("depth") for f in err["field_errors"])
