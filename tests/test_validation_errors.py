"""Tests for error handling in the application factory."""

from typing import List, Literal

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel

from quickly import BaseProcessor, ServiceConfig, StatelessAction, create_app
from quickly.errors import FetchError, MissingPathError


class PathParams(BaseModel):
    """Test path parameters with Literal type."""
    action: Literal["start", "stop"]


class MismatchedParams(BaseModel):
    other: str


class TestProcessor(BaseProcessor):
    """Test processor for error handling."""

    __test__ = False

    @property
    def name(self) -> str:
        return "test-validation"

    def get_stateless_actions(self) -> List[StatelessAction]:
        return [
            StatelessAction(
                name="test_path_params",
                path="/test/{action}",
                path_params_model=PathParams,
                handler=self.handle_path_params,
            ),
            StatelessAction(
                name="test_query",
                path="/query",
                query_parser=lambda query: query.get("q", ""),
                handler=self.handle_query,
            ),
            StatelessAction(
                name="test_fetch_error",
                path="/broken",
                handler=self.handle_broken,
            ),
            StatelessAction(
                name="test_request",
                path="/echo/{action}",
                path_params_model=PathParams,
                include_request=True,
                handler=lambda request, params: {"path": request.url.path, "action": params.action},
            ),
            StatelessAction(
                name="test_bytes",
                path="/bytes",
                handler=lambda: b"\x00\x01",
                media_type="application/octet-stream",
            ),
        ]

    def handle_path_params(self, path_params: PathParams):
        """Handler for path params test."""
        return {"action": path_params.action}

    async def handle_query(self, q: str):
        return {"q": q}

    def handle_broken(self):
        raise FetchError("origin at 10.0.0.1 refused the connection")


def test_path_param_validation_literal_mismatch():
    """Test that invalid Literal path param returns 400."""
    client = TestClient(create_app(TestProcessor()))

    response = client.get("/test/invalid")

    assert response.status_code == 400
    assert response.json() == {"error": "Validation error"}


def test_path_param_validation_success():
    client = TestClient(create_app(TestProcessor()))

    response = client.get("/test/start")

    assert response.status_code == 200
    assert response.json() == {"action": "start"}


def test_query_parser_result_is_passed_to_handler():
    client = TestClient(create_app(TestProcessor()))

    response = client.get("/query?q=hello")

    assert response.json() == {"q": "hello"}


def test_service_error_hides_internal_detail():
    client = TestClient(create_app(TestProcessor()))

    response = client.get("/broken")

    assert response.status_code == FetchError.status_code
    assert "10.0.0.1" not in response.text
    assert response.json() == {"error": FetchError.public_message}


def test_bytes_are_wrapped_with_media_type():
    client = TestClient(create_app(TestProcessor()))

    response = client.get("/bytes")

    assert response.headers["content-type"] == "application/octet-stream"
    assert response.content == b"\x00\x01"


def test_health_path_from_config():
    client = TestClient(create_app(TestProcessor(), ServiceConfig(health_path="/status")))

    assert client.get("/status").json() == {"status": "healthy", "version": "1.0.0"}
    assert client.get("/health").status_code == 404


def test_mismatched_path_params_model_is_rejected():
    class Broken(TestProcessor):
        def get_stateless_actions(self) -> List[StatelessAction]:
            return [
                StatelessAction(
                    name="broken",
                    path="/items/{item}",
                    path_params_model=MismatchedParams,
                    handler=lambda params: params,
                )
            ]

    with pytest.raises(ValueError):
        create_app(Broken())


def test_missing_path_status_code():
    assert MissingPathError.status_code == 422


def test_request_is_passed_first_when_included():
    client = TestClient(create_app(TestProcessor()))

    response = client.get("/echo/stop")

    assert response.json() == {"path": "/echo/stop", "action": "stop"}
