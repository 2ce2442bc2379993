"""HTTP tests for shortening, lookup and redirect."""

from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient

from shortener.api.dependencies import get_short_code_generator, get_shortener_service
from shortener.api.errors import GENERIC_ERROR_MESSAGE
from shortener.middleware.logging import REQUEST_ID_HEADER
from shortener.services.codes import ShortCodeGenerator
from shortener.services.exceptions import ShortCodeConflictError

PROBLEM_JSON = "application/problem+json"


def shorten(client, url):
    return client.post("/api/urls", json={"originalUrl": url})


@pytest.mark.api
class TestShortenAndResolve:

    def test_create_lookup_and_redirect(self, client):
        response = shorten(client, "https://www.example.com/some/long/path")

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"id", "originalUrl", "shortCode", "createdAt"}
        assert body["originalUrl"] == "https://www.example.com/some/long/path"
        assert len(body["shortCode"]) == 7
        assert response.headers["location"].endswith(f"/api/urls/{body['shortCode']}")

        info = client.get(f"/api/urls/{body['shortCode']}")
        assert info.status_code == 200
        assert info.json() == body

        redirect = client.get(f"/r/{body['shortCode']}", follow_redirects=False)
        assert redirect.status_code == 302
        assert redirect.headers["location"] == "https://www.example.com/some/long/path"

    def test_same_url_twice_gives_two_codes(self, client):
        first = shorten(client, "https://example.com").json()
        second = shorten(client, "https://example.com").json()

        assert first["id"] != second["id"]
        assert first["shortCode"] != second["shortCode"]

    def test_unknown_code_redirect_is_not_found(self, client):
        response = client.get("/r/unknown123", follow_redirects=False)

        assert response.status_code == 404
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        body = response.json()
        assert body["status"] == 404
        assert body["title"] == "Resource Not Found"
        assert "unknown123" in body["detail"]
        assert body["instance"] == "/r/unknown123"
        assert body["traceId"]

    def test_unknown_code_lookup_is_not_found(self, client):
        response = client.get("/api/urls/unknown123")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith(PROBLEM_JSON)

    def test_lookup_is_case_sensitive(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]
        swapped = code.swapcase()
        if swapped != code:
            assert client.get(f"/api/urls/{swapped}").status_code == 404


@pytest.mark.api
class TestValidation:

    @pytest.mark.parametrize("url", ["not-a-valid-url", "ftp://example.com/file", "", "http://"])
    def test_invalid_url_is_rejected(self, client, url):
        response = shorten(client, url)

        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        body = response.json()
        assert body["title"] == "Validation Error"
        assert "originalUrl" in body["errors"]
        assert body["traceId"]

    def test_missing_url_is_rejected(self, client):
        response = client.post("/api/urls", json={})

        assert response.status_code == 400
        assert response.json()["errors"] == {"originalUrl": ["URL is required."]}

    def test_malformed_body_is_rejected(self, client):
        response = client.post(
            "/api/urls",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)

    def test_rejected_input_stores_nothing(self, client):
        shorten(client, "not-a-valid-url")
        ok = shorten(client, "https://example.com").json()

        assert client.get(f"/api/urls/{ok['shortCode']}").status_code == 200


@pytest.mark.api
class TestFailureMapping:

    def test_exhausted_allocation_is_internal_error(self, test_app, client):
        test_app.dependency_overrides[get_short_code_generator] = (
            lambda: ShortCodeGenerator(alphabet="a", length=7)
        )

        assert shorten(client, "https://example.com/1").status_code == 201
        response = shorten(client, "https://example.com/2")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert "after 10 attempts" in response.json()["detail"]

    def test_conflict_is_409(self, test_app, client):
        class RacingService:
            async def create_short_url(self, db, original_url):
                raise ShortCodeConflictError("Short code 'raced01' is already in use")

        test_app.dependency_overrides[get_shortener_service] = lambda: RacingService()

        response = shorten(client, "https://example.com")

        assert response.status_code == 409
        assert response.json()["title"] == "Conflict"

    def test_unexpected_error_hides_details(self, test_app):
        class BrokenService:
            async def get_url_by_code(self, db, short_code):
                raise RuntimeError("secret connection string")

        test_app.dependency_overrides[get_shortener_service] = lambda: BrokenService()

        with TestClient(test_app, raise_server_exceptions=False) as client:
            response = client.get("/r/abc1234", follow_redirects=False)

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == GENERIC_ERROR_MESSAGE
        assert "secret" not in response.text
        assert response.headers[REQUEST_ID_HEADER] == body["traceId"]

    def test_stored_url_with_reserved_characters_redirects(self, client):
        original = "https://example.com/a|b^c{d}?q=1"
        code = shorten(client, original).json()["shortCode"]

        redirect = client.get(f"/r/{code}", follow_redirects=False)

        assert redirect.status_code == 302
        assert redirect.headers["location"] == "https://example.com/a%7Cb%5Ec%7Bd%7D?q=1"
        assert unquote(redirect.headers["location"]) == original


@pytest.mark.api
class TestAmbient:

    def test_request_id_header(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"alive": True}
        assert response.headers[REQUEST_ID_HEADER]

    def test_trace_id_matches_request_id(self, client):
        response = client.get("/api/urls/unknown123")
        assert response.json()["traceId"] == response.headers[REQUEST_ID_HEADER]

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["components"]["database"]["status"] == "healthy"

    def test_readiness(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True
