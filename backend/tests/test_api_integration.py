"""Integration tests for the collections API and page rendering."""

import json

import pytest
from fastapi.testclient import TestClient

from pressroom.api.app import create_app
from pressroom.api.pages import embed_state
from pressroom.core.config import Settings
from pressroom.core.types import Entity
from pressroom.editorial import register_editorial_services, seed_demo
from pressroom.hooks import HookName, HookPoint
from pressroom.persistence import InMemoryRepository
from pressroom.services import ServiceRegistry


@pytest.fixture
def registry():
    repository = InMemoryRepository()
    seed_demo(repository)
    registry = ServiceRegistry(repository)
    register_editorial_services(registry)
    return registry


@pytest.fixture
def client(registry):
    with TestClient(create_app(registry)) as client:
        yield client


def page_state(html):
    """Extract the embedded JSON from a rendered page."""
    start = html.index("window.pageInitConfig = ") + len("window.pageInitConfig = ")
    end = html.index(";</script>", start)
    return json.loads(html[start:end])


class TestListCollection:
    def test_list_scoped(self, client):
        response = client.get("/api/submissions", params={"contextId": 1})
        assert response.status_code == 200
        data = response.json()
        assert data["itemsMax"] == 4
        assert [item["id"] for item in data["items"]] == [101, 102, 103, 104]
        assert data["_constants"]["STATUS_QUEUED"] == "queued"

    def test_pagination_and_total(self, client):
        data = client.get("/api/submissions?contextId=1&status=queued&count=1&offset=1").json()
        assert [item["id"] for item in data["items"]] == [103]
        assert data["itemsMax"] == 3

    def test_repeated_params_become_lists(self, client):
        data = client.get("/api/submissions?contextId=1&status=queued&status=published").json()
        assert data["itemsMax"] == 4

    def test_bracket_params(self, client):
        data = client.get("/api/submissions?contextId=1&status[]=published").json()
        assert [item["id"] for item in data["items"]] == [102]

    def test_assigned_to(self, client):
        data = client.get("/api/submissions?contextId=1&assignedTo=17").json()
        assert [item["id"] for item in data["items"]] == [101, 103]

    def test_unknown_filter_dropped(self, client):
        data = client.get("/api/submissions?contextId=1&colour=blue").json()
        assert data["itemsMax"] == 4

    def test_unknown_filter_strict(self, client):
        response = client.get("/api/submissions?contextId=1&colour=blue&strict=true")
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "UNRECOGNIZED_FILTER"
        assert body["keys"] == ["colour"]
        assert "colour" in body["message"]

    def test_invalid_filter_value(self, client):
        response = client.get("/api/submissions?assignedTo=nobody")
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_FILTER_VALUE"

    def test_non_integer_pagination_uses_defaults(self, client):
        response = client.get("/api/submissions?contextId=1&count=lots&offset=abc")
        assert response.status_code == 200
        assert [item["id"] for item in response.json()["items"]] == [101, 102, 103, 104]

    def test_invalid_pagination_without_clamping(self):
        repository = InMemoryRepository()
        seed_demo(repository)
        registry = ServiceRegistry(repository, settings=Settings(clamp_pagination=False))
        register_editorial_services(registry)
        with TestClient(create_app(registry)) as client:
            response = client.get("/api/submissions?count=lots")
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_PAGINATION"

    def test_count_is_clamped(self, client):
        data = client.get("/api/submissions?count=0").json()
        assert len(data["items"]) == 1

    def test_unknown_collection(self, client):
        response = client.get("/api/reviews")
        assert response.status_code == 404
        assert response.json()["error"] == "UNKNOWN_SERVICE"

    def test_failing_query_hook_is_400(self, client, registry):
        def broken(payload):
            raise RuntimeError("bad plugin")

        registry.hooks.register(HookName("Submission", HookPoint.QUERY_OBJECT), broken)
        response = client.get("/api/submissions")
        assert response.status_code == 400
        assert response.json()["error"] == "HOOK_LISTENER_FAILED"

    def test_locale_reaches_hooks(self, client, registry):
        @registry.hooks.listener(HookName("Submission", HookPoint.SUMMARY_PROPERTIES))
        def add_locale(payload):
            payload.values["locale"] = payload.context.locale

        data = client.get("/api/submissions?contextId=2", headers={"Accept-Language": "fr-CA,fr;q=0.8"}).json()
        assert data["items"][0]["locale"] == "fr-CA"


class TestQueryCollection:
    def test_post_query(self, client):
        response = client.post(
            "/api/submissions/query",
            json={"filters": {"assignedTo": [17], "status": ["queued"]}, "scopeId": 1, "count": 5},
        )
        assert response.status_code == 200
        data = response.json()
        assert [item["id"] for item in data["items"]] == [101, 103]
        assert data["itemsMax"] == 2

    def test_post_query_ordering(self, client):
        data = client.post(
            "/api/submissions/query",
            json={"scopeId": 1, "orderBy": "title", "orderDirection": "desc"},
        ).json()
        assert [item["id"] for item in data["items"]] == [103, 101, 102, 104]

    def test_post_query_strict(self, client):
        response = client.post("/api/authors/query", json={"filters": {"colour": "blue"}, "strict": True})
        assert response.status_code == 400


class TestGetItem:
    def test_get_full(self, client):
        response = client.get("/api/submissions/101")
        assert response.status_code == 200
        data = response.json()
        assert data["abstract"] == "A study of review workloads."
        assert [a["fullName"] for a in data["authors"]] == ["Ada Okafor", "Lin Chen"]
        assert data["_constants"]["STATUS_PUBLISHED"] == "published"

    def test_get_missing(self, client):
        assert client.get("/api/submissions/999").status_code == 404

    def test_get_soft_deleted(self, client):
        assert client.get("/api/submissions/106").status_code == 404

    def test_get_author(self, client):
        data = client.get("/api/authors/3").json()
        assert data["email"] == "maria@example.org"


class TestPages:
    def test_page_embeds_list_payload(self, client):
        response = client.get("/pages/submissions?contextId=1&status=published")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

        state = page_state(response.text)
        panel = state["components"]["submissionsListPanel"]
        assert panel["itemsMax"] == 1
        assert panel["items"][0]["title"] == "Metadata Quality in Journals"
        assert panel["_constants"]["STATUS_QUEUED"] == "queued"

    def test_page_matches_api_payload(self, client):
        api = client.get("/api/submissions?contextId=1").json()
        state = page_state(client.get("/pages/submissions?contextId=1").text)
        assert state["components"]["submissionsListPanel"] == api

    def test_script_content_is_escaped(self, client, registry):
        registry.repository.add(
            Entity(
                "Submission",
                107,
                {"contextId": 3, "title": "</script><b>x</b>", "status": "queued", "submissionProgress": 0},
            )
        )
        html = client.get("/pages/submissions?contextId=3").text
        assert "</script><b>" not in html
        state = page_state(html)
        assert state["components"]["submissionsListPanel"]["items"][0]["title"] == "</script><b>x</b>"

    def test_embed_state_escapes_line_separators(self):
        text = embed_state({"title": "a\u2028b & <c>"})
        assert "\u2028" not in text
        assert "<" not in text
        assert json.loads(text) == {"title": "a\u2028b & <c>"}

    def test_unknown_page_collection(self, client):
        assert client.get("/pages/reviews").status_code == 404
