"""API tests for the resolution and submission routes."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from formflow.api.deps import get_component_factory
from formflow.core.config import Settings
from formflow.core.factory import ComponentFactory
from formflow.main import create_app


@pytest.fixture
def factory(repository):
    factory = ComponentFactory(Settings(form_store_type="memory"))
    factory.set_form_repository(repository)
    return factory


@pytest.fixture
def client(factory):
    app = create_app(Settings(form_store_type="memory"))
    app.dependency_overrides[get_component_factory] = lambda: factory
    return TestClient(app)


# =============================================================================
# Health Tests
# =============================================================================


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_cors_origins_come_from_settings(factory):
    app = create_app(Settings(form_store_type="memory", cors_origins=["https://forms.example.com"]))
    app.dependency_overrides[get_component_factory] = lambda: factory

    response = TestClient(app).get("/health", headers={"Origin": "https://forms.example.com"})

    assert response.headers["access-control-allow-origin"] == "https://forms.example.com"


# =============================================================================
# Resolution Route Tests
# =============================================================================


class TestResolutionRoutes:
    """Test suite for /forms/{form_id} resolution routes."""

    def test_render(self, client):
        response = client.post(
            "/forms/form2_contact/render",
            json={"templates": ["Contact: {{item_email}}", "{{email}} {{doesNotExist}}"], "payload": {"f1": "a@b.com"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["rendered"] == ["Contact: a@b.com", "a@b.com "]
        assert body["variables"] == ["item_email", "email", "doesNotExist"]

    def test_render_requires_templates(self, client):
        response = client.post("/forms/form2_contact/render", json={"templates": []})

        assert response.status_code == 422

    def test_mappings(self, client):
        response = client.post("/forms/form2_contact/mappings", json={"payload": {"f5": "10k"}})

        assert response.status_code == 200
        assert response.json()["mapped"] == {"f5": "10k", "budget": "10k", "budgetRange": "10k"}

    def test_field_alias(self, client):
        response = client.get("/forms/form2_contact/fields/f1/alias")

        assert response.json() == {"form_id": "form2_contact", "field_id": "f1", "alias": "item_email"}

    def test_resolve_variable(self, client):
        response = client.post("/forms/form2_contact/variables/phone", json={"payload": {"f4": "555"}})

        body = response.json()
        assert body["found"] is True
        assert body["value"] == "555"
        assert body["strategy"] == "label"

    def test_resolve_system_variable(self, client):
        response = client.post("/forms/form2_contact/variables/leadId", json={"payload": {"trackingToken": "abc_1"}})

        assert response.json()["value"] == "abc"
        assert response.json()["strategy"] == "system_variable"

    def test_resolve_variable_not_found(self, client):
        response = client.post("/forms/form2_contact/variables/nothing", json={"payload": {}})

        assert response.json()["found"] is False


# =============================================================================
# Submission Route Tests
# =============================================================================


class TestSubmissionRoutes:
    """Test suite for submission CRUD and rule previews."""

    def create(self, client, data):
        response = client.post("/forms/form2_contact/submissions", json={"data": data})
        assert response.status_code == 201
        return response.json()

    def test_create_assigns_tracking_token(self, client):
        created = self.create(client, {"f1": "a@b.com"})

        assert created["form_id"] == "form2_contact"
        assert created["tracking_token"].startswith(f"{created['id']}_")
        assert created["task_id"] is None

    def test_create_for_unknown_form(self, client):
        response = client.post("/forms/missing/submissions", json={"data": {}})

        assert response.status_code == 404

    def test_get_update_delete(self, client):
        created = self.create(client, {"f1": "a@b.com"})
        url = f"/submissions/{created['id']}"

        assert client.get(url).json()["data"] == {"f1": "a@b.com"}

        updated = client.put(url, json={"data": {"f1": "new@b.com"}}).json()
        assert updated["data"] == {"f1": "new@b.com"}
        assert updated["tracking_token"] == created["tracking_token"]

        assert client.delete(url).status_code == 204
        assert client.get(url).status_code == 404
        assert client.delete(url).status_code == 404

    def test_list_submissions(self, client):
        self.create(client, {"f1": "one@b.com"})
        self.create(client, [{"id": "f1", "value": "two@b.com"}])

        response = client.get("/forms/form2_contact/submissions", params={"limit": 10})

        assert len(response.json()["submissions"]) == 2

    def test_preview_rule_with_stored_submission(self, client):
        created = self.create(client, {"f1": "a@b.com", "f2": "Ada", "f5": "10k"})

        response = client.post("/rules/rule1/preview", json={"submission_id": created["id"]})

        body = response.json()
        assert body["recipient"] == "a@b.com"
        assert body["subject"] == "Hello Ada"
        assert body["body"] == f"Budget: 10k. Ref {created['tracking_token']}"

    def test_preview_rule_with_stored_item_array_submission(self, client):
        created = self.create(client, [{"id": "f1", "value": "a@b.com"}, {"id": "f5", "value": "10k"}])

        response = client.post("/rules/rule1/preview", json={"submission_id": created["id"]})

        body = response.json()
        assert body["recipient"] == "a@b.com"
        assert body["body"] == f"Budget: 10k. Ref {created['tracking_token']}"

    def test_preview_rule_with_adhoc_payload(self, client):
        response = client.post("/rules/rule1/preview", json={"payload": {"f1": "a@b.com"}})

        assert response.json()["recipient"] == "a@b.com"

    def test_preview_unknown_rule(self, client):
        assert client.post("/rules/nope/preview", json={}).status_code == 404


# =============================================================================
# Worker Tests
# =============================================================================


class TestRenderSubmissionRules:
    """Test suite for the rule rendering task body."""

    def test_renders_active_rules(self, factory, repository):
        from formflow.worker import render_submission_rules

        async def run_test():
            submission = await repository.create_submission("form2_contact", {"f1": "a@b.com", "f2": "Ada"})
            return submission, await render_submission_rules(submission.id, factory=factory)

        submission, result = asyncio.run(run_test())

        assert result["status"] == "completed"
        assert result["rules"][0]["recipient"] == "a@b.com"
        assert result["rules"][0]["subject"] == "Hello Ada"
        assert submission.tracking_token in result["rules"][0]["body"]

    def test_unknown_submission(self, factory):
        from formflow.worker import render_submission_rules

        result = asyncio.run(render_submission_rules("missing", factory=factory))

        assert result["status"] == "failed"
