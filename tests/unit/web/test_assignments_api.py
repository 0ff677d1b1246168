#!/usr/bin/env python3
"""
API tests for /api/assignments.

The app runs against the in-memory SQLite database from conftest.py through
dependency overrides; rate limiting is disabled.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.allocation.errors import PersistenceError
from core.allocation.service import AssignmentOrchestrator
from core.config_loader import AllocationConfig
from database.uow import allocation_uow
from tests import seed_position, seed_recruiter
from web.backend.app import create_app
from web.backend.dependencies import get_allocation_config, get_session_factory
from web.backend.rate_limit import limiter


@pytest.fixture
def client(session_factory):
    limiter.enabled = False
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_allocation_config] = lambda: AllocationConfig(locale="en")
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    limiter.enabled = True


class TestCreateAssignments:

    def test_single_position_created(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            recruiter = seed_recruiter(repo, name="Ana Torres")
            position_id = seed_position(repo).id

        response = client.post("/api/assignments", json={"position_id": str(position_id)})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Position assigned to Ana Torres"
        assert "warning" not in body
        assert body["stats"]["total_assigned"] == 1
        assert body["data"][0]["recruiter_id"] == str(recruiter.id)
        assert body["data"][0]["score_breakdown"] == {"zone": 1.0, "capability": 1.0, "headroom": 1.0}

    def test_batch_created(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            seed_recruiter(repo, capacity=25)
            ids = [str(seed_position(repo, title=f"Operario {i}", priority="P1").id) for i in range(3)]

        response = client.post("/api/assignments", json={"position_ids": ids})

        assert response.status_code == 201
        body = response.json()
        assert body["stats"]["total_assigned"] == 3
        assert body["stats"]["by_priority"] == {"P1": 3}
        assert body["message"] == "3 positions assigned"

    def test_partial_success_is_201_with_warning(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            seed_recruiter(repo, name="Tight", primary_zone="Trujillo", capacity=3, current_load=2)
            ids = [str(seed_position(repo, title=f"Trujillo {i}", zone="Trujillo").id) for i in range(2)]

        response = client.post("/api/assignments", json={"position_ids": ids})

        assert response.status_code == 201
        body = response.json()
        assert body["stats"]["total_assigned"] == 1
        assert body["stats"]["total_failed"] == 1
        assert "could not be assigned" in body["warning"]

    def test_capacity_exhausted_is_409(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            seed_recruiter(repo, capacity=2, current_load=2)
            position_id = seed_position(repo).id

        response = client.post("/api/assignments", json={"position_id": str(position_id)})

        assert response.status_code == 409
        assert response.json()["success"] is False
        assert response.json()["type"] == "ConflictError"

    def test_already_assigned_is_409(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            holder = seed_recruiter(repo)
            position_id = seed_position(repo, status="in_progress", recruiter_id=holder.id).id

        response = client.post("/api/assignments", json={"position_id": str(position_id)})

        assert response.status_code == 409
        assert response.json()["details"]["status"] == "in_progress"

    def test_force_reassigns(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            holder = seed_recruiter(repo, primary_zone="Lima", current_load=1)
            seed_recruiter(repo, name="Local")
            position_id = seed_position(repo, status="in_progress", recruiter_id=holder.id).id

        response = client.post("/api/assignments", json={"position_id": str(position_id), "force": True})

        assert response.status_code == 201
        assert response.json()["data"][0]["recruiter_name"] == "Local"

    def test_unknown_position_is_404(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            seed_recruiter(repo)

        response = client.post("/api/assignments", json={"position_id": str(uuid.uuid4())})

        assert response.status_code == 404
        assert response.json()["error"] == "Position not found"

    def test_persistence_failure_is_500(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            seed_recruiter(repo)
            position_id = seed_position(repo).id

        with patch.object(AssignmentOrchestrator, "assign", side_effect=PersistenceError("Failed to save assignments")):
            response = client.post("/api/assignments", json={"position_id": str(position_id)})

        assert response.status_code == 500
        assert response.json()["type"] == "PersistenceError"

    def test_unexpected_error_hides_internals(self, client, session_factory):
        with patch.object(AssignmentOrchestrator, "assign", side_effect=RuntimeError("password=hunter2")):
            response = client.post("/api/assignments", json={"position_id": str(uuid.uuid4())})

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "hunter2" not in response.text


class TestRequestValidation:

    @pytest.mark.parametrize("payload", [
        {},
        {"position_ids": []},
        {"position_id": "not-a-uuid"},
        {"position_id": str(uuid.uuid4()), "position_ids": [str(uuid.uuid4())]},
    ])
    def test_malformed_requests_are_400(self, client, payload):
        response = client.post("/api/assignments", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "ValidationError"
        assert body["details"]


class TestListAssignments:

    @pytest.fixture
    def assigned(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            recruiter = seed_recruiter(repo, capacity=25)
            ids = [seed_position(repo, title=f"Asistente {i}").id for i in range(3)]
        response = client.post("/api/assignments", json={"position_ids": [str(i) for i in ids]})
        assert response.status_code == 201
        return {"recruiter": recruiter.id, "positions": ids}

    def test_lists_with_display_fields(self, client, assigned):
        response = client.get("/api/assignments")

        assert response.status_code == 200
        body = response.json()
        assert body["meta"] == {"total": 3, "page": 1, "per_page": 50}
        assert body["data"][0]["recruiter_name"] == "Ana Torres"
        assert body["data"][0]["position_zone"] == "Trujillo"

    def test_pagination(self, client, assigned):
        body = client.get("/api/assignments", params={"page": 2, "per_page": 2}).json()

        assert body["meta"]["total"] == 3
        assert len(body["data"]) == 1

    def test_filter_by_position(self, client, assigned):
        position_id = str(assigned["positions"][0])

        body = client.get("/api/assignments", params={"position_id": position_id}).json()

        assert body["meta"]["total"] == 1
        assert body["data"][0]["position_id"] == position_id

    def test_filter_by_status(self, client, assigned):
        assert client.get("/api/assignments", params={"status": "reassigned"}).json()["meta"]["total"] == 0
        assert client.get("/api/assignments", params={"status": "assigned"}).json()["meta"]["total"] == 3

    def test_invalid_status_is_400(self, client):
        response = client.get("/api/assignments", params={"status": "bogus"})

        assert response.status_code == 400
        assert "Invalid status" in response.json()["error"]

    def test_invalid_page_is_400(self, client):
        assert client.get("/api/assignments", params={"page": 0}).status_code == 400
        assert client.get("/api/assignments", params={"per_page": 500}).status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "service": "staffalloc"}
