#!/usr/bin/env python3
"""
API tests for the read-only suggestion endpoints under /api/positions.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from core.config_loader import AllocationConfig
from database.models import Assignment, CapacityReservation
from database.uow import allocation_uow
from tests import FIXED_NOW, seed_position, seed_recruiter
from web.backend.app import create_app
from web.backend.dependencies import get_allocation_config, get_session_factory


@pytest.fixture
def client(session_factory):
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_allocation_config] = lambda: AllocationConfig(locale="en")
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def staffed(session_factory):
    with allocation_uow(session_factory) as repo:
        local = seed_recruiter(repo, name="Local", primary_zone="Trujillo", current_load=2)
        side = seed_recruiter(repo, name="Side", primary_zone="Lima", secondary_zones=["Trujillo"])
        far = seed_recruiter(repo, name="Far", primary_zone="Ica", current_load=5)
        remote = seed_recruiter(repo, name="Remote", primary_zone="Arequipa", current_load=9)
        seed_recruiter(repo, name="Full", capacity=3, current_load=3)

        urgent = seed_position(repo, title="Jefe de Turno", priority="P1", level="jefe",
                               sla_deadline=FIXED_NOW - timedelta(days=2))
        technical = seed_position(repo, title="Operario", priority="P2", level="operario")
        general = seed_position(repo, title="Analista", priority="P3", level="analista")
        held = seed_position(repo, title="Asistente", status="in_progress", recruiter_id=local.id)
        seed_position(repo, title="Cubierta", status="filled")
    return {
        "local": local.id, "side": side.id, "far": far.id, "remote": remote.id,
        "urgent": urgent.id, "technical": technical.id, "general": general.id, "held": held.id,
    }


class TestUnassigned:

    def test_lists_open_positions_most_urgent_first(self, client, staffed):
        response = client.get("/api/positions/unassigned")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert [p["position_id"] for p in body["data"]] == [
            str(staffed["urgent"]), str(staffed["technical"]), str(staffed["general"])
        ]
        assert body["queue_stats"] == {"critical": 1, "technical": 1, "general": 1, "total": 3}

    def test_top_three_suggestions(self, client, staffed):
        body = client.get("/api/positions/unassigned").json()

        for position in body["data"]:
            suggestions = position["suggestions"]
            assert len(suggestions) == 3
            assert "Full" not in [s["name"] for s in suggestions]
            scores = [s["score"] for s in suggestions]
            assert scores == sorted(scores, reverse=True)
            assert all(0 <= s <= 100 for s in scores)
            assert all(s["explanation"] for s in suggestions)

    def test_position_fields(self, client, staffed):
        urgent = client.get("/api/positions/unassigned").json()["data"][0]

        assert urgent["queue"] == "critical"
        assert urgent["level"] == "jefe"
        assert urgent["priority"] == "P1"
        assert urgent["current_recruiter_id"] is None
        assert urgent["priority_score"] > 1000

    def test_limit(self, client, staffed):
        body = client.get("/api/positions/unassigned", params={"limit": 1}).json()

        assert body["count"] == 1
        assert body["queue_stats"]["total"] == 3

    def test_no_side_effects(self, client, session_factory, staffed):
        client.get("/api/positions/unassigned")

        with allocation_uow(session_factory) as repo:
            assert repo.db.execute(select(func.count(Assignment.id))).scalar_one() == 0
            assert repo.db.execute(select(func.count(CapacityReservation.id))).scalar_one() == 0
            assert repo.recruiters.get_loads([staffed["local"]])[staffed["local"]] == 2

    def test_empty(self, client):
        body = client.get("/api/positions/unassigned").json()
        assert body["count"] == 0
        assert body["data"] == []

    def test_invalid_limit_is_400(self, client):
        assert client.get("/api/positions/unassigned", params={"limit": 0}).status_code == 400

    def test_interleave_by_queue(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            seed_recruiter(repo)
            general = seed_position(repo, title="Analista", priority="P2", level="analista")
            technical = seed_position(repo, title="Operario", priority="P3", level="operario")

        by_score = client.get("/api/positions/unassigned").json()["data"]
        interleaved = client.get("/api/positions/unassigned", params={"interleave": "true"}).json()["data"]

        assert [p["position_id"] for p in by_score] == [str(general.id), str(technical.id)]
        assert [p["position_id"] for p in interleaved] == [str(technical.id), str(general.id)]


class TestReassignmentCandidates:

    def test_current_holder_excluded(self, client, staffed):
        response = client.get("/api/positions/reassignment-candidates")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        held = body["data"][0]
        assert held["position_id"] == str(staffed["held"])
        assert held["current_recruiter_id"] == str(staffed["local"])
        suggested = [s["id"] for s in held["suggestions"]]
        assert str(staffed["local"]) not in suggested
        assert suggested[0] == str(staffed["side"])

    def test_inactive_holder_not_listed(self, client, session_factory):
        with allocation_uow(session_factory) as repo:
            gone = seed_recruiter(repo, name="Gone", is_active=False)
            seed_recruiter(repo, name="Here")
            seed_position(repo, status="in_progress", recruiter_id=gone.id)

        assert client.get("/api/positions/reassignment-candidates").json()["count"] == 0
