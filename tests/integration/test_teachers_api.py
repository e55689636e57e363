# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the legacy teacher endpoints and health checks."""

import pytest
from fastapi.testclient import TestClient

TEACHERS = "/api/v1/admin/teachers"
ASSIGNMENTS = "/api/v1/admin/assignments"

pytestmark = pytest.mark.integration


def legacy_item(**overrides) -> dict:
    item = {
        "class": "10",
        "section": "A",
        "subject": "Mathematics",
        "grade": "10",
        "time": "10:00 AM",
        "day": "Monday",
    }
    item.update(overrides)
    return item


class TestAssignClasses:
    """Tests for POST /{teacher_id}/assign-classes."""

    def test_assigns_every_class(self, client: TestClient, admin_headers: dict) -> None:
        response = client.post(
            f"{TEACHERS}/T1/assign-classes",
            json={"assignedClasses": [legacy_item(), legacy_item(day="Tuesday", subject="Physics")]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert len(body["data"]["created"]) == 2
        assert body["data"]["unchanged"] == []

    def test_resend_keeps_existing_assignments(self, client: TestClient, admin_headers: dict) -> None:
        url = f"{TEACHERS}/T1/assign-classes"
        client.post(url, json={"assignedClasses": [legacy_item()]}, headers=admin_headers)

        response = client.post(
            url,
            json={"assignedClasses": [legacy_item(), legacy_item(day="Wednesday")]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert len(response.json()["data"]["unchanged"]) == 1
        assert len(response.json()["data"]["created"]) == 1

    def test_conflict_rejects_whole_batch(self, client: TestClient, admin_headers: dict) -> None:
        response = client.post(
            f"{TEACHERS}/T1/assign-classes",
            json={
                "assignedClasses": [
                    legacy_item(day="Friday"),
                    legacy_item(),
                    legacy_item(subject="Art", time="10:00"),
                ]
            },
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["kind"] == "conflict"

        listing = client.get(f"{ASSIGNMENTS}/teacher/T1", headers=admin_headers)
        assert listing.json()["data"]["assignments"] == []

    def test_malformed_element_returns_400(self, client: TestClient, admin_headers: dict) -> None:
        item = legacy_item()
        del item["class"]

        response = client.post(
            f"{TEACHERS}/T1/assign-classes",
            json={"assignedClasses": [item]},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_requires_admin(self, client: TestClient, teacher_headers: dict) -> None:
        response = client.post(
            f"{TEACHERS}/T1/assign-classes",
            json={"assignedClasses": [legacy_item()]},
            headers=teacher_headers,
        )

        assert response.status_code == 403


class TestDeleteSubjectAssignment:
    """Tests for DELETE /{teacher_id}/subject-assignment."""

    def test_removes_matching_assignments(self, client: TestClient, admin_headers: dict) -> None:
        client.post(
            f"{TEACHERS}/T1/assign-classes",
            json={
                "assignedClasses": [
                    legacy_item(),
                    legacy_item(day="Thursday"),
                    legacy_item(subject="Physics", day="Friday"),
                ]
            },
            headers=admin_headers,
        )
        body = {"classId": "10", "section": "A", "subject": "Mathematics"}

        first = client.request(
            "DELETE",
            f"{TEACHERS}/T1/subject-assignment",
            json=body,
            headers=admin_headers,
        )
        second = client.request(
            "DELETE",
            f"{TEACHERS}/T1/subject-assignment",
            json=body,
            headers=admin_headers,
        )

        assert first.status_code == 200
        assert first.json()["count"] == 2
        assert all(a["isActive"] is False for a in first.json()["data"])
        assert second.status_code == 404

        listing = client.get(f"{ASSIGNMENTS}/teacher/T1", headers=admin_headers)
        assert [a["subject"] for a in listing.json()["data"]["assignments"]] == ["Physics"]


class TestHealth:
    """Tests for liveness and readiness."""

    def test_health_is_public(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["environment"] == "test"

    def test_ready_when_database_reachable(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"ready": True, "checks": {"database": "healthy"}}
