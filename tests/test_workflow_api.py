from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from fastapi.testclient import TestClient

import app.main as main_module
from app.core.enums import (
    EntityKindEnum,
    PaymentStatusEnum,
    RequestStatusEnum,
    WorkflowActionEnum,
    WorkflowErrorCode,
)
from app.modules.workflow.entities import WorkflowEntity
from app.modules.workflow.service import AppliedTransition, get_workflow_service
from app.modules.workflow.repository import EntityFilters
from app.shared.exceptions import NotFoundException, WorkflowRejectedException


class StubWorkflowService:
    def __init__(self, error: WorkflowRejectedException | None = None) -> None:
        self.error = error
        self.calls: list[tuple] = []

    async def apply_action(self, kind, entity_id, action, payload, actor_ref) -> AppliedTransition:
        self.calls.append((kind, entity_id, action, payload, actor_ref))
        if self.error is not None:
            raise self.error
        entity = WorkflowEntity(
            id=entity_id,
            kind=kind,
            lifecycle_status=RequestStatusEnum.APPROVED,
            requested_at=datetime(2026, 3, 1, tzinfo=UTC),
            decided_at=datetime(2026, 3, 2, tzinfo=UTC),
            owner_ref="student-1",
            version=2,
        )
        return AppliedTransition(entity=entity, effects=())

    async def list_entities(self, kind, filters, limit, offset):
        self.calls.append((kind, filters, limit, offset))
        return [], 0

    async def delete_entity(self, kind, entity_id, actor_ref) -> None:
        self.calls.append((kind, entity_id, actor_ref))
        if self.error is not None:
            raise self.error


def make_client(service: StubWorkflowService) -> TestClient:
    main_module.app.dependency_overrides[get_workflow_service] = lambda: service
    return TestClient(main_module.app)


def teardown_function() -> None:
    main_module.app.dependency_overrides.clear()


def test_apply_action_returns_updated_snapshot() -> None:
    service = StubWorkflowService()
    client = make_client(service)
    entity_id = uuid4()

    response = client.post(
        f"/api/v1/workflow/enrollment/{entity_id}/approve",
        headers={"X-Admin-Ref": "admin-1"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["entity"]["lifecycle_status"] == "approved"
    assert body["entity"]["version"] == 2
    assert service.calls[0][0] == EntityKindEnum.ENROLLMENT
    assert service.calls[0][2] == WorkflowActionEnum.APPROVE
    assert service.calls[0][4] == "admin-1"


def test_already_finalized_maps_to_conflict() -> None:
    error = WorkflowRejectedException(WorkflowErrorCode.ALREADY_FINALIZED, "enrollment is already approved")
    client = make_client(StubWorkflowService(error))

    response = client.post(f"/api/v1/workflow/enrollment/{uuid4()}/approve")

    assert response.status_code == 409
    assert response.json() == {
        "error": {"code": "already_finalized", "message": "enrollment is already approved"},
    }


def test_payment_required_maps_to_unprocessable() -> None:
    error = WorkflowRejectedException(WorkflowErrorCode.PAYMENT_REQUIRED, "payment is pending")
    client = make_client(StubWorkflowService(error))

    response = client.post(f"/api/v1/workflow/guest_booking/{uuid4()}/complete")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "payment_required"


def test_unknown_action_is_rejected_before_service() -> None:
    service = StubWorkflowService()
    client = make_client(service)

    response = client.post(f"/api/v1/workflow/enrollment/{uuid4()}/archive")

    assert response.status_code == 422
    assert service.calls == []


def test_list_passes_query_filters_to_service() -> None:
    service = StubWorkflowService()
    client = make_client(service)

    response = client.get(
        "/api/v1/workflow/guest_booking",
        params={"status": "CONFIRMED", "counterpart_ref": "mentor-7", "payment_status": "paid"},
    )

    assert response.status_code == 200
    assert response.json()["total"] == 0
    kind, filters, _, _ = service.calls[0]
    assert kind == EntityKindEnum.GUEST_BOOKING
    assert filters == EntityFilters(
        status="CONFIRMED",
        counterpart_ref="mentor-7",
        payment_status=PaymentStatusEnum.PAID,
    )


def test_delete_returns_no_content() -> None:
    service = StubWorkflowService()
    client = make_client(service)
    entity_id = uuid4()

    response = client.delete(
        f"/api/v1/workflow/mentorship_request/{entity_id}",
        headers={"X-Admin-Ref": "admin-1"},
    )

    assert response.status_code == 204
    assert service.calls == [(EntityKindEnum.MENTORSHIP_REQUEST, entity_id, "admin-1")]


def test_delete_unknown_entity_is_not_found() -> None:
    client = make_client(StubWorkflowService(NotFoundException("enrollment not found")))

    response = client.delete(f"/api/v1/workflow/enrollment/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"
