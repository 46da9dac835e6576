from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from app.core.enums import EntityKindEnum, OutboxStatusEnum
from app.modules.admin.service import AdminService
from app.modules.admin.stats import average_score, status_breakdown


def test_status_breakdown_lists_every_status() -> None:
    breakdown = status_breakdown(EntityKindEnum.GUEST_BOOKING, {"PENDING": 2, "COMPLETED": 1})

    assert breakdown == {"PENDING": 2, "CONFIRMED": 0, "COMPLETED": 1, "CANCELLED": 0}


def test_average_score_skips_ungraded_items() -> None:
    assert average_score([80, None, 90, 100]) == pytest.approx(90.0)


@pytest.mark.parametrize("scores", [[], [None, None]])
def test_average_score_without_grades_is_zero(scores: list) -> None:
    assert average_score(scores) == 0.0


class FakeWorkflowRepository:
    def __init__(self) -> None:
        self.counts = {
            EntityKindEnum.ENROLLMENT: {"pending": 3, "approved": 2},
            EntityKindEnum.GUEST_BOOKING: {"COMPLETED": 2, "CONFIRMED": 1},
        }
        self.revenue = {EntityKindEnum.GUEST_BOOKING: Decimal("150")}
        self.scores = {EntityKindEnum.ENROLLMENT: [Decimal("80"), Decimal("95")]}

    async def count_by_status(self, kind: EntityKindEnum) -> dict[str, int]:
        return self.counts.get(kind, {})

    async def sum_paid_revenue(self, kind: EntityKindEnum) -> Decimal:
        return self.revenue.get(kind, Decimal("0"))

    async def list_scores(self, kind: EntityKindEnum) -> list[Decimal]:
        return self.scores.get(kind, [])


@dataclass
class FakeAuditRepository:
    logs: list[dict] = field(default_factory=list)

    async def count_outbox_by_status(self) -> dict[OutboxStatusEnum, int]:
        return {OutboxStatusEnum.PENDING: 4, OutboxStatusEnum.PROCESSED: 10, OutboxStatusEnum.FAILED: 3}

    async def count_dead_letter_outbox(self, max_retries: int) -> int:
        return 1

    async def create_audit_log(self, actor_ref, action, entity_type, entity_id, payload) -> dict:
        log = {"actor_ref": actor_ref, "action": action, "payload": payload}
        self.logs.append(log)
        return log


class FakeRevenueRepository:
    async def sum_by_aggregate_type(self) -> dict[str, Decimal]:
        return {"guest_booking": Decimal("75.00")}


@pytest.mark.asyncio
async def test_overview_combines_counts_revenue_and_outbox() -> None:
    audit_repository = FakeAuditRepository()
    service = AdminService(
        workflow_repository=FakeWorkflowRepository(),  # type: ignore[arg-type]
        audit_repository=audit_repository,  # type: ignore[arg-type]
        revenue_repository=FakeRevenueRepository(),  # type: ignore[arg-type]
    )

    overview = await service.get_overview("admin-1", max_retries=5)

    kinds = {item.kind: item for item in overview.kinds}
    assert list(kinds) == list(EntityKindEnum)
    assert kinds[EntityKindEnum.ENROLLMENT].total == 5
    assert kinds[EntityKindEnum.ENROLLMENT].by_status["rejected"] == 0
    assert kinds[EntityKindEnum.ENROLLMENT].average_score == pytest.approx(87.5)
    assert kinds[EntityKindEnum.GUEST_BOOKING].average_score is None
    assert kinds[EntityKindEnum.GUEST_BOOKING].paid_revenue == Decimal("150.00")
    assert kinds[EntityKindEnum.GUEST_BOOKING].accrued_revenue == Decimal("75.00")
    assert kinds[EntityKindEnum.MENTORSHIP_BOOKING].total == 0
    assert overview.outbox.pending == 4
    assert overview.outbox.failed_retryable == 2
    assert overview.outbox.failed_dead_letter == 1
    assert audit_repository.logs[-1]["action"] == "admin.overview.view"


@pytest.mark.asyncio
async def test_overview_average_score_is_zero_without_graded_enrollments() -> None:
    workflow_repository = FakeWorkflowRepository()
    workflow_repository.scores = {}
    service = AdminService(
        workflow_repository=workflow_repository,  # type: ignore[arg-type]
        audit_repository=FakeAuditRepository(),  # type: ignore[arg-type]
        revenue_repository=FakeRevenueRepository(),  # type: ignore[arg-type]
    )

    overview = await service.get_overview(None, max_retries=5)

    (enrollments,) = [item for item in overview.kinds if item.kind == EntityKindEnum.ENROLLMENT]
    assert enrollments.average_score == 0.0
