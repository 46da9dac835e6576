"""Admin schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.core.enums import EntityKindEnum


class KindOverviewRead(BaseModel):
    """Status counts and revenue for one entity kind."""

    kind: EntityKindEnum
    total: int
    by_status: dict[str, int]
    paid_revenue: Decimal
    accrued_revenue: Decimal
    average_score: float | None = None


class OutboxOverviewRead(BaseModel):
    max_retries: int
    pending: int
    processed: int
    failed_retryable: int
    failed_dead_letter: int


class AdminOverviewRead(BaseModel):
    """Dashboard snapshot across workflow kinds and side-effect delivery."""

    generated_at: datetime
    kinds: list[KindOverviewRead] = Field(default_factory=list)
    outbox: OutboxOverviewRead
