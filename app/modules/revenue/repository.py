"""Revenue ledger repository layer."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.revenue.models import RevenueEntry
from app.shared.utils import quantize_money


class RevenueLedgerRepository:
    """Append-only access to the revenue ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_entry_by_key(self, idempotency_key: str) -> RevenueEntry | None:
        stmt = select(RevenueEntry).where(RevenueEntry.idempotency_key == idempotency_key)
        return await self.session.scalar(stmt)

    async def append(
        self,
        aggregate_type: str,
        aggregate_id: str,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
    ) -> RevenueEntry | None:
        """Record accrued revenue; returns None when the key was already booked."""
        if await self.get_entry_by_key(idempotency_key) is not None:
            return None

        entry = RevenueEntry(
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            amount=quantize_money(amount),
            currency=currency.upper(),
            idempotency_key=idempotency_key,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def sum_by_aggregate_type(self) -> dict[str, Decimal]:
        stmt = select(RevenueEntry.aggregate_type, func.coalesce(func.sum(RevenueEntry.amount), 0)).group_by(
            RevenueEntry.aggregate_type,
        )
        rows = (await self.session.execute(stmt)).all()
        return {aggregate_type: quantize_money(total) for aggregate_type, total in rows}
