from decimal import Decimal

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.payment_repo import DisputeRepo, PayoutRepo, RefundRepo
from app.domain.entities.payment import (
    Dispute,
    DisputeStatus,
    Payout,
    PayoutStatus,
    Refund,
    RefundStatus,
)
from app.infrastructure.db.tables import disputes, payouts, refunds


class RefundRepoSQL(RefundRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, refund: Refund) -> Refund:
        result = await self._session.execute(
            insert(refunds).values(
                booking_id=refund.booking_id,
                amount=refund.amount,
                reason=refund.reason,
                status=refund.status.value,
                stripe_refund_id=refund.stripe_refund_id,
                processed_at=refund.processed_at,
                created_at=refund.created_at,
            )
        )
        refund.id = result.inserted_primary_key[0]
        return refund

    async def update(self, refund: Refund) -> None:
        await self._session.execute(
            update(refunds)
            .where(refunds.c.id == refund.id)
            .values(
                amount=refund.amount,
                status=refund.status.value,
                processed_at=refund.processed_at,
            )
        )

    async def find_by_stripe_refund_id(self, stripe_refund_id: str) -> Refund | None:
        result = await self._session.execute(
            select(refunds).where(refunds.c.stripe_refund_id == stripe_refund_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None
        return Refund(
            id=row["id"],
            booking_id=row["booking_id"],
            amount=row["amount"],
            reason=row["reason"],
            status=RefundStatus(row["status"]),
            stripe_refund_id=row["stripe_refund_id"],
            processed_at=row["processed_at"],
            created_at=row["created_at"],
        )

    async def total_for_booking(self, booking_id: str) -> Decimal:
        result = await self._session.execute(
            select(func.coalesce(func.sum(refunds.c.amount), 0)).where(
                refunds.c.booking_id == booking_id
            )
        )
        return Decimal(str(result.scalar_one()))


class PayoutRepoSQL(PayoutRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_stripe_payout_id(self, stripe_payout_id: str) -> Payout | None:
        result = await self._session.execute(
            select(payouts).where(payouts.c.stripe_payout_id == stripe_payout_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None
        return Payout(
            id=row["id"],
            lender_id=row["lender_id"],
            amount=row["amount"],
            stripe_payout_id=row["stripe_payout_id"],
            status=PayoutStatus(row["status"]),
            paid_at=row["paid_at"],
            failure_message=row["failure_message"],
        )

    async def save(self, payout: Payout) -> None:
        if payout.id is None:
            result = await self._session.execute(
                insert(payouts).values(
                    lender_id=payout.lender_id,
                    amount=payout.amount,
                    status=payout.status.value,
                    stripe_payout_id=payout.stripe_payout_id,
                    paid_at=payout.paid_at,
                    failure_message=payout.failure_message,
                )
            )
            payout.id = result.inserted_primary_key[0]
            return
        await self._session.execute(
            update(payouts)
            .where(payouts.c.id == payout.id)
            .values(
                status=payout.status.value,
                paid_at=payout.paid_at,
                failure_message=payout.failure_message,
            )
        )


class DisputeRepoSQL(DisputeRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_stripe_dispute_id(self, stripe_dispute_id: str) -> Dispute | None:
        result = await self._session.execute(
            select(disputes).where(disputes.c.stripe_dispute_id == stripe_dispute_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None
        return Dispute(
            id=row["id"],
            booking_id=row["booking_id"],
            raised_by_id=row["raised_by_id"],
            description=row["description"],
            stripe_dispute_id=row["stripe_dispute_id"],
            reason=row["reason"],
            status=DisputeStatus(row["status"]),
            created_at=row["created_at"],
        )

    async def add(self, dispute: Dispute) -> Dispute:
        result = await self._session.execute(
            insert(disputes).values(
                booking_id=dispute.booking_id,
                raised_by_id=dispute.raised_by_id,
                reason=dispute.reason,
                description=dispute.description,
                status=dispute.status.value,
                stripe_dispute_id=dispute.stripe_dispute_id,
                created_at=dispute.created_at,
            )
        )
        dispute.id = result.inserted_primary_key[0]
        return dispute
