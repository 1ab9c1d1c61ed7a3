from copy import deepcopy
from decimal import Decimal

from app.application.interfaces.payment_repo import DisputeRepo, PayoutRepo, RefundRepo
from app.domain.entities.payment import Dispute, Payout, Refund


class InMemoryRefundRepo(RefundRepo):
    def __init__(self) -> None:
        self.refunds: list[Refund] = []

    async def add(self, refund: Refund) -> Refund:
        if refund.stripe_refund_id and any(
            r.stripe_refund_id == refund.stripe_refund_id for r in self.refunds
        ):
            raise ValueError("stripe_refund_id already recorded")
        refund.id = len(self.refunds) + 1
        self.refunds.append(deepcopy(refund))
        return refund

    async def update(self, refund: Refund) -> None:
        for index, stored in enumerate(self.refunds):
            if stored.id == refund.id:
                self.refunds[index] = deepcopy(refund)
                return

    async def find_by_stripe_refund_id(self, stripe_refund_id: str) -> Refund | None:
        for refund in self.refunds:
            if refund.stripe_refund_id == stripe_refund_id:
                return deepcopy(refund)
        return None

    async def total_for_booking(self, booking_id: str) -> Decimal:
        return sum((r.amount for r in self.refunds if r.booking_id == booking_id), Decimal("0"))


class InMemoryPayoutRepo(PayoutRepo):
    def __init__(self) -> None:
        self.payouts: dict[str, Payout] = {}

    async def find_by_stripe_payout_id(self, stripe_payout_id: str) -> Payout | None:
        payout = self.payouts.get(stripe_payout_id)
        return deepcopy(payout) if payout else None

    async def save(self, payout: Payout) -> None:
        if payout.id is None:
            payout.id = len(self.payouts) + 1
        self.payouts[payout.stripe_payout_id] = deepcopy(payout)


class InMemoryDisputeRepo(DisputeRepo):
    def __init__(self) -> None:
        self.disputes: dict[str, Dispute] = {}

    async def find_by_stripe_dispute_id(self, stripe_dispute_id: str) -> Dispute | None:
        return self.disputes.get(stripe_dispute_id)

    async def add(self, dispute: Dispute) -> Dispute:
        if dispute.stripe_dispute_id in self.disputes:
            raise ValueError("stripe_dispute_id already recorded")
        dispute.id = len(self.disputes) + 1
        self.disputes[dispute.stripe_dispute_id] = dispute
        return dispute
