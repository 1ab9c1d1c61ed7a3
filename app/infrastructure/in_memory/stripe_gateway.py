from typing import Any
from uuid import uuid4

from app.application.interfaces.stripe_gateway import (
    ChargeInfo,
    CheckoutSessionRequest,
    CheckoutSessionResult,
    ConnectedAccountStatus,
    RefundResult,
    StripeGateway,
)
from app.domain.errors import PaymentProviderError
from app.infrastructure.gateways.stripe_webhook import verify_webhook_payload


class StubStripeGateway(StripeGateway):
    """Records outbound calls and answers with synthetic Stripe ids."""

    def __init__(self) -> None:
        self.sessions: list[CheckoutSessionRequest] = []
        self.refunds: list[dict[str, Any]] = []
        self.charges: dict[str, ChargeInfo] = {}
        self.accounts: dict[str, ConnectedAccountStatus] = {}
        self.fail_with: str | None = None

    async def create_checkout_session(
        self, request: CheckoutSessionRequest
    ) -> CheckoutSessionResult:
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)
        self.sessions.append(request)
        session_id = f"cs_test_{uuid4().hex[:24]}"
        return CheckoutSessionResult(
            session_id=session_id,
            url=f"https://checkout.stripe.com/c/pay/{session_id}",
            payment_intent_id=f"pi_{uuid4().hex[:24]}",
        )

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None,
        reason: str,
        metadata: dict[str, str],
    ) -> RefundResult:
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)
        self.refunds.append(
            {
                "payment_intent": payment_intent_id,
                "amount": amount,
                "reason": reason,
                "metadata": metadata,
            }
        )
        return RefundResult(refund_id=f"re_{uuid4().hex[:24]}", amount=amount or 0, status="succeeded")

    async def retrieve_charge(self, charge_id: str) -> ChargeInfo:
        charge = self.charges.get(charge_id)
        if not charge:
            raise PaymentProviderError(f"No such charge: {charge_id}")
        return charge

    async def retrieve_account(self, account_id: str) -> ConnectedAccountStatus:
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)
        # Unregistered accounts report as fully onboarded.
        return self.accounts.get(account_id) or ConnectedAccountStatus(
            account_id=account_id,
            charges_enabled=True,
            payouts_enabled=True,
            details_submitted=True,
        )

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        return verify_webhook_payload(payload, signature_header, webhook_secret)
