from dataclasses import dataclass, field
from typing import Any


@dataclass
class CheckoutLineItem:
    name: str
    unit_amount: int
    quantity: int = 1
    description: str | None = None
    images: list[str] = field(default_factory=list)


@dataclass
class CheckoutSessionRequest:
    line_items: list[CheckoutLineItem]
    currency: str
    success_url: str
    cancel_url: str
    customer_email: str | None
    metadata: dict[str, str]
    application_fee_amount: int
    destination_account: str
    payment_intent_metadata: dict[str, str]
    payment_intent_description: str


@dataclass
class CheckoutSessionResult:
    session_id: str
    url: str
    payment_intent_id: str | None = None


@dataclass
class RefundResult:
    refund_id: str
    amount: int
    status: str


@dataclass
class ChargeInfo:
    charge_id: str
    payment_intent_id: str | None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class ConnectedAccountStatus:
    account_id: str
    charges_enabled: bool
    payouts_enabled: bool
    details_submitted: bool
    requirements: dict[str, Any] = field(default_factory=dict)

    @property
    def requires_info(self) -> bool:
        return bool(
            self.requirements.get("currently_due") or self.requirements.get("eventually_due")
        )


class StripeGateway:
    async def create_checkout_session(
        self, request: CheckoutSessionRequest
    ) -> CheckoutSessionResult:
        raise NotImplementedError

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None,
        reason: str,
        metadata: dict[str, str],
    ) -> RefundResult:
        raise NotImplementedError

    async def retrieve_charge(self, charge_id: str) -> ChargeInfo:
        raise NotImplementedError

    async def retrieve_account(self, account_id: str) -> ConnectedAccountStatus:
        raise NotImplementedError

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        raise NotImplementedError
