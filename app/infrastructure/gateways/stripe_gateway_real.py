import logging
from typing import Any

import stripe

from app.application.interfaces.stripe_gateway import (
    ChargeInfo,
    CheckoutSessionRequest,
    CheckoutSessionResult,
    ConnectedAccountStatus,
    RefundResult,
    StripeGateway,
)
from app.domain.errors import PaymentProviderError
from app.infrastructure.circuit_breaker import CircuitBreakerError, stripe_breaker
from app.infrastructure.gateways.stripe_webhook import verify_webhook_payload

logger = logging.getLogger(__name__)


class StripeGatewayReal(StripeGateway):
    def __init__(self, api_key: str | None) -> None:
        stripe.api_key = api_key
        # Failed calls surface to the caller; Stripe webhooks are the only retry path.
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=10.0)

    def _call(self, operation: str, func, **params: Any):
        """
        Run a Stripe SDK call protected by the circuit breaker.

        Raises:
            PaymentProviderError: circuit open or Stripe API failure.
        """
        try:
            # stripe does not have async client here; run sync call
            return stripe_breaker.call(func, **params)
        except CircuitBreakerError as e:
            logger.error(
                "Stripe circuit breaker is open - service unavailable",
                extra={"operation": operation, "circuit_state": str(e)},
            )
            raise PaymentProviderError("Payment provider temporarily unavailable") from e
        except stripe.StripeError as e:
            logger.error("Stripe API error", exc_info=e, extra={"operation": operation})
            raise PaymentProviderError(e.user_message or "Payment provider error") from e

    async def create_checkout_session(
        self, request: CheckoutSessionRequest
    ) -> CheckoutSessionResult:
        line_items = []
        for item in request.line_items:
            product_data: dict[str, Any] = {"name": item.name}
            if item.description:
                product_data["description"] = item.description
            if item.images:
                product_data["images"] = item.images
            line_items.append(
                {
                    "price_data": {
                        "currency": request.currency,
                        "product_data": product_data,
                        "unit_amount": item.unit_amount,
                    },
                    "quantity": item.quantity,
                }
            )

        params: dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": line_items,
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "metadata": request.metadata,
            "payment_intent_data": {
                "application_fee_amount": request.application_fee_amount,
                "transfer_data": {"destination": request.destination_account},
                "metadata": request.payment_intent_metadata,
                "description": request.payment_intent_description,
            },
        }
        if request.customer_email:
            params["customer_email"] = request.customer_email

        session = self._call("checkout.session.create", stripe.checkout.Session.create, **params)
        return CheckoutSessionResult(
            session_id=session.id,
            url=session.url,
            payment_intent_id=session.get("payment_intent"),
        )

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None,
        reason: str,
        metadata: dict[str, str],
    ) -> RefundResult:
        params: dict[str, Any] = {
            "payment_intent": payment_intent_id,
            "reason": reason,
            "metadata": metadata,
        }
        if amount is not None:
            params["amount"] = amount
        refund = self._call("refund.create", stripe.Refund.create, **params)
        return RefundResult(refund_id=refund.id, amount=refund.amount, status=refund.status)

    async def retrieve_charge(self, charge_id: str) -> ChargeInfo:
        charge = self._call("charge.retrieve", stripe.Charge.retrieve, id=charge_id)
        return ChargeInfo(
            charge_id=charge.id,
            payment_intent_id=charge.get("payment_intent"),
            metadata=dict(charge.get("metadata") or {}),
        )

    async def retrieve_account(self, account_id: str) -> ConnectedAccountStatus:
        account = self._call("account.retrieve", stripe.Account.retrieve, id=account_id)
        requirements = account.get("requirements") or {}
        return ConnectedAccountStatus(
            account_id=account.id,
            charges_enabled=bool(account.get("charges_enabled")),
            payouts_enabled=bool(account.get("payouts_enabled")),
            details_submitted=bool(account.get("details_submitted")),
            requirements={
                key: list(requirements.get(key) or [])
                for key in ("currently_due", "eventually_due", "past_due")
            },
        )

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        return verify_webhook_payload(payload, signature_header, webhook_secret)
