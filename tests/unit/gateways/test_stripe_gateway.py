import time
import unittest
from unittest.mock import MagicMock, patch

import stripe

from app.application.interfaces.stripe_gateway import (
    CheckoutLineItem,
    CheckoutSessionRequest,
)
from app.domain.errors import PaymentProviderError, WebhookSignatureError
from app.infrastructure.circuit_breaker import stripe_breaker
from app.infrastructure.gateways.stripe_gateway_real import StripeGatewayReal
from app.infrastructure.gateways.stripe_webhook import verify_webhook_payload
from conftest import WEBHOOK_SECRET, sign_payload, stripe_event


def _stripe_object(**values):
    obj = MagicMock()
    for key, value in values.items():
        setattr(obj, key, value)
    obj.get.side_effect = values.get
    return obj


class TestStripeGatewayReal(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        stripe_breaker.close()
        self.gateway = StripeGatewayReal(api_key="sk_test_123")
        self.request = CheckoutSessionRequest(
            line_items=[
                CheckoutLineItem(
                    name="Party Tent",
                    unit_amount=20000,
                    description="Rental from 2026-03-10 to 2026-03-11 (qty 1)",
                    images=["https://img.example.com/tent.jpg"],
                ),
                CheckoutLineItem(name="Security Deposit (Refundable)", unit_amount=5000),
            ],
            currency="usd",
            success_url="https://rent.example.com/bookings/b1?payment=success",
            cancel_url="https://rent.example.com/checkout/b1?payment=cancelled",
            customer_email="renter@example.com",
            metadata={"bookingId": "b1"},
            application_fee_amount=2000,
            destination_account="acct_1",
            payment_intent_metadata={"bookingId": "b1", "type": "rental_payment"},
            payment_intent_description="Rental: Party Tent",
        )

    def tearDown(self):
        stripe_breaker.close()

    def test_client_configuration(self):
        self.assertEqual(stripe.api_key, "sk_test_123")
        self.assertEqual(stripe.max_network_retries, 0)

    @patch("stripe.checkout.Session.create")
    async def test_create_checkout_session(self, mock_create):
        mock_create.return_value = _stripe_object(
            id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1", payment_intent="pi_1"
        )

        result = await self.gateway.create_checkout_session(self.request)

        self.assertEqual(result.session_id, "cs_test_1")
        self.assertEqual(result.payment_intent_id, "pi_1")
        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs["mode"], "payment")
        self.assertEqual(kwargs["customer_email"], "renter@example.com")
        self.assertEqual(
            kwargs["payment_intent_data"],
            {
                "application_fee_amount": 2000,
                "transfer_data": {"destination": "acct_1"},
                "metadata": {"bookingId": "b1", "type": "rental_payment"},
                "description": "Rental: Party Tent",
            },
        )
        rental, deposit = kwargs["line_items"]
        self.assertEqual(rental["price_data"]["unit_amount"], 20000)
        self.assertEqual(rental["price_data"]["product_data"]["images"], ["https://img.example.com/tent.jpg"])
        self.assertEqual(deposit["price_data"]["product_data"], {"name": "Security Deposit (Refundable)"})
        self.assertEqual(deposit["quantity"], 1)

    @patch("stripe.Refund.create")
    async def test_create_refund(self, mock_create):
        mock_create.return_value = _stripe_object(id="re_1", amount=5000, status="succeeded")

        result = await self.gateway.create_refund(
            payment_intent_id="pi_1",
            amount=5000,
            reason="requested_by_customer",
            metadata={"bookingId": "b1", "refund_reason": "requested_by_customer"},
        )

        self.assertEqual((result.refund_id, result.amount, result.status), ("re_1", 5000, "succeeded"))
        mock_create.assert_called_once_with(
            payment_intent="pi_1",
            reason="requested_by_customer",
            metadata={"bookingId": "b1", "refund_reason": "requested_by_customer"},
            amount=5000,
        )

    @patch("stripe.Charge.retrieve")
    async def test_retrieve_charge(self, mock_retrieve):
        mock_retrieve.return_value = _stripe_object(
            id="ch_1", payment_intent="pi_1", metadata={"bookingId": "b1"}
        )

        charge = await self.gateway.retrieve_charge("ch_1")

        self.assertEqual(charge.payment_intent_id, "pi_1")
        self.assertEqual(charge.metadata, {"bookingId": "b1"})
        mock_retrieve.assert_called_once_with(id="ch_1")

    @patch("stripe.Account.retrieve")
    async def test_retrieve_account(self, mock_retrieve):
        mock_retrieve.return_value = _stripe_object(
            id="acct_1",
            charges_enabled=True,
            payouts_enabled=False,
            details_submitted=True,
            requirements={"currently_due": [], "eventually_due": ["individual.id_number"]},
        )

        status = await self.gateway.retrieve_account("acct_1")

        mock_retrieve.assert_called_once_with(id="acct_1")
        self.assertEqual(status.account_id, "acct_1")
        self.assertEqual(
            (status.charges_enabled, status.payouts_enabled, status.details_submitted),
            (True, False, True),
        )
        self.assertTrue(status.requires_info)
        self.assertEqual(status.requirements["eventually_due"], ["individual.id_number"])
        self.assertEqual(status.requirements["past_due"], [])

    @patch("stripe.Refund.create")
    async def test_card_error_maps_to_provider_error_without_tripping(self, mock_create):
        mock_create.side_effect = stripe.CardError("Your card was declined.", None, "card_declined")

        for _ in range(6):
            with self.assertRaises(PaymentProviderError) as ctx:
                await self.gateway.create_refund("pi_1", 100, "duplicate", {})
            self.assertEqual(ctx.exception.message, "Your card was declined.")

        self.assertEqual(stripe_breaker.current_state, "closed")

    @patch("stripe.checkout.Session.create")
    async def test_circuit_opens_after_repeated_outages(self, mock_create):
        mock_create.side_effect = stripe.APIConnectionError("Network unreachable")

        for _ in range(stripe_breaker.fail_max):
            with self.assertRaises(PaymentProviderError):
                await self.gateway.create_checkout_session(self.request)

        self.assertEqual(stripe_breaker.current_state, "open")
        with self.assertRaises(PaymentProviderError) as ctx:
            await self.gateway.create_checkout_session(self.request)
        self.assertEqual(ctx.exception.message, "Payment provider temporarily unavailable")
        self.assertEqual(mock_create.call_count, stripe_breaker.fail_max)


class TestVerifyWebhookPayload(unittest.TestCase):
    def setUp(self):
        self.payload = stripe_event("evt_1", "payout.paid", {"id": "po_1"})

    def test_valid_signature_returns_event(self):
        event = verify_webhook_payload(self.payload, sign_payload(self.payload), WEBHOOK_SECRET)

        self.assertEqual(event["id"], "evt_1")
        self.assertEqual(event["data"]["object"], {"id": "po_1"})

    def test_wrong_secret(self):
        header = sign_payload(self.payload, secret="whsec_other")
        with self.assertRaises(WebhookSignatureError):
            verify_webhook_payload(self.payload, header, WEBHOOK_SECRET)

    def test_tampered_body(self):
        header = sign_payload(self.payload)
        tampered = self.payload.replace(b"po_1", b"po_2")
        with self.assertRaises(WebhookSignatureError):
            verify_webhook_payload(tampered, header, WEBHOOK_SECRET)

    def test_stale_timestamp(self):
        header = sign_payload(self.payload, timestamp=int(time.time()) - 3600)
        with self.assertRaises(WebhookSignatureError):
            verify_webhook_payload(self.payload, header, WEBHOOK_SECRET)

    def test_missing_secret_or_header(self):
        with self.assertRaises(WebhookSignatureError):
            verify_webhook_payload(self.payload, sign_payload(self.payload), None)
        with self.assertRaises(WebhookSignatureError):
            verify_webhook_payload(self.payload, None, WEBHOOK_SECRET)

    def test_signed_non_json_body(self):
        body = b"not json"
        with self.assertRaises(WebhookSignatureError):
            verify_webhook_payload(body, sign_payload(body), WEBHOOK_SECRET)
