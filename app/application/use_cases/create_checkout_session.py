import logging
from decimal import Decimal

from app.api.schemas.stripe import CreateCheckoutSessionResponse
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.listing_repo import LenderRepo, ListingRepo
from app.application.interfaces.stripe_gateway import (
    CheckoutLineItem,
    CheckoutSessionRequest,
    StripeGateway,
)
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.errors import (
    BookingAlreadyPaidError,
    BookingCancelledError,
    BookingNotFoundError,
    LenderAccountNotConfiguredError,
    LenderChargesNotEnabledError,
    ListingNotFoundError,
    PaymentConfigurationError,
)
from app.domain.pricing import DEFAULT_PLATFORM_FEE_RATE, checkout_amounts

PAID_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.ACTIVE, BookingStatus.COMPLETED)


class CreateCheckoutSessionUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        listing_repo: ListingRepo,
        lender_repo: LenderRepo,
        stripe_gateway: StripeGateway,
        transaction_manager: TransactionManager,
        stripe_secret_key: str | None,
        app_url: str,
        currency: str = "usd",
        platform_fee_rate: Decimal = DEFAULT_PLATFORM_FEE_RATE,
    ) -> None:
        self._booking_repo = booking_repo
        self._listing_repo = listing_repo
        self._lender_repo = lender_repo
        self._stripe_gateway = stripe_gateway
        self._transaction_manager = transaction_manager
        self._stripe_secret_key = stripe_secret_key
        self._app_url = app_url.rstrip("/")
        self._currency = currency
        self._platform_fee_rate = platform_fee_rate
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str) -> CreateCheckoutSessionResponse:
        if not self._stripe_secret_key or not self._stripe_secret_key.startswith("sk_"):
            raise PaymentConfigurationError()

        booking = await self._booking_repo.get(booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)
        if booking.status in PAID_STATUSES or booking.is_paid:
            raise BookingAlreadyPaidError(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise BookingCancelledError(booking_id)

        listing = await self._listing_repo.get(booking.listing_id)
        if not listing:
            raise ListingNotFoundError(booking.listing_id)

        lender = await self._lender_repo.get_by_user(booking.lender_id)
        if not lender or not lender.stripe_account_id:
            raise LenderAccountNotConfiguredError(booking.lender_id)
        if not lender.charges_enabled:
            raise LenderChargesNotEnabledError(booking.lender_id)

        amounts = checkout_amounts(
            booking.subtotal, booking.deposit_amount, self._platform_fee_rate
        )

        line_items = [
            CheckoutLineItem(
                name=listing.title,
                unit_amount=amounts.rental_cents,
                description=self._rental_description(booking),
                images=[listing.cover_image_url] if listing.cover_image_url else [],
            )
        ]
        if amounts.deposit_cents > 0:
            line_items.append(
                CheckoutLineItem(
                    name="Security Deposit (Refundable)",
                    unit_amount=amounts.deposit_cents,
                    description="Held and released after rental completion",
                )
            )

        session = await self._stripe_gateway.create_checkout_session(
            CheckoutSessionRequest(
                line_items=line_items,
                currency=self._currency,
                success_url=f"{self._app_url}/bookings/{booking.id}?payment=success",
                cancel_url=f"{self._app_url}/checkout/{booking.id}?payment=cancelled",
                customer_email=booking.renter_email,
                metadata={
                    "bookingId": booking.id,
                    "renterId": booking.renter_id,
                    "lenderId": booking.lender_id,
                    "rentalAmount": str(amounts.rental_cents),
                    "depositAmount": str(amounts.deposit_cents),
                },
                application_fee_amount=amounts.platform_fee_cents,
                destination_account=lender.stripe_account_id,
                payment_intent_metadata={
                    "bookingId": booking.id,
                    "type": "rental_payment",
                },
                payment_intent_description=f"Rental: {listing.title}",
            )
        )

        async with self._transaction_manager.start():
            booking.stripe_session_id = session.session_id
            if session.payment_intent_id:
                booking.payment_intent_id = session.payment_intent_id
            await self._booking_repo.save(booking)

        self._logger.info(
            "Checkout session created",
            extra={
                "booking_id": booking.id,
                "session_id": session.session_id,
                "total_cents": amounts.total_cents,
                "platform_fee_cents": amounts.platform_fee_cents,
                "lender_net_cents": amounts.lender_net_cents,
            },
        )
        return CreateCheckoutSessionResponse(session_id=session.session_id, url=session.url)

    @staticmethod
    def _rental_description(booking: Booking) -> str:
        start = booking.start_date.isoformat() if booking.start_date else "?"
        end = booking.end_date.isoformat() if booking.end_date else "?"
        return f"Rental from {start} to {end} (qty {booking.quantity})"
