import hashlib
import json
import logging
from decimal import Decimal
from typing import Any

from fastapi import status

from app.api.schemas.bookings import BookingResponse, CreateBookingRequest
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from app.application.interfaces.listing_repo import ListingRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.domain.entities.booking import Booking, BookingAddOn, BookingDeposit
from app.domain.entities.listing import Listing, ListingAddOn
from app.domain.errors import (
    IdempotencyConflictError,
    ListingNotFoundError,
    OwnListingBookingError,
    ValidationError,
)
from app.domain.pricing import quote_booking
from app.domain.value_objects.date_range import DateRange

SCOPE = "BOOKING_CREATE"


def _hash_request(renter_id: str, payload: dict[str, Any]) -> str:
    normalized = json.dumps(
        {"renter_id": renter_id, **payload},
        sort_keys=True,
        default=str,
        separators=(",", ":"),
    )
    return hashlib.sha256(normalized.encode()).hexdigest()


class CreateBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        listing_repo: ListingRepo,
        idempotency_repo: IdempotencyRepo,
        transaction_manager: TransactionManager,
        uuid_generator: UUIDGenerator,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._listing_repo = listing_repo
        self._idempotency_repo = idempotency_repo
        self._transaction_manager = transaction_manager
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        renter_id: str,
        request: CreateBookingRequest,
        idem_key: str,
    ) -> BookingResponse:
        request_hash = _hash_request(renter_id, request.model_dump())

        async with self._transaction_manager.start():
            existing = await self._idempotency_repo.find(SCOPE, idem_key)
            if existing:
                if not existing.matches(request_hash):
                    raise IdempotencyConflictError(idem_key=idem_key, scope=SCOPE)
                return BookingResponse.model_validate(existing.response_body)

            listing = await self._listing_repo.get(request.listing_id)
            if not listing:
                raise ListingNotFoundError(request.listing_id)
            if listing.lender_id == renter_id:
                raise OwnListingBookingError(listing.id)

            booking = self._build_booking(renter_id, listing, request)
            await self._booking_repo.create(booking)

            response = BookingResponse.from_entity(booking)
            await self._idempotency_repo.save(
                IdempotencyRecord(
                    scope=SCOPE,
                    idem_key=idem_key,
                    request_hash=request_hash,
                    booking_id=booking.id,
                    response_body=json.loads(response.model_dump_json()),
                    status_code=status.HTTP_201_CREATED,
                    created_at=booking.created_at,
                )
            )

        self._logger.info(
            "Booking created",
            extra={
                "booking_id": booking.id,
                "listing_id": listing.id,
                "total_price": str(booking.total_price),
            },
        )
        return response

    def _build_booking(
        self, renter_id: str, listing: Listing, request: CreateBookingRequest
    ) -> Booking:
        dates = DateRange(start=request.start_date, end=request.end_date)
        duration = dates.duration(listing.pricing_type.value)

        if duration < listing.min_rental_duration:
            raise ValidationError(
                "start_date",
                f"Minimum rental duration is {listing.min_rental_duration} "
                f"{listing.pricing_type.value} units",
            )
        if listing.max_rental_duration and duration > listing.max_rental_duration:
            raise ValidationError(
                "end_date",
                f"Maximum rental duration is {listing.max_rental_duration} "
                f"{listing.pricing_type.value} units",
            )
        if request.quantity > listing.quantity_available:
            raise ValidationError(
                "quantity", f"Only {listing.quantity_available} available"
            )

        variant_adjustment = Decimal("0")
        if request.variant_id:
            variant = listing.find_variant(request.variant_id)
            if not variant:
                raise ValidationError("variant_id", "Variant does not belong to this listing")
            variant_adjustment = variant.price_adjustment

        add_ons = self._select_add_ons(listing, request.add_on_ids)
        quote = quote_booking(
            listing=listing,
            dates=dates,
            quantity=request.quantity,
            variant_adjustment=variant_adjustment,
            add_ons=add_ons,
        )

        booking_id = self._uuid_generator.generate_uuid()
        now = self._clock.now()
        deposit = listing.deposit
        return Booking(
            id=booking_id,
            renter_id=renter_id,
            lender_id=listing.lender_id,
            listing_id=listing.id,
            variant_id=request.variant_id,
            start_date=dates.start,
            end_date=dates.end,
            quantity=request.quantity,
            rental_duration=quote.rental_duration,
            base_amount=quote.base_amount,
            variant_amount=quote.variant_amount,
            add_ons_amount=quote.add_ons_amount,
            subtotal=quote.subtotal,
            deposit_amount=quote.deposit_amount,
            total_price=quote.total_price,
            renter_email=request.renter_email,
            created_at=now,
            updated_at=now,
            add_ons=[
                BookingAddOn(
                    add_on_id=a.id,
                    name=a.name,
                    quantity=request.quantity,
                    price=a.price,
                    booking_id=booking_id,
                )
                for a in add_ons
            ],
            deposits=(
                [BookingDeposit(deposit_id=deposit.id, amount=deposit.amount, booking_id=booking_id)]
                if deposit and deposit.amount > 0
                else []
            ),
        )

    def _select_add_ons(self, listing: Listing, add_on_ids: list[str]) -> list[ListingAddOn]:
        selected: dict[str, ListingAddOn] = {a.id: a for a in listing.required_add_ons}
        for add_on_id in add_on_ids:
            add_on = listing.find_add_on(add_on_id)
            if not add_on:
                raise ValidationError("add_on_ids", f"Unknown add-on {add_on_id}")
            selected[add_on.id] = add_on
        return list(selected.values())
