from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    condecimal,
    field_validator,
)

from app.domain.cancellation import RefundAdvisory
from app.domain.entities.booking import Booking, BookingStatus


def _format_amount(value: Decimal) -> str:
    return format(value, ".2f")


# Amounts leave the API as 2-decimal strings.
Money = Annotated[
    condecimal(max_digits=12, decimal_places=2),
    PlainSerializer(_format_amount, return_type=str, when_used="json"),
]


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    listing_id: str
    variant_id: str | None = None
    start_date: date
    end_date: date
    quantity: int = Field(default=1, ge=1)
    add_on_ids: list[str] = Field(default_factory=list)
    renter_email: EmailStr | None = None

    @field_validator("end_date")
    @classmethod
    def validate_dates(cls, value: date, info: Any) -> date:
        start = info.data.get("start_date")
        if start and value < start:
            raise ValueError("end_date must be on or after start_date")
        return value


class TransitionBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: BookingStatus
    cancellation_reason: str | None = None


class BookingAddOnOut(BaseModel):
    add_on_id: str
    name: str
    quantity: int
    price: Money


class BookingDepositOut(BaseModel):
    deposit_id: str
    amount: Money
    status: str


class BookingResponse(BaseModel):
    id: str
    renter_id: str
    lender_id: str
    listing_id: str
    variant_id: str | None = None
    start_date: date
    end_date: date
    quantity: int
    rental_duration: int
    base_amount: Money
    variant_amount: Money
    add_ons_amount: Money
    subtotal: Money
    deposit_amount: Money
    total_price: Money
    status: str
    payment_status: str
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None
    cancellation_reason: str | None = None
    stripe_session_id: str | None = None
    payment_intent_id: str | None = None
    payment_error: str | None = None
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    add_ons: list[BookingAddOnOut] = Field(default_factory=list)
    deposits: list[BookingDepositOut] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            renter_id=booking.renter_id,
            lender_id=booking.lender_id,
            listing_id=booking.listing_id,
            variant_id=booking.variant_id,
            start_date=booking.start_date,
            end_date=booking.end_date,
            quantity=booking.quantity,
            rental_duration=booking.rental_duration,
            base_amount=booking.base_amount,
            variant_amount=booking.variant_amount,
            add_ons_amount=booking.add_ons_amount,
            subtotal=booking.subtotal,
            deposit_amount=booking.deposit_amount,
            total_price=booking.total_price,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            confirmed_at=booking.confirmed_at,
            cancelled_at=booking.cancelled_at,
            completed_at=booking.completed_at,
            cancellation_reason=booking.cancellation_reason,
            stripe_session_id=booking.stripe_session_id,
            payment_intent_id=booking.payment_intent_id,
            payment_error=booking.payment_error,
            version=booking.version,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            add_ons=[
                BookingAddOnOut(
                    add_on_id=a.add_on_id, name=a.name, quantity=a.quantity, price=a.price
                )
                for a in booking.add_ons
            ],
            deposits=[
                BookingDepositOut(
                    deposit_id=d.deposit_id, amount=d.amount, status=d.status.value
                )
                for d in booking.deposits
            ],
        )


class RefundEligibilityOut(BaseModel):
    eligibility: str
    days_until_start: int
    message: str

    @classmethod
    def from_advisory(cls, advisory: RefundAdvisory | None) -> "RefundEligibilityOut | None":
        if advisory is None:
            return None
        return cls(**advisory.to_dict())


class BookingEnvelope(BaseModel):
    data: BookingResponse
    refund_eligibility: RefundEligibilityOut | None = None


class BookingListEnvelope(BaseModel):
    data: list[BookingResponse]
