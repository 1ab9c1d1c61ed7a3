from pydantic import BaseModel, ConfigDict, Field, condecimal

from app.api.schemas.bookings import Money

RefundAmount = condecimal(max_digits=12, decimal_places=2, gt=0)


class CreateCheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: str = Field(alias="bookingId", min_length=1)


class CreateCheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    url: str


class RefundRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: str = Field(alias="bookingId", min_length=1)
    amount: RefundAmount | None = None
    reason: str | None = None


class RefundSummary(BaseModel):
    id: str
    amount: Money
    status: str


class RefundResponse(BaseModel):
    success: bool = True
    refund: RefundSummary


class AccountStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    charges_enabled: bool = Field(alias="chargesEnabled")
    payouts_enabled: bool = Field(alias="payoutsEnabled")
    details_submitted: bool = Field(alias="detailsSubmitted")
    requires_info: bool = Field(alias="requiresInfo")
    requirements: dict[str, list[str]] = Field(default_factory=dict)


class WebhookAck(BaseModel):
    received: bool = True
