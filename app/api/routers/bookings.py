from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from app.api.dependencies import get_current_user_id, get_use_cases
from app.api.schemas.bookings import (
    BookingEnvelope,
    BookingListEnvelope,
    BookingResponse,
    CreateBookingRequest,
    RefundEligibilityOut,
    TransitionBookingRequest,
)

router = APIRouter()


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    payload: CreateBookingRequest,
    user_id: str = Depends(get_current_user_id),
    idem_key: str = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    if not idem_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Idempotency-Key header is required",
        )
    return await use_cases["create_booking"].execute(
        renter_id=user_id, request=payload, idem_key=idem_key
    )


@router.get("/bookings", response_model=BookingListEnvelope)
async def list_bookings(
    role: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
) -> BookingListEnvelope:
    found = await use_cases["list_bookings"].execute(
        actor_id=user_id, role=role, status=status_filter
    )
    return BookingListEnvelope(data=[BookingResponse.from_entity(b) for b in found])


@router.get("/bookings/{booking_id}", response_model=BookingEnvelope)
async def get_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
) -> BookingEnvelope:
    booking, advisory = await use_cases["get_booking"].execute(
        booking_id=booking_id, actor_id=user_id
    )
    return BookingEnvelope(
        data=BookingResponse.from_entity(booking),
        refund_eligibility=RefundEligibilityOut.from_advisory(advisory),
    )


@router.patch("/bookings/{booking_id}", response_model=BookingEnvelope)
async def transition_booking(
    booking_id: str,
    payload: TransitionBookingRequest,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
) -> BookingEnvelope:
    booking, advisory = await use_cases["transition_booking"].execute(
        booking_id=booking_id,
        actor_id=user_id,
        target_status=payload.status,
        cancellation_reason=payload.cancellation_reason,
    )
    return BookingEnvelope(
        data=BookingResponse.from_entity(booking),
        refund_eligibility=RefundEligibilityOut.from_advisory(advisory),
    )
