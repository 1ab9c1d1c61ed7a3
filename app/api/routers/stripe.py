from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_current_user_id, get_use_cases
from app.api.schemas.stripe import (
    AccountStatusResponse,
    CreateCheckoutSessionRequest,
    CreateCheckoutSessionResponse,
    RefundRequest,
    RefundResponse,
)

router = APIRouter()


@router.post(
    "/stripe/create-checkout-session",
    response_model=CreateCheckoutSessionResponse,
    status_code=status.HTTP_200_OK,
)
async def create_checkout_session(
    payload: CreateCheckoutSessionRequest,
    use_cases=Depends(get_use_cases),
) -> CreateCheckoutSessionResponse:
    return await use_cases["create_checkout_session"].execute(booking_id=payload.booking_id)


@router.post("/stripe/refund", response_model=RefundResponse, status_code=status.HTTP_200_OK)
async def request_refund(
    payload: RefundRequest,
    use_cases=Depends(get_use_cases),
) -> RefundResponse:
    return await use_cases["request_refund"].execute(
        booking_id=payload.booking_id,
        amount=payload.amount,
        reason=payload.reason,
    )


@router.get("/stripe/connect/account-status", response_model=AccountStatusResponse)
async def connect_account_status(
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
) -> AccountStatusResponse:
    return await use_cases["sync_lender_account"].execute(user_id=user_id)
