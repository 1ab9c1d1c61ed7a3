import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.domain.errors import (
    BookingAlreadyPaidError,
    BookingCancelledError,
    BookingForbiddenError,
    BookingNotFoundError,
    DomainError,
    IdempotencyConflictError,
    InvalidBookingTransitionError,
    InvalidDateRangeError,
    LenderAccountNotConfiguredError,
    LenderChargesNotEnabledError,
    LenderProfileNotFoundError,
    ListingNotFoundError,
    OptimisticLockError,
    OwnListingBookingError,
    PaymentConfigurationError,
    PaymentProviderError,
    RefundNotAllowedError,
    ValidationError,
    WebhookProcessingError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    BookingNotFoundError: status.HTTP_404_NOT_FOUND,
    ListingNotFoundError: status.HTTP_404_NOT_FOUND,
    LenderProfileNotFoundError: status.HTTP_404_NOT_FOUND,
    BookingForbiddenError: status.HTTP_403_FORBIDDEN,
    InvalidBookingTransitionError: status.HTTP_400_BAD_REQUEST,
    BookingAlreadyPaidError: status.HTTP_400_BAD_REQUEST,
    BookingCancelledError: status.HTTP_400_BAD_REQUEST,
    OwnListingBookingError: status.HTTP_400_BAD_REQUEST,
    LenderAccountNotConfiguredError: status.HTTP_400_BAD_REQUEST,
    LenderChargesNotEnabledError: status.HTTP_400_BAD_REQUEST,
    RefundNotAllowedError: status.HTTP_400_BAD_REQUEST,
    WebhookSignatureError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidDateRangeError: status.HTTP_400_BAD_REQUEST,
    OptimisticLockError: status.HTTP_409_CONFLICT,
    IdempotencyConflictError: status.HTTP_409_CONFLICT,
    PaymentConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    WebhookProcessingError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PaymentProviderError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: DomainError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Domain error",
        extra={"code": exc.code, "path": request.url.path, "status_code": status_code},
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )
