"""Excepciones de dominio para el sistema de reservas de alquiler."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Booking ===


class BookingNotFoundError(DomainError):
    """La reserva no existe (o el actor no es parte de ella)."""

    def __init__(self, booking_id: str):
        super().__init__(message="Booking not found", code="BOOKING_NOT_FOUND")
        self.booking_id = booking_id


class BookingForbiddenError(DomainError):
    """El actor no es el cliente ni el prestador de la reserva."""

    def __init__(self, booking_id: str, actor_id: str):
        super().__init__(message="Forbidden", code="BOOKING_FORBIDDEN")
        self.booking_id = booking_id
        self.actor_id = actor_id


class InvalidBookingTransitionError(DomainError):
    """La transición de estado no está permitida para ese actor."""

    def __init__(self, current_status: str, target_status: str, actor: str):
        super().__init__(
            message=(
                f"Invalid status transition: {current_status} -> {target_status} "
                f"by {actor}"
            ),
            code="INVALID_STATUS_TRANSITION",
        )
        self.current_status = current_status
        self.target_status = target_status
        self.actor = actor


class BookingAlreadyPaidError(DomainError):
    """La reserva ya fue pagada; no se crea otra sesión de checkout."""

    def __init__(self, booking_id: str):
        super().__init__(message="Booking already paid", code="BOOKING_ALREADY_PAID")
        self.booking_id = booking_id


class BookingCancelledError(DomainError):
    """La reserva está cancelada y no admite pagos."""

    def __init__(self, booking_id: str):
        super().__init__(message="Booking is cancelled", code="BOOKING_CANCELLED")
        self.booking_id = booking_id


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar la reserva."""

    def __init__(self, booking_id: str, expected_version: int):
        super().__init__(
            message=(
                f"Booking {booking_id} was modified concurrently "
                f"(expected version {expected_version})"
            ),
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.booking_id = booking_id
        self.expected_version = expected_version


# === Errores de Listing / Prestador ===


class ListingNotFoundError(DomainError):
    """El artículo publicado no existe."""

    def __init__(self, listing_id: str):
        super().__init__(message="Listing not found", code="LISTING_NOT_FOUND")
        self.listing_id = listing_id


class OwnListingBookingError(DomainError):
    """Un prestador no puede reservar su propio artículo."""

    def __init__(self, listing_id: str):
        super().__init__(
            message="Cannot book your own listing", code="OWN_LISTING_BOOKING"
        )
        self.listing_id = listing_id


class LenderProfileNotFoundError(DomainError):
    """El usuario no tiene perfil de prestador."""

    def __init__(self, user_id: str):
        super().__init__(message="Lender profile not found", code="LENDER_PROFILE_NOT_FOUND")
        self.user_id = user_id


class LenderAccountNotConfiguredError(DomainError):
    """El prestador no tiene cuenta de pagos conectada."""

    def __init__(self, lender_id: str):
        super().__init__(
            message="Lender payment account not configured",
            code="LENDER_ACCOUNT_NOT_CONFIGURED",
        )
        self.lender_id = lender_id


class LenderChargesNotEnabledError(DomainError):
    """La cuenta conectada del prestador aún no está aprobada para cobrar."""

    def __init__(self, lender_id: str):
        super().__init__(
            message="Lender is not able to accept payments yet",
            code="LENDER_CHARGES_NOT_ENABLED",
        )
        self.lender_id = lender_id


# === Errores de Pago ===


class PaymentConfigurationError(DomainError):
    """Credenciales del procesador de pagos ausentes o inválidas."""

    def __init__(self, message: str = "Stripe is not configured"):
        super().__init__(message=message, code="PAYMENT_CONFIGURATION_ERROR")


class PaymentProviderError(DomainError):
    """Falla en la comunicación con el procesador de pagos."""

    def __init__(self, message: str):
        super().__init__(message=message, code="PAYMENT_PROVIDER_ERROR")


class WebhookSignatureError(DomainError):
    """Firma del webhook ausente o inválida."""

    def __init__(self, message: str):
        super().__init__(message=message, code="WEBHOOK_SIGNATURE_ERROR")


class RefundNotAllowedError(DomainError):
    """La reserva no admite un reembolso en su estado actual."""

    def __init__(self, message: str):
        super().__init__(message=message, code="REFUND_NOT_ALLOWED")


# === Errores de Idempotencia ===


class IdempotencyConflictError(DomainError):
    """Conflicto de idempotencia: misma key pero diferente request."""

    def __init__(self, idem_key: str, scope: str):
        super().__init__(
            message="Idempotency conflict: different payload for same key",
            code="IDEMPOTENCY_CONFLICT",
        )
        self.idem_key = idem_key
        self.scope = scope


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(message=message, code="VALIDATION_ERROR")
        self.field = field


class InvalidDateRangeError(DomainError):
    """Rango de fechas inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_DATE_RANGE")


class InvalidMoneyError(DomainError):
    """Monto monetario inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_MONEY")


class WebhookProcessingError(DomainError):
    """El evento quedó registrado pero su procesamiento falló; Stripe reintentará."""

    def __init__(self, event_id: str, message: str):
        super().__init__(
            message=f"Webhook handler failed: {message}", code="WEBHOOK_PROCESSING_ERROR"
        )
        self.event_id = event_id
