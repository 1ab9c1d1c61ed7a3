"""Política informativa de reembolso al cancelar."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

DEFAULT_FULL_REFUND_MIN_DAYS = 2


class RefundEligibility(str, Enum):
    FULL = "full"
    PARTIAL = "partial"


@dataclass(frozen=True)
class RefundAdvisory:
    """
    Resultado de la política de cancelación.

    Es sólo informativo: no dispara ningún reembolso.
    """

    eligibility: RefundEligibility
    days_until_start: int
    message: str

    def to_dict(self) -> dict:
        return {
            "eligibility": self.eligibility.value,
            "days_until_start": self.days_until_start,
            "message": self.message,
        }


def refund_advisory(
    start_date: date,
    today: date,
    min_days: int = DEFAULT_FULL_REFUND_MIN_DAYS,
) -> RefundAdvisory:
    """Reembolso total si faltan al menos ``min_days`` días para el inicio."""
    days_until_start = (start_date - today).days
    if days_until_start >= min_days:
        return RefundAdvisory(
            eligibility=RefundEligibility.FULL,
            days_until_start=days_until_start,
            message="Cancelled with enough notice: eligible for a full refund",
        )
    return RefundAdvisory(
        eligibility=RefundEligibility.PARTIAL,
        days_until_start=days_until_start,
        message=(
            f"Cancelled less than {min_days} days before start: "
            "eligible for a partial refund only"
        ),
    )
