"""Value Object DateRange - rango de fechas de un alquiler."""

from dataclasses import dataclass
from datetime import date

from app.domain.errors import InvalidDateRangeError


@dataclass(frozen=True)
class DateRange:
    """
    Value Object inmutable que representa el rango [start, end] de un alquiler.

    Ambos extremos son inclusivos: un alquiler de un solo día tiene
    start == end.

    Attributes:
        start: Fecha de inicio (retiro / entrega).
        end: Fecha de fin (devolución).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"start_date must be on or before end_date: {self.start} > {self.end}"
            )

    @property
    def days(self) -> int:
        """Diferencia en días completos entre inicio y fin."""
        return (self.end - self.start).days

    def duration(self, pricing_type: str) -> int:
        """
        Calcula la duración en unidades del tipo de precio del artículo.

        Regla de negocio:
        - daily: días inclusivos (mismo día = 1).
        - weekly: semanas completas, mínimo 1.
        - hourly: horas entre fechas, mínimo 1.
        """
        if pricing_type == "hourly":
            return max(1, self.days * 24)
        if pricing_type == "weekly":
            return max(1, self.days // 7)
        return max(1, self.days + 1)
