"""Value Objects del dominio de reservas."""

from app.domain.value_objects.date_range import DateRange
from app.domain.value_objects.money import from_minor_units, to_minor_units

__all__ = [
    "DateRange",
    "from_minor_units",
    "to_minor_units",
]
