"""
QueueLens – Domain Value Object: DateRange
============================================
Ventana temporal [from, to] de una consulta de analytics.

- Siempre timezone-aware (los valores naive se toman como UTC).
- Invariante: from <= to. Si no se cumple → VALIDATION_ERROR.
- Se serializa como {"from": ISO-8601, "to": ISO-8601}.

COBERTURA:
  Un rango A "cubre" a B si A.from <= B.from y A.to >= B.to.
  Es la regla de validez del cache: un agregado cacheado para una
  ventana más ancha satisface una consulta más estrecha.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Union

from queuelens.domain.exceptions.domain_errors import AnalyticsValidationError

DateLike = Union[str, date, datetime]


def parse_datetime(value: DateLike, field: str = "date") -> datetime:
    """
    Convierte str ISO / date / datetime a datetime aware.

    Acepta fechas sin hora ("2024-01-01") y el sufijo "Z".

    Raises:
        AnalyticsValidationError: valor ausente o con formato inválido
    """
    if value is None or value == "":
        raise AnalyticsValidationError(
            f"{field} es obligatorio", operation="parse_date", context={field: value},
        )

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise AnalyticsValidationError(
                f"Formato de fecha inválido para {field}: {value!r}",
                operation="parse_date",
                context={field: value},
            ) from exc
    else:
        raise AnalyticsValidationError(
            f"Tipo de fecha no soportado para {field}: {type(value).__name__}",
            operation="parse_date",
            context={field: str(value)},
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class DateRange:
    """Rango de fechas inmutable con validación from <= to."""

    date_from: datetime
    date_to: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "date_from", parse_datetime(self.date_from, "date_from"))
        object.__setattr__(self, "date_to", parse_datetime(self.date_to, "date_to"))

        if self.date_from > self.date_to:
            raise AnalyticsValidationError(
                "date_from debe ser anterior o igual a date_to",
                operation="date_range",
                context={"date_from": self.date_from, "date_to": self.date_to},
            )

    @classmethod
    def parse(cls, date_from: DateLike, date_to: DateLike) -> "DateRange":
        """Construye el rango desde strings ISO o fechas."""
        return cls(parse_datetime(date_from, "date_from"), parse_datetime(date_to, "date_to"))

    def covers(self, date_from: DateLike, date_to: DateLike) -> bool:
        """True si este rango contiene completamente [date_from, date_to]."""
        return (
            self.date_from <= parse_datetime(date_from, "date_from")
            and self.date_to >= parse_datetime(date_to, "date_to")
        )

    def to_dict(self) -> dict:
        return {
            "from": self.date_from.isoformat(),
            "to": self.date_to.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DateRange":
        return cls.parse(data["from"], data["to"])
