"""
Основные доменные типы и утилиты общего ядра.
"""

import re
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

# Общие типы идентификаторов
EntityId = UUID

Multiplier = Union[int, Decimal]

_CENTS = Decimal("0.01")


def generate_id() -> UUID:
    """Генерирует новый UUID."""
    return uuid4()


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class BusinessRuleValidationException(DomainException):
    """Исключение при нарушении бизнес-правил."""

    pass


class CapacityException(BusinessRuleValidationException):
    """Недостаточно свободных мест для запрошенного числа гостей."""

    pass


class InvalidOperationException(BusinessRuleValidationException):
    """Операция недопустима в текущем состоянии агрегата."""

    pass


class ConcurrencyException(DomainException):
    """Исключение при конфликте версий."""

    pass


class CurrencyMismatchException(DomainException, ValueError):
    """Арифметика над суммами в разных валютах."""

    pass


def round_money(amount: Decimal) -> Decimal:
    """Округляет сумму до копеек, половины - от нуля."""
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


class Money(BaseModel):
    """
    Денежная сумма с валютой.
    Неизменяемый объект, сумма всегда округлена до 2 знаков.
    """

    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: str = Field(default="USD", description="Код валюты (ISO 4217)")

    @field_validator("amount", mode="before")
    @classmethod
    def _to_decimal(cls, value: Any) -> Any:
        # float через str, чтобы не тащить двоичную погрешность
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("amount")
    @classmethod
    def _round_amount(cls, value: Decimal) -> Decimal:
        return round_money(value)

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) != 3 or not value.isalpha():
            raise ValueError(
                "Код валюты должен состоять из 3 букв (например, USD, RUB)."
            )
        return value

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        return cls(amount=Decimal("0"), currency=currency)

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._ensure_same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._ensure_same_currency(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, multiplier: Multiplier) -> "Money":
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, Decimal)):
            return NotImplemented
        return Money(amount=self.amount * multiplier, currency=self.currency)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:,.2f}"

    def _ensure_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchException(
                f"Нельзя выполнять операции над суммами в разных валютах: "
                f"{self.currency} и {other.currency}"
            )


class Address(BaseModel):
    """Платежный адрес."""

    model_config = ConfigDict(frozen=True)

    street: str
    city: str
    state: str
    postal_code: str

    @field_validator("street")
    @classmethod
    def _street_has_number(cls, value: str) -> str:
        value = value.strip()
        # Например, "301 Hill St"
        if not re.match(r"^[0-9]+\s+.+", value):
            raise ValueError("Улица должна содержать номер дома и название.")
        return value

    @field_validator("city", "state", "postal_code")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value, "Поле адреса")

    def __str__(self) -> str:
        return f"{self.street}, {self.city}, {self.state} {self.postal_code}"


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    event_id: UUID = Field(default_factory=uuid4)
    occurred_on: datetime = Field(default_factory=lambda: now())


class AggregateRoot(BaseModel):
    """
    Корень агрегата: идентичность, версия для оптимистичной блокировки
    и накопленные доменные события.
    """

    id: EntityId = Field(default_factory=generate_id, frozen=True)
    version: int = 0
    _domain_events: List[DomainEvent] = PrivateAttr(default_factory=list)

    def pull_domain_events(self) -> List[DomainEvent]:
        """Возвращает накопленные события и очищает список."""
        events = list(self._domain_events)
        self._domain_events = []
        return events

    def clone(self) -> "AggregateRoot":
        """Глубокая копия состояния без накопленных событий."""
        copy = self.model_copy(deep=True)
        copy._domain_events = []
        return copy

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)


# Общие утилиты
def require_text(value: str, field_name: str) -> str:
    """Проверяет, что строка не пустая, и возвращает ее без пробелов по краям."""
    if value is None or not value.strip():
        raise ValueError(f"{field_name} не может быть пустым.")
    return value.strip()


def require_positive(value: int, field_name: str) -> int:
    """Проверяет, что целое значение положительно."""
    if value <= 0:
        raise ValueError(f"{field_name} должно быть положительным.")
    return value


def now() -> datetime:
    """Возвращает текущую дату и время (UTC)."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Возвращает текущую дату."""
    return date.today()
