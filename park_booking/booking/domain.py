"""
Доменная модель контекста бронирования.

Бронирование - неизменяемая запись о гостях и датах, взятых у парка.
Меняются только статус и момент отмены.
"""

from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from park_booking.shared_kernel import (
    AggregateRoot,
    DomainEvent,
    EntityId,
    InvalidOperationException,
    Money,
    now,
    require_text,
)


class BookingStatus(str, Enum):
    """Статусы бронирования."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class GuestCategory(str, Enum):
    """Ценовая категория гостя."""

    ADULT = "adult"
    CHILD = "child"


class BookingCreated(DomainEvent):
    """Событие создания бронирования."""

    booking_id: EntityId
    park_id: EntityId
    guests: int
    reserved_dates: Tuple[date, ...]


class BookingConfirmed(DomainEvent):
    """Событие подтверждения бронирования."""

    booking_id: EntityId


class BookingCancelled(DomainEvent):
    """Событие отмены бронирования."""

    booking_id: EntityId
    park_id: EntityId
    released_dates: Tuple[date, ...]


class BookingRemoved(DomainEvent):
    """Событие удаления бронирования."""

    booking_id: EntityId
    park_id: EntityId


class Booking(AggregateRoot):
    """Бронирование парка."""

    park_id: EntityId = Field(..., frozen=True)
    guest_name: str = Field(..., frozen=True)
    guests: int = Field(..., gt=0, frozen=True)
    start_date: date = Field(..., frozen=True)
    day_count: int = Field(..., gt=0, frozen=True)
    price_per_day: Money = Field(..., frozen=True)
    reserved_dates: Tuple[date, ...] = Field(..., frozen=True)
    guest_category: GuestCategory = Field(GuestCategory.ADULT, frozen=True)
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime = Field(default_factory=now)
    cancelled_at: Optional[datetime] = None

    @field_validator("guest_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value, "Имя гостя")

    @model_validator(mode="after")
    def _dates_match_day_count(self) -> "Booking":
        if len(set(self.reserved_dates)) != len(self.reserved_dates):
            raise ValueError("Забронированные даты не должны повторяться.")
        if len(self.reserved_dates) != self.day_count:
            raise ValueError(
                "Количество забронированных дат должно совпадать с количеством дней."
            )
        return self

    @property
    def total_price(self) -> Money:
        """Полная стоимость: цена за день * гости * дни."""
        return self.price_per_day * (self.guests * self.day_count)

    @property
    def is_active(self) -> bool:
        """Удерживает ли бронирование места и даты парка."""
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @classmethod
    def create(
        cls,
        park_id: EntityId,
        guest_name: str,
        guests: int,
        price_per_day: Money,
        reserved_dates: Iterable[date],
        guest_category: GuestCategory = GuestCategory.ADULT,
    ) -> "Booking":
        """Создает новое бронирование в статусе PENDING."""
        dates = tuple(reserved_dates)
        if not dates:
            raise ValueError("Бронирование должно включать хотя бы один день.")

        booking = cls(
            park_id=park_id,
            guest_name=guest_name,
            guests=guests,
            start_date=dates[0],
            day_count=len(dates),
            price_per_day=price_per_day,
            reserved_dates=dates,
            guest_category=guest_category,
        )
        booking._record_event(
            BookingCreated(
                booking_id=booking.id,
                park_id=park_id,
                guests=guests,
                reserved_dates=dates,
            )
        )
        return booking

    def confirm(self) -> None:
        """Подтверждает бронирование."""
        if self.status != BookingStatus.PENDING:
            raise InvalidOperationException(
                f"Невозможно подтвердить бронирование в статусе {self.status.value}"
            )

        self.status = BookingStatus.CONFIRMED
        self._record_event(BookingConfirmed(booking_id=self.id))

    def cancel(self) -> None:
        """Отменяет бронирование. Отмена окончательна."""
        if not self.is_active:
            raise InvalidOperationException(
                f"Невозможно отменить бронирование в статусе {self.status.value}"
            )

        self.status = BookingStatus.CANCELLED
        self.cancelled_at = now()
        self._record_event(
            BookingCancelled(
                booking_id=self.id,
                park_id=self.park_id,
                released_dates=self.reserved_dates,
            )
        )
