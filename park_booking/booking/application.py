"""
Прикладной слой контекста бронирования.

Сервис согласует парк и бронирование: места и даты, взятые бронированием,
симметрично списываются с парка и возвращаются ему.
Промахи бизнес-правил (нет парка, нет мест, нет дат) возвращаются как
None/False, ошибки входных данных поднимаются исключениями.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel

from park_booking.shared_kernel import (
    DomainEvent,
    EntityId,
    require_positive,
    require_text,
)
from park_booking.shared_kernel.infrastructure import ConsoleLogger
from park_booking.shared_kernel.interfaces import IEventBus, ILogger

from . import interfaces as ports
from .domain import Booking, BookingRemoved, BookingStatus, GuestCategory

# DTO для исходящих данных


class BookingDTO(BaseModel):
    """DTO для представления бронирования."""

    id: EntityId
    park_id: EntityId
    guest_name: str
    guests: int
    start_date: date
    day_count: int
    reserved_dates: Tuple[date, ...]
    status: BookingStatus
    guest_category: GuestCategory
    price_per_day: Decimal
    total_price: Decimal
    currency: str
    created_at: datetime
    cancelled_at: Optional[datetime]

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=booking.id,
            park_id=booking.park_id,
            guest_name=booking.guest_name,
            guests=booking.guests,
            start_date=booking.start_date,
            day_count=booking.day_count,
            reserved_dates=booking.reserved_dates,
            status=booking.status,
            guest_category=booking.guest_category,
            price_per_day=booking.price_per_day.amount,
            total_price=booking.total_price.amount,
            currency=booking.price_per_day.currency,
            created_at=booking.created_at,
            cancelled_at=booking.cancelled_at,
        )


# Сервисы приложения


class BookingApplicationService:
    """Сервис приложения для работы с бронированиями."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        event_bus: Optional[IEventBus] = None,
        logger: Optional[ILogger] = None,
        child_price_factor: Decimal = Decimal("0.6"),
        default_guest_name: str = "Guest",
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._event_bus = event_bus
        self._logger = logger or ConsoleLogger()
        self._child_price_factor = child_price_factor
        self._default_guest_name = default_guest_name

    @property
    def uow(self) -> ports.IBookingUnitOfWork:
        return self._uow

    def get_all_bookings(self) -> List[Booking]:
        return self._uow.bookings.get_all()

    def get_bookings_by_park(self, park_id: EntityId) -> List[Booking]:
        return self._uow.bookings.get_by_park(park_id)

    def get_booking(self, booking_id: EntityId) -> Optional[Booking]:
        return self._uow.bookings.get_by_id(booking_id)

    def create_multi_day_booking(
        self, park_id: EntityId, guest_name: str, guests: int, day_count: int
    ) -> Optional[Booking]:
        """
        Создает бронирование на day_count ближайших свободных дат.

        Returns:
            Подтвержденное бронирование или None, если парк не найден,
            нет мест или не хватает свободных дат.
        """
        require_text(guest_name, "Имя гостя")
        require_positive(guests, "Количество гостей")
        require_positive(day_count, "Количество дней")

        with self._uow:
            park = self._uow.parks.get_by_id(park_id)
            if park is None:
                self._logger.info("Парк не найден", park_id=park_id)
                return None

            if not park.has_availability_for(guests):
                self._logger.info(
                    "Недостаточно мест для бронирования",
                    park_id=park_id,
                    guests=guests,
                    available=park.available_guest_capacity,
                )
                return None

            reserved_dates = park.try_reserve_dates(day_count)
            if reserved_dates is None:
                self._logger.info(
                    "Недостаточно свободных дат для бронирования",
                    park_id=park_id,
                    day_count=day_count,
                )
                return None

            park.reserve_guests(guests)
            booking = Booking.create(
                park_id=park.id,
                guest_name=guest_name,
                guests=guests,
                price_per_day=park.price_per_guest_per_day,
                reserved_dates=reserved_dates,
                guest_category=GuestCategory.ADULT,
            )
            booking.confirm()

            self._uow.parks.update(park)
            self._uow.bookings.add(booking)

        self._logger.info(
            "Бронирование создано",
            booking_id=booking.id,
            park_id=park_id,
            guests=guests,
            dates=[d.isoformat() for d in booking.reserved_dates],
        )
        self._publish(booking.pull_domain_events())
        return booking

    def create_single_day_booking(
        self,
        park_id: EntityId,
        guest_name: Optional[str],
        guest_category: GuestCategory,
        day: date,
    ) -> Optional[Booking]:
        """
        Создает бронирование одного гостя на конкретную дату.

        Детский билет стоит child_price_factor от цены взрослого (по умолчанию 60%).
        Пустое имя гостя заменяется именем по умолчанию.
        """
        with self._uow:
            park = self._uow.parks.get_by_id(park_id)
            if park is None:
                self._logger.info("Парк не найден", park_id=park_id)
                return None

            if not park.has_availability_for(1):
                self._logger.info("Нет свободных мест", park_id=park_id)
                return None

            if not park.try_reserve_specific_date(day):
                self._logger.info(
                    "Дата недоступна для бронирования", park_id=park_id, date=day
                )
                return None

            park.reserve_guests(1)

            price_per_day = park.price_per_guest_per_day
            if guest_category == GuestCategory.CHILD:
                price_per_day = price_per_day * self._child_price_factor

            safe_guest_name = (
                guest_name.strip()
                if guest_name and guest_name.strip()
                else self._default_guest_name
            )
            booking = Booking.create(
                park_id=park.id,
                guest_name=safe_guest_name,
                guests=1,
                price_per_day=price_per_day,
                reserved_dates=[day],
                guest_category=guest_category,
            )
            booking.confirm()

            self._uow.parks.update(park)
            self._uow.bookings.add(booking)

        self._logger.info(
            "Однодневное бронирование создано",
            booking_id=booking.id,
            park_id=park_id,
            date=day,
            category=guest_category.value,
        )
        self._publish(booking.pull_domain_events())
        return booking

    def cancel_booking(self, booking_id: EntityId) -> bool:
        """
        Отменяет бронирование и возвращает парку места и даты.

        Returns:
            False, если бронирование или парк не найдены либо бронирование
            уже отменено.
        """
        with self._uow:
            booking = self._uow.bookings.get_by_id(booking_id)
            if booking is None:
                return False

            park = self._uow.parks.get_by_id(booking.park_id)
            if park is None:
                return False

            if not booking.is_active:
                self._logger.info("Бронирование уже отменено", booking_id=booking_id)
                return False

            booking.cancel()
            park.release_guests(booking.guests)
            park.release_dates(booking.reserved_dates)

            self._uow.bookings.update(booking)
            self._uow.parks.update(park)

        self._logger.info("Бронирование отменено", booking_id=booking_id)
        self._publish(booking.pull_domain_events())
        return True

    def remove_booking(self, booking_id: EntityId) -> bool:
        """
        Удаляет запись о бронировании.

        Места и даты возвращаются парку только для активного бронирования:
        отмененное уже вернуло их при отмене.
        """
        with self._uow:
            booking = self._uow.bookings.get_by_id(booking_id)
            if booking is None:
                return False

            park = self._uow.parks.get_by_id(booking.park_id)
            if park is None:
                return False

            if booking.is_active:
                park.release_guests(booking.guests)
                park.release_dates(booking.reserved_dates)
                self._uow.parks.update(park)

            removed = self._uow.bookings.remove(booking_id)

        if removed:
            self._logger.info("Бронирование удалено", booking_id=booking_id)
            self._publish([BookingRemoved(booking_id=booking.id, park_id=booking.park_id)])
        return removed

    def _publish(self, events: List[DomainEvent]) -> None:
        if self._event_bus is None:
            return
        for event in events:
            self._event_bus.publish(event)
