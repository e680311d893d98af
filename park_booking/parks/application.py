"""
Прикладной слой контекста парков.

Администрирование парков: добавление, удаление, изменение вместимости,
цен и описания.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional

from pydantic import BaseModel

from park_booking.shared_kernel import EntityId, Money, require_positive
from park_booking.shared_kernel.infrastructure import ConsoleLogger
from park_booking.shared_kernel.interfaces import ILogger

from .domain import Park

if TYPE_CHECKING:
    from park_booking.booking.interfaces import IBookingUnitOfWork

# DTO для исходящих данных


class ParkDTO(BaseModel):
    """DTO для представления парка."""

    id: EntityId
    name: str
    description: str
    location: str
    guest_limit: int
    available_guest_capacity: int
    guests_currently_booked: int
    price_per_guest_per_day: Decimal
    currency: str
    available_dates: List[date]
    last_modified_at: datetime

    @classmethod
    def from_domain(cls, park: Park) -> "ParkDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=park.id,
            name=park.name,
            description=park.description,
            location=park.location,
            guest_limit=park.guest_limit,
            available_guest_capacity=park.available_guest_capacity,
            guests_currently_booked=park.guests_currently_booked,
            price_per_guest_per_day=park.price_per_guest_per_day.amount,
            currency=park.price_per_guest_per_day.currency,
            available_dates=list(park.available_dates),
            last_modified_at=park.last_modified_at,
        )


# Сервисы приложения


class ParkApplicationService:
    """Сервис приложения для администрирования парков."""

    def __init__(self, uow: "IBookingUnitOfWork", logger: Optional[ILogger] = None):
        self._uow = uow
        self._logger = logger or ConsoleLogger()

    def list_parks(self) -> List[Park]:
        return self._uow.parks.get_all()

    def get_park(self, park_id: EntityId) -> Optional[Park]:
        return self._uow.parks.get_by_id(park_id)

    def add_park(
        self,
        name: str,
        description: str,
        location: str,
        guest_limit: int,
        price_per_guest_per_day: Money,
        available_dates: Iterable[date] = (),
    ) -> Park:
        """Регистрирует новый парк с полной вместимостью."""
        park = Park.create(
            name=name,
            description=description,
            location=location,
            guest_limit=guest_limit,
            price_per_guest_per_day=price_per_guest_per_day,
            initial_availability=available_dates,
        )
        with self._uow:
            self._uow.parks.add(park)

        self._logger.info("Парк добавлен", park_id=park.id, name=park.name)
        return park

    def remove_park(self, park_id: EntityId) -> bool:
        """
        Удаляет парк.

        Парк с активными бронированиями не удаляется: иначе бронирования
        ссылались бы на несуществующий парк.
        """
        with self._uow:
            if self._uow.parks.get_by_id(park_id) is None:
                return False

            active = [b for b in self._uow.bookings.get_by_park(park_id) if b.is_active]
            if active:
                self._logger.warning(
                    "Нельзя удалить парк с активными бронированиями",
                    park_id=park_id,
                    active_bookings=len(active),
                )
                return False

            removed = self._uow.parks.remove(park_id)

        self._logger.info("Парк удален", park_id=park_id)
        return removed

    def add_guest_capacity(self, park_id: EntityId, additional_guests: int) -> bool:
        """Увеличивает лимит гостей парка."""
        require_positive(additional_guests, "Количество мест")
        with self._uow:
            park = self._uow.parks.get_by_id(park_id)
            if park is None:
                return False

            park.update_guest_limit(park.guest_limit + additional_guests)
            self._uow.parks.update(park)

        self._logger.info(
            "Лимит гостей увеличен", park_id=park_id, guest_limit=park.guest_limit
        )
        return True

    def remove_guest_capacity(self, park_id: EntityId, guests_to_remove: int) -> bool:
        """
        Уменьшает лимит гостей парка.

        Raises:
            InvalidOperationException: если новый лимит меньше числа уже
                забронированных мест.
        """
        require_positive(guests_to_remove, "Количество мест")
        with self._uow:
            park = self._uow.parks.get_by_id(park_id)
            if park is None:
                return False

            park.update_guest_limit(park.guest_limit - guests_to_remove)
            self._uow.parks.update(park)

        self._logger.info(
            "Лимит гостей уменьшен", park_id=park_id, guest_limit=park.guest_limit
        )
        return True

    def update_pricing(self, park_id: EntityId, new_price_per_guest: Decimal) -> bool:
        """Меняет цену за гостя в день; валюта парка сохраняется."""
        with self._uow:
            park = self._uow.parks.get_by_id(park_id)
            if park is None:
                return False

            currency = park.price_per_guest_per_day.currency
            park.update_price(Money(amount=new_price_per_guest, currency=currency))
            self._uow.parks.update(park)

        self._logger.info(
            "Цена парка обновлена",
            park_id=park_id,
            price=str(park.price_per_guest_per_day),
        )
        return True

    def update_details(
        self, park_id: EntityId, name: str, description: str, location: str
    ) -> bool:
        with self._uow:
            park = self._uow.parks.get_by_id(park_id)
            if park is None:
                return False

            park.update_details(name, description, location)
            self._uow.parks.update(park)

        self._logger.info("Описание парка обновлено", park_id=park_id)
        return True
