"""
Инфраструктурный слой контекста бронирования.

Содержит реализации репозиториев и единицу работы, объединяющую
хранилища парков, бронирований и корзин.
"""

from pathlib import Path
from typing import Any, List, Optional, Union

from park_booking.cart.infrastructure import InMemoryCartRepository
from park_booking.cart.interfaces import ICartRepository
from park_booking.parks.infrastructure import InMemoryParkRepository
from park_booking.parks.interfaces import IParkRepository
from park_booking.shared_kernel import EntityId
from park_booking.shared_kernel.infrastructure import (
    ChangeTracker,
    ConsoleLogger,
    InMemoryRepository,
    JsonFileRepository,
    TrackedRepository,
)
from park_booking.shared_kernel.interfaces import ILogger

from . import interfaces as ports
from .domain import Booking


class InMemoryBookingRepository(InMemoryRepository[Booking], ports.IBookingRepository):
    """Реализация репозитория бронирований в памяти."""

    def get_all(self) -> List[Booking]:
        return sorted(self._find_all(), key=lambda booking: booking.created_at)

    def get_by_park(self, park_id: EntityId) -> List[Booking]:
        return [booking for booking in self.get_all() if booking.park_id == park_id]

    def get_by_id(self, booking_id: EntityId) -> Optional[Booking]:
        return self._find(booking_id)

    def add(self, booking: Booking) -> None:
        self._insert(booking)

    def update(self, booking: Booking) -> bool:
        return self._replace(booking)

    def remove(self, booking_id: EntityId) -> bool:
        return self._delete(booking_id)


class JsonFileBookingRepository(JsonFileRepository[Booking], InMemoryBookingRepository):
    """Репозиторий бронирований, хранящий данные в JSON-файле."""

    def __init__(self, file_path: Union[str, Path]):
        super().__init__(file_path, Booking)


class BookingUnitOfWork(ports.IBookingUnitOfWork):
    """
    Единица работы для контекста бронирования.

    Внутри блока with репозитории доступны через обертки, которые ведут
    журнал записей. Если блок завершился исключением, откатываются только
    записи этой единицы работы, поэтому запись парка и запись бронирования
    сохраняются вместе или не сохраняются вовсе, а изменения, параллельно
    зафиксированные другими единицами работы над теми же репозиториями,
    остаются на месте.
    """

    def __init__(
        self,
        parks_repo: Optional[IParkRepository] = None,
        bookings_repo: Optional[ports.IBookingRepository] = None,
        carts_repo: Optional[ICartRepository] = None,
        logger: Optional[ILogger] = None,
    ):
        self._parks = parks_repo or InMemoryParkRepository()
        self._bookings = bookings_repo or InMemoryBookingRepository()
        self._carts = carts_repo or InMemoryCartRepository()
        self._logger = logger or ConsoleLogger()
        self._tracker: Optional[ChangeTracker] = None

    @property
    def parks(self) -> IParkRepository:
        return self._tracked(self._parks)

    @property
    def bookings(self) -> ports.IBookingRepository:
        return self._tracked(self._bookings)

    @property
    def carts(self) -> ICartRepository:
        return self._tracked(self._carts)

    @property
    def in_transaction(self) -> bool:
        return self._tracker is not None

    def commit(self) -> None:
        """Фиксирует все изменения."""
        if self._tracker is not None:
            self._logger.debug("BookingUnitOfWork committed", writes=len(self._tracker))
        self._tracker = None

    def rollback(self) -> None:
        """Откатывает записи, сделанные этой единицей работы с начала блока."""
        if self._tracker is None:
            return
        skipped = self._tracker.revert()
        self._tracker = None
        if skipped:
            self._logger.warning(
                "BookingUnitOfWork rolled back; entities changed by others were kept",
                skipped=[str(entity_id) for entity_id in skipped],
            )
        else:
            self._logger.warning("BookingUnitOfWork rolled back")

    def __enter__(self) -> "BookingUnitOfWork":
        if self._tracker is not None:
            raise RuntimeError("BookingUnitOfWork уже открыт")
        self._tracker = ChangeTracker()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False  # Пробрасываем исключение дальше, если оно было

    def _tracked(self, repository: Any) -> Any:
        if self._tracker is None:
            return repository
        return TrackedRepository(repository, self._tracker)
