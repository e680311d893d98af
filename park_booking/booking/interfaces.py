"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from typing import Any, List, Protocol

from park_booking.cart.interfaces import ICartRepository
from park_booking.parks.interfaces import IParkRepository
from park_booking.shared_kernel import EntityId

from .domain import Booking


class IBookingRepository(Protocol):
    """
    Интерфейс репозитория для бронирований.

    reserved_dates должны возвращаться ровно теми же календарными датами.
    """

    def get_all(self) -> List[Booking]: ...
    def get_by_park(self, park_id: EntityId) -> List[Booking]: ...
    def get_by_id(self, booking_id: EntityId) -> Booking | None: ...
    def add(self, booking: Booking) -> None: ...
    def update(self, booking: Booking) -> bool: ...
    def remove(self, booking_id: EntityId) -> bool: ...


class IBookingUnitOfWork(Protocol):
    """
    Интерфейс Unit of Work для контекста Booking.

    Изменения, сделанные внутри блока with, либо сохраняются все,
    либо откатываются все при исключении.
    """

    @property
    def parks(self) -> IParkRepository: ...
    @property
    def bookings(self) -> IBookingRepository: ...
    @property
    def carts(self) -> ICartRepository: ...

    def __enter__(self) -> IBookingUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
