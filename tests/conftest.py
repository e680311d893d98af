"""
Общие фикстуры для тестов.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any, List, Tuple

import pytest

from park_booking.booking.application import BookingApplicationService
from park_booking.booking.infrastructure import BookingUnitOfWork
from park_booking.cart.application import CartApplicationService
from park_booking.parks.application import ParkApplicationService
from park_booking.parks.domain import Park
from park_booking.shared_kernel import Address, Money, today
from park_booking.shared_kernel.infrastructure import InMemoryEventBus


class RecordingLogger:
    """Логгер, запоминающий записи вместо вывода."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str, dict]] = []

    def info(self, message: str, **kwargs: Any) -> None:
        self.records.append(("INFO", message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self.records.append(("ERROR", message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.records.append(("WARNING", message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self.records.append(("DEBUG", message, kwargs))

    def levels(self) -> List[str]:
        return [level for level, _, _ in self.records]


def make_park(guest_limit: int = 10, days: int = 14, price: str = "100.00", **kwargs) -> Park:
    """Парк с непрерывным набором дат, начиная с сегодняшней."""
    start = today()
    return Park.create(
        name=kwargs.pop("name", "Yellowstone"),
        description=kwargs.pop("description", "Гейзеры и каньоны"),
        location=kwargs.pop("location", "Wyoming"),
        guest_limit=guest_limit,
        price_per_guest_per_day=Money(amount=Decimal(price)),
        initial_availability=[start + timedelta(days=i) for i in range(days)],
        **kwargs,
    )


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def uow(logger):
    return BookingUnitOfWork(logger=logger)


@pytest.fixture
def event_bus(logger):
    return InMemoryEventBus(logger)


@pytest.fixture
def park(uow):
    """Парк на 10 гостей, 14 дат от сегодняшней, $100 за гостя в день."""
    park = make_park()
    uow.parks.add(park)
    return park


@pytest.fixture
def booking_service(uow, event_bus, logger):
    return BookingApplicationService(uow, event_bus=event_bus, logger=logger)


@pytest.fixture
def cart_service(uow, logger):
    return CartApplicationService(uow, logger=logger)


@pytest.fixture
def park_service(uow, logger):
    return ParkApplicationService(uow, logger=logger)


@pytest.fixture
def billing_address():
    return Address(street="301 Hill St", city="Springfield", state="IL", postal_code="62701")
