"""
Сборка приложения: репозитории, единица работы, шина событий и сервисы.
"""

from functools import partial
from typing import Any, Dict, Optional

from park_booking.booking.application import BookingApplicationService
from park_booking.booking.infrastructure import BookingUnitOfWork, JsonFileBookingRepository
from park_booking.cart.application import CartApplicationService
from park_booking.cart.domain import CartPricingPolicy
from park_booking.parks.application import ParkApplicationService
from park_booking.parks.infrastructure import JsonFileParkRepository
from park_booking.payments.application import PaymentApplicationService
from park_booking.payments.infrastructure import MockPaymentGateway
from park_booking.settings import AppSettings
from park_booking.shared_kernel import DomainEvent
from park_booking.shared_kernel.infrastructure import (
    ConsoleLogger,
    InMemoryEventBus,
    StandardLogger,
)
from park_booking.shared_kernel.interfaces import ILogger


def create_logger(settings: AppSettings) -> ILogger:
    if settings.log_backend == "logging":
        return StandardLogger()
    return ConsoleLogger(debug_enabled=settings.debug)


def on_booking_event(event: DomainEvent, logger: ILogger) -> None:
    """Журнал аудита бронирований."""
    logger.info(f"Audit: {type(event).__name__}", event=event.model_dump(mode="json"))


def bootstrap_app(settings: Optional[AppSettings] = None) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or AppSettings()
    logger = create_logger(settings)

    # 1. Хранилища: JSON-файлы, если задан каталог данных, иначе память
    if settings.data_dir is not None:
        uow = BookingUnitOfWork(
            parks_repo=JsonFileParkRepository(settings.data_dir / "parks.json"),
            bookings_repo=JsonFileBookingRepository(settings.data_dir / "bookings.json"),
            logger=logger,
        )
    else:
        uow = BookingUnitOfWork(logger=logger)

    # 2. Шина событий и подписки
    event_bus = InMemoryEventBus(logger)
    event_bus.subscribe(DomainEvent, partial(on_booking_event, logger=logger))

    # 3. Сервисы, зависимости передаются явно
    cart_service = CartApplicationService(
        uow, pricing_policy=CartPricingPolicy.from_settings(settings), logger=logger
    )
    booking_service = BookingApplicationService(
        uow,
        event_bus=event_bus,
        logger=logger,
        child_price_factor=settings.child_price_factor,
        default_guest_name=settings.default_guest_name,
    )
    gateway = MockPaymentGateway()

    return {
        "settings": settings,
        "logger": logger,
        "uow": uow,
        "event_bus": event_bus,
        "park_service": ParkApplicationService(uow, logger=logger),
        "booking_service": booking_service,
        "cart_service": cart_service,
        "payment_gateway": gateway,
        "payment_service": PaymentApplicationService(gateway, cart_service, logger=logger),
    }
