"""
Сквозной сценарий: парк -> бронирование -> корзина -> оплата -> отмена.
"""

from datetime import datetime, timezone
from decimal import Decimal

from park_booking.booking.domain import BookingStatus, GuestCategory
from park_booking.bootstrap import bootstrap_app
from park_booking.payments.application import PaymentApplicationService
from park_booking.settings import AppSettings
from park_booking.shared_kernel import Address, Money, today

from .conftest import make_park


def test_single_day_booking_lifecycle(booking_service, uow, park):
    """Бронирование на сегодня и его отмена возвращают парк в исходное состояние."""
    dates = list(park.available_dates)

    # Действие: взрослый гость на первую дату
    booking = booking_service.create_single_day_booking(
        park.id, "Ann", GuestCategory.ADULT, dates[0]
    )

    # Проверка
    stored_park = uow.parks.get_by_id(park.id)
    assert stored_park.available_guest_capacity == 9
    assert dates[0] not in stored_park.available_dates
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.total_price == Money(amount=Decimal("100.00"))

    # Действие: отмена
    assert booking_service.cancel_booking(booking.id) is True

    # Проверка
    stored_park = uow.parks.get_by_id(park.id)
    assert stored_park.available_guest_capacity == 10
    assert dates[0] in stored_park.available_dates
    assert stored_park.available_dates == dates
    assert uow.bookings.get_by_id(booking.id).status == BookingStatus.CANCELLED


def test_checkout_flow():
    """Полный путь через собранное приложение."""
    # Подготовка
    app = bootstrap_app(AppSettings())
    park = make_park(guest_limit=10, days=14)
    app["uow"].parks.add(park)
    booking_service = app["booking_service"]
    cart_service = app["cart_service"]
    payment_service = PaymentApplicationService(
        app["payment_gateway"],
        cart_service,
        logger=app["logger"],
        clock=lambda: datetime(2030, 1, 1, tzinfo=timezone.utc),
    )

    bookings = [
        booking_service.create_single_day_booking(park.id, name, GuestCategory.ADULT, day)
        for name, day in zip(("Ann", "Bob", "Eve"), park.available_dates)
    ]
    cart = cart_service.get_or_create_cart()
    for booking in bookings:
        cart_service.add_booking_to_cart(cart.id, booking.id)

    # Действие
    totals = cart_service.calculate_totals(cart.id)
    result = payment_service.process_payment(
        cart.id,
        "Ann Smith",
        "4532015112830366",
        "12/30",
        "123",
        Address(street="1 Main St", city="Cody", state="WY", postal_code="82414"),
    )
    if result.success:
        cart_service.clear_cart(cart.id)

    # Проверка
    assert totals.regular_total.amount == Decimal("300.00")
    assert totals.total_with_tax.amount == Decimal("292.28")
    assert result.success is True
    assert app["payment_gateway"].processed_requests[0].amount == totals.total_with_tax
    assert cart_service.get_or_create_cart(cart.id).item_count == 0
    assert app["uow"].parks.get_by_id(park.id).available_guest_capacity == 7
    assert today() not in app["uow"].parks.get_by_id(park.id).available_dates
