"""
Тесты инфраструктуры: репозитории, единица работы, шина событий, логгеры.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from park_booking.booking.application import BookingApplicationService
from park_booking.booking.domain import Booking, BookingCreated, BookingRemoved, GuestCategory
from park_booking.booking.infrastructure import (
    BookingUnitOfWork,
    InMemoryBookingRepository,
    JsonFileBookingRepository,
)
from park_booking.parks.infrastructure import InMemoryParkRepository, JsonFileParkRepository
from park_booking.shared_kernel import ConcurrencyException, DomainEvent, Money, today
from park_booking.shared_kernel.infrastructure import (
    ConsoleLogger,
    InMemoryEventBus,
    StandardLogger,
)

from .conftest import make_park


class TestInMemoryRepository:
    """Тесты репозиториев в памяти."""

    def test_reads_do_not_alias_stored_state(self):
        repo = InMemoryParkRepository()
        park = make_park()
        repo.add(park)

        loaded = repo.get_by_id(park.id)
        loaded.reserve_guests(5)

        assert repo.get_by_id(park.id).available_guest_capacity == 10

    def test_duplicate_add_rejected(self):
        repo = InMemoryParkRepository()
        park = make_park()
        repo.add(park)

        with pytest.raises(ValueError):
            repo.add(park)

    def test_update_unknown_returns_false(self):
        assert InMemoryParkRepository().update(make_park()) is False

    def test_lost_update_is_detected(self):
        """Два параллельных чтения: второе сохранение получает конфликт версий."""
        # Подготовка
        repo = InMemoryParkRepository()
        park = make_park(guest_limit=10)
        repo.add(park)
        first = repo.get_by_id(park.id)
        second = repo.get_by_id(park.id)

        # Действие
        first.reserve_guests(6)
        repo.update(first)
        second.reserve_guests(6)

        # Проверка
        with pytest.raises(ConcurrencyException):
            repo.update(second)
        assert repo.get_by_id(park.id).available_guest_capacity == 4

    def test_update_increments_version(self):
        repo = InMemoryParkRepository()
        park = make_park()
        repo.add(park)

        loaded = repo.get_by_id(park.id)
        repo.update(loaded)

        assert loaded.version == 1
        assert repo.get_by_id(park.id).version == 1

    def test_get_all_parks_sorted_by_name(self):
        repo = InMemoryParkRepository()
        repo.add(make_park(name="Zion"))
        repo.add(make_park(name="Acadia"))

        assert [p.name for p in repo.get_all()] == ["Acadia", "Zion"]


class TestBookingUnitOfWork:
    """Тесты единицы работы."""

    def test_failed_block_rolls_back_all_repositories(self, logger):
        # Подготовка
        uow = BookingUnitOfWork(logger=logger)
        park = make_park()
        uow.parks.add(park)

        # Действие
        with pytest.raises(RuntimeError):
            with uow:
                loaded = uow.parks.get_by_id(park.id)
                loaded.reserve_guests(3)
                uow.parks.update(loaded)
                raise RuntimeError("booking write failed")

        # Проверка
        restored = uow.parks.get_by_id(park.id)
        assert restored.available_guest_capacity == 10
        assert restored.version == 0
        assert "WARNING" in logger.levels()
        assert not uow.in_transaction

    def test_booking_write_failure_rolls_back_park_write(self, booking_service, uow, park):
        """Сбой записи бронирования откатывает уже сохраненный парк."""

        class FailingBookingRepository(InMemoryBookingRepository):
            def add(self, booking):
                raise IOError("disk full")

        uow._bookings = FailingBookingRepository()

        with pytest.raises(IOError):
            booking_service.create_multi_day_booking(park.id, "Ann", 2, 2)

        stored_park = uow.parks.get_by_id(park.id)
        assert stored_park.available_guest_capacity == 10
        assert len(stored_park.available_dates) == 14

    def test_nested_enter_rejected(self, uow):
        with uow:
            with pytest.raises(RuntimeError):
                uow.__enter__()


class TestSharedRepositories:
    """Несколько единиц работы над одними и теми же репозиториями."""

    @pytest.fixture
    def repositories(self):
        return {
            "parks_repo": InMemoryParkRepository(),
            "bookings_repo": InMemoryBookingRepository(),
        }

    def test_rollback_keeps_booking_committed_by_other_unit(self, repositories, logger):
        """Конфликт версий откатывает только свои записи, чужое бронирование остается."""
        # Подготовка
        uow_a = BookingUnitOfWork(logger=logger, **repositories)
        uow_b = BookingUnitOfWork(logger=logger, **repositories)
        park = make_park()
        uow_a.parks.add(park)
        service_a = BookingApplicationService(uow_a, logger=logger)

        # Действие
        with pytest.raises(ConcurrencyException):
            with uow_b:
                stale = uow_b.parks.get_by_id(park.id)
                booking = service_a.create_single_day_booking(
                    park.id, "Ann", GuestCategory.ADULT, today()
                )
                stale.reserve_guests(2)
                uow_b.parks.update(stale)

        # Проверка
        assert repositories["bookings_repo"].get_by_id(booking.id) is not None
        stored_park = repositories["parks_repo"].get_by_id(park.id)
        assert stored_park.available_guest_capacity == 9
        assert today() not in stored_park.available_dates

    def test_rollback_undoes_own_writes_only(self, repositories, logger):
        # Подготовка
        uow_a = BookingUnitOfWork(logger=logger, **repositories)
        uow_b = BookingUnitOfWork(logger=logger, **repositories)
        first, second = make_park(name="Acadia"), make_park(name="Zion")
        repositories["parks_repo"].add(first)
        repositories["parks_repo"].add(second)

        # Действие
        with pytest.raises(RuntimeError):
            with uow_b:
                own = uow_b.parks.get_by_id(first.id)
                own.reserve_guests(5)
                uow_b.parks.update(own)

                with uow_a:
                    other = uow_a.parks.get_by_id(second.id)
                    other.reserve_guests(3)
                    uow_a.parks.update(other)

                raise RuntimeError("abort")

        # Проверка
        assert repositories["parks_repo"].get_by_id(first.id).available_guest_capacity == 10
        assert repositories["parks_repo"].get_by_id(second.id).available_guest_capacity == 7

    def test_rollback_skips_entity_overwritten_by_other_unit(self, repositories, logger):
        """Сущность, перезаписанную после нас другой единицей работы, откат не трогает."""
        uow_a = BookingUnitOfWork(logger=logger, **repositories)
        uow_b = BookingUnitOfWork(logger=logger, **repositories)
        park = make_park()
        repositories["parks_repo"].add(park)

        with pytest.raises(RuntimeError):
            with uow_b:
                mine = uow_b.parks.get_by_id(park.id)
                mine.reserve_guests(1)
                uow_b.parks.update(mine)

                with uow_a:
                    theirs = uow_a.parks.get_by_id(park.id)
                    theirs.reserve_guests(2)
                    uow_a.parks.update(theirs)

                raise RuntimeError("abort")

        stored_park = repositories["parks_repo"].get_by_id(park.id)
        assert stored_park.available_guest_capacity == 7
        assert stored_park.version == 2
        assert any("kept" in message for _, message, _ in logger.records)

    def test_cart_created_inside_failed_block_is_removed(self, uow):
        with pytest.raises(RuntimeError):
            with uow:
                cart = uow.carts.get_or_create()
                raise RuntimeError("abort")

        assert uow.carts.get_all() == []
        assert cart.id is not None


class TestJsonFileRepositories:
    """Тесты JSON-репозиториев."""

    def test_park_round_trip(self, tmp_path):
        # Подготовка
        path = tmp_path / "parks.json"
        park = make_park(days=3)
        park.reserve_guests(2)

        # Действие
        JsonFileParkRepository(path).add(park)
        loaded = JsonFileParkRepository(path).get_by_id(park.id)

        # Проверка
        assert loaded.available_guest_capacity == 8
        assert loaded.available_dates == park.available_dates
        assert loaded.price_per_guest_per_day == park.price_per_guest_per_day

    def test_booking_dates_round_trip_exactly(self, tmp_path):
        path = tmp_path / "data" / "bookings.json"
        dates = [date(2030, 12, 31), date(2031, 1, 1)]
        booking = Booking.create(
            park_id=make_park().id,
            guest_name="Ann",
            guests=2,
            price_per_day=Money(amount=Decimal("12.34")),
            reserved_dates=dates,
            guest_category=GuestCategory.CHILD,
        )
        booking.confirm()

        JsonFileBookingRepository(path).add(booking)
        loaded = JsonFileBookingRepository(path).get_by_id(booking.id)

        assert loaded.reserved_dates == tuple(dates)
        assert loaded.status == booking.status
        assert loaded.guest_category == GuestCategory.CHILD
        assert loaded.total_price == booking.total_price

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileParkRepository(tmp_path / "absent.json").get_all() == []

    def test_rollback_rewrites_file(self, tmp_path, logger):
        path = tmp_path / "parks.json"
        repo = JsonFileParkRepository(path)
        uow = BookingUnitOfWork(parks_repo=repo, logger=logger)

        with pytest.raises(RuntimeError):
            with uow:
                uow.parks.add(make_park())
                raise RuntimeError("abort")

        assert JsonFileParkRepository(path).get_all() == []


class TestEventBus:
    """Тесты шины событий."""

    def _event(self) -> BookingCreated:
        return BookingCreated(
            booking_id=make_park().id,
            park_id=make_park().id,
            guests=1,
            reserved_dates=(today(),),
        )

    def test_handlers_receive_events(self, logger):
        bus = InMemoryEventBus(logger)
        received = []
        bus.subscribe(BookingCreated, received.append)

        event = self._event()
        bus.publish(event)

        assert received == [event]

    def test_handler_error_is_logged_not_raised(self, logger):
        bus = InMemoryEventBus(logger)
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(BookingCreated, broken)
        bus.subscribe(BookingCreated, received.append)

        bus.publish(self._event())

        assert len(received) == 1
        assert "ERROR" in logger.levels()

    def test_base_class_subscription_receives_all_events(self, logger):
        bus = InMemoryEventBus(logger)
        audit, created_only = [], []
        bus.subscribe(DomainEvent, audit.append)
        bus.subscribe(BookingCreated, created_only.append)

        created = self._event()
        bus.publish(created)
        bus.publish(BookingRemoved(booking_id=created.booking_id, park_id=created.park_id))

        assert [type(e) for e in audit] == [BookingCreated, BookingRemoved]
        assert created_only == [created]


class TestLoggers:
    def test_console_logger_writes_context(self, capsys):
        ConsoleLogger().info("Парк добавлен", park="Zion")

        out = capsys.readouterr().out
        assert "[INFO] Парк добавлен" in out
        assert '"park": "Zion"' in out

    def test_console_logger_hides_debug_by_default(self, capsys):
        ConsoleLogger().debug("hidden")
        ConsoleLogger(debug_enabled=True).debug("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_standard_logger_uses_logging(self, caplog):
        with caplog.at_level(logging.INFO, logger="park_booking"):
            StandardLogger().warning("Платеж отклонен", cart="c1")

        assert caplog.records[0].levelno == logging.WARNING
        assert "Платеж отклонен" in caplog.text
        assert '"cart": "c1"' in caplog.text
