"""
Доменная модель контекста парков.

Парк владеет счетчиком свободных мест для гостей и набором дат,
доступных для бронирования. Дата присутствует в наборе тогда и только тогда,
когда ее не удерживает ни одно активное бронирование.
"""

from bisect import insort
from datetime import date, datetime
from typing import Iterable, List, Optional

from pydantic import Field, field_validator, model_validator

from park_booking.shared_kernel import (
    AggregateRoot,
    CapacityException,
    EntityId,
    InvalidOperationException,
    Money,
    now,
    require_positive,
    require_text,
)


class Park(AggregateRoot):
    """Агрегат 'Парк'."""

    name: str
    description: str
    location: str
    guest_limit: int = Field(..., gt=0)
    available_guest_capacity: Optional[int] = None
    price_per_guest_per_day: Money
    available_dates: List[date] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now)
    last_modified_at: datetime = Field(default_factory=now)

    @field_validator("name", "description", "location")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value, "Поле парка")

    @field_validator("price_per_guest_per_day")
    @classmethod
    def _non_negative_price(cls, value: Money) -> Money:
        if value.amount < 0:
            raise ValueError("Цена не может быть отрицательной.")
        return value

    @field_validator("available_dates")
    @classmethod
    def _unique_ascending(cls, value: List[date]) -> List[date]:
        return sorted(set(value))

    @model_validator(mode="after")
    def _check_capacity(self) -> "Park":
        # Новый парк создается с полной вместимостью
        if self.available_guest_capacity is None:
            self.available_guest_capacity = self.guest_limit
        if not 0 <= self.available_guest_capacity <= self.guest_limit:
            raise ValueError(
                "Свободная вместимость должна быть в диапазоне от 0 до лимита гостей."
            )
        return self

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        location: str,
        guest_limit: int,
        price_per_guest_per_day: Money,
        initial_availability: Iterable[date] = (),
        park_id: Optional[EntityId] = None,
    ) -> "Park":
        """Создает новый парк с полной вместимостью."""
        if guest_limit <= 0:
            raise ValueError("Лимит гостей должен быть больше нуля.")

        fields = dict(
            name=name,
            description=description,
            location=location,
            guest_limit=guest_limit,
            price_per_guest_per_day=price_per_guest_per_day,
            available_dates=list(initial_availability),
        )
        if park_id is not None:
            fields["id"] = park_id
        return cls(**fields)

    @property
    def guests_currently_booked(self) -> int:
        return self.guest_limit - self.available_guest_capacity

    def has_availability_for(self, requested_guests: int) -> bool:
        """Есть ли свободные места для запрошенного числа гостей."""
        return requested_guests > 0 and self.available_guest_capacity >= requested_guests

    def reserve_guests(self, guests: int) -> None:
        """Резервирует места для гостей."""
        require_positive(guests, "Количество гостей")
        if not self.has_availability_for(guests):
            raise CapacityException(
                f"Недостаточно свободных мест: запрошено {guests}, "
                f"доступно {self.available_guest_capacity}."
            )
        self.available_guest_capacity -= guests
        self._touch()

    def release_guests(self, guests: int) -> None:
        """
        Возвращает места в парк.

        Превышение лимита молча обрезается: парк не знает, какое
        бронирование освобождает места.
        """
        require_positive(guests, "Количество гостей")
        self.available_guest_capacity = min(
            self.available_guest_capacity + guests, self.guest_limit
        )
        self._touch()

    def try_reserve_dates(self, day_count: int) -> Optional[List[date]]:
        """
        Резервирует day_count самых ранних свободных дат.

        Все или ничего: если дат не хватает, набор не меняется и
        возвращается None. Иначе даты удаляются из набора и возвращаются
        по возрастанию.
        """
        require_positive(day_count, "Количество дней")
        if len(self.available_dates) < day_count:
            return None

        reserved = self.available_dates[:day_count]
        self.available_dates = self.available_dates[day_count:]
        self._touch()
        return reserved

    def try_reserve_specific_date(self, day: date) -> bool:
        """Резервирует конкретную дату, если она свободна."""
        if day not in self.available_dates:
            return False
        self.available_dates.remove(day)
        self._touch()
        return True

    def release_date(self, day: date) -> None:
        """Возвращает дату в набор свободных (идемпотентно)."""
        if day not in self.available_dates:
            insort(self.available_dates, day)
        self._touch()

    def release_dates(self, days: Iterable[date]) -> None:
        for day in days:
            self.release_date(day)
        self._touch()

    def update_guest_limit(self, new_guest_limit: int) -> None:
        """Меняет лимит гостей, сохраняя уже забронированные места."""
        require_positive(new_guest_limit, "Лимит гостей")
        booked = self.guests_currently_booked
        if new_guest_limit < booked:
            raise InvalidOperationException(
                f"Нельзя уменьшить лимит гостей до {new_guest_limit}: "
                f"уже забронировано {booked}."
            )
        self.guest_limit = new_guest_limit
        self.available_guest_capacity = new_guest_limit - booked
        self._touch()

    def update_price(self, new_price: Money) -> None:
        if new_price.amount < 0:
            raise ValueError("Цена не может быть отрицательной.")
        self.price_per_guest_per_day = new_price
        self._touch()

    def update_details(self, name: str, description: str, location: str) -> None:
        self.name = require_text(name, "Название парка")
        self.description = require_text(description, "Описание парка")
        self.location = require_text(location, "Расположение парка")
        self._touch()

    def _touch(self) -> None:
        self.last_modified_at = now()
