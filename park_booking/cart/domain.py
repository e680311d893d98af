"""
Доменная модель контекста корзины.

Содержит корзину с историей изменений (undo) и политику расчета итогов:
сумма позиций -> скидка за комплект -> налог. Порядок шагов - часть
контракта: скидка считается до налога, налог - от суммы со скидкой.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from park_booking.shared_kernel import (
    AggregateRoot,
    EntityId,
    Money,
    now,
    require_positive,
    require_text,
)

if TYPE_CHECKING:
    from park_booking.settings import AppSettings


class CartItem(BaseModel):
    """Позиция корзины, ссылающаяся на бронирование."""

    model_config = ConfigDict(frozen=True)

    booking_id: EntityId
    park_name: str  # Денормализованное поле для отображения
    quantity: int = Field(..., gt=0)
    unit_price: Money

    @field_validator("park_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value, "Название парка")

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> CartItem:
        """Возвращает копию позиции с новым количеством."""
        require_positive(quantity, "Количество")
        return self.model_copy(update={"quantity": quantity})


CartItems = Dict[EntityId, CartItem]


class Cart(AggregateRoot):
    """
    Агрегат 'Корзина'.

    Каждое изменение (добавление, очистка) сначала кладет снимок текущих
    позиций в стек истории, поэтому каждый вызов undo() откатывает ровно
    одно изменение. Глубина истории не ограничена.
    """

    items: CartItems = Field(default_factory=dict)
    history: List[CartItems] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now)
    last_updated_at: datetime = Field(default_factory=now)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def list_items(self) -> List[CartItem]:
        return list(self.items.values())

    def get_item(self, booking_id: EntityId) -> Optional[CartItem]:
        return self.items.get(booking_id)

    def add_or_update_item(self, item: CartItem) -> None:
        """Добавляет позицию или заменяет позицию того же бронирования."""
        self._snapshot()
        self.items[item.booking_id] = item
        self._touch()

    def remove_item(self, booking_id: EntityId) -> bool:
        """Удаляет позицию. Неудачное удаление не попадает в историю."""
        if self.items.pop(booking_id, None) is None:
            return False
        self._touch()
        return True

    def clear(self) -> None:
        self._snapshot()
        self.items = {}
        self._touch()

    def undo(self) -> bool:
        """Восстанавливает позиции из последнего снимка."""
        if not self.history:
            return False
        self.items = self.history.pop()
        self._touch()
        return True

    def total(self, aggregator: Callable[[List[CartItem]], Money]) -> Money:
        """Применяет переданную функцию агрегации к текущим позициям."""
        return aggregator(self.list_items())

    def _snapshot(self) -> None:
        # Позиции неизменяемы, копии словаря достаточно
        self.history.append(dict(self.items))

    def _touch(self) -> None:
        self.last_updated_at = now()


class CartTotals(BaseModel):
    """Итоги корзины."""

    model_config = ConfigDict(frozen=True)

    regular_total: Money
    discounted_total: Money
    tax: Money
    total_with_tax: Money
    items: Tuple[CartItem, ...] = ()

    @property
    def discount(self) -> Money:
        return self.regular_total - self.discounted_total


class CartPricingPolicy(BaseModel):
    """Политика расчета итогов корзины."""

    model_config = ConfigDict(frozen=True)

    bundle_trigger: int = Field(3, gt=0)  # Минимум позиций для скидки
    bundle_discount_rate: Decimal = Field(Decimal("0.10"), ge=0, le=1)
    tax_rate: Decimal = Field(Decimal("0.0825"), ge=0)
    currency: str = "USD"  # Валюта пустой корзины

    @classmethod
    def from_settings(cls, settings: AppSettings) -> CartPricingPolicy:
        return cls(
            bundle_trigger=settings.bundle_trigger,
            bundle_discount_rate=settings.bundle_discount_rate,
            tax_rate=settings.tax_rate,
            currency=settings.currency,
        )

    def calculate_regular_total(self, items: Sequence[CartItem]) -> Money:
        """Сумма позиций без скидок и налогов."""
        currency = items[0].unit_price.currency if items else self.currency
        total = Money.zero(currency)
        for item in items:
            total = total + item.subtotal
        return total

    def apply_bundle_discount(self, regular_total: Money, item_count: int) -> Money:
        """Скидка за комплект: применяется целиком при item_count >= порога."""
        if item_count >= self.bundle_trigger:
            return regular_total - regular_total * self.bundle_discount_rate
        return regular_total

    def calculate_tax(self, amount: Money) -> Money:
        return amount * self.tax_rate

    def calculate(self, cart: Cart) -> CartTotals:
        items = cart.list_items()
        regular_total = cart.total(self.calculate_regular_total)
        discounted_total = self.apply_bundle_discount(regular_total, len(items))
        tax = self.calculate_tax(discounted_total)

        return CartTotals(
            regular_total=regular_total,
            discounted_total=discounted_total,
            tax=tax,
            total_with_tax=discounted_total + tax,
            items=tuple(items),
        )
