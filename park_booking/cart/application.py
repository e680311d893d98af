"""
Прикладной слой контекста корзины.

Корзина хранит ссылки на существующие бронирования; итоги считаются
по требованию политикой цен.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel

from park_booking.shared_kernel import EntityId, require_positive
from park_booking.shared_kernel.infrastructure import ConsoleLogger
from park_booking.shared_kernel.interfaces import ILogger

from .domain import Cart, CartItem, CartPricingPolicy, CartTotals

if TYPE_CHECKING:
    from park_booking.booking.interfaces import IBookingUnitOfWork

# DTO для исходящих данных


class CartItemDTO(BaseModel):
    """DTO для представления позиции корзины."""

    booking_id: EntityId
    park_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def from_domain(cls, item: CartItem) -> "CartItemDTO":
        """Создает DTO из доменной модели."""
        return cls(
            booking_id=item.booking_id,
            park_name=item.park_name,
            quantity=item.quantity,
            unit_price=item.unit_price.amount,
            subtotal=item.subtotal.amount,
        )


class CartDTO(BaseModel):
    """DTO для представления корзины вместе с итогами."""

    id: EntityId
    items: List[CartItemDTO]
    currency: str
    regular_total: Decimal
    discount: Decimal
    discounted_total: Decimal
    tax: Decimal
    total_with_tax: Decimal
    can_undo: bool

    @classmethod
    def from_domain(cls, cart: Cart, totals: CartTotals) -> "CartDTO":
        """Создает DTO из корзины и рассчитанных для нее итогов."""
        return cls(
            id=cart.id,
            items=[CartItemDTO.from_domain(item) for item in cart.list_items()],
            currency=totals.total_with_tax.currency,
            regular_total=totals.regular_total.amount,
            discount=totals.discount.amount,
            discounted_total=totals.discounted_total.amount,
            tax=totals.tax.amount,
            total_with_tax=totals.total_with_tax.amount,
            can_undo=bool(cart.history),
        )


# Сервисы приложения


class CartApplicationService:
    """Сервис приложения для работы с корзинами."""

    def __init__(
        self,
        uow: "IBookingUnitOfWork",
        pricing_policy: Optional[CartPricingPolicy] = None,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._pricing_policy = pricing_policy or CartPricingPolicy()
        self._logger = logger or ConsoleLogger()

    @property
    def pricing_policy(self) -> CartPricingPolicy:
        return self._pricing_policy

    def get_or_create_cart(self, cart_id: Optional[EntityId] = None) -> Cart:
        with self._uow:
            return self._uow.carts.get_or_create(cart_id)

    def list_carts(self) -> List[Cart]:
        return self._uow.carts.get_all()

    def delete_cart(self, cart_id: EntityId) -> bool:
        with self._uow:
            removed = self._uow.carts.remove(cart_id)
        if removed:
            self._logger.debug("Корзина удалена", cart_id=cart_id)
        return removed

    def add_booking_to_cart(
        self, cart_id: EntityId, booking_id: EntityId, quantity: int = 1
    ) -> bool:
        """
        Добавляет бронирование в корзину или меняет количество.

        Позиция оценивается полной стоимостью бронирования. Отмененное
        или несуществующее бронирование не добавляется.
        """
        require_positive(quantity, "Количество")

        with self._uow:
            booking = self._uow.bookings.get_by_id(booking_id)
            if booking is None or not booking.is_active:
                self._logger.info(
                    "Бронирование недоступно для корзины", booking_id=booking_id
                )
                return False

            park = self._uow.parks.get_by_id(booking.park_id)
            park_name = park.name if park is not None else str(booking.park_id)

            cart = self._uow.carts.get_or_create(cart_id)
            cart.add_or_update_item(
                CartItem(
                    booking_id=booking.id,
                    park_name=park_name,
                    quantity=quantity,
                    unit_price=booking.total_price,
                )
            )
            self._uow.carts.update(cart)

        self._logger.debug(
            "Бронирование добавлено в корзину",
            cart_id=cart.id,
            booking_id=booking_id,
            quantity=quantity,
        )
        return True

    def remove_booking_from_cart(self, cart_id: EntityId, booking_id: EntityId) -> bool:
        with self._uow:
            cart = self._uow.carts.get_or_create(cart_id)
            if not cart.remove_item(booking_id):
                return False
            self._uow.carts.update(cart)

        self._logger.debug(
            "Бронирование удалено из корзины", cart_id=cart_id, booking_id=booking_id
        )
        return True

    def undo_last_change(self, cart_id: EntityId) -> bool:
        """Отменяет последнее изменение корзины. Пустая история - False."""
        with self._uow:
            cart = self._uow.carts.get_or_create(cart_id)
            if not cart.undo():
                return False
            self._uow.carts.update(cart)

        self._logger.debug("Изменение корзины отменено", cart_id=cart_id)
        return True

    def clear_cart(self, cart_id: EntityId) -> bool:
        """Очищает корзину. Очистка всегда попадает в историю и отменяется undo."""
        with self._uow:
            cart = self._uow.carts.get_or_create(cart_id)
            cart.clear()
            self._uow.carts.update(cart)

        self._logger.debug("Корзина очищена", cart_id=cart_id)
        return True

    def calculate_totals(self, cart_id: EntityId) -> CartTotals:
        """Сумма позиций -> скидка за комплект -> налог со суммы после скидки."""
        cart = self.get_or_create_cart(cart_id)
        return self._pricing_policy.calculate(cart)

    def get_cart_summary(self, cart_id: EntityId) -> CartDTO:
        cart = self.get_or_create_cart(cart_id)
        return CartDTO.from_domain(cart, self._pricing_policy.calculate(cart))
