"""
Инфраструктурный слой контекста корзины.
"""

from typing import List, Optional

from park_booking.shared_kernel import EntityId
from park_booking.shared_kernel.infrastructure import InMemoryRepository

from . import interfaces as ports
from .domain import Cart


class InMemoryCartRepository(InMemoryRepository[Cart], ports.ICartRepository):
    """Реализация репозитория корзин в памяти. История undo хранится вместе с корзиной."""

    def get_or_create(self, cart_id: Optional[EntityId] = None) -> Cart:
        if cart_id is not None:
            existing = self._find(cart_id)
            if existing is not None:
                return existing
            cart = Cart(id=cart_id)
        else:
            cart = Cart()

        self._insert(cart)
        return cart

    def update(self, cart: Cart) -> bool:
        return self._replace(cart)

    def remove(self, cart_id: EntityId) -> bool:
        return self._delete(cart_id)

    def get_all(self) -> List[Cart]:
        return self._find_all()
