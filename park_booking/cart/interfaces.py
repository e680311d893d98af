"""
Интерфейсы (порты) для контекста корзины.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from park_booking.shared_kernel import EntityId

from .domain import Cart


class ICartRepository(Protocol):
    """Интерфейс репозитория для корзин."""

    def get_or_create(self, cart_id: Optional[EntityId] = None) -> Cart:
        """Возвращает корзину по id; без id создает корзину с новым идентификатором."""
        ...

    def update(self, cart: Cart) -> bool: ...
    def remove(self, cart_id: EntityId) -> bool: ...
    def get_all(self) -> List[Cart]: ...
