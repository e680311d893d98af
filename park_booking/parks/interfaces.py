"""
Интерфейсы (порты) для контекста парков.
"""

from __future__ import annotations

from typing import List, Protocol

from park_booking.shared_kernel import EntityId

from .domain import Park


class IParkRepository(Protocol):
    """
    Интерфейс репозитория для парков.

    Каждое чтение возвращает актуальный снимок вместимости и набора дат,
    запись сохраняет оба поля вместе.
    """

    def get_all(self) -> List[Park]: ...
    def get_by_id(self, park_id: EntityId) -> Park | None: ...
    def add(self, park: Park) -> None: ...
    def update(self, park: Park) -> bool: ...
    def remove(self, park_id: EntityId) -> bool: ...
