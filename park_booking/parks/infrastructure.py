"""
Инфраструктурный слой контекста парков.
"""

from pathlib import Path
from typing import List, Optional, Union

from park_booking.shared_kernel import EntityId
from park_booking.shared_kernel.infrastructure import InMemoryRepository, JsonFileRepository

from . import interfaces as ports
from .domain import Park


class InMemoryParkRepository(InMemoryRepository[Park], ports.IParkRepository):
    """Реализация репозитория парков в памяти."""

    def get_all(self) -> List[Park]:
        return sorted(self._find_all(), key=lambda park: park.name)

    def get_by_id(self, park_id: EntityId) -> Optional[Park]:
        return self._find(park_id)

    def add(self, park: Park) -> None:
        self._insert(park)

    def update(self, park: Park) -> bool:
        return self._replace(park)

    def remove(self, park_id: EntityId) -> bool:
        return self._delete(park_id)


class JsonFileParkRepository(JsonFileRepository[Park], InMemoryParkRepository):
    """Репозиторий парков, хранящий данные в JSON-файле."""

    def __init__(self, file_path: Union[str, Path]):
        super().__init__(file_path, Park)
