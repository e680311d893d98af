"""
Интерфейсы (порты) общего ядра.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Type, TypeVar

from .domain import DomainEvent, EntityId

T_Event = TypeVar("T_Event", bound=DomainEvent)


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class IEventBus(Protocol):
    """Интерфейс для шины событий."""

    def publish(self, event: DomainEvent) -> None: ...
    def subscribe(
        self, event_type: Type[T_Event], handler: Callable[[T_Event], None]
    ) -> None: ...


class IRevertibleRepository(Protocol):
    """Репозиторий, изменения которого единица работы может откатить поштучно."""

    def peek(self, entity_id: EntityId) -> Optional[Any]: ...
    def revert(self, entity_id: EntityId, original: Optional[Any]) -> None: ...
