"""
Инфраструктура общего ядра: логгеры, шина событий и базовые репозитории.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union

from .domain import AggregateRoot, ConcurrencyException, DomainEvent, EntityId
from . import interfaces as ports

T = TypeVar("T", bound=AggregateRoot)


class ConsoleLogger(ports.ILogger):
    """Простая реализация логгера, выводящая сообщения в консоль."""

    def __init__(self, debug_enabled: bool = False):
        self._debug_enabled = debug_enabled

    def info(self, message: str, **kwargs: Any) -> None:
        self._write("INFO", message, kwargs, sys.stdout)

    def error(self, message: str, **kwargs: Any) -> None:
        self._write("ERROR", message, kwargs, sys.stderr)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._write("WARNING", message, kwargs, sys.stderr)

    def debug(self, message: str, **kwargs: Any) -> None:
        if self._debug_enabled:
            self._write("DEBUG", message, kwargs, sys.stdout)

    @staticmethod
    def _write(level: str, message: str, context: Dict[str, Any], stream) -> None:
        print(f"[{level}] {message}", file=stream, flush=True)
        if context:
            print(
                "  Context:",
                json.dumps(context, default=str, indent=2, ensure_ascii=False),
                file=stream,
                flush=True,
            )


class StandardLogger(ports.ILogger):
    """Адаптер к стандартному модулю logging."""

    def __init__(self, name: str = "park_booking"):
        self._logger = logging.getLogger(name)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        if context:
            self._logger.log(
                level, "%s %s", message, json.dumps(context, default=str, ensure_ascii=False)
            )
        else:
            self._logger.log(level, message)


class InMemoryEventBus(ports.IEventBus):
    """
    Шина доменных событий в памяти.

    Обработчик, подписанный на базовый класс события, получает и события
    подклассов: подписка на DomainEvent дает журнал всех событий бронирования.
    Ошибка обработчика записывается в лог и не прерывает доставку остальным.
    """

    def __init__(self, logger: Optional[ports.ILogger] = None):
        self._handlers: Dict[Type[DomainEvent], List[Callable[[Any], None]]] = {}
        self._logger = logger or ConsoleLogger()

    def publish(self, event: DomainEvent) -> None:
        event_name = type(event).__name__
        handlers = [
            handler
            for event_type in type(event).__mro__
            for handler in self._handlers.get(event_type, [])
        ]
        if not handlers:
            self._logger.debug("Событие без обработчиков", event_type=event_name)
            return

        self._logger.debug(
            "Доставка события", event_type=event_name, handlers=len(handlers)
        )
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    "Сбой обработчика события",
                    event_type=event_name,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                    event_id=event.event_id,
                )

    def subscribe(self, event_type: Type[DomainEvent], handler: Callable[[Any], None]) -> None:
        self._handlers.setdefault(event_type, []).append(handler)


class ChangeTracker:
    """
    Журнал записей одной единицы работы.

    Для каждой затронутой сущности помнит значение до первой записи и
    последнее записанное значение. Откат возвращает прежнее значение только
    там, где в хранилище все еще лежит записанное этой единицей работы:
    изменения, зафиксированные другими, не затираются.
    """

    def __init__(self) -> None:
        self._writes: Dict[Tuple[int, EntityId], Tuple[Any, Optional[Any], Optional[Any]]] = {}

    def __len__(self) -> int:
        return len(self._writes)

    def record(
        self,
        repository: ports.IRevertibleRepository,
        entity_id: EntityId,
        original: Optional[Any],
        written: Optional[Any],
    ) -> None:
        key = (id(repository), entity_id)
        if key in self._writes:
            original = self._writes[key][1]
        self._writes[key] = (repository, original, written)

    def revert(self) -> List[EntityId]:
        """Откатывает записи в обратном порядке; возвращает id пропущенных сущностей."""
        skipped: List[EntityId] = []
        for (_, entity_id), (repository, original, written) in reversed(
            list(self._writes.items())
        ):
            if repository.peek(entity_id) is not written:
                skipped.append(entity_id)
                continue
            repository.revert(entity_id, original)
        self._writes.clear()
        return skipped


class TrackedRepository:
    """
    Репозиторий, видимый внутри единицы работы.

    Пишущие методы (add, update, remove, get_or_create) передаются
    исходному репозиторию и попадают в журнал; остальные вызовы
    передаются без изменений.
    """

    def __init__(self, repository: Any, tracker: ChangeTracker):
        self._repository = repository
        self._tracker = tracker

    def __getattr__(self, name: str) -> Any:
        return getattr(self._repository, name)

    def add(self, entity: AggregateRoot) -> None:
        self._write(entity.id, lambda: self._repository.add(entity))

    def update(self, entity: AggregateRoot) -> bool:
        return self._write(entity.id, lambda: self._repository.update(entity))

    def remove(self, entity_id: EntityId) -> bool:
        return self._write(entity_id, lambda: self._repository.remove(entity_id))

    def get_or_create(self, entity_id: Optional[EntityId] = None) -> Any:
        if entity_id is not None:
            return self._write(entity_id, lambda: self._repository.get_or_create(entity_id))

        entity = self._repository.get_or_create()
        self._tracker.record(
            self._repository, entity.id, None, self._repository.peek(entity.id)
        )
        return entity

    def _write(self, entity_id: EntityId, operation: Callable[[], Any]) -> Any:
        original = self._repository.peek(entity_id)
        result = operation()
        written = self._repository.peek(entity_id)
        if written is not original:
            self._tracker.record(self._repository, entity_id, original, written)
        return result


class InMemoryRepository(Generic[T]):
    """
    Базовый репозиторий агрегатов в памяти.

    Хранит глубокие копии: объект, полученный из репозитория, не разделяет
    состояние с хранилищем, изменения видны только после update().
    Обновление сверяет версию агрегата (оптимистичная блокировка).
    Каждая запись кладет новый объект, хранимые объекты на месте не меняются.
    """

    def __init__(self) -> None:
        self._items: Dict[EntityId, T] = {}

    def peek(self, entity_id: EntityId) -> Optional[T]:
        """Хранимый объект без копирования. Используется журналом изменений."""
        return self._items.get(entity_id)

    def revert(self, entity_id: EntityId, original: Optional[T]) -> None:
        """Возвращает сущности прежнее значение; None - сущности не было."""
        if original is None:
            self._items.pop(entity_id, None)
        else:
            self._items[entity_id] = original
        self._persist()

    def _find(self, entity_id: EntityId) -> Optional[T]:
        stored = self._items.get(entity_id)
        return stored.clone() if stored is not None else None

    def _find_all(self) -> List[T]:
        return [item.clone() for item in self._items.values()]

    def _insert(self, entity: T) -> None:
        if entity.id in self._items:
            raise ValueError(f"{type(entity).__name__} with id {entity.id} already exists")
        self._items[entity.id] = entity.clone()
        self._persist()

    def _replace(self, entity: T) -> bool:
        stored = self._items.get(entity.id)
        if stored is None:
            return False
        if stored.version != entity.version:
            raise ConcurrencyException(
                f"{type(entity).__name__} {entity.id} был изменен параллельно: "
                f"версия {entity.version}, в хранилище {stored.version}"
            )
        entity.version += 1
        self._items[entity.id] = entity.clone()
        self._persist()
        return True

    def _delete(self, entity_id: EntityId) -> bool:
        if self._items.pop(entity_id, None) is None:
            return False
        self._persist()
        return True

    def _persist(self) -> None:
        """Точка расширения для репозиториев с внешним хранилищем."""
        pass


class JsonFileRepository(InMemoryRepository[T]):
    """Базовый класс для репозиториев, работающих с JSON-файлами."""

    def __init__(self, file_path: Union[str, Path], model_class: Type[T]):
        """
        Инициализирует репозиторий.

        Args:
            file_path: Путь к JSON-файлу с данными
            model_class: Класс модели данных
        """
        super().__init__()
        self._file_path = Path(file_path)
        self._model_class = model_class
        self._load_data()

    def _load_data(self) -> None:
        """Загружает данные из JSON-файла."""
        if not self._file_path.exists():
            self._items = {}
            return

        raw_data = self._file_path.read_text(encoding="utf-8")
        if not raw_data.strip():
            self._items = {}
            return

        entities = (self._model_class.model_validate(item) for item in json.loads(raw_data))
        self._items = {entity.id: entity for entity in entities}

    def _persist(self) -> None:
        """Сохраняет данные в JSON-файл."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        data = [item.model_dump(mode="json") for item in self._items.values()]

        # Сохраняем в файл с отступами для читаемости
        with open(self._file_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
