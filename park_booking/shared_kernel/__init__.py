"""
Общее ядро (Shared Kernel) системы бронирования парков.

Содержит общие типы данных и утилиты, используемые в различных ограниченных контекстах.
"""

from .domain import (
    Address,
    AggregateRoot,
    BusinessRuleValidationException,
    CapacityException,
    ConcurrencyException,
    CurrencyMismatchException,
    DomainEvent,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    InvalidOperationException,
    # Основные классы
    Money,
    generate_id,
    # Утилиты
    now,
    require_positive,
    require_text,
    round_money,
    today,
)

__all__ = [
    # Базовые типы
    "EntityId",
    "generate_id",
    # Основные классы
    "Money",
    "Address",
    "AggregateRoot",
    "DomainEvent",
    # Исключения
    "DomainException",
    "BusinessRuleValidationException",
    "CapacityException",
    "InvalidOperationException",
    "ConcurrencyException",
    "CurrencyMismatchException",
    # Утилиты
    "now",
    "today",
    "round_money",
    "require_text",
    "require_positive",
]
