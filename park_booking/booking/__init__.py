"""
Модуль контекста бронирования (Booking Context).

Отвечает за бронирование парков, включая:
- Создание многодневных и однодневных бронирований
- Отмену и удаление бронирований
- Согласованность вместимости и дат парка с активными бронированиями
"""

from . import domain, interfaces

__all__ = [
    "domain",
    "interfaces",
]
