"""
Модуль контекста парков (Parks Context).

Отвечает за парки как бронируемый ресурс:
- Вместимость и лимит гостей
- Набор дат, доступных для бронирования
- Цены и административные изменения
"""

from . import domain, interfaces

__all__ = [
    "domain",
    "interfaces",
]
