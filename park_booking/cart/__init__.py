"""
Модуль контекста корзины (Cart Context).

Отвечает за корзину перед оформлением:
- Добавление и удаление бронирований с отменой изменений (undo)
- Расчет итогов: скидка за комплект и налог
"""

from . import domain, interfaces

__all__ = [
    "domain",
    "interfaces",
]
