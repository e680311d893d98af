"""
Модуль контекста оплаты (Payments Context).

Отвечает за оплату корзины:
- Проверку номера карты, срока действия и CVC
- Передачу итоговой суммы платежному шлюзу
"""

from . import domain, interfaces

__all__ = [
    "domain",
    "interfaces",
]
