"""
Система бронирования парков.

Ограниченные контексты:
- parks: парки, вместимость и свободные даты
- booking: бронирования и единица работы
- cart: корзина и расчет итогов
- payments: проверка реквизитов и оплата
"""

__version__ = "0.1.0"
