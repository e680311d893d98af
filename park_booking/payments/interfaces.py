"""
Интерфейсы (порты) для контекста оплаты.
"""

from __future__ import annotations

from typing import Protocol

from .domain import PaymentRequest, PaymentResult


class IPaymentGateway(Protocol):
    """Интерфейс для платежного шлюза."""

    def process(self, request: PaymentRequest) -> PaymentResult:
        """Проводит платеж. Отказ банка возвращается как неуспешный результат."""
        ...
