"""
Инфраструктурный слой контекста оплаты.
"""

from typing import List

from . import interfaces as ports
from .domain import PaymentRequest, PaymentResult

SUCCESS_MESSAGE = "Платеж успешно проведен."
DECLINED_MESSAGE = "Платеж отклонен банком-эмитентом."


class MockPaymentGateway(ports.IPaymentGateway):
    """
    Заглушка платежного шлюза для тестирования.

    Детерминирована: платеж проходит, если последняя цифра номера карты четная.
    """

    def __init__(self) -> None:
        self.processed_requests: List[PaymentRequest] = []

    def process(self, request: PaymentRequest) -> PaymentResult:
        self.processed_requests.append(request)
        last_digit = int(request.card_number[-1])
        if last_digit % 2 == 0:
            return PaymentResult(success=True, message=SUCCESS_MESSAGE)
        return PaymentResult(success=False, message=DECLINED_MESSAGE)
