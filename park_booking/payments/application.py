"""
Прикладной слой контекста оплаты.

Проверяет реквизиты, берет итог корзины с налогом и передает запрос шлюзу.
Корзина и бронирования здесь не меняются: очистить корзину после успешной
оплаты должен вызывающий код.
"""

from datetime import datetime
from typing import Callable, Optional

from park_booking.cart.application import CartApplicationService
from park_booking.shared_kernel import Address, EntityId, now
from park_booking.shared_kernel.infrastructure import ConsoleLogger
from park_booking.shared_kernel.interfaces import ILogger

from . import interfaces as ports
from .domain import (
    PaymentRequest,
    PaymentResult,
    validate_card_number,
    validate_cvc,
    validate_expiration,
)


class PaymentApplicationService:
    """Сервис приложения для оплаты корзины."""

    def __init__(
        self,
        gateway: ports.IPaymentGateway,
        cart_service: CartApplicationService,
        logger: Optional[ILogger] = None,
        clock: Callable[[], datetime] = now,
    ):
        self._gateway = gateway
        self._cart_service = cart_service
        self._logger = logger or ConsoleLogger()
        self._clock = clock

    def process_payment(
        self,
        cart_id: EntityId,
        cardholder_name: str,
        card_number: str,
        expiration: str,
        cvc: str,
        billing_address: Address,
    ) -> PaymentResult:
        """
        Оплачивает корзину.

        Raises:
            InvalidCardNumberException, InvalidExpirationException,
            CardExpiredException, InvalidCvcException: реквизиты не прошли проверку.
        """
        digits = validate_card_number(card_number)
        validate_expiration(expiration, self._clock())
        cvc = validate_cvc(cvc)

        totals = self._cart_service.calculate_totals(cart_id)
        request = PaymentRequest(
            cart_id=cart_id,
            cardholder_name=cardholder_name,
            card_number=digits,
            expiration_month_year=expiration.strip(),
            cvc=cvc,
            billing_address=billing_address,
            amount=totals.total_with_tax,
        )

        result = self._gateway.process(request)
        if result.success:
            self._logger.info(
                "Платеж проведен",
                cart_id=cart_id,
                amount=str(request.amount),
                card=request.masked_card_number,
            )
        else:
            self._logger.warning(
                "Платеж отклонен",
                cart_id=cart_id,
                card=request.masked_card_number,
                reason=result.message,
            )
        return result
