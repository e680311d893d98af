"""
Доменная модель контекста оплаты.

Проверки реквизитов карты выполняются до обращения к платежному шлюзу:
номер (длина и контрольная сумма Луна), срок действия MM/YY и CVC.
"""

import calendar
import re
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator

from park_booking.shared_kernel import Address, DomainException, EntityId, Money, require_text

_EXPIRATION_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")
_CVC_PATTERN = re.compile(r"^[0-9]{3,4}$")

MIN_CARD_DIGITS = 13
MAX_CARD_DIGITS = 19


class PaymentValidationException(DomainException, ValueError):
    """Ошибка проверки платежных реквизитов."""

    pass


class InvalidCardNumberException(PaymentValidationException):
    pass


class InvalidExpirationException(PaymentValidationException):
    pass


class CardExpiredException(PaymentValidationException):
    pass


class InvalidCvcException(PaymentValidationException):
    pass


class PaymentRequest(BaseModel):
    """Запрос к платежному шлюзу."""

    model_config = ConfigDict(frozen=True)

    cart_id: EntityId
    cardholder_name: str
    card_number: str
    expiration_month_year: str
    cvc: str
    billing_address: Address
    amount: Money

    @field_validator("cardholder_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value, "Имя держателя карты")

    @field_validator("card_number")
    @classmethod
    def _strip_spaces(cls, value: str) -> str:
        return value.replace(" ", "")

    @property
    def masked_card_number(self) -> str:
        return f"**** {self.card_number[-4:]}"


class PaymentResult(BaseModel):
    """Результат обработки платежа."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str


def normalize_card_number(card_number: str) -> str:
    """Оставляет в номере карты только ASCII-цифры."""
    return "".join(ch for ch in card_number if "0" <= ch <= "9")


def passes_luhn_check(digits: str) -> bool:
    """Проверка контрольной суммы по алгоритму Луна."""
    total = 0
    for position, ch in enumerate(reversed(digits)):
        digit = int(ch)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_card_number(card_number: str) -> str:
    """
    Проверяет номер карты и возвращает его без разделителей.

    Raises:
        InvalidCardNumberException: неверная длина или контрольная сумма.
    """
    digits = normalize_card_number(card_number or "")
    if not MIN_CARD_DIGITS <= len(digits) <= MAX_CARD_DIGITS:
        raise InvalidCardNumberException(
            f"Номер карты должен содержать от {MIN_CARD_DIGITS} до {MAX_CARD_DIGITS} цифр."
        )
    if not passes_luhn_check(digits):
        raise InvalidCardNumberException("Номер карты не прошел проверку контрольной суммы.")
    return digits


def expiration_moment(expiration: str) -> datetime:
    """
    Переводит срок MM/YY в последний момент месяца (UTC).

    Raises:
        InvalidExpirationException: строка не в формате MM/YY.
    """
    match = _EXPIRATION_PATTERN.match((expiration or "").strip())
    if match is None:
        raise InvalidExpirationException("Срок действия должен быть в формате MM/YY.")

    month = int(match.group(1))
    year = 2000 + int(match.group(2))
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc)


def validate_expiration(expiration: str, current_time: datetime) -> datetime:
    """
    Проверяет, что карта не просрочена на момент current_time.

    Raises:
        InvalidExpirationException: неверный формат.
        CardExpiredException: срок действия истек.
    """
    expires_at = expiration_moment(expiration)
    if expires_at < current_time:
        raise CardExpiredException("Срок действия карты истек.")
    return expires_at


def validate_cvc(cvc: str) -> str:
    """Проверяет CVC: 3-4 цифры."""
    value = cvc or ""
    if not _CVC_PATTERN.fullmatch(value):
        raise InvalidCvcException("CVC должен содержать 3 или 4 цифры.")
    return value
