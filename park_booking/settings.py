"""
Настройки приложения.

Значения по умолчанию соответствуют бизнес-правилам парков; любое из них
можно переопределить переменной окружения PARK_BOOKING_<ИМЯ_ПОЛЯ>.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "PARK_BOOKING_"


class AppSettings(BaseModel):
    """Настройки цен, логирования и хранилища."""

    model_config = ConfigDict(frozen=True)

    currency: str = "USD"
    tax_rate: Decimal = Field(Decimal("0.0825"), ge=0)
    bundle_trigger: int = Field(3, gt=0)
    bundle_discount_rate: Decimal = Field(Decimal("0.10"), ge=0, le=1)
    child_price_factor: Decimal = Field(Decimal("0.6"), gt=0, le=1)
    default_guest_name: str = "Guest"
    log_backend: Literal["console", "logging"] = "console"
    debug: bool = False
    data_dir: Optional[Path] = None  # None - хранение только в памяти

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        """Читает настройки из переменных окружения с префиксом PARK_BOOKING_."""
        environ = os.environ if environ is None else environ
        values = {
            name: environ[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in environ
        }
        return cls.model_validate(values)
