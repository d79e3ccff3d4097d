"""Static registry of the VAT and turnover tax rates known to the engine."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class VatCategory(str, Enum):
    """VAT tiers a product can be assigned to."""

    STANDARD = "STANDARD"
    REDUCED = "REDUCED"
    EXEMPT = "EXEMPT"


class TurnoverRegion(str, Enum):
    """Turnover tax (Ingresos Brutos) tiers."""

    REGION_A = "REGION_A"
    REGION_B = "REGION_B"


VAT_RATES: Mapping[VatCategory, Decimal] = MappingProxyType(
    {
        VatCategory.STANDARD: Decimal("0.21"),
        VatCategory.REDUCED: Decimal("0.105"),
        VatCategory.EXEMPT: Decimal("0"),
    }
)

TURNOVER_TAX_RATES: Mapping[TurnoverRegion, Decimal] = MappingProxyType(
    {
        TurnoverRegion.REGION_A: Decimal("0.03"),
        TurnoverRegion.REGION_B: Decimal("0.035"),
    }
)

DEFAULT_VAT_RATE = VAT_RATES[VatCategory.STANDARD]
DEFAULT_TURNOVER_TAX_RATE = TURNOVER_TAX_RATES[TurnoverRegion.REGION_A]


def rate_table() -> dict[str, dict[str, str]]:
    """Serialise both tables with rates rendered as decimal strings."""

    return {
        "vat": {category.value: str(rate) for category, rate in VAT_RATES.items()},
        "turnover_tax": {
            region.value: str(rate) for region, rate in TURNOVER_TAX_RATES.items()
        },
    }


__all__ = [
    "DEFAULT_TURNOVER_TAX_RATE",
    "DEFAULT_VAT_RATE",
    "TURNOVER_TAX_RATES",
    "TurnoverRegion",
    "VAT_RATES",
    "VatCategory",
    "rate_table",
]
