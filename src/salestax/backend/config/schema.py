"""Pydantic models describing tax configuration and service settings."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .rates import (
    DEFAULT_TURNOVER_TAX_RATE,
    DEFAULT_VAT_RATE,
    TURNOVER_TAX_RATES,
    VAT_RATES,
    TurnoverRegion,
    VatCategory,
)


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def coerce_decimal(value: Any, *, field: str = "value") -> Decimal:
    """Convert ``value`` into a finite :class:`~decimal.Decimal`.

    Floats go through their shortest ``repr`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than the binary expansion. Booleans are rejected even though they
    are integers.
    """

    if isinstance(value, bool) or value is None:
        raise ValueError(f"Field '{field}' must be numeric")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Field '{field}' must be numeric") from exc
    else:
        raise ValueError(f"Field '{field}' must be numeric")

    if not result.is_finite():
        raise ValueError(f"Field '{field}' must be a finite number")
    return result


def describe_validation_error(error: ValidationError) -> str:
    """Flatten pydantic issues into ``location: message`` fragments."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = str(issue.get("msg", "Invalid value"))
        message = message.removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) if messages else str(error)


def vat_rate_for(category: VatCategory | str) -> Decimal:
    """Return the VAT rate registered for ``category``."""

    try:
        return VAT_RATES[VatCategory(category)]
    except ValueError as exc:
        raise ConfigurationError(f"Unknown VAT category: {category!r}") from exc


def turnover_rate_for(region: TurnoverRegion | str) -> Decimal:
    """Return the turnover tax rate registered for ``region``."""

    try:
        return TURNOVER_TAX_RATES[TurnoverRegion(region)]
    except ValueError as exc:
        raise ConfigurationError(f"Unknown turnover tax region: {region!r}") from exc


class TaxConfiguration(ImmutableModel):
    """Which taxes apply to a calculation and how input prices are read.

    Instances are immutable. Construction failures surface as
    :class:`ConfigurationError`; rates are never clamped into range.
    """

    vat_rate: Decimal = Field(default=DEFAULT_VAT_RATE, alias="vatRate")
    include_turnover_tax: bool = Field(default=False, alias="includeTurnoverTax")
    turnover_tax_rate: Decimal = Field(
        default=DEFAULT_TURNOVER_TAX_RATE, alias="turnoverTaxRate"
    )
    tax_included_in_price: bool = Field(default=False, alias="taxIncludedInPrice")
    round_to_cents: bool = Field(default=True, alias="roundToCents")

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as error:
            raise ConfigurationError(
                f"Invalid tax configuration: {describe_validation_error(error)}"
            ) from error

    @field_validator("vat_rate", "turnover_tax_rate", mode="before")
    @classmethod
    def _coerce_rates(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_decimal(value, field=info.field_name or "rate")

    @model_validator(mode="after")
    def _validate_rates(self) -> TaxConfiguration:
        if self.vat_rate < 0 or self.vat_rate > 1:
            raise ConfigurationError("VAT rate must be between 0 and 1")
        if self.turnover_tax_rate < 0:
            raise ConfigurationError("Turnover tax rate must be non-negative")
        return self

    @property
    def active_turnover_rate(self) -> Decimal:
        """Turnover rate that actually applies (zero when the tax is off)."""

        return self.turnover_tax_rate if self.include_turnover_tax else Decimal(0)

    @property
    def effective_rate(self) -> Decimal:
        return self.vat_rate + self.active_turnover_rate

    def as_payload(self) -> dict[str, Any]:
        """Return a JSON-ready representation with rates as decimal strings."""

        return self.model_dump(mode="json")


_CONFIGURATION_ALIASES: dict[str, str] = {
    field.alias: name
    for name, field in TaxConfiguration.model_fields.items()
    if field.alias
}


def merge_configuration(
    base: TaxConfiguration, changes: Mapping[str, Any] | None
) -> TaxConfiguration:
    """Return a new configuration with ``changes`` applied on top of ``base``.

    ``changes`` may use field names or their camelCase aliases. The merged
    result is validated as a whole, so ``base`` is never partially updated.
    """

    if not changes:
        return base
    if not isinstance(changes, Mapping):
        raise ConfigurationError("Configuration changes must be provided as a mapping")

    merged = base.model_dump()
    for key, value in changes.items():
        merged[_CONFIGURATION_ALIASES.get(str(key), str(key))] = value
    return TaxConfiguration(**merged)


class TaxSettings(ImmutableModel):
    """Tax block of the settings file."""

    vat_category: VatCategory | None = None
    vat_rate: Decimal | None = None
    include_turnover_tax: bool = False
    turnover_region: TurnoverRegion | None = None
    turnover_tax_rate: Decimal | None = None
    tax_included_in_price: bool = False
    round_to_cents: bool = True

    @field_validator("vat_rate", "turnover_tax_rate", mode="before")
    @classmethod
    def _coerce_optional_rates(cls, value: Any, info: ValidationInfo) -> Decimal | None:
        if value is None:
            return None
        return coerce_decimal(value, field=info.field_name or "rate")

    @model_validator(mode="after")
    def _validate_exclusive_sources(self) -> TaxSettings:
        if self.vat_category is not None and self.vat_rate is not None:
            raise ConfigurationError("Provide either vat_category or vat_rate, not both")
        if self.turnover_region is not None and self.turnover_tax_rate is not None:
            raise ConfigurationError(
                "Provide either turnover_region or turnover_tax_rate, not both"
            )
        return self

    @property
    def resolved_vat_rate(self) -> Decimal:
        if self.vat_rate is not None:
            return self.vat_rate
        if self.vat_category is not None:
            return vat_rate_for(self.vat_category)
        return DEFAULT_VAT_RATE

    @property
    def resolved_turnover_tax_rate(self) -> Decimal:
        if self.turnover_tax_rate is not None:
            return self.turnover_tax_rate
        if self.turnover_region is not None:
            return turnover_rate_for(self.turnover_region)
        return DEFAULT_TURNOVER_TAX_RATE

    def to_configuration(self) -> TaxConfiguration:
        return TaxConfiguration(
            vat_rate=self.resolved_vat_rate,
            include_turnover_tax=self.include_turnover_tax,
            turnover_tax_rate=self.resolved_turnover_tax_rate,
            tax_included_in_price=self.tax_included_in_price,
            round_to_cents=self.round_to_cents,
        )


class ServiceSettings(ImmutableModel):
    """Top-level settings consumed by the service facade and HTTP layer."""

    currency_symbol: str = "$"
    default_locale: str = "en"
    taxes: TaxSettings = Field(default_factory=TaxSettings)

    @field_validator("taxes", mode="before")
    @classmethod
    def _default_taxes(cls, value: Any) -> Any:
        return {} if value is None else value

    def tax_configuration(self) -> TaxConfiguration:
        return self.taxes.to_configuration()


__all__ = [
    "ConfigurationError",
    "ImmutableModel",
    "ServiceSettings",
    "TaxConfiguration",
    "TaxSettings",
    "coerce_decimal",
    "describe_validation_error",
    "merge_configuration",
    "turnover_rate_for",
    "vat_rate_for",
]
