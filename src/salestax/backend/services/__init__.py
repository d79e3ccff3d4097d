"""Service-layer helpers for the SalesTax backend."""

from salestax.backend.app.services.calculation_service import (
    calculate_amount,
    calculate_cart,
    calculate_reverse,
)

from .request_parser import parse_calculation_payload, parse_json_object
from .response_builder import build_calculation_response

__all__ = [
    "build_calculation_response",
    "calculate_amount",
    "calculate_cart",
    "calculate_reverse",
    "parse_calculation_payload",
    "parse_json_object",
]
