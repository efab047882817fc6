"""
Utility functions for the application.
"""
from typing import Any, Dict, Union
from decimal import Decimal, ROUND_HALF_UP
import math

TWO_PLACES = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "ILS": "₪",
}


def round_money(value: Union[Decimal, float, int]) -> Decimal:
    """Round to currency minor units, half away from zero."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_price(price: Union[Decimal, float, int], currency: str = "ILS") -> str:
    """Format a price for display, e.g. ``1,234.50 ₪``."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{round_money(price):,.2f} {symbol}"


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def format_response(data: Any, message: str = "Success") -> Dict[str, Any]:
    """Format API response."""
    return {
        "message": message,
        "data": data
    }


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
