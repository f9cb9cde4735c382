"""
USD conversion with the fallback rate table (rates already include the -5% gross coefficient)
"""
from typing import Dict, Optional

from app.core.config import settings

CURRENCY_SYMBOLS = {
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
    "CAD": "C$",
}


def get_rates() -> Dict[str, float]:
    return dict(settings.CURRENCY_RATES)


def get_rate(currency: str, rates: Optional[Dict[str, float]] = None) -> float:
    """Rate of one unit of currency in USD; unknown currencies count as 1"""
    table = rates if rates is not None else settings.CURRENCY_RATES
    return table.get(currency) or settings.CURRENCY_RATES.get(currency) or 1.0


def convert_to_usd(amount, currency: str, rates: Optional[Dict[str, float]] = None) -> float:
    if not amount:
        return 0.0
    return float(amount) * get_rate(currency, rates)


def format_currency(amount, currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{symbol}{float(amount or 0):.2f}"
