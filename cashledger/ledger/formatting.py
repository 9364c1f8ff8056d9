"""
Display formatting shared by every report.

Amounts stay Decimal throughout the engine; these helpers are the single
place they become strings.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from cashledger.models.transaction import Timestamp


CENT = Decimal("0.01")
DEFAULT_CURRENCY_SYMBOL = "₱"


def format_currency(
    amount: Union[Decimal, int, float, str],
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> str:
    """
    Format an amount as e.g. "₱1,234.50".

    Always two decimals, comma thousands separators, symbol in front of
    the sign ("₱-50.00").
    """
    if isinstance(amount, float):
        amount = str(amount)
    quantized = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{symbol}{quantized:,.2f}"


def format_period(start: Optional[date], end: Optional[date]) -> Optional[str]:
    """Describe a filter period; None when no bound is set."""
    if start is None and end is None:
        return None
    start_text = start.strftime("%m/%d/%Y") if start else "Start"
    end_text = end.strftime("%m/%d/%Y") if end else "End"
    return f"{start_text} to {end_text}"


def export_filename(exported_at: Timestamp) -> str:
    """cash_management_MM-DD-YY.json"""
    return f"cash_management_{exported_at.date.replace('/', '-')}.json"
