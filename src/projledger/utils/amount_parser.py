"""Amount parsing and formatting utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "7500000"
    - "7,500,000.00"
    - "Rp 7,500,000" / "IDR 7500000"
    - "-123.45" and "(123.45)" (negative)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount at full precision

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency markers and thousands separators
    amount_str = re.sub(r"^(rp\.?|idr)", "", amount_str.strip(), flags=re.IGNORECASE)
    amount_str = re.sub(r"[$€£¥_,\s]", "", amount_str)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number, got '{amount_str}'")
    return -amount if is_negative else amount


def round_money(amount: Decimal) -> Decimal:
    """Round an amount to two decimal places for display."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Format an amount with thousands separators and two decimals."""
    return f"{round_money(amount):,.2f}"
