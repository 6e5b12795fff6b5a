"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "1000"
    - "1,000.50"
    - "Rs. 1,000.00" / "₹1,000" / "$250"
    - "-250.75"
    - "(250.75)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Currency markers, including the "Rs." prefix and "/-" suffix used on reports
    amount_str = re.sub(r"^(rs\.?|inr)\s*", "", amount_str.strip(), flags=re.IGNORECASE)
    amount_str = re.sub(r"[$€£¥₹]", "", amount_str)
    amount_str = amount_str.removesuffix("/-")

    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}': not a finite number")
    return -amount if is_negative else amount
