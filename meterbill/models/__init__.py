from decimal import Decimal, InvalidOperation


def format_amount(amount: Decimal) -> str:
    """Format a monetary amount with two decimals: Decimal('1550') -> '1,550.00'"""
    return f"{amount:,.2f}"


def parse_amount(text: str) -> Decimal | None:
    """Parse a decimal amount. Returns None on invalid input.

    Accepts formats like '50', '50.00', '1,550.00'.
    """
    text = text.strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value
