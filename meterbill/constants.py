from decimal import Decimal

DATETIME_FORMAT = "%Y-%m-%d %H:%M"
DATE_FORMAT = "%Y-%m-%d"
PERIOD_FORMAT = "%Y-%m"

# Case-insensitive tokens accepted in place of a threshold for the open-ended slab.
UNBOUNDED_TOKENS = frozenset({"inf", "infty", "above"})

DEFAULT_SLABS = "100:3.5,200:4.5,inf:6.0"
DEFAULT_FIXED_CHARGE = Decimal("50.0")
DEFAULT_TAX_RATE = Decimal("0.05")

CONSUMER_SEQUENCE = "consumers"
BILL_SEQUENCE = "bills"

MONTHS_EN = {
    "01": "January",
    "02": "February",
    "03": "March",
    "04": "April",
    "05": "May",
    "06": "June",
    "07": "July",
    "08": "August",
    "09": "September",
    "10": "October",
    "11": "November",
    "12": "December",
}


def format_period(period: str) -> str:
    if not period or "-" not in period:
        return period or ""
    year, month = period.split("-")
    return f"{MONTHS_EN.get(month, month)} {year}"
