"""Number and date formatting for operator-facing text."""

from datetime import date

from chitledger.models.chit import clean_phone_number

RUPEE = "₹"


def group_thousands(value: int) -> str:
    """Western grouping: 100000 -> '100,000'."""
    return f"{int(value):,}"


def group_indian(value: int) -> str:
    """
    Indian grouping: the last three digits, then pairs.

    100000 -> '1,00,000', 12345678 -> '1,23,45,678'
    """
    value = int(value)
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if len(digits) <= 3:
        return sign + digits

    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return sign + ",".join(pairs + [tail])


def format_inr(value: int) -> str:
    """Whole rupees with the rupee sign and Indian grouping."""
    return f"{RUPEE}{group_indian(value)}"


def format_day(day: date) -> str:
    """'05 Jan 2025'."""
    return day.strftime("%d %b %Y")


def whatsapp_number(phone: str) -> str:
    """Cleaned number with the 91 country code when it is a full mobile number."""
    cleaned = clean_phone_number(phone)
    return f"91{cleaned}" if len(cleaned) == 10 else cleaned
