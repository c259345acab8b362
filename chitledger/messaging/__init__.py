"""Subscriber message content and formatting helpers."""

from chitledger.messaging.formatting import (
    format_day,
    format_inr,
    group_indian,
    group_thousands,
    whatsapp_number,
)
from chitledger.messaging.templates import (
    DEFAULT_BRAND,
    forecast_message,
    prize_notification_message,
    quick_pay_message,
    receipt_message,
    reminder_message,
    report_summary_message,
)
from chitledger.models.chit import clean_phone_number

__all__ = [
    "DEFAULT_BRAND",
    "clean_phone_number",
    "forecast_message",
    "format_day",
    "format_inr",
    "group_indian",
    "group_thousands",
    "prize_notification_message",
    "quick_pay_message",
    "receipt_message",
    "reminder_message",
    "report_summary_message",
    "whatsapp_number",
]
