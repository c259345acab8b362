"""
Message Templates

Plain-text bodies for the WhatsApp-style messages sent to subscribers.
Asterisks and underscores are WhatsApp bold/italic markers.

Amounts in reminders and receipts use western grouping (5,000); the
quick-pay request and report summaries use the rupee format with Indian
grouping, as the collection desk always has.
"""

from datetime import date

from chitledger.ledger.installments import (
    DEFAULT_FORECAST_MONTHS,
    forecast,
    installment_due_date,
)
from chitledger.messaging.formatting import (
    RUPEE,
    format_day,
    format_inr,
    group_thousands,
)
from chitledger.models.chit import Group, Member, Payment
from chitledger.models.results import ReportSummary


DEFAULT_BRAND = "GTS CHITS"


def reminder_message(
    member: Member,
    group: Group,
    month: int,
    amount: int,
    brand: str = DEFAULT_BRAND,
) -> str:
    due_date = format_day(installment_due_date(group, month))
    return (
        f"*{brand} - PAYMENT REMINDER*\n\n"
        f"Dear *{member.name}*,\n\n"
        f"Monthly chit payment for Month {month} is due.\n\n"
        f"*Group:* {group.name}\n"
        f"*Amount:* {RUPEE}{group_thousands(amount)}\n"
        f"*Due Date:* {due_date}\n\n"
        f"Kindly ignore if already paid.\n\n"
        f"Thank you,\n"
        f"*{brand}*"
    )


def receipt_message(
    member: Member,
    group: Group,
    payment: Payment,
    brand: str = DEFAULT_BRAND,
) -> str:
    return (
        f"*{brand} - PAYMENT RECEIPT*\n\n"
        f"Dear *{member.name}*,\n\n"
        f"We have received your payment for *Month {payment.month_number}*.\n\n"
        f"*Group:* {group.name}\n"
        f"*Amount:* {RUPEE}{group_thousands(payment.amount_paid)}\n"
        f"*Date:* {payment.payment_date.isoformat()}\n"
        f"*Receipt #:* {payment.receipt_number}\n\n"
        f"Thank you for your prompt payment!\n\n"
        f"*{brand}*"
    )


def forecast_message(
    member: Member,
    group: Group,
    current_month: int,
    months: int = DEFAULT_FORECAST_MONTHS,
    brand: str = DEFAULT_BRAND,
) -> str:
    """Upcoming installments after current_month, up to the group's last month."""
    lines = [
        f"*{brand} - {months} MONTH FORECAST*\n",
        f"Subscriber: *{member.name}*",
        f"Group: {group.name}\n",
        "*Upcoming Installments:*",
    ]
    for entry in forecast(group, member, current_month, months):
        lines.append(f"Month {entry.month}: {RUPEE}{group_thousands(entry.expected_amount)}")

    lines.append("\n_Note: Forecast is based on current prize allotment status._\n")
    lines.append(f"*{brand}*")
    return "\n".join(lines)


def prize_notification_message(
    member: Member,
    group: Group,
    month: int,
    brand: str = DEFAULT_BRAND,
) -> str:
    lines = [
        f"*{brand} - PRIZE ALLOTMENT*\n",
        f"Dear *{member.name}*,\n",
        f"Congratulations! You have been allotted the prize for *Month {month}*.\n",
        f"*Group:* {group.name}",
        f"*Prize Month:* {month}",
    ]
    if month < group.total_months:
        lines.append(
            f"*Installment from Month {month + 1}:* "
            f"{RUPEE}{group_thousands(group.prized_installment)}"
        )
    lines.append("")
    lines.append("Thank you,")
    lines.append(f"*{brand}*")
    return "\n".join(lines)


def quick_pay_message(
    member: Member,
    month: int,
    amount: int,
    vpa: str,
    brand: str = DEFAULT_BRAND,
) -> str:
    return (
        f"*{brand} - QUICK PAY*\n\n"
        f"Hello *{member.name}*,\n\n"
        f"Please pay *{format_inr(amount)}* for *Month {month}* using the UPI details below:\n\n"
        f"*VPA:* {vpa}\n"
        f"*Amount:* {format_inr(amount)}\n\n"
        f"Thank you,\n"
        f"*{brand}*"
    )


def report_summary_message(
    summary: ReportSummary,
    on: date,
    brand: str = DEFAULT_BRAND,
) -> str:
    """Shareable headline of a report, dated `on`."""
    return (
        f"*{brand} - {summary.report.upper()} REPORT*\n"
        f"*{summary.label}:* {format_inr(summary.total)}\n"
        f"*Records:* {summary.count}\n"
        f"Date: {format_day(on)}\n\n"
        f"_Generated by {brand}._"
    )
