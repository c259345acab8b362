"""Tests for subscriber message content."""

import pytest
from datetime import date

from chitledger.messaging import (
    forecast_message,
    format_day,
    format_inr,
    group_indian,
    group_thousands,
    prize_notification_message,
    quick_pay_message,
    receipt_message,
    reminder_message,
    report_summary_message,
    whatsapp_number,
)
from chitledger.models import ReportSummary


class TestFormatting:
    """Tests for number and date formatting."""

    @pytest.mark.parametrize("value, expected", [
        (0, "0"),
        (999, "999"),
        (1000, "1,000"),
        (100000, "1,00,000"),
        (12345678, "1,23,45,678"),
        (-150000, "-1,50,000"),
    ])
    def test_indian_grouping(self, value, expected):
        """Test lakh/crore digit grouping."""
        assert group_indian(value) == expected

    def test_format_inr(self):
        """Test the rupee sign is prefixed."""
        assert format_inr(100000) == "₹1,00,000"
        assert format_inr(5000) == "₹5,000"

    def test_group_thousands(self):
        """Test western grouping."""
        assert group_thousands(100000) == "100,000"

    def test_format_day(self):
        """Test the DD Mon YYYY format."""
        assert format_day(date(2025, 3, 5)) == "05 Mar 2025"

    def test_whatsapp_number(self):
        """Test ten-digit numbers get the country code."""
        assert whatsapp_number("+91 98765-43210") == "919876543210"
        assert whatsapp_number("12345") == "12345"


class TestTemplates:
    """Tests for the message templates."""

    def test_reminder(self, group, member):
        """Test the reminder text."""
        text = reminder_message(member, group, 3, 5000)
        assert text == (
            "*GTS CHITS - PAYMENT REMINDER*\n\n"
            "Dear *Ravi Kumar*,\n\n"
            "Monthly chit payment for Month 3 is due.\n\n"
            "*Group:* Diwali 1L\n"
            "*Amount:* ₹5,000\n"
            "*Due Date:* 05 Mar 2025\n\n"
            "Kindly ignore if already paid.\n\n"
            "Thank you,\n"
            "*GTS CHITS*"
        )

    def test_receipt(self, group, member, payment):
        """Test the receipt text."""
        text = receipt_message(member, group, payment)
        assert "*GTS CHITS - PAYMENT RECEIPT*" in text
        assert "We have received your payment for *Month 1*." in text
        assert "*Amount:* ₹5,000\n" in text
        assert "*Date:* 2025-01-05\n" in text
        assert "*Receipt #:* GTS-123456" in text

    def test_forecast(self, group, prized_member):
        """Test the forecast lists the next months at the right rate."""
        text = forecast_message(prized_member, group, 4)
        assert text == (
            "*GTS CHITS - 3 MONTH FORECAST*\n\n"
            "Subscriber: *Lakshmi Devi*\n"
            "Group: Diwali 1L\n\n"
            "*Upcoming Installments:*\n"
            "Month 5: ₹5,000\n"
            "Month 6: ₹6,000\n"
            "Month 7: ₹6,000\n\n"
            "_Note: Forecast is based on current prize allotment status._\n\n"
            "*GTS CHITS*"
        )

    def test_forecast_near_end(self, group, member):
        """Test the forecast stops at the last month."""
        text = forecast_message(member, group, 19)
        assert "Month 20: ₹5,000" in text
        assert "Month 21" not in text

    def test_prize_notification(self, group, member):
        """Test the notification announces the post-win installment."""
        text = prize_notification_message(member, group, 5)
        assert "*GTS CHITS - PRIZE ALLOTMENT*" in text
        assert "prize for *Month 5*" in text
        assert "*Installment from Month 6:* ₹6,000" in text

    def test_prize_notification_last_month(self, group, member):
        """Test no later installment is quoted for a final-month win."""
        text = prize_notification_message(member, group, 20)
        assert "Installment from" not in text

    def test_quick_pay(self, member):
        """Test the UPI request text."""
        text = quick_pay_message(member, 3, 100000, "gts@upi")
        assert text == (
            "*GTS CHITS - QUICK PAY*\n\n"
            "Hello *Ravi Kumar*,\n\n"
            "Please pay *₹1,00,000* for *Month 3* using the UPI details below:\n\n"
            "*VPA:* gts@upi\n"
            "*Amount:* ₹1,00,000\n\n"
            "Thank you,\n"
            "*GTS CHITS*"
        )

    def test_custom_brand(self, group, member):
        """Test the brand name is configurable."""
        text = reminder_message(member, group, 1, 5000, brand="SRI CHITS")
        assert text.startswith("*SRI CHITS - PAYMENT REMINDER*")
        assert text.endswith("*SRI CHITS*")

    def test_report_summary(self):
        """Test the shareable report headline."""
        summary = ReportSummary(report="Due", label="Total Outstanding", count=3, total=150000)
        text = report_summary_message(summary, date(2025, 3, 10))
        assert text == (
            "*GTS CHITS - DUE REPORT*\n"
            "*Total Outstanding:* ₹1,50,000\n"
            "*Records:* 3\n"
            "Date: 10 Mar 2025\n\n"
            "_Generated by GTS CHITS._"
        )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
