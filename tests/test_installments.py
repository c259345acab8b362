"""Tests for the installment rule engine."""

import pytest
from datetime import date

from chitledger.ledger import (
    ValidationError,
    current_chit_month,
    expected_amount,
    forecast,
    installment_due_date,
)


class TestExpectedAmount:
    """Tests for the amount due in a month."""

    def test_unprized_member_always_regular(self, group, member):
        """Test an eligible member pays the regular installment every month."""
        for month in range(1, group.total_months + 1):
            assert expected_amount(group, member, month) == 5000

    def test_rate_changes_after_win(self, group, prized_member):
        """Test the winning month is regular, the next month is prized."""
        amounts = [expected_amount(group, prized_member, m) for m in (4, 5, 6)]
        assert amounts == [5000, 5000, 6000]

    def test_prized_rate_to_the_end(self, group, prized_member):
        """Test the prized rate holds for every later month."""
        assert expected_amount(group, prized_member, 20) == 6000

    def test_deterministic(self, group, prized_member):
        """Test recomputation gives the same value."""
        assert expected_amount(group, prized_member, 7) == expected_amount(
            group, prized_member, 7
        )

    @pytest.mark.parametrize("month", [0, -1, 1.5, "3", True])
    def test_invalid_month(self, group, member, month):
        """Test non-positive or non-integer months are rejected."""
        with pytest.raises(ValidationError):
            expected_amount(group, member, month)


class TestForecast:
    """Tests for the forward forecast."""

    def test_next_three_months(self, group, prized_member):
        """Test the forecast covers the months after the current one."""
        entries = list(forecast(group, prized_member, 4))
        assert [(e.month, e.expected_amount) for e in entries] == [
            (5, 5000),
            (6, 6000),
            (7, 6000),
        ]

    def test_stops_at_last_month(self, group, member):
        """Test the forecast never runs past the group's duration."""
        entries = list(forecast(group, member, 19))
        assert [e.month for e in entries] == [20]
        assert list(forecast(group, member, 20)) == []

    def test_custom_length(self, group, member):
        """Test a longer forecast window."""
        assert len(list(forecast(group, member, 1, months=6))) == 6

    def test_restartable(self, group, member):
        """Test each call starts over."""
        first = list(forecast(group, member, 2))
        second = list(forecast(group, member, 2))
        assert first == second

    def test_lazy(self, group, member):
        """Test the forecast is a generator."""
        entries = forecast(group, member, 1)
        assert next(entries).month == 2


class TestCalendar:
    """Tests for month and due date arithmetic."""

    def test_current_month(self):
        """Test months are counted from the start month, 1-based."""
        start = date(2025, 1, 5)
        assert current_chit_month(start, date(2025, 1, 31)) == 1
        assert current_chit_month(start, date(2025, 3, 1)) == 3
        assert current_chit_month(start, date(2026, 1, 5)) == 13

    def test_current_month_before_start(self):
        """Test dates before the start clamp to month 1."""
        assert current_chit_month(date(2025, 6, 1), date(2025, 1, 1)) == 1

    def test_due_date(self, group):
        """Test installment N falls N-1 months after the start date."""
        assert installment_due_date(group, 1) == date(2025, 1, 5)
        assert installment_due_date(group, 3) == date(2025, 3, 5)
        assert installment_due_date(group, 13) == date(2026, 1, 5)

    def test_due_date_invalid_month(self, group):
        """Test month zero has no due date."""
        with pytest.raises(ValidationError):
            installment_due_date(group, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
