"""Shared fixtures for the Chit Ledger test suite."""

from datetime import date, datetime, timedelta, timezone

import pytest

from chitledger.config import LedgerSettings, Settings
from chitledger.models import Group, Member, Payment, PaymentMode
from chitledger.orchestrator import create_app_components
from chitledger.services.storage import InMemoryKeyValueAdapter, LedgerStore


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def group():
    """20-month group, 5,000 regular / 6,000 prized, starting 5 Jan 2025."""
    return Group(
        id="g1",
        name="Diwali 1L",
        total_value=100000,
        total_months=20,
        regular_installment=5000,
        prized_installment=6000,
        start_date=date(2025, 1, 5),
    )


@pytest.fixture
def other_group():
    return Group(
        id="g2",
        name="Pongal 50K",
        total_value=50000,
        total_months=10,
        member_count=10,
        regular_installment=5000,
        prized_installment=5500,
        start_date=date(2025, 2, 1),
        upi_id="pongal@upi",
    )


@pytest.fixture
def member():
    return Member(id="m1", group_id="g1", name="Ravi Kumar", phone="9876543210")


@pytest.fixture
def prized_member():
    """Won the prize in month 5."""
    return Member(
        id="m2",
        group_id="g1",
        name="Lakshmi Devi",
        phone="9123456780",
        is_prized=True,
        prized_month=5,
    )


@pytest.fixture
def payment():
    return Payment(
        id="p1",
        member_id="m1",
        group_id="g1",
        month_number=1,
        amount_paid=5000,
        expected_amount=5000,
        payment_date=date(2025, 1, 5),
        payment_mode=PaymentMode.CASH,
        receipt_number="GTS-123456",
    )


@pytest.fixture
def adapter():
    return InMemoryKeyValueAdapter()


@pytest.fixture
def store(adapter, clock):
    return LedgerStore(adapter, clock=clock)


@pytest.fixture
def seeded_store(store, group, other_group, member, prized_member):
    store.save_groups([group, other_group])
    store.save_members([member, prized_member])
    return store


@pytest.fixture
def ledger_settings():
    return LedgerSettings(
        brand_name="GTS CHITS",
        receipt_prefix="GTS",
        backup_file_prefix="GTS_DATABASE",
        forecast_months=3,
        default_group_name=None,
        verbose_import=False,
        collection_vpa="",
        whatsapp_use_web=False,
    )


@pytest.fixture
def app(store, tmp_path, monkeypatch):
    """All flows wired to the in-memory store; backups go to tmp_path."""
    monkeypatch.setenv("CHITLEDGER_STORAGE_BACKUP_DIR", str(tmp_path / "backups"))
    for name in (
        "CHITLEDGER_BRAND_NAME",
        "CHITLEDGER_RECEIPT_PREFIX",
        "CHITLEDGER_DEFAULT_GROUP_NAME",
        "CHITLEDGER_VERBOSE_IMPORT",
    ):
        monkeypatch.delenv(name, raising=False)
    return create_app_components(settings=Settings(), store=store)
