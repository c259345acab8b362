"""
Main Orchestrator for Chit Ledger

This module ties together all the components and defines the
end-to-end flows the operator drives:
1. Group setup (create → status toggle → delete)
2. Enrollment (single form, bulk sheet import)
3. Collection (amount check → save → receipt)
4. Allotment (prize → notification)
5. Backup (export, confirmed restore, confirmed wipe)
6. Reports and reminders

DESIGN DECISION: The orchestrator enforces the boundaries:
- Engines decide, the store persists, the flow reports
- Nothing is written unless the engine accepted the action
- Destructive actions require explicit confirmation
- Every step is audited

Every mutating flow method returns an OperationOutcome. Business rule
violations and store failures are caught here and turned into an
operator-facing message; nothing escapes as an exception.
"""

from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Union

from chitledger.audit import AuditLogger, get_logger
from chitledger.config import LedgerSettings, Settings, get_settings
from chitledger.ledger import (
    ChitLedgerError,
    GroupNotFound,
    MemberNotFound,
    admit_batch,
    allot_prize,
    create_group,
    current_chit_month,
    delete_group,
    delete_member,
    enroll_member,
    expected_amount,
    record_payment,
    set_group_status,
)
from chitledger.messaging import (
    forecast_message,
    prize_notification_message,
    quick_pay_message,
    receipt_message,
    reminder_message,
    report_summary_message,
)
from chitledger.models import (
    AuditEventBuilder,
    AuditEventType,
    BackupDocument,
    DashboardStats,
    DueReport,
    Group,
    GroupStatus,
    GroupSummary,
    Member,
    MemberDraft,
    MemberStatement,
    OperationOutcome,
    PaymentMode,
    ReportSummary,
    find_group,
    find_group_by_name,
    find_member,
    find_payment,
    members_of_group,
)
from chitledger.queries import (
    consolidated_report,
    consolidated_summary,
    dashboard_stats,
    due_report,
    due_summary,
    member_statement,
    statement_summary,
)
from chitledger.services.storage import (
    KeyValueAdapter,
    LedgerStore,
    MalformedImport,
    StorageError,
    StorageQuotaExceeded,
    create_adapter,
    export_backup,
    parse_backup,
    restore,
)


logger = get_logger(__name__)

CONFIRMATION_REQUIRED = "confirmation_required"


def storage_failure_message(error: StorageError) -> str:
    """Operator message for a failed write: nothing was saved."""
    if isinstance(error, StorageQuotaExceeded):
        headline = "Storage is full and the change was not saved."
    else:
        headline = f"The change could not be saved ({error})."
    return f"{headline} Export a backup immediately to avoid losing data."


class _LedgerFlow:
    """Shared wiring: the store, the audit trail and the ledger settings."""

    def __init__(
        self,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().ledger

    def _today(self) -> date:
        return self._store.now().date()

    def _failure(
        self,
        error: ChitLedgerError,
        event_type: AuditEventType,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        **details: Any,
    ) -> OperationOutcome:
        """Audit a blocked action and describe it to the operator."""
        if isinstance(error, StorageError) and not isinstance(error, MalformedImport):
            self._audit_logger.log_storage_error(error.code, str(error))
            return OperationOutcome.failed(
                storage_failure_message(error), error.code, **details
            )

        self._audit_logger.log_rejection(
            event_type=event_type,
            error_code=error.code,
            error_message=str(error),
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or None,
        )
        return OperationOutcome.failed(str(error), error.code, **details)

    def _require_group(self, group_id: str) -> Group:
        group = find_group(self._store.groups, group_id)
        if group is None:
            raise GroupNotFound(f"Group {group_id} not found")
        return group

    def _require_member(self, member_id: str) -> Member:
        member = find_member(self._store.members, member_id)
        if member is None:
            raise MemberNotFound(f"Member {member_id} not found")
        return member


class GroupFlow(_LedgerFlow):
    """Group setup and lifecycle."""

    def create(
        self,
        name: str,
        total_value: int,
        total_months: int,
        regular_installment: int,
        prized_installment: int,
        start_date: date,
        member_count: Optional[int] = None,
        upi_id: Optional[str] = None,
    ) -> OperationOutcome:
        try:
            groups = create_group(
                self._store.groups,
                name=name,
                total_value=total_value,
                total_months=total_months,
                regular_installment=regular_installment,
                prized_installment=prized_installment,
                start_date=start_date,
                member_count=member_count,
                upi_id=upi_id,
            )
            self._store.save_groups(groups)
        except ChitLedgerError as e:
            return self._failure(e, AuditEventType.GROUP_CREATED, "group")

        group = groups[-1]
        self._audit_logger.log(AuditEventBuilder.group_created(
            group_id=group.id,
            name=group.name,
            capacity=group.member_count,
        ))
        return OperationOutcome.ok(
            f"Group '{group.name}' created: {group.total_months} months, "
            f"ends {group.end_date.isoformat()}",
            entity_id=group.id,
        )

    def set_status(
        self,
        group_id: str,
        status: Union[GroupStatus, str],
    ) -> OperationOutcome:
        try:
            groups = set_group_status(self._store.groups, group_id, status)
            self._store.save_groups(groups)
        except ChitLedgerError as e:
            return self._failure(
                e, AuditEventType.GROUP_STATUS_CHANGED, "group", group_id
            )

        group = find_group(groups, group_id)
        self._audit_logger.log(AuditEventBuilder.group_status_changed(
            group_id=group_id,
            status=group.status.value,
        ))
        return OperationOutcome.ok(
            f"Group '{group.name}' is now {group.status.value}",
            entity_id=group_id,
        )

    def delete(self, group_id: str) -> OperationOutcome:
        """
        Delete a group. Its members and payments are kept and show as
        "Unassigned" afterwards.
        """
        try:
            group = self._require_group(group_id)
            groups = delete_group(self._store.groups, group_id)
            self._store.save_groups(groups)
        except ChitLedgerError as e:
            return self._failure(e, AuditEventType.GROUP_DELETED, "group", group_id)

        orphaned = len(members_of_group(self._store.members, group_id))
        self._audit_logger.log(AuditEventBuilder.group_deleted(
            group_id=group_id,
            orphaned_members=orphaned,
        ))
        message = f"Group '{group.name}' deleted"
        if orphaned:
            message += f"; {orphaned} members are now unassigned"
        return OperationOutcome.ok(message, entity_id=group_id, orphaned_members=orphaned)


class EnrollmentFlow(_LedgerFlow):
    """Subscriber enrollment, one at a time or from an imported sheet."""

    def enroll(self, draft: MemberDraft) -> OperationOutcome:
        try:
            members = enroll_member(
                self._store.members,
                self._store.groups,
                draft,
                today=self._today(),
            )
            self._store.save_members(members)
        except ChitLedgerError as e:
            return self._failure(
                e,
                AuditEventType.ENROLLMENT_REJECTED,
                "member",
                group_id=draft.group_id,
            )

        member = members[-1]
        self._audit_logger.log(AuditEventBuilder.member_enrolled(
            member_id=member.id,
            name=member.name,
            group_id=member.group_id,
        ))
        return OperationOutcome.ok(f"{member.name} enrolled", entity_id=member.id)

    def import_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        default_group_name: Optional[str] = None,
        verbose: Optional[bool] = None,
    ) -> OperationOutcome:
        """
        Bulk-enroll spreadsheet rows.

        default_group_name falls back to the configured default. Rows are
        admitted greedily in order until each group is full.
        """
        default_name = default_group_name or self._settings.default_group_name
        verbose = self._settings.verbose_import if verbose is None else verbose

        groups = self._store.groups
        default_group = find_group_by_name(groups, default_name) if default_name else None
        if default_name and default_group is None:
            logger.warning("import_default_group_missing", group_name=default_name)

        result = admit_batch(
            rows,
            groups,
            self._store.members,
            default_group_id=default_group.id if default_group else None,
            verbose=verbose,
            today=self._today(),
        )

        if result.accepted:
            try:
                self._store.save_members([*self._store.members, *result.accepted])
            except StorageError as e:
                return self._failure(e, AuditEventType.BULK_IMPORT_COMPLETED)

        self._audit_logger.log(AuditEventBuilder.bulk_import_completed(
            accepted=result.accepted_count,
            rejected=result.rejected_count,
        ))

        message = f"Imported {result.accepted_count} members"
        if result.rejected_count:
            message += f"; {result.rejected_count} rows skipped"

        details: dict[str, Any] = {
            "accepted": result.accepted_count,
            "rejected": result.rejected_count,
        }
        if verbose:
            details["rejections"] = [r.model_dump() for r in result.rejections]

        if result.rejected_count and not result.accepted_count:
            return OperationOutcome.failed(message, "nothing_imported", **details)
        return OperationOutcome.ok(message, **details)

    def delete(self, member_id: str) -> OperationOutcome:
        """Remove a member. Their payments stay on record."""
        try:
            member = self._require_member(member_id)
            members = delete_member(self._store.members, member_id)
            self._store.save_members(members)
        except ChitLedgerError as e:
            return self._failure(e, AuditEventType.MEMBER_DELETED, "member", member_id)

        self._audit_logger.log(AuditEventBuilder.member_deleted(member_id))
        return OperationOutcome.ok(f"{member.name} removed", entity_id=member_id)


class CollectionFlow(_LedgerFlow):
    """
    Installment collection.

    Flow:
    1. Look up member and group
    2. Engine checks month, settlement and exact amount
    3. Save payments (stamps last change)
    4. Receipt text available for sharing
    """

    def amount_due(self, member_id: str, month: int) -> int:
        member = self._require_member(member_id)
        group = self._require_group(member.group_id)
        return expected_amount(group, member, month)

    def record(
        self,
        member_id: str,
        month: int,
        amount_entered: Union[int, str, None] = None,
        mode: Union[PaymentMode, str] = PaymentMode.CASH,
        payment_date: Optional[date] = None,
        remarks: str = "",
        transaction_ref: Optional[str] = None,
    ) -> OperationOutcome:
        try:
            member = self._require_member(member_id)
            group = self._require_group(member.group_id)
            payments = record_payment(
                self._store.payments,
                member,
                group,
                month,
                amount_entered,
                mode=mode,
                payment_date=payment_date,
                remarks=remarks,
                transaction_ref=transaction_ref,
                receipt_prefix=self._settings.receipt_prefix,
                clock=self._store.now,
            )
            self._store.save_payments(payments)
        except ChitLedgerError as e:
            return self._failure(
                e,
                AuditEventType.PAYMENT_REJECTED,
                "member",
                member_id,
                month=month,
            )

        payment = find_payment(payments, member_id, month)
        self._audit_logger.log(AuditEventBuilder.payment_recorded(
            payment_id=payment.id,
            member_id=member_id,
            month=month,
            amount=payment.amount_paid,
            receipt_number=payment.receipt_number,
        ))
        return OperationOutcome.ok(
            f"Payment of {payment.amount_paid} saved for {member.name}, "
            f"month {month}. Receipt {payment.receipt_number}",
            entity_id=payment.id,
            receipt_number=payment.receipt_number,
            amount=payment.amount_paid,
        )

    def receipt(self, member_id: str, month: int) -> Optional[str]:
        """Receipt text for a recorded payment, or None if nothing is recorded."""
        member = find_member(self._store.members, member_id)
        if member is None:
            return None
        group = find_group(self._store.groups, member.group_id)
        payment = find_payment(self._store.payments, member_id, month)
        if group is None or payment is None:
            return None
        return receipt_message(member, group, payment, brand=self._settings.brand_name)

    def quick_pay_request(self, member_id: str, month: int) -> Optional[str]:
        """UPI payment request text, or None when no VPA is configured."""
        member = self._require_member(member_id)
        group = self._require_group(member.group_id)
        vpa = self._store.collection_vpa(group)
        if not vpa:
            return None
        return quick_pay_message(
            member,
            month,
            expected_amount(group, member, month),
            vpa,
            brand=self._settings.brand_name,
        )


class AllotmentFlow(_LedgerFlow):
    """Prize allotment. One-way: a prized member stays prized."""

    def allot(self, member_id: str, month: int) -> OperationOutcome:
        try:
            member = self._require_member(member_id)
            group = self._require_group(member.group_id)
            members = allot_prize(self._store.members, member_id, month, group)
            self._store.save_members(members)
        except ChitLedgerError as e:
            return self._failure(
                e,
                AuditEventType.PRIZE_REJECTED,
                "member",
                member_id,
                month=month,
            )

        prized = find_member(members, member_id)
        self._audit_logger.log(AuditEventBuilder.prize_allotted(member_id, month))
        return OperationOutcome.ok(
            f"{prized.name} confirmed as prize winner for month {month}",
            entity_id=member_id,
            notification=prize_notification_message(
                prized, group, month, brand=self._settings.brand_name
            ),
        )


class BackupFlow(_LedgerFlow):
    """
    Export, restore and wipe.

    Restore and wipe replace everything, so both require confirmed=True.
    """

    def __init__(
        self,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
        backup_dir: Optional[Union[str, Path]] = None,
    ):
        super().__init__(store, audit_logger, settings)
        self._backup_dir = backup_dir

    @property
    def needs_backup(self) -> bool:
        return self._store.needs_backup

    def export(self, write_file: bool = True) -> OperationOutcome:
        try:
            filename, text = export_backup(
                self._store,
                prefix=self._settings.backup_file_prefix,
                destination_dir=self._backup_dir if write_file else None,
            )
        except StorageError as e:
            return self._failure(e, AuditEventType.BACKUP_EXPORTED)

        counts = self._counts(self._store.snapshot())
        self._audit_logger.log(AuditEventBuilder.backup_exported(filename, counts))
        return OperationOutcome.ok(
            f"Backup exported to {filename}",
            filename=filename,
            content=text,
            **counts,
        )

    def restore(self, text: Union[str, bytes], confirmed: bool = False) -> OperationOutcome:
        """All-or-nothing: the document is fully validated before anything is replaced."""
        if not confirmed:
            return OperationOutcome.failed(
                "Restoring replaces all current groups, members and payments. "
                "Confirm to continue.",
                CONFIRMATION_REQUIRED,
            )

        try:
            document = parse_backup(text)
            restore(self._store, document)
        except ChitLedgerError as e:
            return self._failure(e, AuditEventType.RESTORE_REJECTED)

        counts = self._counts(document)
        self._audit_logger.log(AuditEventBuilder.restore_completed(counts))
        return OperationOutcome.ok(
            f"Restored {counts['groups']} groups, {counts['members']} members "
            f"and {counts['payments']} payments",
            **counts,
        )

    def wipe(self, confirmed: bool = False) -> OperationOutcome:
        if not confirmed:
            return OperationOutcome.failed(
                "Wiping deletes every record permanently. Confirm to continue.",
                CONFIRMATION_REQUIRED,
            )

        try:
            self._store.wipe()
        except StorageError as e:
            return self._failure(e, AuditEventType.DATABASE_WIPED)

        self._audit_logger.log(AuditEventBuilder.database_wiped())
        return OperationOutcome.ok("All records wiped")

    @staticmethod
    def _counts(document: BackupDocument) -> dict[str, int]:
        return {
            "groups": len(document.groups),
            "members": len(document.members),
            "payments": len(document.payments),
        }


class PreferencesFlow(_LedgerFlow):
    """Operator preferences. Changing them does not make a backup stale."""

    def set_upi_id(self, upi_id: str) -> OperationOutcome:
        try:
            self._store.set_upi_id(upi_id)
        except StorageError as e:
            return self._failure(e, AuditEventType.STORAGE_ERROR)
        return OperationOutcome.ok("Collection UPI ID updated", upi_id=self._store.upi_id)

    def set_whatsapp_use_web(self, enabled: bool) -> OperationOutcome:
        try:
            self._store.set_whatsapp_use_web(enabled)
        except StorageError as e:
            return self._failure(e, AuditEventType.STORAGE_ERROR)
        channel = "WhatsApp Web" if enabled else "the WhatsApp app"
        return OperationOutcome.ok(f"Messages will open in {channel}")


class ReportFlow(_LedgerFlow):
    """
    Read-only reports and reminder text.

    Lookups of unknown ids raise GroupNotFound / MemberNotFound.
    """

    def due(self, group_id: str, month: int) -> DueReport:
        return due_report(
            self._store.groups,
            self._store.members,
            self._store.payments,
            group_id,
            month,
        )

    def reminders(self, group_id: str, month: int) -> list[tuple[Member, str]]:
        """Reminder text for every member still due in `month`."""
        report = self.due(group_id, month)
        return [
            (
                entry.member,
                reminder_message(
                    entry.member,
                    report.group,
                    month,
                    entry.expected_amount,
                    brand=self._settings.brand_name,
                ),
            )
            for entry in report.entries
        ]

    def statement(self, member_id: str) -> MemberStatement:
        return member_statement(
            self._store.groups,
            self._store.members,
            self._store.payments,
            member_id,
        )

    def consolidated(self) -> list[GroupSummary]:
        return consolidated_report(
            self._store.groups,
            self._store.members,
            self._store.payments,
        )

    def forecast(self, member_id: str, current_month: Optional[int] = None) -> str:
        """Forecast text; current_month defaults to the group's running month."""
        member = self._require_member(member_id)
        group = self._require_group(member.group_id)
        if current_month is None:
            current_month = current_chit_month(group.start_date, self._today())
        return forecast_message(
            member,
            group,
            current_month,
            months=self._settings.forecast_months,
            brand=self._settings.brand_name,
        )

    def summary(
        self,
        report: str,
        group_id: Optional[str] = None,
        month: Optional[int] = None,
        member_id: Optional[str] = None,
    ) -> ReportSummary:
        """
        Headline figure of a report.

        Args:
            report: "Due" (needs group_id and month), "Individual"
                (needs member_id) or "Consolidated"
        """
        kind = report.strip().lower()
        if kind == "due":
            if group_id is None or month is None:
                raise ValueError("Due summary needs a group and a month")
            return due_summary(self.due(group_id, month))
        if kind in ("individual", "candidate"):
            if member_id is None:
                raise ValueError("Individual summary needs a member")
            return statement_summary(self.statement(member_id))
        if kind == "consolidated":
            return consolidated_summary(self._store.groups, self._store.payments)
        raise ValueError(f"Unknown report: {report!r}")

    def summary_message(self, summary: ReportSummary) -> str:
        """Shareable text for a report headline, dated today."""
        return report_summary_message(
            summary,
            self._today(),
            brand=self._settings.brand_name,
        )

    def dashboard(self) -> DashboardStats:
        return dashboard_stats(
            self._store.groups,
            self._store.members,
            self._store.payments,
            last_backup=self._store.last_backup,
            needs_backup=self._store.needs_backup,
        )


class LedgerApp(NamedTuple):
    store: LedgerStore
    audit_logger: AuditLogger
    groups: GroupFlow
    enrollment: EnrollmentFlow
    collection: CollectionFlow
    allotment: AllotmentFlow
    backup: BackupFlow
    preferences: PreferencesFlow
    reports: ReportFlow


def create_app_components(
    settings: Optional[Settings] = None,
    adapter: Optional[KeyValueAdapter] = None,
    store: Optional[LedgerStore] = None,
) -> LedgerApp:
    """
    Factory function to create all application components.

    Args:
        settings: Root settings; defaults to get_settings()
        adapter: Storage backend; defaults to the configured one
        store: A ready store (tests); overrides adapter

    Returns:
        LedgerApp with the store, the audit logger and every flow
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    ledger_settings = settings.ledger

    if store is None:
        store = LedgerStore(
            adapter or create_adapter(storage_settings),
            default_upi_id=ledger_settings.collection_vpa,
            default_whatsapp_web=ledger_settings.whatsapp_use_web,
        )

    audit_logger = AuditLogger()
    shared = dict(store=store, audit_logger=audit_logger, settings=ledger_settings)

    return LedgerApp(
        store=store,
        audit_logger=audit_logger,
        groups=GroupFlow(**shared),
        enrollment=EnrollmentFlow(**shared),
        collection=CollectionFlow(**shared),
        allotment=AllotmentFlow(**shared),
        backup=BackupFlow(**shared, backup_dir=storage_settings.backup_dir),
        preferences=PreferencesFlow(**shared),
        reports=ReportFlow(**shared),
    )
