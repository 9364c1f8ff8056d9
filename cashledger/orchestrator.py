"""
Ledger Service

Ties the record store, the input validator and the ledger engine together
and defines the user-facing operations:
1. Add / edit / delete a transaction (validate → mutate a copy → write)
2. Recompute views (read → filter → aggregate → project)
3. Reports and export

Every operation takes the active identity as an explicit argument and
refuses to run without one. Mutations are committed only when the store
write succeeds; the service keeps no cached state, so the next recompute
always sees exactly what the store holds.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from cashledger.config import LedgerSettings, Settings, get_settings
from cashledger.errors import (
    NotFoundError,
    PersistenceError,
    PreconditionError,
    ValidationError,
)
from cashledger.events import LedgerEventLogger, configure_logging, create_correlation_id
from cashledger.ledger import compute_views, period_records, to_table
from cashledger.ledger.export import build_export
from cashledger.models.transaction import (
    Identity,
    PartitionKey,
    Timestamp,
    Transaction,
    ValidationIssue,
    ViewFilter,
)
from cashledger.models.views import (
    ExportDocument,
    LedgerViews,
    ReportTable,
    ReportType,
)
from cashledger.services.session import SessionProvider
from cashledger.services.storage import (
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStoreInterface,
)
from cashledger.validation import TransactionValidator


Clock = Callable[[], datetime]

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerService:
    """
    Orchestrates ledger operations for one record store.

    Flow of a mutation:
    1. Check identity (PreconditionError)
    2. Validate input (ValidationError)
    3. Read the partition and locate the record (NotFoundError)
    4. Build the new collection as a copy
    5. Write it back (PersistenceError: nothing committed)
    """

    def __init__(
        self,
        record_store: RecordStoreInterface,
        validator: Optional[TransactionValidator] = None,
        event_logger: Optional[LedgerEventLogger] = None,
        settings: Optional[LedgerSettings] = None,
        namespace: str = "cms_tx_",
        clock: Optional[Clock] = None,
    ):
        self._store = record_store
        self._settings = settings or get_settings().ledger
        self._validator = validator or TransactionValidator(self._settings)
        self._events = event_logger or LedgerEventLogger()
        self._namespace = namespace
        self._clock = clock or _utc_now
        self._tz = self._settings.tzinfo

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def partition_for(self, identity: Identity) -> PartitionKey:
        return PartitionKey.for_identity(identity, namespace=self._namespace)

    def now(self) -> Timestamp:
        return Timestamp.from_datetime(self._clock(), self._tz)

    def _require_identity(
        self,
        identity: Optional[Identity],
        operation: str,
        correlation_id: Optional[UUID],
    ) -> Identity:
        if identity is None:
            self._events.log_precondition_failed(operation, correlation_id)
            raise PreconditionError(f"{operation} requires an active identity")
        return identity

    def _validate(
        self,
        operation: str,
        partition: PartitionKey,
        category: Any,
        amount: Union[Decimal, int, float, str, None],
        note: Optional[str],
        correlation_id: Optional[UUID],
    ):
        try:
            return self._validator.validate(category, amount, note)
        except ValidationError as e:
            self._events.log_validation_failed(
                operation=operation,
                issues=[issue.model_dump() for issue in e.issues],
                partition=partition.storage_key,
                correlation_id=correlation_id,
            )
            raise

    async def _read(self, partition: PartitionKey) -> list[Transaction]:
        try:
            return await self._store.read_all(partition)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to read {partition.storage_key}: {e}") from e

    async def _commit(
        self,
        partition: PartitionKey,
        records: list[Transaction],
        operation: str,
        correlation_id: Optional[UUID],
    ) -> None:
        """Write the new collection; raise PersistenceError unless it was stored."""
        try:
            written = await self._store.write_all(partition, records)
        except PersistenceError as e:
            self._events.log_save_failed(partition.storage_key, operation, str(e), correlation_id)
            raise
        except Exception as e:
            self._events.log_save_failed(partition.storage_key, operation, str(e), correlation_id)
            raise PersistenceError(f"{operation} was not saved: {e}") from e

        if not written:
            message = f"{operation} was not saved: the store rejected the write"
            self._events.log_save_failed(partition.storage_key, operation, message, correlation_id)
            raise PersistenceError(message)

    @staticmethod
    def _index_of(records: list[Transaction], transaction_id: str) -> int:
        for idx, tx in enumerate(records):
            if tx.id == transaction_id:
                return idx
        return -1

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def list_transactions(self, identity: Optional[Identity]) -> list[Transaction]:
        """All records of the identity, in insertion order."""
        identity = self._require_identity(identity, "list_transactions", None)
        return await self._read(self.partition_for(identity))

    async def get_transaction(
        self,
        identity: Optional[Identity],
        transaction_id: str,
    ) -> Transaction:
        identity = self._require_identity(identity, "get_transaction", None)
        records = await self._read(self.partition_for(identity))
        idx = self._index_of(records, transaction_id)
        if idx == -1:
            raise NotFoundError(transaction_id)
        return records[idx]

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    async def add_transaction(
        self,
        identity: Optional[Identity],
        category: Any,
        amount: Union[Decimal, int, float, str, None],
        note: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Record a new transaction attributed to the current date.

        Returns:
            The stored transaction

        Raises:
            PreconditionError: No identity
            ValidationError: Bad category, amount or note
            PersistenceError: The store write failed; nothing was added
        """
        correlation_id = correlation_id or create_correlation_id()
        identity = self._require_identity(identity, "add_transaction", correlation_id)
        partition = self.partition_for(identity)
        category, amount, note = self._validate(
            "add_transaction", partition, category, amount, note, correlation_id
        )

        tx = Transaction.new(
            category=category,
            amount=amount,
            note=note,
            created_at=self.now(),
            created_by=identity.display_name,
            id_prefix=self._settings.id_prefix,
        )
        records = await self._read(partition)
        await self._commit(partition, records + [tx], "add_transaction", correlation_id)

        self._events.log_transaction_added(
            partition=partition.storage_key,
            transaction_id=tx.id,
            category=tx.category.value,
            amount=str(tx.amount),
            correlation_id=correlation_id,
        )
        return tx

    async def edit_transaction(
        self,
        identity: Optional[Identity],
        transaction_id: str,
        category: Any,
        amount: Union[Decimal, int, float, str, None],
        note: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Replace category, amount and note of an existing transaction.

        The attribution date and creation metadata are kept; the single
        edited_at/edited_by slot is overwritten.

        Raises:
            PreconditionError: No identity
            ValidationError: Bad category, amount or note
            NotFoundError: No transaction with that id
            PersistenceError: The store write failed; the edit was not applied
        """
        correlation_id = correlation_id or create_correlation_id()
        identity = self._require_identity(identity, "edit_transaction", correlation_id)
        partition = self.partition_for(identity)
        category, amount, note = self._validate(
            "edit_transaction", partition, category, amount, note, correlation_id
        )

        records = await self._read(partition)
        idx = self._index_of(records, transaction_id)
        if idx == -1:
            self._events.log_not_found(
                partition.storage_key, transaction_id, "edit_transaction", correlation_id
            )
            raise NotFoundError(transaction_id)

        original = records[idx]
        edited = original.with_edit(
            category=category,
            amount=amount,
            note=note,
            edited_at=self.now(),
            edited_by=identity.display_name,
        )
        updated = list(records)
        updated[idx] = edited
        await self._commit(partition, updated, "edit_transaction", correlation_id)

        changed = [
            name for name in ("category", "amount", "note")
            if getattr(original, name) != getattr(edited, name)
        ]
        self._events.log_transaction_edited(
            partition.storage_key, transaction_id, changed, correlation_id
        )
        return edited

    async def delete_transaction(
        self,
        identity: Optional[Identity],
        transaction_id: str,
        confirmed: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Remove a transaction. The caller must pass confirmed=True.

        Returns:
            The removed transaction

        Raises:
            PreconditionError: No identity
            ValidationError: Deletion was not confirmed
            NotFoundError: No transaction with that id
            PersistenceError: The store write failed; nothing was removed
        """
        correlation_id = correlation_id or create_correlation_id()
        identity = self._require_identity(identity, "delete_transaction", correlation_id)
        partition = self.partition_for(identity)

        if not confirmed:
            issue = ValidationIssue(
                field="confirmed",
                issue_type="unconfirmed",
                message="Deletion must be confirmed",
            )
            self._events.log_validation_failed(
                "delete_transaction", [issue.model_dump()], partition.storage_key, correlation_id
            )
            raise ValidationError(issue.message, [issue])

        records = await self._read(partition)
        idx = self._index_of(records, transaction_id)
        if idx == -1:
            self._events.log_not_found(
                partition.storage_key, transaction_id, "delete_transaction", correlation_id
            )
            raise NotFoundError(transaction_id)

        removed = records[idx]
        remaining = records[:idx] + records[idx + 1:]
        await self._commit(partition, remaining, "delete_transaction", correlation_id)

        self._events.log_transaction_deleted(
            partition.storage_key, transaction_id, correlation_id
        )
        return removed

    # ------------------------------------------------------------------
    # derived views
    # ------------------------------------------------------------------

    async def recompute_views(
        self,
        identity: Optional[Identity],
        view_filter: Optional[ViewFilter] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerViews:
        """
        Re-read the partition and derive every view from scratch.

        Call after every add/edit/delete and whenever the filter changes.

        Raises:
            PreconditionError: No identity
            ValidationError: The filter period is inverted
        """
        identity = self._require_identity(identity, "recompute_views", correlation_id)
        partition = self.partition_for(identity)
        view_filter = view_filter or ViewFilter()

        records = await self._read(partition)
        try:
            views = compute_views(
                identity_key=identity.key,
                records=records,
                view_filter=view_filter,
                tz=self._tz,
                now=self._clock(),
            )
        except ValidationError as e:
            self._events.log_validation_failed(
                "recompute_views",
                [issue.model_dump() for issue in e.issues],
                partition.storage_key,
                correlation_id,
            )
            raise

        self._events.log_views_recomputed(
            partition=partition.storage_key,
            record_count=len(records),
            period_count=views.statistics.count,
            displayed_count=sum(len(day.transactions) for day in views.transaction_days),
            correlation_id=correlation_id,
        )
        return views

    async def build_report(
        self,
        identity: Optional[Identity],
        report_type: ReportType,
        view_filter: Optional[ViewFilter] = None,
    ) -> ReportTable:
        """
        Render one of the printable reports for the filter's period.

        Category and search selections of `view_filter` are ignored.
        """
        identity = self._require_identity(identity, "build_report", None)
        view_filter = view_filter or ViewFilter()
        records = await self._read(self.partition_for(identity))
        return to_table(
            report_type,
            period_records(records, view_filter, self._tz),
            generated_at=self.now(),
            identity=identity,
            view_filter=view_filter,
            currency_symbol=self._settings.currency_symbol,
        )

    async def export(
        self,
        identity: Optional[Identity],
        correlation_id: Optional[UUID] = None,
    ) -> ExportDocument:
        """Snapshot every record of the identity."""
        identity = self._require_identity(identity, "export", correlation_id)
        partition = self.partition_for(identity)
        records = await self._read(partition)
        document = build_export(records, exported_at=self.now(), identity=identity)
        self._events.log_export_created(partition.storage_key, len(records), correlation_id)
        return document


def create_record_store(settings: Settings) -> RecordStoreInterface:
    """
    Build the configured record store.

    Falls back to the JSON file store when Google Sheets is selected but
    cannot be configured.
    """
    storage = settings.storage
    if storage.backend == "memory":
        return InMemoryRecordStore()
    if storage.backend == "google_sheets":
        try:
            return GoogleSheetsRecordStore()
        except Exception as e:
            logger.warning(
                "storage_fallback",
                backend="google_sheets",
                fallback="json",
                error=str(e),
            )
    return JsonFileRecordStore(storage.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    record_store: Optional[RecordStoreInterface] = None,
) -> tuple[LedgerService, SessionProvider]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to the cached environment settings
        record_store: Store override (tests pass an InMemoryRecordStore)

    Returns:
        (ledger_service, session_provider)
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    service = LedgerService(
        record_store=record_store or create_record_store(settings),
        settings=settings.ledger,
        namespace=settings.storage.namespace,
    )
    return service, SessionProvider()
