"""
Content provider for pet records.

PetProvider resolves content URIs to the pets collection or to a single
pet, validates write payloads, forwards the request to the backing store
and publishes a change notification after every mutation that touched a
row.
"""

from typing import Any, Callable, Mapping, Sequence

from pet_provider.contract import (
    COLUMN_ID,
    CONTENT_ITEM_TYPE,
    CONTENT_LIST_TYPE,
    TABLE_NAME,
)
from pet_provider.core.addressing import (
    PET_URI_MATCHER,
    Address,
    CollectionAddress,
    ItemAddress,
    UriMatcher,
    with_appended_id,
)
from pet_provider.core.errors import UnrecognizedAddress, UnsupportedOperation
from pet_provider.core.models import PetFields
from pet_provider.core.rules import PetRuleEngine
from pet_provider.core.validators import ValidationError
from pet_provider.notifications import ChangeBus
from pet_provider.observability import metrics
from pet_provider.observability.logger import get_logger, log_operation
from pet_provider.store import BaseStore

from .result_set import ResultSet

logger = get_logger(__name__)

Values = Mapping[str, Any] | PetFields | None


def _shape(address: Address) -> str:
    return "item" if isinstance(address, ItemAddress) else "collection"


def _id_selection(address: ItemAddress) -> tuple[str, list[Any]]:
    return f"{COLUMN_ID} = ?", [address.id]


def _default_store() -> BaseStore:
    from pet_provider.config import load_settings
    from pet_provider.store import create_store

    return create_store(load_settings())


class PetProvider:
    """
    Gateway between URI-addressed requests and the pets table.

    Supported URIs:
        content://com.example.android.pets/pets       every pet
        content://com.example.android.pets/pets/<id>  the pet with that id

    Every operation raises UnrecognizedAddress for any other URI. Writes are
    checked by PetRuleEngine before the store is touched.

    Insert failures reported by the store are soft: insert() logs the
    failure and returns None. Store failures on query, update and delete
    propagate as StoreFailure.
    """

    def __init__(
        self,
        store_factory: Callable[[], BaseStore] | None = None,
        notifier: ChangeBus | None = None,
        rules: PetRuleEngine | None = None,
        matcher: UriMatcher = PET_URI_MATCHER,
    ):
        """
        Initialize the provider. Nothing is opened until on_create().

        Args:
            store_factory: Builds the backing store; defaults to the store
                           selected by environment settings
            notifier: Change bus; when omitted the provider creates one and
                      runs its dispatcher thread between on_create() and
                      shutdown()
            rules: Write rules; defaults to the standard pet rules
            matcher: URI matcher for the pets authority
        """
        self._store_factory = store_factory or _default_store
        self._owns_notifier = notifier is None
        self.notifier = notifier if notifier is not None else ChangeBus(matcher)
        self.rules = rules or PetRuleEngine()
        self.matcher = matcher
        self._store: BaseStore | None = None

    def on_create(self) -> bool:
        """Bind the backing store handle. The store itself connects on first use."""
        if self._store is None:
            self._store = self._store_factory()
            if self._owns_notifier:
                self.notifier.start()
            logger.info("Pet provider created", extra={"store": type(self._store).__name__})
        return True

    @property
    def store(self) -> BaseStore:
        if self._store is None:
            self.on_create()
        return self._store

    def shutdown(self) -> None:
        """Close the store and stop a provider-owned change bus."""
        if self._owns_notifier:
            self.notifier.stop()
        if self._store is not None:
            self._store.close()
            self._store = None

    def __enter__(self):
        self.on_create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # =======================
    # DISPATCH HELPERS
    # =======================

    def _resolve(self, uri: str, operation: str) -> Address:
        try:
            return self.matcher.resolve(uri, operation)
        except UnrecognizedAddress:
            metrics.increment_counter(
                metrics.gateway_operations_total,
                operation=operation, shape="unknown", status="rejected",
            )
            logger.warning("Unknown URI", extra={"operation": operation, "uri": uri})
            raise

    def _record(self, operation: str, address: Address, status: str = "success") -> None:
        metrics.increment_counter(
            metrics.gateway_operations_total,
            operation=operation, shape=_shape(address), status=status,
        )

    def _validate(self, check: Callable[[PetFields], None], values: Values,
                  operation: str, address: Address) -> PetFields:
        try:
            fields = PetFields.from_values(values)
            check(fields)
        except ValidationError as e:
            metrics.increment_counter(
                metrics.validation_failures_total,
                operation=operation, field_name=e.field_name,
            )
            self._record(operation, address, "rejected")
            logger.warning(
                "Rejected write payload",
                extra={"operation": operation, "uri": address.uri,
                       "field_name": e.field_name, "rule": e.rule_name},
            )
            raise
        return fields

    def _notify_change(self, address: Address) -> None:
        self.notifier.notify(address)

    # =======================
    # OPERATIONS
    # =======================

    def query(
        self,
        uri: str,
        projection: Sequence[str] | None = None,
        selection: str | None = None,
        selection_args: Sequence[Any] | None = None,
        sort_order: str | None = None,
    ) -> ResultSet:
        """
        Query pets.

        Args:
            uri: Collection or item URI
            projection: Columns to return; all columns when empty
            selection: WHERE fragment with "?" placeholders (ignored for item URIs)
            selection_args: Values for the placeholders (ignored for item URIs)
            sort_order: ORDER BY fragment

        Returns:
            ResultSet registered for change notification on uri

        Raises:
            UnrecognizedAddress: If uri is not a pets URI
            StoreFailure: If the store rejects the query
        """
        address = self._resolve(uri, "query")

        if isinstance(address, CollectionAddress):
            pass
        elif isinstance(address, ItemAddress):
            selection, selection_args = _id_selection(address)
        else:
            raise UnrecognizedAddress(uri, "query")

        with metrics.track_duration(metrics.gateway_operation_duration_seconds, operation="query"):
            rows = self.store.query(TABLE_NAME, projection, selection, selection_args, sort_order)

        result = ResultSet(rows, address)
        result.attach(self.notifier.register(address, result))
        self._record("query", address)
        return result

    def get_type(self, uri: str) -> str:
        """
        Return the type token for a URI.

        Raises:
            UnrecognizedAddress: If uri is not a pets URI
        """
        address = self._resolve(uri, "get_type")

        if isinstance(address, CollectionAddress):
            return CONTENT_LIST_TYPE
        elif isinstance(address, ItemAddress):
            return CONTENT_ITEM_TYPE
        raise UnrecognizedAddress(uri, "get_type")

    def insert(self, uri: str, values: Values) -> str | None:
        """
        Insert a pet.

        Args:
            uri: The collection URI
            values: Column values; name and gender are required

        Returns:
            The new pet's item URI, or None if the store refused the row

        Raises:
            UnrecognizedAddress: If uri is not a pets URI
            UnsupportedOperation: If uri is an item URI
            ValidationError: If values break a field rule
        """
        address = self._resolve(uri, "insert")

        if isinstance(address, ItemAddress):
            self._record("insert", address, "rejected")
            raise UnsupportedOperation("insertion", uri)
        elif not isinstance(address, CollectionAddress):
            raise UnrecognizedAddress(uri, "insert")

        fields = self._validate(self.rules.check_insert, values, "insert", address)

        with log_operation("Inserting pet", logger=logger, uri=uri):
            with metrics.track_duration(metrics.gateway_operation_duration_seconds, operation="insert"):
                row_id = self.store.insert(TABLE_NAME, fields.present())

        if row_id is None or row_id < 0:
            metrics.increment_counter(metrics.insert_failures_total)
            self._record("insert", address, "error")
            logger.error("Insertion failed", extra={"uri": uri})
            return None

        self._notify_change(address)
        self._record("insert", address)
        return with_appended_id(uri, row_id)

    def update(
        self,
        uri: str,
        values: Values,
        selection: str | None = None,
        selection_args: Sequence[Any] | None = None,
    ) -> int:
        """
        Update pets.

        Only the supplied fields are validated and written. An empty payload
        returns 0 without touching the store.

        Args:
            uri: Collection or item URI
            values: Column values to set
            selection: WHERE fragment (ignored for item URIs)
            selection_args: Values for the placeholders (ignored for item URIs)

        Returns:
            Number of rows updated

        Raises:
            UnrecognizedAddress: If uri is not a pets URI
            ValidationError: If a supplied value breaks a field rule
            StoreFailure: If the store rejects the update
        """
        address = self._resolve(uri, "update")

        if isinstance(address, CollectionAddress):
            pass
        elif isinstance(address, ItemAddress):
            selection, selection_args = _id_selection(address)
        else:
            raise UnrecognizedAddress(uri, "update")

        # Absent fields are not checked, so an empty payload passes untouched
        fields = self._validate(self.rules.check_update, values, "update", address)
        if fields.is_empty():
            return 0

        with log_operation("Updating pets", logger=logger, uri=uri):
            with metrics.track_duration(metrics.gateway_operation_duration_seconds, operation="update"):
                count = self.store.update(TABLE_NAME, fields.present(), selection, selection_args)

        if count != 0:
            self._notify_change(address)
        self._record("update", address)
        return count

    def delete(
        self,
        uri: str,
        selection: str | None = None,
        selection_args: Sequence[Any] | None = None,
    ) -> int:
        """
        Delete pets.

        Args:
            uri: Collection or item URI
            selection: WHERE fragment; None deletes every row (ignored for item URIs)
            selection_args: Values for the placeholders (ignored for item URIs)

        Returns:
            Number of rows deleted

        Raises:
            UnrecognizedAddress: If uri is not a pets URI
            StoreFailure: If the store rejects the delete
        """
        address = self._resolve(uri, "delete")

        if isinstance(address, CollectionAddress):
            pass
        elif isinstance(address, ItemAddress):
            selection, selection_args = _id_selection(address)
        else:
            raise UnrecognizedAddress(uri, "delete")

        with log_operation("Deleting pets", logger=logger, uri=uri):
            with metrics.track_duration(metrics.gateway_operation_duration_seconds, operation="delete"):
                count = self.store.delete(TABLE_NAME, selection, selection_args)

        if count != 0:
            self._notify_change(address)
        self._record("delete", address)
        return count
