"""List view and editor dialog for master records.

A ``RecordList`` owns its own copy of one backend collection. Successful
creates, updates and deletes are applied to that copy directly, so the list
stays consistent with the backend without a refetch. Failures are logged,
surfaced through the view's notifier and re-raised to the caller; the list
is left as it was.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from backoffice.core.errors import BackofficeError, NotFoundError, ValidationError
from backoffice.models.base import RecordId
from backoffice.models.records import Customer, Item, MasterRecord, Supplier
from backoffice.services.backend_client import BackofficeClient, Resource
from backoffice.services.notifications import Notifier

RecordT = TypeVar("RecordT", bound=MasterRecord)

RECORD_MODELS: Dict[Resource, Type[MasterRecord]] = {
    Resource.ITEMS: Item,
    Resource.SUPPLIERS: Supplier,
    Resource.CUSTOMERS: Customer,
}

# Label used in user-facing messages
RECORD_LABELS = {
    Resource.ITEMS: "item",
    Resource.SUPPLIERS: "supplier",
    Resource.CUSTOMERS: "customer",
}


def validate_record(record: MasterRecord) -> None:
    """Check required fields before anything is sent to the backend.

    Raises:
        ValidationError: Naming the first missing field
    """
    missing = record.missing_fields()
    if missing:
        raise ValidationError(f"{missing[0]} is required", field=missing[0])


def build_record(model: Type[RecordT], data: Dict[str, Any]) -> RecordT:
    """Validate raw form or backend data into a record."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        raise ValidationError(f"invalid {field}: {error['msg']}", field=field) from e


class RecordEditor(Generic[RecordT]):
    """Edit dialog holding a private working copy of one record.

    Changes made here are invisible to the list until ``save`` succeeds.
    """

    def __init__(self, owner: "RecordList[RecordT]", record: RecordT):
        self._owner = owner
        self.original = record
        self.draft: RecordT = record.model_copy(deep=True)
        self.is_open = True

    @property
    def record_id(self) -> Optional[RecordId]:
        return self.original.id

    @property
    def is_dirty(self) -> bool:
        return self.draft.model_dump() != self.original.model_dump()

    def set_field(self, field: str, value: Any) -> RecordT:
        """Change one field of the working copy.

        Numeric fields accept blank input as zero.

        Raises:
            ValidationError: If the value cannot be stored in the field
        """
        if not self.is_open:
            raise ValidationError("editor is closed")
        if field not in type(self.draft).model_fields:
            raise ValidationError(f"Unknown field: {field}", field=field)
        try:
            setattr(self.draft, field, value)
        except PydanticValidationError as e:
            raise ValidationError(
                f"invalid {field}: {e.errors()[0]['msg']}", field=field
            ) from e
        return self.draft

    async def save(self) -> RecordT:
        """Commit the working copy through the list and close the dialog."""
        saved = await self._owner.update(self.record_id, self.draft)
        self.is_open = False
        return saved

    def discard(self) -> None:
        """Close the dialog, dropping the working copy."""
        self.draft = self.original.model_copy(deep=True)
        self.is_open = False


class RecordList(Generic[RecordT]):
    """In-memory list view of one master-record collection."""

    def __init__(
        self,
        client: BackofficeClient,
        resource: Resource,
        notifier: Optional[Notifier] = None,
    ):
        if resource not in RECORD_MODELS:
            raise ValueError(f"{resource.value} is not a master-record collection")
        self.client = client
        self.resource = resource
        self.model: Type[RecordT] = RECORD_MODELS[resource]  # type: ignore[assignment]
        self.notifier = notifier or Notifier()
        self.label = RECORD_LABELS[resource]
        self._rows: List[RecordT] = []

    def __len__(self) -> int:
        return len(self._rows)

    def list(self) -> List[RecordT]:
        """Rows currently held by the view."""
        return list(self._rows)

    def find(self, record_id: RecordId) -> RecordT:
        """Row with the given id.

        Raises:
            NotFoundError: If no row carries that id
        """
        for row in self._rows:
            if str(row.id) == str(record_id):
                return row
        raise NotFoundError(f"No {self.label} with id {record_id} in the list")

    def _index_of(self, record_id: RecordId) -> Optional[int]:
        for index, row in enumerate(self._rows):
            if str(row.id) == str(record_id):
                return index
        return None

    async def load(self) -> List[RecordT]:
        """Fetch the collection and replace the rows."""
        try:
            data = await self.client.list(self.resource)
            rows = [build_record(self.model, row) for row in data]
        except BackofficeError as e:
            self.notifier.error(f"Failed to load {self.resource.value}", e)
            raise
        self._rows = rows
        self.notifier.info(f"Loaded {len(rows)} {self.resource.value}")
        return self.list()

    async def create(self, data: Dict[str, Any]) -> RecordT:
        """Submit a new record and append what the backend returns."""
        try:
            record = build_record(self.model, data)
            validate_record(record)
            created = await self.client.create(self.resource, record.to_payload())
            if isinstance(created, dict):
                # Responses may be the stored record or just {"id": ..., "message": ...}
                known = {
                    key: value for key, value in created.items()
                    if key in self.model.model_fields
                }
                record = build_record(self.model, {**record.to_payload(), **known})
        except BackofficeError as e:
            self.notifier.error(f"Failed to create {self.label}", e)
            raise
        self._rows.append(record)
        self.notifier.success(f"{self.label.capitalize()} created successfully")
        return record

    def edit(self, record_id: RecordId) -> RecordEditor[RecordT]:
        """Open an editor dialog on a working copy of one row."""
        return RecordEditor(self, self.find(record_id))

    async def update(self, record_id: RecordId, patch: Any) -> RecordT:
        """Replace a record on the backend, then in the list.

        Args:
            record_id: Id of the row to replace
            patch: A record, or a dict of fields to change. Fields left out
                keep their stored values; a row the list does not hold is
                fetched first.

        Raises:
            ValidationError: If required fields are missing or a value is invalid
        """
        index = self._index_of(record_id)
        try:
            if isinstance(patch, MasterRecord):
                fields = patch.model_dump()
            elif index is not None:
                fields = {**self._rows[index].model_dump(), **dict(patch)}
            else:
                # PUT replaces the whole record
                current = await self.client.get(self.resource, record_id)
                fields = {**build_record(self.model, current).model_dump(), **dict(patch)}
            if index is not None:
                fields["id"] = self._rows[index].id
            else:
                fields["id"] = fields.get("id") or record_id
            record = build_record(self.model, fields)
            validate_record(record)
            await self.client.update(self.resource, record_id, record.to_payload())
        except BackofficeError as e:
            self.notifier.error(f"Failed to update {self.label}", e)
            raise
        if index is not None:
            self._rows[index] = record
        self.notifier.success(f"{self.label.capitalize()} updated")
        return record

    async def remove(self, record_id: RecordId) -> None:
        """Delete a record on the backend, then drop its row.

        Raises:
            ConflictError: If the backend refuses because the record is
                referenced elsewhere; the row is kept
        """
        try:
            await self.client.delete(self.resource, record_id)
        except BackofficeError as e:
            self.notifier.error(f"Failed to delete {self.label}", e)
            raise
        index = self._index_of(record_id)
        if index is not None:
            del self._rows[index]
        self.notifier.success(f"{self.label.capitalize()} deleted")
