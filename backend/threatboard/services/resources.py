"""
Generic resource controller.

One ``ResourceController`` serves each entity type. The entity-specific parts
(validation models, filter fields, unique fields, references, timestamp hooks)
come from a ``ResourceDefinition``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ApiError, NotFoundError, StorageError, ValidationError
from ..models.common import RecordModel, UpdateModel, describe_validation_error
from ..models.compat import canonicalize
from .query_filter import (
    FilterSpec,
    PageMeta,
    Predicate,
    apply_query,
    paginate,
    parse_limit,
    parse_offset,
)
from .store import ResourceStore

logger = logging.getLogger(__name__)

CreateHook = Callable[[dict, datetime], dict]
UpdateHook = Callable[[dict, dict, datetime], dict]


@dataclass(frozen=True)
class ResourceDefinition:
    """
    Static description of one entity type.

    Attributes:
        name: Collection name and URL segment (e.g. "actors")
        label: Human label used in messages (e.g. "Threat actor")
        plural: Human plural used in messages (e.g. "threat actors")
        create_model: Validation model for POST bodies
        update_model: Whitelist model for PUT bodies
        filters: Query filter configuration for the list endpoint
        unique_fields: Fields whose values must be unique (case-insensitive)
        references: Field -> referenced collection, joined on single reads
        on_create: Hook stamping server-side fields on new records
        on_update: Hook receiving (existing, changes, now), returning changes
    """
    name: str
    label: str
    plural: str
    create_model: type[RecordModel]
    update_model: type[UpdateModel]
    filters: FilterSpec
    unique_fields: tuple[str, ...] = ()
    references: Mapping[str, str] = field(default_factory=dict)
    on_create: Optional[CreateHook] = None
    on_update: Optional[UpdateHook] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResourceController:
    """CRUD and list operations for one entity type over an explicit store handle."""

    def __init__(
        self,
        definition: ResourceDefinition,
        store: ResourceStore,
        registry: Optional["ResourceRegistry"] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.definition = definition
        self.store = store
        self.registry = registry
        self._clock = clock

    @property
    def name(self) -> str:
        return self.definition.name

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        """Translate store failures into a StorageError with a generic message."""
        try:
            yield
        except StorageError as e:
            logger.error(f"Storage failure while trying to {action}: {e}")
            raise StorageError(f"Failed to {action}") from e
        except ApiError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error while trying to {action}")
            raise StorageError(f"Failed to {action}") from e

    def _not_found(self, raw_id: Any) -> NotFoundError:
        return NotFoundError(f"{self.definition.label} with ID {raw_id} not found")

    def _canonical(self, record: dict) -> dict:
        return canonicalize(self.definition.name, record)

    def _validate(self, model: type[RecordModel], payload: Any) -> RecordModel:
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            return model.model_validate(self._canonical(payload))
        except PydanticValidationError as e:
            raise ValidationError(describe_validation_error(e)) from e

    def _check_unique(self, fields: dict, exclude_id: Any = None) -> None:
        if not self.definition.unique_fields:
            return
        records = [self._canonical(r) for r in self.store.list()]
        for name in self.definition.unique_fields:
            value = fields.get(name)
            if value is None:
                continue
            wanted = str(value).lower()
            for record in records:
                if record.get("id") == exclude_id:
                    continue
                if str(record.get(name, "")).lower() == wanted:
                    raise ValidationError(
                        f"{self.definition.label} with {name} '{value}' already exists"
                    )

    def all(self) -> list[dict]:
        """The whole collection in canonical form."""
        with self._storage_errors(f"retrieve {self.definition.plural}"):
            return [self._canonical(r) for r in self.store.list()]

    def list(self, params: Mapping[str, Any]) -> tuple[list[dict], PageMeta]:
        """Filter and paginate the collection according to query parameters."""
        records = self.all()
        return apply_query(records, self.definition.filters, params)

    def select(
        self, predicate: Predicate, params: Mapping[str, Any]
    ) -> tuple[list[dict], PageMeta]:
        """Paginate the records matching a fixed predicate, such as a saved view."""
        records = [r for r in self.all() if predicate(r)]
        limit = parse_limit(params.get("limit"), self.definition.filters.default_limit)
        offset = parse_offset(params.get("offset"))
        return paginate(records, limit, offset)

    def get(self, raw_id: Any, populate: bool = True) -> dict:
        record_id = self.store.parse_id(raw_id)
        if record_id is None:
            raise self._not_found(raw_id)
        with self._storage_errors(f"retrieve {self.definition.label.lower()}"):
            record = self.store.get(record_id)
        if record is None:
            raise self._not_found(raw_id)
        record = self._canonical(record)
        if populate and self.store.populates_references and self.registry is not None:
            record = self.registry.populate(self.definition, record)
        return record

    def create(self, payload: Any) -> dict:
        model = self._validate(self.definition.create_model, payload)
        fields = model.model_dump(mode="json")
        with self._storage_errors(f"create {self.definition.label.lower()}"):
            self._check_unique(fields)
            if self.definition.on_create is not None:
                fields = self.definition.on_create(fields, self._clock())
            record = self.store.create(fields)
        logger.info(f"Created {self.definition.name} record {record['id']}")
        return self._canonical(record)

    def update(self, raw_id: Any, payload: Any) -> dict:
        record_id = self.store.parse_id(raw_id)
        if record_id is None:
            raise self._not_found(raw_id)
        with self._storage_errors(f"update {self.definition.label.lower()}"):
            existing = self.store.get(record_id)
        if existing is None:
            raise self._not_found(raw_id)

        model = self._validate(self.definition.update_model, payload)
        changes = model.changes()
        with self._storage_errors(f"update {self.definition.label.lower()}"):
            self._check_unique(changes, exclude_id=record_id)
            if self.definition.on_update is not None:
                changes = self.definition.on_update(
                    self._canonical(existing), changes, self._clock()
                )
            updated = self.store.update(record_id, changes)
        if updated is None:
            raise self._not_found(raw_id)
        logger.info(f"Updated {self.definition.name} record {record_id}")
        return self._canonical(updated)

    def delete(self, raw_id: Any) -> None:
        record_id = self.store.parse_id(raw_id)
        if record_id is None:
            raise self._not_found(raw_id)
        with self._storage_errors(f"delete {self.definition.label.lower()}"):
            deleted = self.store.delete(record_id)
        if not deleted:
            raise self._not_found(raw_id)
        logger.info(f"Deleted {self.definition.name} record {record_id}")


class ResourceRegistry:
    """Holds the controller for every entity type plus the users store."""

    def __init__(self, users: ResourceStore):
        self.users = users
        self._controllers: dict[str, ResourceController] = {}

    def register(self, definition: ResourceDefinition, store: ResourceStore) -> ResourceController:
        controller = ResourceController(definition, store, registry=self)
        self._controllers[definition.name] = controller
        return controller

    def __getitem__(self, name: str) -> ResourceController:
        return self._controllers[name]

    def __contains__(self, name: str) -> bool:
        return name in self._controllers

    def __iter__(self):
        return iter(self._controllers.values())

    def _resolve(self, collection: str, value: Any) -> Any:
        if value is None or collection not in self._controllers:
            return value
        try:
            return self._controllers[collection].get(value, populate=False)
        except NotFoundError:
            return value

    def populate(self, definition: ResourceDefinition, record: dict) -> dict:
        """Replace reference ids with the referenced records where they exist."""
        out = dict(record)
        for field_name, collection in definition.references.items():
            value = out.get(field_name)
            if isinstance(value, list):
                out[field_name] = [self._resolve(collection, v) for v in value]
            else:
                out[field_name] = self._resolve(collection, value)
        return out
