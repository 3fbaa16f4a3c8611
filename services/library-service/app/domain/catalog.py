"""Generic CRUD service shared by plain catalog entities such as books."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from .contracts import RecordStore
from .errors import NotFoundError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")
DraftT = TypeVar("DraftT")


class CrudService(Generic[RecordT, DraftT]):
    """Validated passthrough to a ``RecordStore`` for one entity type."""

    def __init__(
        self,
        store: RecordStore[RecordT, DraftT],
        *,
        entity_name: str,
        validate: Callable[[DraftT], None],
    ) -> None:
        self._store = store
        self._entity_name = entity_name
        self._validate = validate

    def list(self) -> list[RecordT]:
        return self._store.list_all()

    def get(self, record_id: int) -> RecordT:
        record = self._store.get(record_id)
        if record is None:
            raise NotFoundError(f"{self._entity_name} not found with id: {record_id}")
        return record

    def create(self, draft: DraftT) -> RecordT:
        self._validate(draft)
        record = self._store.insert(draft)
        logger.info("%s created", self._entity_name)
        return record

    def update(self, record_id: int, draft: DraftT) -> RecordT:
        self._validate(draft)
        record = self._store.replace(record_id, draft)
        if record is None:
            raise NotFoundError(f"{self._entity_name} not found with id: {record_id}")
        logger.info("%s %s updated", self._entity_name, record_id)
        return record

    def delete(self, record_id: int) -> None:
        if not self._store.delete(record_id):
            raise NotFoundError(f"{self._entity_name} not found with id: {record_id}")
        logger.info("%s %s deleted", self._entity_name, record_id)
