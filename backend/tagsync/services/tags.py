"""Tag lifecycle — create, import, update, soft and hard delete.

One ``TagService`` serves both owned and shared tags; the namespace picks
the backing table and everything else is identical.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError
from sqlmodel import Session, SQLModel

from tagsync.models.tag import API_FIELDS, FieldChanges, SharedTag, Tag, TagImport
from tagsync.services.document_store import Document, DocumentCollection
from tagsync.services.tag_writer import (
    WriteOutcome,
    WriteResult,
    apply_update,
    live_record_filter,
    now_ms,
)

logger = logging.getLogger(__name__)


class TagNamespace(str, enum.Enum):
    OWNED = "owned"
    SHARED = "shared"

    @property
    def model(self) -> type[SQLModel]:
        return Tag if self is TagNamespace.OWNED else SharedTag


class TagService:
    def __init__(self, session: Session, namespace: TagNamespace = TagNamespace.OWNED) -> None:
        self.namespace = namespace
        self.collection = DocumentCollection(session, namespace.model)

    def create(
        self,
        device_id: str,
        local_id: str,
        user_id: str,
        text: str,
        enc_key: str,
        enc_config: str,
        create_ts: int,
        schema_version: int,
        tag_id: str | None = None,
    ) -> Document | None:
        """Insert a new tag. Its gate timestamp starts at ``create_ts``."""
        return self.collection.insert_one({
            "_id": tag_id,
            "dId": device_id,
            "lId": local_id,
            "userId": user_id,
            "tag": text,
            "encKey": enc_key,
            "encConfig": enc_config,
            "createTs": create_ts,
            "updateTs": create_ts,
            "schemaVersion": schema_version,
        })

    def bulk_import(self, records: Iterable[Mapping[str, Any]]) -> bool:
        """Insert backup records in order, stopping at the first that fails.

        A record fails when it does not validate as a ``TagImport`` or the
        store rejects it. Records inserted before the failure are kept. Every
        imported record is stamped with the server time as its updateTs.
        """
        imported = 0
        for record in records:
            try:
                fields = TagImport.model_validate(record).to_document()
            except ValidationError as exc:
                logger.warning(
                    "Import into %s stopped after %d record(s): record %r is invalid (%d error(s))",
                    self.collection.name, imported, record.get("_id"), exc.error_count(),
                )
                return False
            fields["updateTs"] = now_ms()
            if self.collection.insert_one(fields) is None:
                logger.warning(
                    "Import into %s stopped after %d record(s): record %r was rejected",
                    self.collection.name, imported, record.get("_id"),
                )
                return False
            imported += 1
        logger.info("Imported %d record(s) into %s", imported, self.collection.name)
        return True

    def get(self, user_id: str, tag_id: str) -> Document | None:
        return self.collection.find_one(live_record_filter(tag_id, user_id), API_FIELDS)

    def update(
        self,
        user_id: str,
        tag_id: str,
        changes: FieldChanges,
        update_ts: int | None = None,
    ) -> WriteResult:
        return apply_update(self.collection, tag_id, user_id, changes, update_ts)

    def update_details(
        self,
        user_id: str,
        tag_id: str,
        text: str,
        enc_key: str,
        enc_config: str,
        update_ts: int,
        schema_version: int,
    ) -> WriteResult:
        changes = FieldChanges(
            text=text,
            enc_key=enc_key,
            enc_config=enc_config,
            schema_version=schema_version,
        )
        return self.update(user_id, tag_id, changes, update_ts)

    def soft_delete(self, user_id: str, tag_id: str, delete_ts: int) -> WriteResult:
        # Not timestamp-gated: a tombstone wins over any content edit.
        result = self.collection.update_one(
            live_record_filter(tag_id, user_id),
            {
                "tag": "",
                "deleted": True,
                "encKey": "",
                "encConfig": "",
                "deleteTs": delete_ts,
            },
        )
        if result.acknowledged and result.modified_count > 0:
            logger.info("Soft-deleted %s/%s", self.collection.name, tag_id)
            return WriteResult(WriteOutcome.APPLIED, tag_id, delete_ts)
        return WriteResult(WriteOutcome.NOT_FOUND, tag_id, delete_ts)

    def hard_delete(self, user_id: str, tag_id: str) -> bool:
        result = self.collection.delete_one({"_id": tag_id, "userId": user_id})
        if result.deleted_count:
            logger.info("Hard-deleted %s/%s", self.collection.name, tag_id)
        return bool(result.deleted_count)

    def hard_delete_all(self, user_id: str) -> bool:
        result = self.collection.delete_many({"userId": user_id})
        logger.info(
            "Hard-deleted %d record(s) from %s for user %s",
            result.deleted_count, self.collection.name, user_id,
        )
        return bool(result.deleted_count)
