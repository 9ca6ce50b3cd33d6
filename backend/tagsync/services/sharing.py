"""Shared tags — a recipient's copies of tags other users shared with them.

Every operation is scoped by the recipient's user id. A share is a copy:
later edits to the original or to the copy never reach the other side.
"""
from __future__ import annotations

import logging

from sqlmodel import Session

from tagsync.services.document_store import Document
from tagsync.services.tag_writer import WriteResult
from tagsync.services.tags import TagNamespace, TagService

logger = logging.getLogger(__name__)


class SharingService:
    def __init__(self, session: Session) -> None:
        self._owned = TagService(session, TagNamespace.OWNED)
        self._shared = TagService(session, TagNamespace.SHARED)

    def add_shared(
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
        return self._shared.create(
            device_id, local_id, user_id, text, enc_key, enc_config,
            create_ts, schema_version, tag_id=tag_id,
        )

    def share_tag(
        self,
        owner_user_id: str,
        tag_id: str,
        recipient_user_id: str,
        device_id: str,
        local_id: str,
        create_ts: int,
    ) -> Document | None:
        """Copy an owned tag into the recipient's shared set under a new id."""
        source = self._owned.get(owner_user_id, tag_id)
        if source is None:
            return None
        copy = self.add_shared(
            device_id,
            local_id,
            recipient_user_id,
            source["tag"],
            source["encKey"],
            source["encConfig"],
            create_ts,
            source["schemaVersion"],
        )
        if copy is not None:
            logger.info("Shared tag %s as %s with user %s", tag_id, copy["_id"], recipient_user_id)
        return copy

    def get_shared(self, user_id: str, tag_id: str) -> Document | None:
        return self._shared.get(user_id, tag_id)

    def update_shared_details(
        self,
        user_id: str,
        tag_id: str,
        text: str,
        enc_key: str,
        enc_config: str,
        update_ts: int,
        schema_version: int,
    ) -> WriteResult:
        return self._shared.update_details(
            user_id, tag_id, text, enc_key, enc_config, update_ts, schema_version
        )

    def soft_delete_shared(self, user_id: str, tag_id: str, delete_ts: int) -> WriteResult:
        return self._shared.soft_delete(user_id, tag_id, delete_ts)

    def hard_delete_shared(self, user_id: str, tag_id: str) -> bool:
        return self._shared.hard_delete(user_id, tag_id)
