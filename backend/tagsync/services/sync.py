"""Read paths used by devices to converge on the server's state.

Each query names its projection: normal reads get ``API_FIELDS``, sync and
backup reads get the full record. Sync reads include tombstones so devices
can apply remote deletions locally.
"""
from __future__ import annotations

from sqlmodel import Session

from tagsync.models.tag import API_FIELDS, BACKUP_FIELDS, SYNC_FIELDS, SharedTag, Tag
from tagsync.services.document_store import Document, DocumentCollection


class SyncService:
    def __init__(self, session: Session) -> None:
        self._owned = DocumentCollection(session, Tag)
        self._shared = DocumentCollection(session, SharedTag)

    # --- Owned tags ---

    def fetch_active(self, user_id: str) -> list[Document]:
        return self._owned.find({"userId": user_id, "deleted": False}, API_FIELDS)

    def fetch_all_for_sync(self, user_id: str) -> list[Document]:
        return self._owned.find({"userId": user_id}, SYNC_FIELDS)

    def fetch_for_backup(self, user_id: str) -> list[Document]:
        return self._owned.find({"userId": user_id, "deleted": False}, BACKUP_FIELDS)

    # --- Shared tags ---

    def fetch_shared_by_ids(self, ids: list[str]) -> list[Document]:
        if not ids:
            return []
        return self._shared.find({"_id": {"$in": ids}, "deleted": False}, API_FIELDS)

    def fetch_shared_by_user_filtered(self, user_id: str, ids: list[str]) -> list[Document]:
        """What ``user_id`` is currently showing out of ``ids``."""
        if not ids:
            return []
        return self._shared.find(
            {
                "_id": {"$in": ids},
                "userId": user_id,
                "archived": False,
                "recycled": False,
                "deleted": False,
            },
            API_FIELDS,
        )

    def fetch_shared_for_sync(self, ids: list[str]) -> list[Document]:
        if not ids:
            return []
        return self._shared.find({"_id": {"$in": ids}}, SYNC_FIELDS)
