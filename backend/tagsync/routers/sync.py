"""Sync router — full state, tombstones included, for device reconciliation."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from tagsync.dependencies import get_current_user_id, get_sync_service
from tagsync.models.tag import TagIdsRequest, TagSyncRead
from tagsync.services.sync import SyncService

router = APIRouter(prefix="/api/sync", tags=["sync"])


@router.get("/tags", response_model=list[TagSyncRead])
async def sync_tags(
    user_id: str = Depends(get_current_user_id),
    sync: SyncService = Depends(get_sync_service),
) -> list[dict]:
    return sync.fetch_all_for_sync(user_id)


@router.post("/shared-tags", response_model=list[TagSyncRead])
async def sync_shared_tags(
    body: TagIdsRequest,
    _user_id: str = Depends(get_current_user_id),
    sync: SyncService = Depends(get_sync_service),
) -> list[dict]:
    return sync.fetch_shared_for_sync(body.ids)
