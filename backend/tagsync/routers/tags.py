"""Tag router — lifecycle of the caller's own tags."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import IntegrityError

from tagsync.dependencies import get_current_user_id, get_sharing_service, get_sync_service, get_tag_service
from tagsync.models.tag import (
    TagCreate,
    TagDetailsUpdate,
    TagRead,
    TagShareRequest,
    TagSoftDelete,
    TagSyncRead,
)
from tagsync.services.sharing import SharingService
from tagsync.services.sync import SyncService
from tagsync.services.tag_writer import WriteOutcome, WriteResult
from tagsync.services.tags import TagService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tags", tags=["tags"])


def raise_for_rejection(result: WriteResult) -> None:
    """Map a rejected write to the HTTP status the client acts on."""
    if result.outcome is WriteOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Tag not found")
    if result.outcome is WriteOutcome.STALE:
        raise HTTPException(status_code=409, detail="A newer change has already been applied")


@router.post("", response_model=TagRead, status_code=201)
async def create_tag(
    body: TagCreate,
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> dict:
    try:
        doc = tags.create(
            body.device_id, body.local_id, user_id, body.text, body.enc_key,
            body.enc_config, body.create_ts, body.schema_version, tag_id=body.id,
        )
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Tag id already exists")
    if doc is None:
        raise HTTPException(status_code=422, detail="Incomplete tag")
    return doc


@router.post("/import")
async def import_tags(
    records: list[dict[str, Any]] = Body(...),
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> dict:
    """Restore tags from a backup. Stops at the first record that fails."""
    # Backups are restored into the caller's account only
    owned = [{**r, "userId": user_id} for r in records]
    try:
        success = tags.bulk_import(owned)
    except IntegrityError:
        logger.warning("Tag import for user %s hit a duplicate id", user_id)
        success = False
    return {"success": success}


@router.get("", response_model=list[TagRead])
async def list_tags(
    user_id: str = Depends(get_current_user_id),
    sync: SyncService = Depends(get_sync_service),
) -> list[dict]:
    return sync.fetch_active(user_id)


@router.get("/backup", response_model=list[TagSyncRead])
async def backup_tags(
    user_id: str = Depends(get_current_user_id),
    sync: SyncService = Depends(get_sync_service),
) -> list[dict]:
    return sync.fetch_for_backup(user_id)


@router.get("/{tag_id}", response_model=TagRead)
async def get_tag(
    tag_id: str,
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> dict:
    doc = tags.get(user_id, tag_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return doc


@router.put("/{tag_id}")
async def update_tag(
    tag_id: str,
    body: TagDetailsUpdate,
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> dict:
    result = tags.update_details(
        user_id, tag_id, body.text, body.enc_key, body.enc_config,
        body.update_ts, body.schema_version,
    )
    raise_for_rejection(result)
    return {"updated": True, "updateTs": result.timestamp}


@router.post("/{tag_id}/delete")
async def soft_delete_tag(
    tag_id: str,
    body: TagSoftDelete,
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> dict:
    result = tags.soft_delete(user_id, tag_id, body.delete_ts)
    raise_for_rejection(result)
    return {"deleted": True}


@router.delete("/{tag_id}", status_code=204)
async def hard_delete_tag(
    tag_id: str,
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> None:
    if not tags.hard_delete(user_id, tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")


@router.delete("")
async def hard_delete_all_tags(
    user_id: str = Depends(get_current_user_id),
    tags: TagService = Depends(get_tag_service),
) -> dict:
    return {"deleted": tags.hard_delete_all(user_id)}


@router.post("/{tag_id}/share", response_model=TagRead, status_code=201)
async def share_tag(
    tag_id: str,
    body: TagShareRequest,
    user_id: str = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
) -> dict:
    copy = sharing.share_tag(
        user_id, tag_id, body.recipient_user_id, body.device_id,
        body.local_id, body.create_ts,
    )
    if copy is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return copy
